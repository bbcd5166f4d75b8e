from __future__ import annotations

"""Workers: named groups of functions that form one location on an agent's map.

A worker is built standalone so it can be reused across agents, then bound
exactly once by ``Agent.init`` (agent id, log callable, decision client).

Besides being stepped by its agent, a bound worker can run a single task on its
own (``run_task``): the decision service is asked for the next action scoped to
that task until it answers with anything other than a function call.
"""

import json
import logging
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional

from agent_relay.decision_api.base import DecisionClientProtocol

from .errors import AgentNotInitializedError, ConfigurationError, FunctionNotFoundError
from .function import Function, FunctionResultPayload

logger = logging.getLogger(__name__)

EnvironmentProvider = Callable[[], Awaitable[Dict[str, Any]]]
LogCallable = Callable[[str], None]


class Worker:
    """A named, described collection of functions plus an optional environment provider."""

    def __init__(
        self,
        *,
        id: str,
        name: str,
        description: str,
        functions: Iterable[Function],
        get_environment: Optional[EnvironmentProvider] = None,
    ) -> None:
        self.id = id
        self.name = name
        self.description = description
        self.functions: List[Function] = list(functions)
        self.get_environment = get_environment

        names = [fn.name for fn in self.functions]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ConfigurationError(f"Worker '{id}' declares duplicate function names: {duplicates}")

        self._agent_id: Optional[str] = None
        self._log: Optional[LogCallable] = None
        self._client: Optional[DecisionClientProtocol] = None

        # Result of the last function run by ``step``; reported with the next task action request.
        self._action_result: Optional[FunctionResultPayload] = None

    def __repr__(self) -> str:
        return f"Worker(id={self.id!r}, name={self.name!r}, functions={[fn.name for fn in self.functions]!r})"

    def set_agent_id(self, agent_id: str) -> None:
        self._agent_id = agent_id

    def set_logger(self, log: LogCallable) -> None:
        self._log = log

    def set_client(self, client: DecisionClientProtocol) -> None:
        self._client = client

    @property
    def agent_id(self) -> Optional[str]:
        return self._agent_id

    def log(self, message: str) -> None:
        if self._log is not None:
            self._log(message)

    def get_function(self, name: Optional[str]) -> Function:
        for fn in self.functions:
            if fn.name == name:
                return fn
        raise FunctionNotFoundError(name, scope=self.id)

    async def environment(self) -> Dict[str, Any]:
        """Return a fresh environment snapshot, or ``{}`` without a provider."""
        if self.get_environment is None:
            return {}
        return await self.get_environment()

    def _require_bound(self) -> tuple[str, DecisionClientProtocol]:
        if not self._agent_id:
            raise AgentNotInitializedError()
        if self._client is None:
            raise AgentNotInitializedError("Decision client not initialized")
        return self._agent_id, self._client

    async def step(self, task_id: str, *, verbose: bool = False) -> bool:
        """Run one task-scoped decision round.

        Args:
            task_id: Submission id returned by ``set_task``.
            verbose: Log environment, chosen function and outcome through the agent's sink.

        Returns:
            ``True`` after executing a function, ``False`` once the decision
            service answers with anything else (the task is finished).

        Raises:
            AgentNotInitializedError: If the worker has not been bound by an agent.
            FunctionNotFoundError: If the service names a function this worker lacks.
        """
        agent_id, client = self._require_bound()

        environment = await self.environment()
        if verbose:
            self.log(f"Environment State: {json.dumps(environment, default=str)}")

        action = await client.get_task_action(agent_id, task_id, self, self._action_result, environment)
        self._action_result = None

        if not action.is_function_call:
            logger.debug("Worker.step: task=%s stopped on action_type=%s", task_id, action.action_type.value)
            return False

        args = action.action_args
        fn = self.get_function(args.fn_name)
        if verbose:
            self.log(f"Performing function {args.fn_name} with args {json.dumps(args.args, default=str)}.")

        result = await fn.execute(args.args, self.log)
        if verbose:
            self.log(f"Function status: {result.status.value} - {result.feedback}.")

        self._action_result = result.to_payload(args.fn_id)
        return True

    async def run_task(self, task: str, *, verbose: bool = False) -> str:
        """Register ``task`` with the decision service and step until it is finished.

        Returns:
            The submission id assigned to the task.
        """
        agent_id, client = self._require_bound()
        submission_id = await client.set_task(agent_id, task)
        # A result left over from an interrupted task belongs to that submission only.
        self._action_result = None
        logger.info("Worker %s: running task submission_id=%s", self.id, submission_id)

        while await self.step(submission_id, verbose=verbose):
            pass
        return submission_id
