from __future__ import annotations

"""Agent orchestrator.

``Agent`` owns the agent identity, its workers and the dialogue with the
decision service.

Execution model
---------------

- ``init`` registers the workers as a map of locations and the agent itself,
  then binds every worker (agent id, log callable, client).
- Each ``step`` is one decision round against the *active* worker:

  1. Snapshot the worker environment and the agent state.
  2. Send them, together with the pending function result, to the decision
     service. The pending slot is cleared as soon as it has been sent.
  3. Dispatch the returned action: run a function (its result becomes the new
     pending result), move to another worker, or wait.

- ``run`` repeats ``step`` with a heartbeat pause until the service answers
  ``wait`` or an action type this SDK does not handle.

The pending slot holds at most one result, so request N+1 always reports the
outcome of round N and nothing older.
"""

import asyncio
import json
import logging
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional, Union

from agent_relay.core.config import get_settings
from agent_relay.decision_api.base import DecisionClientProtocol
from agent_relay.decision_api.factory import create_decision_client
from agent_relay.decision_api.models.domain import Action, ActionType, LLMModel

from .errors import AgentNotInitializedError, ConfigurationError, WorkerNotFoundError
from .function import FunctionResultPayload
from .worker import Worker

logger = logging.getLogger(__name__)

AgentStateProvider = Callable[[], Awaitable[Dict[str, Any]]]
LogSink = Callable[["Agent", str], None]


def default_log_sink(agent: "Agent", message: str) -> None:
    """Emit ``[<agent name>] <message>`` through the module logger."""
    logger.info("[%s] %s", agent.name, message)


class Agent:
    """Drive a set of workers against the external decision service.

    Args:
        api_key: Decision service API key; selects the v2 or legacy client when
            ``client`` is not given. Defaults to ``GAME_API_KEY`` from the settings.
        name: Agent name registered with the decision service.
        goal: Agent goal registered with the decision service.
        description: Agent description registered with the decision service.
        workers: Workers the agent can act through; the first one starts active.
        get_agent_state: Optional coroutine function returning the agent state
            sent with every decision request.
        llm_model: Model requested from the v2 API.
        client: Pre-built decision client (tests, custom transports).
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        *,
        name: str,
        goal: str,
        description: str,
        workers: Iterable[Worker],
        get_agent_state: Optional[AgentStateProvider] = None,
        llm_model: Union[LLMModel, str, None] = None,
        client: Optional[DecisionClientProtocol] = None,
    ) -> None:
        self.name = name
        self.goal = goal
        self.description = description
        self.workers: List[Worker] = list(workers)
        self.get_agent_state = get_agent_state

        if not self.workers:
            raise ConfigurationError(f"Agent '{name}' needs at least one worker")
        self._owns_client = client is None
        if client is None:
            api_key = api_key or get_settings().decision_api.api_key
            if not api_key:
                raise ConfigurationError("An API key is required when no decision client is provided")
            client = create_decision_client(api_key, llm_model=llm_model)
        self._client: DecisionClientProtocol = client

        self._worker_id: str = self.workers[0].id
        self._agent_id: Optional[str] = None
        self._map_id: Optional[str] = None
        self._log_sink: LogSink = default_log_sink

        # Single-slot mailbox: written after a function runs, cleared when sent.
        self._action_result: Optional[FunctionResultPayload] = None

    @property
    def agent_id(self) -> Optional[str]:
        return self._agent_id

    @property
    def map_id(self) -> Optional[str]:
        return self._map_id

    @property
    def active_worker_id(self) -> str:
        return self._worker_id

    @property
    def pending_result(self) -> Optional[FunctionResultPayload]:
        return self._action_result

    @property
    def client(self) -> DecisionClientProtocol:
        return self._client

    def log(self, message: str) -> None:
        """Send ``message`` to the current log sink.

        Workers hold this bound method, so a sink installed later with
        ``set_logger`` applies to them as well.
        """
        self._log_sink(self, message)

    def set_logger(self, sink: LogSink) -> None:
        self._log_sink = sink

    async def init(self) -> None:
        """Register the map and the agent, then bind every worker.

        Not idempotent: a second call registers a new map and agent.
        """
        map_record = await self._client.create_map(self.workers)
        agent_record = await self._client.create_agent(self.name, self.goal, self.description)

        for worker in self.workers:
            worker.set_agent_id(agent_record.id)
            worker.set_logger(self.log)
            worker.set_client(self._client)

        self._map_id = map_record.id
        self._agent_id = agent_record.id
        logger.info("Agent %s initialized: agent_id=%s map_id=%s", self.name, self._agent_id, self._map_id)

    def get_worker_by_id(self, worker_id: str) -> Worker:
        for worker in self.workers:
            if worker.id == worker_id:
                return worker
        raise WorkerNotFoundError(worker_id)

    def _require_initialized(self) -> tuple[str, str]:
        if not self._agent_id or not self._map_id:
            raise AgentNotInitializedError()
        return self._agent_id, self._map_id

    async def step(self, *, verbose: bool = False) -> ActionType:
        """Run one decision round against the active worker.

        Returns:
            The dispatched ``ActionType``; ``ActionType.UNKNOWN`` for any action
            this method does not handle.

        Raises:
            AgentNotInitializedError: If ``init`` has not completed.
            WorkerNotFoundError: If the active worker id is not configured.
            FunctionNotFoundError: If the service names a function the active worker lacks.
            DecisionApiError: If the decision service request fails.
        """
        agent_id, map_id = self._require_initialized()
        worker = self.get_worker_by_id(self._worker_id)

        environment = await worker.environment()
        agent_state = await self.get_agent_state() if self.get_agent_state is not None else {}

        if verbose:
            self.log(f"Environment State: {json.dumps(environment, default=str)}")
            self.log(f"Agent State: {json.dumps(agent_state, default=str)}")

        action = await self._client.get_action(
            agent_id,
            map_id,
            worker,
            self._action_result,
            environment,
            agent_state,
        )
        self._action_result = None

        if verbose:
            self.log(f"Action State: {json.dumps(action.agent_state or {}, default=str)}.")

        return await self._dispatch(action, worker, verbose=verbose)

    async def _dispatch(self, action: Action, worker: Worker, *, verbose: bool) -> ActionType:
        action_type = action.action_type
        args = action.action_args

        if action.is_function_call:
            if verbose:
                self.log(f"Performing function {args.fn_name} with args {json.dumps(args.args, default=str)}.")
            fn = worker.get_function(args.fn_name)
            result = await fn.execute(args.args, self.log)
            if verbose:
                self.log(f"Function status [{result.status.value}]: {result.feedback}.")
            self._action_result = result.to_payload(args.fn_id)
            return action_type

        if action_type is ActionType.GO_TO:
            # The target is resolved lazily: an unknown id fails on the next step.
            self._worker_id = args.location_id or ""
            if verbose:
                self.log(f"Going to {args.location_id}.")
            return action_type

        if action_type is ActionType.WAIT:
            if verbose:
                self.log("No actions to perform.")
            return action_type

        logger.debug("Agent.step: unhandled action_type=%s", action_type.value)
        return ActionType.UNKNOWN

    async def run(self, heartbeat_seconds: Optional[float] = None, *, verbose: bool = False) -> None:
        """Step repeatedly, pausing ``heartbeat_seconds`` between rounds.

        Without ``heartbeat_seconds`` the ``AGENT_RELAY_HEARTBEAT_SECONDS`` setting is used.

        Returns once a round yields ``wait`` or ``unknown``; call ``run`` or
        ``step`` again to resume. Cancel the surrounding task to stop early.
        """
        self._require_initialized()
        if heartbeat_seconds is None:
            heartbeat_seconds = get_settings().heartbeat_seconds

        while True:
            action_type = await self.step(verbose=verbose)
            if action_type in (ActionType.WAIT, ActionType.UNKNOWN):
                break
            await asyncio.sleep(heartbeat_seconds)

    async def aclose(self) -> None:
        """Close the decision client if this agent built it from an API key."""
        if self._owns_client:
            await self._client.aclose()  # type: ignore[attr-defined]

    async def __aenter__(self) -> "Agent":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()
