"""Client protocols and shared helpers for the decision service clients.

Defines the protocols the orchestration core depends on, and a
``DecisionClientCommonMixin`` that builds every agent/task request body once so
the v2 and legacy clients only differ in how a body reaches the service.

Usage:
- ``DecisionApiClient`` and ``LegacyDecisionApiClient`` implement
  ``DecisionClientProtocol``.
- Only ``DecisionApiClient`` implements ``ChatClientProtocol``.
"""

from __future__ import annotations

from typing import (
    TYPE_CHECKING,
    Any,
    Dict,
    Optional,
    Protocol,
    Sequence,
    runtime_checkable,
)

import httpx

from .errors import DecisionApiError, DecisionApiResponseError
from .models.domain import Action, AgentRecord, ChatTurn, MapRecord
from .models.dto import (
    ActionRequest,
    ActionResultDTO,
    CreateAgentRequest,
    SetTaskRequest,
    TaskActionRequest,
    locations_from_workers,
)

if TYPE_CHECKING:
    from agent_relay.agent_core.function import FunctionResultPayload
    from agent_relay.agent_core.worker import Worker

@runtime_checkable
class DecisionClientProtocol(Protocol):
    """Protocol for clients driving ``Agent`` and ``Worker``."""

    async def create_map(self, workers: Sequence["Worker"]) -> MapRecord: ...

    async def create_agent(self, name: str, goal: str, description: str) -> AgentRecord: ...

    async def get_action(
        self,
        agent_id: str,
        map_id: str,
        worker: "Worker",
        action_result: Optional["FunctionResultPayload"],
        environment: Dict[str, Any],
        agent_state: Dict[str, Any],
    ) -> Action: ...

    async def set_task(self, agent_id: str, task: str) -> str: ...

    async def get_task_action(
        self,
        agent_id: str,
        submission_id: str,
        worker: "Worker",
        action_result: Optional["FunctionResultPayload"],
        environment: Dict[str, Any],
    ) -> Action: ...


@runtime_checkable
class ChatClientProtocol(Protocol):
    """Protocol for clients driving ``ChatAgent`` and ``Chat``."""

    async def create_chat(self, prompt: str, partner_id: str, partner_name: str) -> str: ...

    async def update_chat(
        self,
        conversation_id: str,
        message: str,
        state: Optional[Dict[str, Any]] = None,
        functions: Optional[list[Dict[str, Any]]] = None,
    ) -> ChatTurn: ...

    async def report_function_result(self, conversation_id: str, fn_id: str, result: str) -> ChatTurn: ...

    async def end_chat(self, conversation_id: str, message: Optional[str] = None) -> ChatTurn: ...


class DecisionClientCommonMixin:
    """Agent/task operations shared by every decision service client.

    Subclasses provide ``_post(operation, route, payload)`` which delivers the
    payload and returns the unwrapped ``data`` member of the response, and may
    set ``_route_prefix`` for services that version their routes in the path.
    """

    _route_prefix: str = ""
    _client: httpx.AsyncClient
    _owns_client: bool

    async def _post(self, operation: str, route: str, payload: Dict[str, Any]) -> Any:
        raise NotImplementedError

    def _route(self, route: str) -> str:
        return f"{self._route_prefix}{route}"

    async def create_map(self, workers: Sequence["Worker"]) -> MapRecord:
        body = locations_from_workers(workers)
        data = await self._post("create_map", self._route("/maps"), body.to_payload())
        return MapRecord.model_validate(self._require_mapping("create_map", data))

    async def create_agent(self, name: str, goal: str, description: str) -> AgentRecord:
        body = CreateAgentRequest(name=name, goal=goal, description=description)
        data = await self._post("create_agent", self._route("/agents"), body.to_payload())
        return AgentRecord.model_validate(self._require_mapping("create_agent", data))

    async def get_action(
        self,
        agent_id: str,
        map_id: str,
        worker: "Worker",
        action_result: Optional["FunctionResultPayload"],
        environment: Dict[str, Any],
        agent_state: Dict[str, Any],
    ) -> Action:
        body = ActionRequest(
            location=worker.id,
            map_id=map_id,
            environment=environment,
            functions=[fn.to_json() for fn in worker.functions],
            agent_state=agent_state,
            current_action=ActionResultDTO.model_validate(action_result) if action_result else None,
        )
        data = await self._post("get_action", self._route(f"/agents/{agent_id}/actions"), body.to_payload())
        return Action.model_validate(self._require_mapping("get_action", data))

    async def set_task(self, agent_id: str, task: str) -> str:
        body = SetTaskRequest(task=task)
        data = await self._post("set_task", self._route(f"/agents/{agent_id}/tasks"), body.to_payload())
        submission_id = self._require_mapping("set_task", data).get("submission_id")
        if not submission_id:
            raise DecisionApiResponseError("set_task", "submission_id", details=data)
        return str(submission_id)

    async def get_task_action(
        self,
        agent_id: str,
        submission_id: str,
        worker: "Worker",
        action_result: Optional["FunctionResultPayload"],
        environment: Dict[str, Any],
    ) -> Action:
        body = TaskActionRequest(
            environment=environment,
            functions=[fn.to_json() for fn in worker.functions],
            action_result=ActionResultDTO.model_validate(action_result) if action_result else None,
        )
        route = self._route(f"/agents/{agent_id}/tasks/{submission_id}/next")
        data = await self._post("get_task_action", route, body.to_payload())
        return Action.model_validate(self._require_mapping("get_task_action", data))

    @staticmethod
    def _require_mapping(operation: str, data: Any) -> Dict[str, Any]:
        if not isinstance(data, dict):
            raise DecisionApiResponseError(operation, "data", details=data)
        return data

    @staticmethod
    def _extract_data(operation: str, response: httpx.Response) -> Any:
        try:
            body = response.json()
        except ValueError as e:
            raise DecisionApiError(
                f"Decision service {operation} returned a non-JSON body",
                status_code=response.status_code,
                details=response.text,
            ) from e
        if not isinstance(body, dict) or "data" not in body:
            raise DecisionApiResponseError(operation, "data", details=body)
        return body["data"]

    @staticmethod
    def _wrap_transport_error(operation: str, exc: httpx.HTTPError) -> DecisionApiError:
        if isinstance(exc, httpx.HTTPStatusError):
            return DecisionApiError(
                f"Decision service {operation} failed: {exc.response.status_code}",
                status_code=exc.response.status_code,
                details=exc.response.text,
            )
        return DecisionApiError(f"Decision service {operation} request error: {exc}")

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()
