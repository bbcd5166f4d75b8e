from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Union

import httpx

from .base import ChatClientProtocol, DecisionClientCommonMixin, DecisionClientProtocol
from .errors import DecisionApiResponseError
from .models.domain import ChatTurn, LLMModel
from .models.dto import CreateChatRequest, EndChatRequest, ReportFunctionRequest, UpdateChatRequest


class DecisionApiClient(DecisionClientCommonMixin, DecisionClientProtocol, ChatClientProtocol):
    """
    Thin async HTTP client for the v2 decision service API.

    Responsibilities:
    - register maps and agents
    - request the next action (free-running and task-scoped)
    - drive conversations (create, next, function result, end)

    Every request body is wrapped as ``{"data": ...}`` and every response is read
    from its ``data`` member. Transport failures raise ``DecisionApiError``; no
    retries are attempted.
    """

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = "https://sdk.game.virtuals.io/v2",
        llm_model: Union[LLMModel, str] = LLMModel.LLAMA_3_1_405B_INSTRUCT,
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.llm_model = llm_model.value if isinstance(llm_model, LLMModel) else llm_model
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout, follow_redirects=True)
        self._logger = logging.getLogger(__name__)

    def _headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "x-api-key": self.api_key,
            "model_name": self.llm_model,
        }

    async def _post(self, operation: str, route: str, payload: Dict[str, Any]) -> Any:
        url = f"{self.base_url}{route}"
        try:
            self._logger.debug("DecisionApiClient.%s: POST %s", operation, url)
            r = await self._client.post(url, headers=self._headers(), json={"data": payload})
            r.raise_for_status()
        except httpx.HTTPError as e:
            raise self._wrap_transport_error(operation, e) from e
        return self._extract_data(operation, r)

    async def create_chat(self, prompt: str, partner_id: str, partner_name: str) -> str:
        body = CreateChatRequest(prompt=prompt, partner_id=partner_id, partner_name=partner_name)
        data = await self._post("create_chat", "/conversation", body.to_payload())
        conversation_id = self._require_mapping("create_chat", data).get("conversation_id")
        if not conversation_id:
            raise DecisionApiResponseError("create_chat", "conversation_id", details=data)
        self._logger.debug("DecisionApiClient.create_chat: created conversation_id=%s", conversation_id)
        return str(conversation_id)

    async def update_chat(
        self,
        conversation_id: str,
        message: str,
        state: Optional[Dict[str, Any]] = None,
        functions: Optional[List[Dict[str, Any]]] = None,
    ) -> ChatTurn:
        body = UpdateChatRequest(message=message, state=state, functions=functions)
        data = await self._post("update_chat", f"/conversation/{conversation_id}/next", body.to_payload())
        return ChatTurn.model_validate(self._require_mapping("update_chat", data))

    async def report_function_result(self, conversation_id: str, fn_id: str, result: str) -> ChatTurn:
        body = ReportFunctionRequest(fn_id=fn_id, result=result)
        route = f"/conversation/{conversation_id}/function/result"
        data = await self._post("report_function_result", route, body.to_payload())
        return ChatTurn.model_validate(self._require_mapping("report_function_result", data))

    async def end_chat(self, conversation_id: str, message: Optional[str] = None) -> ChatTurn:
        body = EndChatRequest(message=message)
        data = await self._post("end_chat", f"/conversation/{conversation_id}/end", body.to_payload())
        return ChatTurn.model_validate(data if isinstance(data, dict) else {})
