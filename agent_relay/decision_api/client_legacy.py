from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from .base import DecisionClientCommonMixin, DecisionClientProtocol
from .errors import DecisionApiAuthError, DecisionApiResponseError


class LegacyDecisionApiClient(DecisionClientCommonMixin, DecisionClientProtocol):
    """
    Async HTTP client for the legacy (v1) decision service.

    Every call first exchanges the API key for a short-lived bearer token, then
    posts the real request through the runner's ``/prompts`` proxy endpoint:

        {"data": {"method": "post", "headers": {...}, "route": "/v2/...", "data": <payload>}}

    Only the agent and task operations exist on this API; conversations need a
    v2 key and ``DecisionApiClient``.
    """

    _route_prefix = "/v2"

    def __init__(
        self,
        api_key: str,
        *,
        runner_url: str = "https://game.virtuals.io",
        access_token_url: str = "https://api.virtuals.io/api/accesses/tokens",
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.api_key = api_key
        self.runner_url = runner_url.rstrip("/")
        self.access_token_url = access_token_url
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout, follow_redirects=True)
        self._logger = logging.getLogger(__name__)

    async def get_access_token(self) -> str:
        try:
            self._logger.debug("LegacyDecisionApiClient.get_access_token: POST %s", self.access_token_url)
            r = await self._client.post(self.access_token_url, headers={"x-api-key": self.api_key}, json={})
            r.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise DecisionApiAuthError(
                f"Access token exchange failed: {e.response.status_code}",
                status_code=e.response.status_code,
                details=e.response.text,
            ) from e
        except httpx.RequestError as e:
            raise DecisionApiAuthError(f"Access token exchange request error: {e}") from e
        data = self._extract_data("get_access_token", r)
        token = data.get("accessToken") if isinstance(data, dict) else None
        if not token:
            raise DecisionApiResponseError("get_access_token", "accessToken", details=data)
        return str(token)

    async def _post(self, operation: str, route: str, payload: Dict[str, Any]) -> Any:
        token = await self.get_access_token()
        url = f"{self.runner_url}/prompts"
        envelope = {
            "data": {
                "method": "post",
                "headers": {"Content-Type": "application/json"},
                "route": route,
                "data": payload,
            }
        }
        headers = {"Content-Type": "application/json", "Authorization": f"Bearer {token}"}
        try:
            self._logger.debug("LegacyDecisionApiClient.%s: POST %s route=%s", operation, url, route)
            r = await self._client.post(url, headers=headers, json=envelope)
            r.raise_for_status()
        except httpx.HTTPError as e:
            raise self._wrap_transport_error(operation, e) from e
        return self._extract_data(operation, r)
