"""Decision client selection.

Keys issued for the v2 API carry the ``apt-`` prefix; every other key is
served by the legacy token-exchange API.
"""

from __future__ import annotations

import logging
from typing import Optional, Union

import httpx

from agent_relay.core.config import Settings, get_settings

from .client import DecisionApiClient
from .client_legacy import LegacyDecisionApiClient
from .models.domain import LLMModel

logger = logging.getLogger(__name__)

V2_API_KEY_PREFIX = "apt-"


def is_v2_api_key(api_key: str) -> bool:
    return api_key.startswith(V2_API_KEY_PREFIX)


def create_decision_client(
    api_key: str,
    *,
    llm_model: Union[LLMModel, str, None] = None,
    settings: Optional[Settings] = None,
    http_client: Optional[httpx.AsyncClient] = None,
) -> Union[DecisionApiClient, LegacyDecisionApiClient]:
    """
    Build the decision client matching ``api_key``.

    Args:
        api_key: Decision service API key.
        llm_model: Model for the v2 API; defaults to ``settings.llm_model``.
        settings: Settings to read endpoints and timeouts from; defaults to ``get_settings()``.
        http_client: Optional ``httpx.AsyncClient`` to reuse (e.g. a mock transport in tests).

    Returns:
        ``DecisionApiClient`` for v2 keys, ``LegacyDecisionApiClient`` otherwise.
    """
    cfg = (settings or get_settings()).decision_api
    if is_v2_api_key(api_key):
        logger.debug("create_decision_client: using v2 API at %s", cfg.base_url)
        return DecisionApiClient(
            api_key,
            base_url=cfg.base_url,
            llm_model=llm_model or cfg.llm_model,
            timeout=cfg.request_timeout,
            client=http_client,
        )
    logger.debug("create_decision_client: using legacy API at %s", cfg.legacy_runner_url)
    return LegacyDecisionApiClient(
        api_key,
        runner_url=cfg.legacy_runner_url,
        access_token_url=cfg.access_token_url,
        timeout=cfg.request_timeout,
        client=http_client,
    )
