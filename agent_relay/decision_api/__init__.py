"""Async HTTP clients for the external decision service.

The decision service chooses what an agent does next. These clients only move
requests and responses; they hold no agent state and never retry.
"""

from .base import ChatClientProtocol, DecisionClientProtocol
from .client import DecisionApiClient
from .client_legacy import LegacyDecisionApiClient
from .errors import DecisionApiAuthError, DecisionApiError, DecisionApiResponseError
from .factory import create_decision_client, is_v2_api_key
from .models import Action, ActionArgs, ActionType, AgentRecord, ChatTurn, LLMModel, MapRecord

__all__ = [
    "ChatClientProtocol",
    "DecisionClientProtocol",
    "DecisionApiClient",
    "LegacyDecisionApiClient",
    "DecisionApiAuthError",
    "DecisionApiError",
    "DecisionApiResponseError",
    "create_decision_client",
    "is_v2_api_key",
    "Action",
    "ActionArgs",
    "ActionType",
    "AgentRecord",
    "ChatTurn",
    "LLMModel",
    "MapRecord",
]
