from .base import BaseSchema, WireSchema
from .domain import (
    FUNCTION_ACTIONS,
    Action,
    ActionArgs,
    ActionType,
    AgentRecord,
    ChatFunctionCall,
    ChatTurn,
    LLMModel,
    MapRecord,
)
from .dto import (
    ActionRequest,
    ActionResultDTO,
    CreateAgentRequest,
    CreateChatRequest,
    CreateMapRequest,
    EndChatRequest,
    LocationDTO,
    ReportFunctionRequest,
    SetTaskRequest,
    TaskActionRequest,
    UpdateChatRequest,
)

__all__ = [
    "BaseSchema",
    "WireSchema",
    "FUNCTION_ACTIONS",
    "Action",
    "ActionArgs",
    "ActionType",
    "AgentRecord",
    "ChatFunctionCall",
    "ChatTurn",
    "LLMModel",
    "MapRecord",
    "ActionRequest",
    "ActionResultDTO",
    "CreateAgentRequest",
    "CreateChatRequest",
    "CreateMapRequest",
    "EndChatRequest",
    "LocationDTO",
    "ReportFunctionRequest",
    "SetTaskRequest",
    "TaskActionRequest",
    "UpdateChatRequest",
]
