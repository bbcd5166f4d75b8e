from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import Field, field_validator

from .base import WireSchema


class ActionType(str, Enum):
    """Discriminant of an ``Action`` returned by the decision service.

    ``UNKNOWN`` also stands in for any value this SDK does not recognise.
    """

    CALL_FUNCTION = "call_function"
    CONTINUE_FUNCTION = "continue_function"
    WAIT = "wait"
    GO_TO = "go_to"
    TRY_TO_TALK = "try_to_talk"
    CONVERSATION = "conversation"
    UNKNOWN = "unknown"


FUNCTION_ACTIONS = frozenset({ActionType.CALL_FUNCTION, ActionType.CONTINUE_FUNCTION})


class LLMModel(str, Enum):
    """Models accepted by the v2 decision service."""

    LLAMA_3_1_405B_INSTRUCT = "Llama-3.1-405B-Instruct"
    LLAMA_3_3_70B_INSTRUCT = "Llama-3.3-70B-Instruct"
    DEEPSEEK_R1 = "DeepSeek-R1"
    DEEPSEEK_V3 = "DeepSeek-V3"
    QWEN_2_5_72B_INSTRUCT = "Qwen-2.5-72B-Instruct"


class MapRecord(WireSchema):
    id: str


class AgentRecord(WireSchema):
    id: str
    name: Optional[str] = None
    goal: Optional[str] = None
    description: Optional[str] = None


class ActionArgs(WireSchema):
    location_id: Optional[str] = None
    task_id: Optional[str] = None
    fn_id: Optional[str] = None
    fn_name: Optional[str] = None
    args: Dict[str, Any] = Field(default_factory=dict)
    thought: Optional[str] = None

    @field_validator("args", mode="before")
    @classmethod
    def _none_args_to_empty(cls, v: Any) -> Any:
        return {} if v is None else v


class Action(WireSchema):
    """Instruction returned by the decision service for the next round."""

    action_type: ActionType = ActionType.UNKNOWN
    action_args: ActionArgs = Field(default_factory=ActionArgs)
    agent_state: Optional[Dict[str, Any]] = None

    @field_validator("action_type", mode="before")
    @classmethod
    def _coerce_unknown(cls, v: Any) -> Any:
        try:
            return ActionType(v)
        except ValueError:
            return ActionType.UNKNOWN

    @field_validator("action_args", mode="before")
    @classmethod
    def _none_action_args(cls, v: Any) -> Any:
        return {} if v is None else v

    @property
    def is_function_call(self) -> bool:
        return self.action_type in FUNCTION_ACTIONS


class ChatFunctionCall(WireSchema):
    id: str
    fn_name: str
    args: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("args", mode="before")
    @classmethod
    def _none_args_to_empty(cls, v: Any) -> Any:
        return {} if v is None else v


class ChatTurn(WireSchema):
    """One conversation response from the decision service."""

    message: Optional[str] = None
    is_finished: bool = False
    function_call: Optional[ChatFunctionCall] = None
