from __future__ import annotations

"""Turn-based conversations with the decision service.

A chat is independent of workers and maps. Each ``Chat.next`` turn sends the
partner's message (plus state and the available functions); when the service
asks for a function call, the function runs locally and its outcome is reported
back in the same turn, and the service's reply to that report becomes the
turn's message.
"""

import asyncio
import inspect
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional, Tuple, TypedDict, Union

from agent_relay.core.config import get_settings
from agent_relay.decision_api.base import ChatClientProtocol
from agent_relay.decision_api.factory import create_decision_client, is_v2_api_key
from agent_relay.decision_api.models.domain import ChatTurn, LLMModel

from .errors import ChatProtocolError, ConfigurationError, FunctionNotFoundError
from .function import FunctionArg, FunctionResultStatus, unwrap_args

logger = logging.getLogger(__name__)

ChatExecutable = Callable[..., Tuple[Union[FunctionResultStatus, str], str, Dict[str, Any]]]
StateProvider = Callable[[], Union[Dict[str, Any], Awaitable[Dict[str, Any]]]]


class ActionStatusValue(TypedDict):
    value: str


class ChatFunctionResult(TypedDict, total=False):
    action_id: str
    action_status: ActionStatusValue
    feedback_message: str
    info: Dict[str, Any]


def _default_executable(**_: Any) -> Tuple[FunctionResultStatus, str, Dict[str, Any]]:
    return FunctionResultStatus.DONE, "Default implementation - no action taken", {}


@dataclass(frozen=True)
class ChatFunction:
    """A function callable from a conversation.

    The body receives the unwrapped arguments as keyword arguments and returns
    ``(status, feedback, info)``. It runs synchronously within the turn.
    """

    fn_name: str
    fn_description: str
    args: List[FunctionArg] = field(default_factory=list)
    executable: ChatExecutable = field(default=_default_executable, repr=False, compare=False)
    hint: Optional[str] = None

    def get_function_def(self) -> Dict[str, Any]:
        return {
            "fn_name": self.fn_name,
            "fn_description": self.fn_description,
            "args": [arg.to_json() for arg in self.args],
            "hint": self.hint,
        }

    def execute(self, fn_id: str, args: Optional[Dict[str, Any]]) -> ChatFunctionResult:
        status, feedback, info = self.executable(**unwrap_args(args))
        status_value = status.value if isinstance(status, FunctionResultStatus) else str(status)
        return {
            "action_id": fn_id,
            "action_status": {"value": status_value},
            "feedback_message": feedback,
            "info": info,
        }


@dataclass
class FunctionCallResponse:
    fn_name: str
    fn_args: Dict[str, Any]
    result: ChatFunctionResult


@dataclass
class ChatResponse:
    message: str
    is_finished: bool
    function_call: Optional[FunctionCallResponse] = None


class Chat:
    """One conversation with a partner, identified by the service's conversation id."""

    def __init__(
        self,
        conversation_id: str,
        client: ChatClientProtocol,
        action_space: Optional[Iterable[ChatFunction]] = None,
        get_state_fn: Optional[StateProvider] = None,
    ) -> None:
        self.conversation_id = conversation_id
        self._client = client
        self.action_space: Optional[Dict[str, ChatFunction]] = (
            {fn.fn_name: fn for fn in action_space} if action_space is not None else None
        )
        self.get_state_fn = get_state_fn
        self._end_task: Optional[asyncio.Task] = None

    async def _state(self) -> Optional[Dict[str, Any]]:
        if self.get_state_fn is None:
            return None
        state = self.get_state_fn()
        if inspect.isawaitable(state):
            state = await state
        return state

    async def update_conversation(self, message: str) -> ChatTurn:
        functions = (
            [fn.get_function_def() for fn in self.action_space.values()] if self.action_space is not None else None
        )
        return await self._client.update_chat(self.conversation_id, message, await self._state(), functions)

    async def report_function_result(self, result: ChatFunctionResult) -> str:
        status = result["action_status"]["value"]
        feedback = result.get("feedback_message")
        summary = f"{status}: {feedback}" if feedback else status

        turn = await self._client.report_function_result(self.conversation_id, result["action_id"], summary)
        if not turn.message:
            raise ChatProtocolError("Agent did not return a message for the function report")
        return turn.message

    async def next(self, message: str) -> ChatResponse:
        """Advance the conversation by one turn.

        Raises:
            ChatProtocolError: If the service calls a function on a chat without
                functions, or returns no message for the function report.
            FunctionNotFoundError: If the service names an unknown function.
            DecisionApiError: If a decision service request fails.
        """
        turn = await self.update_conversation(message)

        call = turn.function_call
        if call is None:
            return ChatResponse(message=turn.message or "", is_finished=turn.is_finished)

        if self.action_space is None:
            raise ChatProtocolError("No functions provided")
        fn = self.action_space.get(call.fn_name)
        if fn is None:
            raise FunctionNotFoundError(call.fn_name, scope=f"chat {self.conversation_id}")

        logger.debug("Chat %s: calling %s with %s", self.conversation_id, call.fn_name, call.args)
        result = fn.execute(call.id, call.args)
        reply = await self.report_function_result(result)

        return ChatResponse(
            message=reply,
            is_finished=turn.is_finished,
            function_call=FunctionCallResponse(fn_name=call.fn_name, fn_args=call.args, result=result),
        )

    def end(self, message: Optional[str] = None) -> asyncio.Task:
        """Notify the service that the chat is over without waiting for the answer.

        Must be called from a running event loop. The returned task may be
        awaited; a failure is logged and not raised.
        """
        task = asyncio.get_running_loop().create_task(self._client.end_chat(self.conversation_id, message))
        task.add_done_callback(self._log_end_failure)
        self._end_task = task
        return task

    def _log_end_failure(self, task: asyncio.Task) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.warning("Chat %s: end_chat failed: %s", self.conversation_id, exc)


class ChatAgent:
    """Factory for ``Chat`` sessions sharing one prompt and one decision client.

    Args:
        api_key: v2 API key (``apt-`` prefix); required unless ``client`` is given.
            Defaults to ``GAME_API_KEY`` from the settings.
        prompt: System prompt for every chat created by this agent.
        llm_model: Model requested from the v2 API; defaults to ``AGENT_RELAY_LLM_MODEL``.
        client: Pre-built chat-capable client.
    """

    def __init__(
        self,
        api_key: Optional[str],
        prompt: str,
        *,
        llm_model: Union[LLMModel, str, None] = None,
        client: Optional[ChatClientProtocol] = None,
    ) -> None:
        self.prompt = prompt
        self._owns_client = client is None
        if client is None:
            api_key = api_key or get_settings().decision_api.api_key
            if not api_key or not is_v2_api_key(api_key):
                raise ConfigurationError("Please use V2 API key to use ChatAgent")
            client = create_decision_client(api_key, llm_model=llm_model)  # type: ignore[assignment]
        self._client: ChatClientProtocol = client

    async def create_chat(
        self,
        partner_id: str,
        partner_name: str,
        *,
        action_space: Optional[Iterable[ChatFunction]] = None,
        get_state_fn: Optional[StateProvider] = None,
    ) -> Chat:
        conversation_id = await self._client.create_chat(self.prompt, partner_id, partner_name)
        logger.info("ChatAgent: created chat %s with partner %s", conversation_id, partner_id)
        return Chat(conversation_id, self._client, action_space, get_state_fn)

    async def aclose(self) -> None:
        """Close the decision client if this chat agent built it from an API key."""
        if self._owns_client:
            await self._client.aclose()  # type: ignore[attr-defined]

    async def __aenter__(self) -> "ChatAgent":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()
