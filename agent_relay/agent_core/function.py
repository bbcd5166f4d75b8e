from __future__ import annotations

"""Function declarations and execution results.

A *function* is the unit of side-effecting work an agent can be told to run.

- Workers declare functions up front; the decision service only ever sees their
  ``to_json()`` description, never the execution body.
- The decision service names a function and sends its arguments wrapped as
  ``{"value": ...}``; ``Function.execute`` unwraps them before calling the body.
- The body reports its outcome as a ``FunctionResult``. Domain failures are
  returned as ``FunctionResultStatus.FAILED`` with a feedback message so the
  decision service can react to them. Exceptions raised by the body are not
  caught here.
"""

import inspect
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Tuple, TypedDict, Union

logger = logging.getLogger(__name__)

FunctionLogger = Callable[[str], None]
Executable = Callable[[Dict[str, Any], FunctionLogger], Union["FunctionResult", Awaitable["FunctionResult"]]]


class FunctionResultStatus(str, Enum):
    DONE = "done"
    FAILED = "failed"


class FunctionResultPayload(TypedDict):
    action_id: Optional[str]
    action_status: str
    feedback_message: str


@dataclass(frozen=True)
class FunctionResult:
    """Outcome of one function execution.

    The result does not know which action it answers; the caller provides the
    action id when serializing it with ``to_payload``.
    """

    status: FunctionResultStatus
    feedback: str = ""

    @classmethod
    def done(cls, feedback: str = "") -> "FunctionResult":
        return cls(FunctionResultStatus.DONE, feedback)

    @classmethod
    def failed(cls, feedback: str = "") -> "FunctionResult":
        return cls(FunctionResultStatus.FAILED, feedback)

    def to_payload(self, action_id: Optional[str]) -> FunctionResultPayload:
        return {
            "action_id": action_id,
            "action_status": self.status.value,
            "feedback_message": self.feedback,
        }


@dataclass(frozen=True)
class FunctionArg:
    """Declaration of one function argument as presented to the decision service."""

    name: str
    description: str
    type: Optional[str] = None
    default: Any = None
    enum: Optional[Tuple[Any, ...]] = None
    optional: bool = False

    def to_json(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"name": self.name, "description": self.description}
        if self.type is not None:
            data["type"] = self.type
        if self.default is not None:
            data["default"] = self.default
        if self.enum is not None:
            data["enum"] = list(self.enum)
        if self.optional:
            data["optional"] = True
        return data


def unwrap_args(raw_args: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Turn ``{"a": {"value": "x"}}`` into ``{"a": "x"}``.

    Values that are not ``{"value": ...}`` mappings pass through unchanged. No
    validation against the declared arguments is performed.
    """
    unwrapped: Dict[str, Any] = {}
    for key, value in (raw_args or {}).items():
        if isinstance(value, Mapping) and "value" in value:
            unwrapped[key] = value["value"]
        else:
            unwrapped[key] = value
    return unwrapped


@dataclass(frozen=True)
class Function:
    """A named, described function with typed arguments and an execution body.

    Attributes
    ----------
    name:
        Unique name within the owning worker. The decision service refers to the
        function by this name.
    description:
        Human-readable description sent to the decision service.
    args:
        Ordered argument declarations.
    executable:
        ``(args, logger) -> FunctionResult``; may be a coroutine function.
    hint:
        Optional extra guidance for the decision service.
    """

    name: str
    description: str
    executable: Executable = field(repr=False, compare=False)
    args: List[FunctionArg] = field(default_factory=list)
    hint: Optional[str] = None

    def to_json(self) -> Dict[str, Any]:
        return {
            "fn_name": self.name,
            "fn_description": self.description,
            "args": [arg.to_json() for arg in self.args],
            "hint": self.hint,
        }

    async def execute(self, raw_args: Optional[Mapping[str, Any]], log: FunctionLogger) -> FunctionResult:
        """Unwrap ``raw_args`` and run the execution body.

        Args:
            raw_args: Arguments as sent by the decision service (``{"name": {"value": v}}``).
            log: Sink for progress messages emitted by the body.

        Returns:
            FunctionResult: Whatever the body returned.
        """
        args = unwrap_args(raw_args)
        logger.debug("Function.execute: name=%s args=%s", self.name, args)
        result = self.executable(args, log)
        if inspect.isawaitable(result):
            result = await result
        return result


def function(
    name: str,
    description: str,
    *,
    args: Optional[List[FunctionArg]] = None,
    hint: Optional[str] = None,
) -> Callable[[Executable], Function]:
    """Decorator building a ``Function`` from an execution body.

    Examples:
        >>> @function("check_price", "Check a price", args=[FunctionArg("currency", "Currency name")])
        ... async def check_price(args, log):
        ...     return FunctionResult.done("100000")
        >>> check_price.name
        'check_price'
    """

    def decorator(executable: Executable) -> Function:
        return Function(name=name, description=description, executable=executable, args=list(args or []), hint=hint)

    return decorator
