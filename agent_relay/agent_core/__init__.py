"""Agent orchestration core.

This package contains the decision/action loop that sits between locally
declared functions and the external decision service.

Design overview
---------------

- ``Function``: a named, described unit of side-effecting work. Its execution
  body returns a ``FunctionResult`` (``done``/``failed`` plus feedback).
- ``Worker``: a named group of functions with an optional environment
  snapshot. Each worker is one location on the agent's map.
- ``Agent``: registers itself and its workers, then loops: ask the decision
  service what to do with the active worker, run the chosen function, report
  the result in the next request.
- ``ChatAgent``/``Chat``: a separate turn-based protocol where a turn may call
  one ``ChatFunction``.

Typical usage
-------------

1. Declare functions and group them into workers.
2. Build an ``Agent`` with the workers and ``await agent.init()``.
3. ``await agent.run(heartbeat_seconds)`` or drive ``await agent.step()`` yourself.
"""

from .agent import Agent, default_log_sink
from .chat import Chat, ChatAgent, ChatFunction, ChatResponse, FunctionCallResponse
from .errors import (
    AgentNotInitializedError,
    AgentRelayError,
    ChatProtocolError,
    ConfigurationError,
    FunctionNotFoundError,
    WorkerNotFoundError,
)
from .function import Function, FunctionArg, FunctionResult, FunctionResultStatus, function, unwrap_args
from .worker import Worker

__all__ = [
    "Agent",
    "default_log_sink",
    "Chat",
    "ChatAgent",
    "ChatFunction",
    "ChatResponse",
    "FunctionCallResponse",
    "AgentNotInitializedError",
    "AgentRelayError",
    "ChatProtocolError",
    "ConfigurationError",
    "FunctionNotFoundError",
    "WorkerNotFoundError",
    "Function",
    "FunctionArg",
    "FunctionResult",
    "FunctionResultStatus",
    "function",
    "unwrap_args",
    "Worker",
]
