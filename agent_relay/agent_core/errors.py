"""Error types raised by the agent orchestration core.

Purpose:
- Separate configuration mistakes (missing ``init``, unknown worker or function)
  from transport failures, which live in ``agent_relay.decision_api.errors``.
- None of these are retried by the core; they propagate to whoever drives
  ``Agent.step``/``Agent.run``/``Chat.next``.
"""

from __future__ import annotations


class AgentRelayError(Exception):
    """Base error for the orchestration core."""


class ConfigurationError(AgentRelayError):
    """Raised when an agent, worker or chat is constructed with invalid data."""


class AgentNotInitializedError(AgentRelayError):
    """Raised when stepping before ``Agent.init`` has bound ids and client."""

    def __init__(self, message: str = "Agent not initialized") -> None:
        super().__init__(message)


class WorkerNotFoundError(AgentRelayError):
    def __init__(self, worker_id: str) -> None:
        super().__init__(f"Worker not found: '{worker_id}'")
        self.worker_id = worker_id


class FunctionNotFoundError(AgentRelayError):
    def __init__(self, fn_name: str | None, *, scope: str | None = None) -> None:
        where = f" in '{scope}'" if scope else ""
        super().__init__(f"Function not found{where}: '{fn_name}'")
        self.fn_name = fn_name
        self.scope = scope


class ChatProtocolError(AgentRelayError):
    """Raised when a conversation turn is inconsistent with the local chat setup."""
