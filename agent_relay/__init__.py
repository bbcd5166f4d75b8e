"""agent-relay.

This package lets a named agent decide, round after round, which of its
declared functions to run by delegating the decision to an external decision
service, running the chosen function locally and reporting the outcome back.

High-level architecture
-----------------------

- ``agent_relay.agent_core``:

  - ``Function``/``FunctionResult``: function declarations and outcomes.
  - ``Worker``: groups of functions acting as locations, plus the task runner.
  - ``Agent``: the stepping loop with a single pending-result slot.
  - ``ChatAgent``/``Chat``: turn-based conversations with optional functions.

- ``agent_relay.decision_api``:

  - Async httpx clients for the v2 and legacy decision service APIs, request
    DTOs, response models and transport errors.

- ``agent_relay.core``:

  - Settings loaded from the environment and logging setup.

Typical workflow
----------------

1. Declare functions and workers.
2. Create an ``Agent`` and ``await agent.init()``.
3. ``await agent.run(heartbeat_seconds=5)``.
4. Or, for one-off jobs, ``await worker.run_task("...")`` on a bound worker.
"""

from .agent_core import (
    Agent,
    Chat,
    ChatAgent,
    ChatFunction,
    Function,
    FunctionArg,
    FunctionResult,
    FunctionResultStatus,
    Worker,
    function,
)
from .decision_api import ActionType, DecisionApiClient, DecisionApiError, LLMModel, LegacyDecisionApiClient

__all__ = [
    "Agent",
    "Chat",
    "ChatAgent",
    "ChatFunction",
    "Function",
    "FunctionArg",
    "FunctionResult",
    "FunctionResultStatus",
    "Worker",
    "function",
    "ActionType",
    "DecisionApiClient",
    "DecisionApiError",
    "LLMModel",
    "LegacyDecisionApiClient",
]
