"""Error types specific to the decision service API layer.

Purpose:
- Provide typed exceptions thrown by ``DecisionApiClient`` and
  ``LegacyDecisionApiClient``.
- Expose HTTP-oriented context (e.g., status code, error body) for diagnosis.

Usage:
- Catch ``DecisionApiError`` for any transport failure and inspect
  ``status_code`` or ``details``.
- Nothing in this package retries; wrap ``Agent.step``/``Agent.run`` if you
  want backoff.
"""

from __future__ import annotations

from typing import Any, Optional


class DecisionApiError(Exception):
    """Base error for decision service failures.

    Args:
        message: Human-readable error description.
        status_code: Optional HTTP status code associated with the failure.
        details: Optional structured payload from the server (e.g., JSON body).
    """
    def __init__(self, message: str, *, status_code: Optional[int] = None, details: Optional[Any] = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.details = details


class DecisionApiAuthError(DecisionApiError):
    """Raised when the legacy API key cannot be exchanged for an access token."""


class DecisionApiResponseError(DecisionApiError):
    """Raised when a successful response is missing a field the SDK needs.

    Args:
        operation: The client operation that received the response.
        missing: The field that was expected.
    """
    def __init__(self, operation: str, missing: str, *, details: Optional[Any] = None) -> None:
        super().__init__(f"Decision service {operation} response is missing '{missing}'", details=details)
        self.operation = operation
        self.missing = missing
