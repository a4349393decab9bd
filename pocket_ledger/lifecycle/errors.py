"""
Lifecycle error taxonomy.

Callable entry points surface exactly one of these codes to the client.
The values match the Cloud Functions callable error codes.
"""

from enum import Enum


class ErrorCode(str, Enum):
    """Caller-visible failure classification."""
    UNAUTHENTICATED = "unauthenticated"  # no verified session; prompt re-login
    NOT_FOUND = "not-found"              # identity already gone; treat as done
    INTERNAL = "internal"                # anything else; details are in the logs


class AccountLifecycleError(Exception):
    """A classified failure of an authenticated lifecycle operation."""

    def __init__(self, code: ErrorCode, message: str):
        self.code = code
        self.message = message
        super().__init__(message)

    def __repr__(self) -> str:
        return f"AccountLifecycleError(code={self.code.value!r}, message={self.message!r})"
