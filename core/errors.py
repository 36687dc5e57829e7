"""
GATE Core — Structured Errors
===============================
Every failure the engine reports is an AccessError carrying:

- kind:      Machine-readable code (e.g. 'INVALID_TRANSITION').
- message:   Human-readable explanation.
- field:     Offending input field, where one applies.
- retryable: True only for Conflict.

Expected outcomes of a consumption attempt (expired, exhausted,
revoked, not found) are NOT errors. They are ConsumptionOutcome values.
"""

from __future__ import annotations

from typing import Optional


class ErrorKind:
    """Known error kinds. Convention: SCREAMING_SNAKE_CASE."""

    VALIDATION = "VALIDATION_ERROR"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    INVALID_TRANSITION = "INVALID_TRANSITION"
    ALREADY_TERMINAL = "ALREADY_TERMINAL"
    CONFLICT = "CONFLICT"
    CAPACITY_EXCEEDED = "CAPACITY_EXCEEDED"


class AccessError(Exception):
    """Base error for all engine operations."""

    kind: str = "ACCESS_ERROR"
    retryable: bool = False

    def __init__(self, message: str, *, field: Optional[str] = None):
        self.message = message
        self.field = field
        super().__init__(message)

    def to_dict(self) -> dict:
        """Serialize for the API layer."""
        return {
            "kind": self.kind,
            "message": self.message,
            "field": self.field,
            "retryable": self.retryable,
        }


class ValidationError(AccessError, ValueError):
    """Malformed input. Raised before any store access."""

    kind = ErrorKind.VALIDATION


class Forbidden(AccessError):
    """Policy Engine denied the action."""

    kind = ErrorKind.FORBIDDEN


class NotFound(AccessError):
    """Unknown record id."""

    kind = ErrorKind.NOT_FOUND

    def __init__(self, resource: str, record_id: str):
        self.resource = resource
        self.record_id = record_id
        super().__init__(f"{resource} '{record_id}' not found.", field="id")


class InvalidTransition(AccessError):
    """Attempted a state change out of a terminal state."""

    kind = ErrorKind.INVALID_TRANSITION

    def __init__(self, record_id: str, from_state: str, to_state: str):
        self.record_id = record_id
        self.from_state = from_state
        self.to_state = to_state
        super().__init__(
            f"Invalid transition for '{record_id}': "
            f"{from_state} → {to_state}.",
            field="status",
        )


class AlreadyTerminal(AccessError):
    """Revoke/cancel on a record that is already settled."""

    kind = ErrorKind.ALREADY_TERMINAL

    def __init__(self, record_id: str, status: str):
        self.record_id = record_id
        self.status = status
        super().__init__(
            f"'{record_id}' is already {status} (terminal state).",
            field="status",
        )


class Conflict(AccessError):
    """Optimistic-concurrency retry budget exhausted. Caller may retry."""

    kind = ErrorKind.CONFLICT
    retryable = True

    def __init__(self, record_id: str, attempts: int):
        self.record_id = record_id
        self.attempts = attempts
        super().__init__(
            f"Record '{record_id}' changed concurrently; "
            f"gave up after {attempts} attempts."
        )


class CapacityExceeded(AccessError):
    """Code generation could not find a code that no active credential holds."""

    kind = ErrorKind.CAPACITY_EXCEEDED

    def __init__(self, attempts: int, *, code_type: str = "PIN"):
        self.attempts = attempts
        self.code_type = code_type
        super().__init__(
            f"Could not generate a unique {code_type} code after {attempts} attempts.",
            field="code",
        )
