"""Base exception classes for domain-level errors."""

from __future__ import annotations


class DomainError(Exception):
    """Base exception for all domain-level errors."""

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__


class InvalidOperationError(DomainError):
    """Raised when an operation is not allowed in the current state."""

    def __init__(self, operation: str, current_state: str, message: str | None = None) -> None:
        super().__init__(
            message or f"Cannot {operation} while {current_state}",
            code="INVALID_OPERATION",
        )
        self.operation = operation
        self.current_state = current_state
