"""Base exception classes for domain-level errors."""

from __future__ import annotations

from typing import Any


class DomainError(Exception):
    """Base exception for all domain-level errors."""

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__


class ConfigurationError(DomainError):
    """Raised when the manager is constructed with missing or invalid options."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message, code="CONFIGURATION_ERROR")
        self.field = field


class NodeConnectionError(DomainError):
    """Raised (or published) when the node socket cannot be opened or used."""

    def __init__(self, message: str, attempts: int = 0) -> None:
        super().__init__(message, code="NODE_CONNECTION_ERROR")
        self.attempts = attempts


class RequestError(DomainError):
    """Raised when a REST call to the node fails.

    ``status`` is the HTTP status for non-success responses and ``None`` when
    the request never produced a response (timeout, refused connection).
    """

    def __init__(
        self,
        method: str,
        path: str,
        status: int | None = None,
        message: str | None = None,
    ) -> None:
        if message is None:
            if status is None:
                message = f"{method} /{path} failed without a response"
            else:
                message = f"{method} /{path} failed with status {status}"
        super().__init__(message, code="REQUEST_ERROR")
        self.method = method
        self.path = path
        self.status = status


class ProtocolError(DomainError):
    """Raised when data received from the node does not have the expected shape."""

    def __init__(self, message: str, raw: Any = None) -> None:
        super().__init__(message, code="PROTOCOL_ERROR")
        self.raw = raw


class InvalidOperationError(DomainError):
    """Raised when an operation is invalid in the current state."""

    def __init__(self, operation: str, current_state: str, message: str | None = None) -> None:
        msg = message or f"Cannot perform '{operation}' in state '{current_state}'"
        super().__init__(msg, code="INVALID_OPERATION")
        self.operation = operation
        self.current_state = current_state
