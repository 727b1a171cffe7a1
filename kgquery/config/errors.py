"""
Error Taxonomy - Consistent error codes across the query engine.

Usage:
    from kgquery.config.errors import ErrorCode, KGQueryError

    raise QueryTimeoutError("Query exceeded 30.0s", details={"timeout": 30.0})
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Standardized error codes for machine-readable error responses."""

    # Argument errors
    INVALID_ARGUMENT = "INVALID_ARGUMENT"

    # Query execution errors
    QUERY_TIMEOUT = "QUERY_TIMEOUT"
    QUERY_CANCELLED = "QUERY_CANCELLED"

    # Storage errors
    REPOSITORY_UNAVAILABLE = "REPOSITORY_UNAVAILABLE"
    REPOSITORY_READ_FAILED = "REPOSITORY_READ_FAILED"


class KGQueryError(Exception):
    """Base exception with error code support."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(f"[{code.value}] {message}")

    def to_dict(self) -> dict[str, Any]:
        """Convert to API-friendly dictionary."""
        return {
            "code": self.code.value,
            "message": self.message,
            "details": self.details,
        }


class InvalidArgumentError(KGQueryError, ValueError):
    """A required argument is missing or out of range."""

    def __init__(self, param_name: str, message: str | None = None) -> None:
        self.param_name = param_name
        super().__init__(
            ErrorCode.INVALID_ARGUMENT,
            message or f"Argument '{param_name}' must not be None",
            {"param": param_name},
        )


class QueryTimeoutError(KGQueryError):
    """Query did not complete within its timeout."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(ErrorCode.QUERY_TIMEOUT, message, details)


class OperationCancelledError(KGQueryError):
    """Operation was cancelled through its cancellation token."""

    def __init__(
        self,
        message: str = "Operation was cancelled",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(ErrorCode.QUERY_CANCELLED, message, details)


class RepositoryError(KGQueryError):
    """Storage backend errors."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        code: ErrorCode = ErrorCode.REPOSITORY_UNAVAILABLE,
    ) -> None:
        super().__init__(code, message, details)
