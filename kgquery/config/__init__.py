"""
Configuration - Engine settings and error taxonomy.
"""

from .errors import (
    ErrorCode,
    InvalidArgumentError,
    KGQueryError,
    OperationCancelledError,
    QueryTimeoutError,
    RepositoryError,
)
from .settings import Settings, configure_logging, get_settings

__all__ = [
    # Settings
    "Settings",
    "get_settings",
    "configure_logging",
    # Errors
    "ErrorCode",
    "KGQueryError",
    "InvalidArgumentError",
    "QueryTimeoutError",
    "OperationCancelledError",
    "RepositoryError",
]
