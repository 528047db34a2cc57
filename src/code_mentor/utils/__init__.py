"""Utility functions and helpers.

- errors: Exception hierarchy
- security: Secret redaction for logs
- logging: Structured logging with secret sanitization
- health: Health check utilities
"""

from code_mentor.utils.errors import (
    EmptyInputError,
    EmptyResponseError,
    MalformedResponseError,
    MentorError,
    MissingCredentialError,
    RateLimitError,
    RequestRejectedError,
    RequestTimeoutError,
    TransportError,
    UnsupportedFileError,
)
from code_mentor.utils.health import HealthChecker, HealthReport, HealthStatus
from code_mentor.utils.logging import (
    LogFormat,
    LogLevel,
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
    unbind_context,
)
from code_mentor.utils.security import RedactionError, SecretRedactor, SecurityError

__all__ = [
    # Errors
    "EmptyInputError",
    "EmptyResponseError",
    "MalformedResponseError",
    "MentorError",
    "MissingCredentialError",
    "RateLimitError",
    "RequestRejectedError",
    "RequestTimeoutError",
    "TransportError",
    "UnsupportedFileError",
    # Health
    "HealthChecker",
    "HealthReport",
    "HealthStatus",
    # Logging
    "LogFormat",
    "LogLevel",
    "bind_context",
    "clear_context",
    "configure_logging",
    "get_logger",
    "unbind_context",
    # Security
    "RedactionError",
    "SecretRedactor",
    "SecurityError",
]
