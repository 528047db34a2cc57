"""Exception hierarchy for CodeMentor.

Adapter and parser layers raise these; CodeMentor converts the model
call failures into Failure outcomes, and the session and web layers turn
input and concurrency errors into no-ops or HTTP status codes.
"""

from __future__ import annotations


class MentorError(Exception):
    """Base exception for all CodeMentor errors."""


# =============================================================================
# Model call failures
# =============================================================================


class MissingCredentialError(MentorError):
    """The model API key is not configured."""


class EmptyResponseError(MentorError):
    """The model returned no body."""


class MalformedResponseError(MentorError):
    """The model reply does not parse as the declared schema."""


class TransportError(MentorError):
    """The model call itself failed (network, quota, server-side)."""


class RateLimitError(TransportError):
    """Rate limit exceeded.

    Attributes:
        retry_after: Number of seconds the provider asked to wait, if known.
    """

    def __init__(self, message: str, retry_after: int | None = None) -> None:
        super().__init__(message)
        self.retry_after = retry_after


class RequestTimeoutError(TransportError):
    """The transport timed out waiting for the model."""


# =============================================================================
# Caller-side errors
# =============================================================================


class EmptyInputError(MentorError, ValueError):
    """Code text or refine instruction is empty."""


class RequestRejectedError(MentorError):
    """The action is not allowed in the current session state."""


class UnsupportedFileError(MentorError, ValueError):
    """An uploaded file was rejected by the extension allow-list or size limit."""
