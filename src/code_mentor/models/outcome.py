"""Result type for model calls.

Model calls resolve to either a Success carrying the parsed payload or a
Failure tagged with its kind, instead of raising.
"""

from dataclasses import dataclass
from enum import StrEnum
from typing import Generic, TypeVar

T = TypeVar("T")


class FailureKind(StrEnum):
    """Why a model call failed."""

    MISSING_CREDENTIAL = "missing_credential"
    EMPTY_RESPONSE = "empty_response"
    MALFORMED_RESPONSE = "malformed_response"
    TRANSPORT_FAILURE = "transport_failure"


@dataclass(frozen=True)
class Success(Generic[T]):
    """A model call that produced a valid payload."""

    value: T


@dataclass(frozen=True)
class Failure:
    """A model call that failed.

    Attributes:
        kind: Failure classification.
        message: Localized user-facing text.
        detail: Diagnostic text; logged, never rendered.
    """

    kind: FailureKind
    message: str
    detail: str = ""


Outcome = Success[T] | Failure
