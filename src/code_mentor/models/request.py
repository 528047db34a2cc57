"""Outbound model request."""

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any


class RequestKind(StrEnum):
    """The user action a model request was built for."""

    ANALYZE = "analyze"
    TRACE = "trace"
    REFINE = "refine"


@dataclass(frozen=True)
class ModelRequest:
    """A prompt plus the response shape the reply must satisfy."""

    kind: RequestKind
    system_prompt: str
    prompt: str
    response_schema: dict[str, Any] = field(compare=False)
    temperature: float
