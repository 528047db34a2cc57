"""Data models for conversational code refinement."""

from dataclasses import dataclass


@dataclass(frozen=True)
class RefineResult:
    """Replacement code produced by one refine request."""

    new_code: str
    explanation: str
