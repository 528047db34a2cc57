"""Data models for code review results."""

from dataclasses import dataclass
from enum import StrEnum


class Severity(StrEnum):
    """Severity of a detected defect (critical > warning > info)."""

    CRITICAL = "critical"
    WARNING = "warning"
    INFO = "info"


class ImprovementCategory(StrEnum):
    """Category of an improvement suggestion."""

    PERFORMANCE = "performance"
    READABILITY = "readability"
    SECURITY = "security"
    BEST_PRACTICE = "best-practice"


@dataclass(frozen=True)
class Bug:
    """A defect reported by the reviewer."""

    description: str
    severity: Severity
    line: int | None = None  # 1-based, never checked against the input


@dataclass(frozen=True)
class Improvement:
    """An improvement suggestion."""

    description: str
    category: ImprovementCategory


@dataclass(frozen=True)
class AnalysisResult:
    """Structured code review produced by one analyze request."""

    summary: str
    language: str
    bugs: tuple[Bug, ...]
    improvements: tuple[Improvement, ...]
    time_complexity: str
    space_complexity: str
    corrected_code: str

    @property
    def has_bugs(self) -> bool:
        """Whether any defect was reported."""
        return bool(self.bugs)
