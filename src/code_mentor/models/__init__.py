"""Data models and transfer objects."""

from .analysis import AnalysisResult, Bug, Improvement, ImprovementCategory, Severity
from .outcome import Failure, FailureKind, Outcome, Success
from .refine import RefineResult
from .request import ModelRequest, RequestKind
from .trace import ExecutionTrace, TraceStep, VariableState

__all__ = [
    # Analysis models
    "Severity",
    "ImprovementCategory",
    "Bug",
    "Improvement",
    "AnalysisResult",
    # Trace models
    "VariableState",
    "TraceStep",
    "ExecutionTrace",
    # Refine models
    "RefineResult",
    # Request/response plumbing
    "RequestKind",
    "ModelRequest",
    "FailureKind",
    "Success",
    "Failure",
    "Outcome",
]
