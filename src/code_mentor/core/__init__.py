"""Core business logic components.

This module exports the main business logic classes:
- CodeMentor: Builds, sends and validates model requests
- MentorSession: One user's editor text and request states
- SessionStore: Bounded in-memory session map
- TraceStepper: Cursor over the steps of an execution trace
"""

from code_mentor.core.mentor import CodeMentor
from code_mentor.core.session import MentorSession, SessionStore
from code_mentor.core.state import (
    RefineState,
    RequestState,
    RequestStatus,
    StepAction,
    TraceState,
    TraceStepper,
)
from code_mentor.core.uploads import decode_upload, is_allowed_file

__all__ = [
    "CodeMentor",
    "MentorSession",
    "RefineState",
    "RequestState",
    "RequestStatus",
    "SessionStore",
    "StepAction",
    "TraceState",
    "TraceStepper",
    "decode_upload",
    "is_allowed_file",
]
