"""Display models for the HTML page.

Pure functions from session state to template context. Templates only
branch on what is prepared here; all user-visible text is Hebrew.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from code_mentor.core.state import RequestStatus
from code_mentor.models.analysis import Bug, Severity

if TYPE_CHECKING:
    from code_mentor.core.session import MentorSession
    from code_mentor.core.state import TraceState
    from code_mentor.models.trace import VariableState

SEVERITY_LABELS: dict[Severity, str] = {
    Severity.CRITICAL: "קריטי",
    Severity.WARNING: "אזהרה",
    Severity.INFO: "מידע",
}

NO_BUGS_MESSAGE = "לא נמצאו שגיאות קריטיות. כל הכבוד!"
NO_IMPROVEMENTS_MESSAGE = "לא נמצאו הצעות לשיפור מיוחדות."
NO_VARIABLES_MESSAGE = "אין משתנים פעילים בצעד זה"
FINAL_OUTPUT_TITLE = "פלט סופי"
UPLOAD_REJECTED_MESSAGE = "לא ניתן לטעון את הקובץ: סוג הקובץ אינו נתמך או שהקובץ גדול מדי."


@dataclass(frozen=True)
class BugView:
    description: str
    severity: str
    severity_label: str
    line_label: str | None


@dataclass(frozen=True)
class TraceView:
    input_description: str
    position_label: str
    line_content: str
    variables: tuple[VariableState, ...]
    explanation: str
    is_first: bool
    is_last: bool
    final_output: str | None


def line_label(line: int | None) -> str | None:
    """Return "שורה N:" for a positive line number, else None."""
    if line is None or line <= 0:
        return None
    return f"שורה {line}:"


def bug_view(bug: Bug) -> BugView:
    return BugView(
        description=bug.description,
        severity=bug.severity.value,
        severity_label=SEVERITY_LABELS[bug.severity],
        line_label=line_label(bug.line),
    )


def step_position_label(index: int, step_count: int) -> str:
    """Return "צעד i מתוך N" for a zero-based index."""
    return f"צעד {index + 1} מתוך {step_count}"


def trace_view(trace: TraceState) -> TraceView | None:
    """Build the trace panel for the current step, or None if there is no trace."""
    step = trace.current_step
    if trace.data is None or trace.stepper is None or step is None:
        return None
    stepper = trace.stepper
    return TraceView(
        input_description=trace.data.input_description,
        position_label=step_position_label(stepper.index, stepper.step_count),
        line_content=step.line_content,
        variables=step.variables,
        explanation=step.explanation,
        is_first=stepper.is_first,
        is_last=stepper.is_last,
        final_output=trace.data.final_output if trace.show_final_output else None,
    )


def error_message(session: MentorSession) -> str | None:
    """The single error panel shows the analysis error, else the trace error."""
    return session.analysis.error or session.trace.error


def page_context(session: MentorSession, **extra: Any) -> dict[str, Any]:
    """Build the template context for index.html."""
    analysis = session.analysis.data
    return {
        "code": session.code,
        "can_submit": session.can_submit,
        "analysis_loading": session.analysis.status == RequestStatus.LOADING,
        "trace_loading": session.trace.status == RequestStatus.LOADING,
        "error_message": error_message(session),
        "analysis": analysis,
        "bugs": [bug_view(b) for b in analysis.bugs] if analysis else [],
        "trace": trace_view(session.trace),
        "refine": session.refine,
        "labels": {
            "no_bugs": NO_BUGS_MESSAGE,
            "no_improvements": NO_IMPROVEMENTS_MESSAGE,
            "no_variables": NO_VARIABLES_MESSAGE,
            "final_output": FINAL_OUTPUT_TITLE,
        },
        **extra,
    }
