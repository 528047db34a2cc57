"""Per-user workspace and the in-memory session store.

MentorSession enforces the rules between the state containers:

- analyze and trace are mutually exclusive while either is loading;
- starting an analysis discards the trace and the refine loop first;
- refine is single-flight and never corrupts accepted code on failure.

All checks and the LOADING transition happen before the first await, so
two actions on the same session cannot both pass the guard.
"""

from __future__ import annotations

import asyncio
import secrets
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any

import structlog
from cachetools import TTLCache

from code_mentor.core.mentor import FAILURE_MESSAGES, CodeMentor
from code_mentor.core.state import (
    AnalysisState,
    RefineState,
    RequestState,
    StepAction,
    TraceState,
    TraceStepper,
)
from code_mentor.models.outcome import Failure
from code_mentor.models.request import RequestKind
from code_mentor.utils.errors import EmptyInputError, RequestRejectedError
from code_mentor.utils.logging import LogEventNames

log = structlog.get_logger()


@contextmanager
def _settle_on_abort(state: RequestState[Any], kind: RequestKind) -> Iterator[None]:
    """Leave LOADING if the wrapped call is cancelled or raises unexpectedly.

    Cancellation returns the state to IDLE; any other exception settles it
    as a failure with the usual user message. Both are re-raised.
    """
    try:
        yield
    except asyncio.CancelledError:
        log.info(LogEventNames.REQUEST_ABORTED, kind=kind.value, reason="cancelled")
        state.reset()
        raise
    except Exception:
        log.exception(LogEventNames.REQUEST_ABORTED, kind=kind.value, reason="error")
        state.fail(FAILURE_MESSAGES[kind])
        raise


@dataclass
class MentorSession:
    """One user's editor text and request states."""

    session_id: str
    code: str = ""
    analysis: AnalysisState = field(default_factory=RequestState)
    trace: TraceState = field(default_factory=TraceState)
    refine: RefineState = field(default_factory=RefineState)

    @property
    def busy(self) -> bool:
        """Whether an analyze or trace request is in flight."""
        return self.analysis.is_loading or self.trace.is_loading

    @property
    def can_submit(self) -> bool:
        """Whether analyze/trace may be triggered right now."""
        return bool(self.code.strip()) and not self.busy

    def _accept_code(self, code: str | None, action: str) -> None:
        candidate = self.code if code is None else code
        if not candidate.strip():
            log.debug(LogEventNames.EMPTY_INPUT_IGNORED, action=action)
            raise EmptyInputError("Code text is empty")
        if self.busy:
            log.info(LogEventNames.REQUEST_REJECTED, action=action, reason="busy")
            raise RequestRejectedError(
                "Another analysis or trace request is already in progress"
            )
        self.code = candidate

    async def analyze(self, mentor: CodeMentor, code: str | None = None) -> AnalysisState:
        """Run a code review for the editor text.

        Args:
            mentor: Request orchestrator
            code: New editor text; None keeps the current text

        Returns:
            The settled analysis state

        Raises:
            EmptyInputError: If there is no code to analyze
            RequestRejectedError: If an analyze or trace request is in flight
        """
        self._accept_code(code, "analyze")

        # A trace belongs to the code and analysis it was made for
        self.trace.reset()
        self.refine.clear()
        self.analysis.start()

        with _settle_on_abort(self.analysis, RequestKind.ANALYZE):
            outcome = await mentor.analyze(self.code)
        self.analysis.apply(outcome)
        if self.analysis.data is not None:
            self.refine.seed(self.analysis.data.corrected_code)
        return self.analysis

    async def run_trace(self, mentor: CodeMentor, code: str | None = None) -> TraceState:
        """Run an execution simulation for the editor text.

        Raises:
            EmptyInputError: If there is no code to trace
            RequestRejectedError: If an analyze or trace request is in flight
        """
        self._accept_code(code, "trace")

        self.trace.start()
        with _settle_on_abort(self.trace, RequestKind.TRACE):
            outcome = await mentor.trace(self.code)
        self.trace.apply(outcome)
        return self.trace

    async def refine_code(self, mentor: CodeMentor, instruction: str) -> RefineState:
        """Apply a free-text edit to the current corrected code.

        On failure the current code and the typed instruction are kept and
        the failure message is stored on the refine state only.

        Raises:
            RequestRejectedError: If there is no corrected code yet or a
                refine request is already pending
            EmptyInputError: If the instruction is blank
        """
        if not self.refine.available:
            log.info(LogEventNames.REQUEST_REJECTED, action="refine", reason="no_code")
            raise RequestRejectedError("There is no corrected code to refine yet")
        try:
            token = self.refine.begin(instruction)
        except RequestRejectedError:
            log.info(LogEventNames.REQUEST_REJECTED, action="refine", reason="pending")
            raise

        try:
            outcome = await mentor.refine(self.refine.current_code, instruction)
        except asyncio.CancelledError:
            log.info(LogEventNames.REQUEST_ABORTED, kind="refine", reason="cancelled")
            self.refine.abandon(token)
            raise
        except Exception:
            log.exception(LogEventNames.REQUEST_ABORTED, kind="refine", reason="error")
            self.refine.fail(token, FAILURE_MESSAGES[RequestKind.REFINE])
            raise

        if isinstance(outcome, Failure):
            log.warning(
                LogEventNames.REFINE_FAILED,
                failure=outcome.kind.value,
                detail=outcome.detail,
            )
            applied = self.refine.fail(token, outcome.message)
        else:
            applied = self.refine.complete(token, outcome.value)
            if applied:
                log.info(LogEventNames.REFINE_APPLIED, code_chars=len(outcome.value.new_code))

        if not applied:
            log.info(LogEventNames.REFINE_DISCARDED, reason="superseded")
        return self.refine

    def step_trace(self, action: StepAction) -> TraceStepper:
        """Move the trace cursor.

        Raises:
            RequestRejectedError: If there is no trace to step through
        """
        stepper = self.trace.stepper
        if stepper is None:
            raise RequestRejectedError("There is no execution trace to step through")
        stepper.apply(action)
        return stepper

    def close_trace(self) -> None:
        """Dismiss the trace panel."""
        if self.trace.is_loading:
            raise RequestRejectedError("The trace request is still in progress")
        self.trace.reset()

    def load_code(self, text: str) -> None:
        """Replace the editor text (e.g. from an uploaded file)."""
        self.code = text

    def clear(self) -> None:
        """Reset the editor and every result.

        Raises:
            RequestRejectedError: If an analyze or trace request is in flight
        """
        if self.busy:
            raise RequestRejectedError("Cannot clear while a request is in progress")
        self.code = ""
        self.analysis.reset()
        self.trace.reset()
        self.refine.clear()


class SessionStore:
    """Bounded in-memory map of session id to MentorSession.

    Sessions expire after ttl seconds without being looked up again; the
    least recently used ones are evicted beyond max_sessions.
    """

    def __init__(
        self,
        max_sessions: int = 1024,
        ttl: float = 3600,
        timer: Callable[[], float] = time.monotonic,
    ) -> None:
        self._sessions: TTLCache[str, MentorSession] = TTLCache(
            maxsize=max_sessions, ttl=ttl, timer=timer
        )

    def __len__(self) -> int:
        return len(self._sessions)

    def get(self, session_id: str | None) -> MentorSession | None:
        """Return a live session, refreshing its expiry."""
        if not session_id:
            return None
        session = self._sessions.get(session_id)
        if session is not None:
            # Re-insert to restart the TTL
            self._sessions[session_id] = session
        return session

    def create(self) -> MentorSession:
        session = MentorSession(session_id=secrets.token_hex(16))
        self._sessions[session.session_id] = session
        log.debug(LogEventNames.SESSION_CREATED, active_sessions=len(self._sessions))
        return session

    def get_or_create(self, session_id: str | None) -> tuple[MentorSession, bool]:
        """Return (session, created)."""
        session = self.get(session_id)
        if session is not None:
            return session, False
        return self.create(), True

    def discard(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)
