"""Independent state containers for one user's workspace.

Each concern (analysis, trace, refine) owns its own container with an
explicit status, so every transition can be exercised on its own.
MentorSession composes them and enforces the rules between them.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Generic, TypeVar

from code_mentor.models.outcome import Failure, Outcome
from code_mentor.utils.errors import EmptyInputError, RequestRejectedError

if TYPE_CHECKING:
    from code_mentor.models.analysis import AnalysisResult
    from code_mentor.models.refine import RefineResult
    from code_mentor.models.trace import ExecutionTrace, TraceStep

T = TypeVar("T")


class RequestStatus(StrEnum):
    """Lifecycle of one request-backed value."""

    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


class StepAction(StrEnum):
    """Trace stepper transitions."""

    NEXT = "next"
    PREVIOUS = "previous"
    RESET = "reset"


@dataclass
class RequestState(Generic[T]):
    """Idle/loading/success/error holder for one request kind.

    Invariant: data is set only in SUCCESS, error only in ERROR.
    """

    status: RequestStatus = RequestStatus.IDLE
    data: T | None = None
    error: str | None = None

    @property
    def is_loading(self) -> bool:
        return self.status == RequestStatus.LOADING

    def start(self) -> None:
        """Enter LOADING, discarding any previous result or error."""
        self.status = RequestStatus.LOADING
        self.data = None
        self.error = None

    def succeed(self, data: T) -> None:
        self.status = RequestStatus.SUCCESS
        self.data = data
        self.error = None

    def fail(self, message: str) -> None:
        self.status = RequestStatus.ERROR
        self.data = None
        self.error = message

    def reset(self) -> None:
        self.status = RequestStatus.IDLE
        self.data = None
        self.error = None

    def apply(self, outcome: Outcome[T]) -> None:
        """Settle the state from a model call outcome."""
        if isinstance(outcome, Failure):
            self.fail(outcome.message)
        else:
            self.succeed(outcome.value)


class TraceStepper:
    """Cursor over the steps of a trace.

    The index always stays within [0, step_count - 1]. Moving past either
    end is a no-op, and the last step is an ordinary, re-enterable state.
    """

    def __init__(self, step_count: int) -> None:
        if step_count < 1:
            raise ValueError(f"A trace needs at least one step, got {step_count}")
        self._step_count = step_count
        self._index = 0

    @property
    def index(self) -> int:
        return self._index

    @property
    def step_count(self) -> int:
        return self._step_count

    @property
    def is_first(self) -> bool:
        return self._index == 0

    @property
    def is_last(self) -> bool:
        return self._index == self._step_count - 1

    def next(self) -> int:
        if not self.is_last:
            self._index += 1
        return self._index

    def previous(self) -> int:
        if not self.is_first:
            self._index -= 1
        return self._index

    def reset(self) -> int:
        self._index = 0
        return self._index

    def apply(self, action: StepAction) -> int:
        """Run one transition and return the new index."""
        if action == StepAction.NEXT:
            return self.next()
        if action == StepAction.PREVIOUS:
            return self.previous()
        return self.reset()


@dataclass
class TraceState(RequestState["ExecutionTrace"]):
    """Trace request state plus the stepper for the current trace."""

    stepper: TraceStepper | None = None

    def start(self) -> None:
        super().start()
        self.stepper = None

    def succeed(self, data: ExecutionTrace) -> None:
        super().succeed(data)
        self.stepper = TraceStepper(data.step_count)

    def fail(self, message: str) -> None:
        super().fail(message)
        self.stepper = None

    def reset(self) -> None:
        super().reset()
        self.stepper = None

    @property
    def current_step(self) -> TraceStep | None:
        if self.data is None or self.stepper is None:
            return None
        return self.data.steps[self.stepper.index]

    @property
    def show_final_output(self) -> bool:
        """The final output panel is visible exactly on the last step."""
        return self.stepper is not None and self.stepper.is_last


@dataclass
class RefineState:
    """The refine loop: one mutable "current code" plus the latest explanation.

    Every seed or clear bumps the generation; a refine reply that arrives
    for an older generation is discarded instead of overwriting newer code.
    """

    current_code: str = ""
    instruction: str = ""
    explanation: str | None = None
    error: str | None = None
    pending: bool = False
    generation: int = 0

    @property
    def available(self) -> bool:
        """Whether there is corrected code to refine."""
        return bool(self.current_code)

    def seed(self, code: str) -> None:
        """Start a new refine loop from freshly corrected code."""
        self.current_code = code
        self.instruction = ""
        self.explanation = None
        self.error = None
        self.pending = False
        self.generation += 1

    def clear(self) -> None:
        self.seed("")

    def begin(self, instruction: str) -> int:
        """Mark a refine request in flight.

        Returns:
            The generation token to pass to complete() or fail().

        Raises:
            RequestRejectedError: If a refine request is already pending.
            EmptyInputError: If the instruction is blank.
        """
        if self.pending:
            raise RequestRejectedError("A refine request is already in progress")
        if not instruction.strip():
            raise EmptyInputError("Refine instruction is empty")
        self.pending = True
        self.instruction = instruction
        self.error = None
        return self.generation

    def complete(self, token: int, result: RefineResult) -> bool:
        """Accept a refine reply. Returns False if it was stale and discarded."""
        if token != self.generation:
            return False
        self.current_code = result.new_code
        self.explanation = result.explanation
        self.instruction = ""
        self.error = None
        self.pending = False
        return True

    def fail(self, token: int, message: str) -> bool:
        """Record a refine failure, keeping the code and the typed instruction."""
        if token != self.generation:
            return False
        self.error = message
        self.pending = False
        return True

    def abandon(self, token: int) -> None:
        """Drop a cancelled request, leaving code and instruction as they were."""
        if token == self.generation:
            self.pending = False


AnalysisState = RequestState["AnalysisResult"]
