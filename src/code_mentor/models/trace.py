"""Data models for simulated execution traces."""

from dataclasses import dataclass


@dataclass(frozen=True)
class VariableState:
    """Illustrative variable snapshot; both fields are opaque text."""

    name: str
    value: str


@dataclass(frozen=True)
class TraceStep:
    """One discrete point in a simulated execution."""

    step: int  # informational; navigation uses the position in ExecutionTrace.steps
    line_content: str
    variables: tuple[VariableState, ...]
    explanation: str


@dataclass(frozen=True)
class ExecutionTrace:
    """Step-by-step simulation of a program on one sample input."""

    input_description: str
    steps: tuple[TraceStep, ...]
    final_output: str

    @property
    def step_count(self) -> int:
        """Number of steps in the trace."""
        return len(self.steps)

    @property
    def last_index(self) -> int:
        """Index of the final step."""
        return len(self.steps) - 1
