"""Response shapes the model must satisfy, and the parsers that enforce them.

The pydantic models here are the single source of truth for the JSON
contract: request builders embed their generated JSON Schema in prompts,
and replies are validated against them before being converted into the
frozen domain models. Nothing in this module touches the network.
"""

from __future__ import annotations

import json
from typing import Any, Literal, TypeVar

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from code_mentor.models.analysis import (
    AnalysisResult,
    Bug,
    Improvement,
    ImprovementCategory,
    Severity,
)
from code_mentor.models.refine import RefineResult
from code_mentor.models.request import RequestKind
from code_mentor.models.trace import ExecutionTrace, TraceStep, VariableState
from code_mentor.utils.errors import EmptyResponseError, MalformedResponseError
from code_mentor.utils.logging import LogEventNames

log = structlog.get_logger()

# Maximum reply length in characters
MAX_RESPONSE_LENGTH = 200_000

M = TypeVar("M", bound=BaseModel)


class _WireModel(BaseModel):
    """Base for reply models: camelCase on the wire, extra keys ignored."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


# =============================================================================
# Analysis
# =============================================================================


class BugSchema(_WireModel):
    """A defect found in the submitted code."""

    line: int | None = Field(default=None, description="Line number of the issue if applicable")
    description: str = Field(description="Explanation of the error in Hebrew")
    severity: Literal["critical", "warning", "info"]


class ImprovementSchema(_WireModel):
    """A code quality suggestion."""

    description: str = Field(description="Suggestion description in Hebrew")
    category: Literal["performance", "readability", "security", "best-practice"]


class AnalysisSchema(_WireModel):
    """Structured code review."""

    summary: str = Field(description="A short summary of what the code does in Hebrew.")
    language: str = Field(description="The programming language detected.")
    bugs: list[BugSchema] = Field(
        description="List of errors or potential bugs found in the code."
    )
    improvements: list[ImprovementSchema] = Field(
        description="Suggestions for code quality improvements."
    )
    time_complexity: str = Field(
        alias="timeComplexity",
        description="Big O time complexity analysis in Hebrew (e.g. O(n) because...).",
    )
    space_complexity: str = Field(
        alias="spaceComplexity",
        description="Big O space complexity analysis in Hebrew.",
    )
    corrected_code: str = Field(
        alias="correctedCode",
        description="The full corrected version of the code implementing fixes and improvements.",
    )

    def to_result(self) -> AnalysisResult:
        """Convert to the domain model."""
        return AnalysisResult(
            summary=self.summary,
            language=self.language,
            bugs=tuple(
                Bug(description=b.description, severity=Severity(b.severity), line=b.line)
                for b in self.bugs
            ),
            improvements=tuple(
                Improvement(description=i.description, category=ImprovementCategory(i.category))
                for i in self.improvements
            ),
            time_complexity=self.time_complexity,
            space_complexity=self.space_complexity,
            corrected_code=self.corrected_code,
        )

    @classmethod
    def from_result(cls, result: AnalysisResult) -> AnalysisSchema:
        """Build the wire model from a domain model."""
        return cls(
            summary=result.summary,
            language=result.language,
            bugs=[
                BugSchema(line=b.line, description=b.description, severity=b.severity.value)
                for b in result.bugs
            ],
            improvements=[
                ImprovementSchema(description=i.description, category=i.category.value)
                for i in result.improvements
            ],
            time_complexity=result.time_complexity,
            space_complexity=result.space_complexity,
            corrected_code=result.corrected_code,
        )


# =============================================================================
# Execution trace
# =============================================================================


class VariableSchema(_WireModel):
    """A variable and its value at one step; both are illustrative text."""

    name: str
    value: str

    @field_validator("name", "value", mode="before")
    @classmethod
    def stringify(cls, v: Any) -> Any:
        """Render non-string JSON values (numbers, arrays, null) as JSON text."""
        if isinstance(v, str):
            return v
        return json.dumps(v, ensure_ascii=False)


class TraceStepSchema(_WireModel):
    """One step of the simulated execution."""

    step: int
    line_content: str = Field(
        alias="lineContent",
        description="The representative code line or operation being executed.",
    )
    variables: list[VariableSchema] = Field(
        description="List of relevant variables and their values at this step."
    )
    explanation: str = Field(
        description="Short explanation of what happened in this step in Hebrew."
    )


class TraceSchema(_WireModel):
    """Step-by-step execution simulation."""

    input_description: str = Field(
        alias="inputDescription",
        description=(
            "Description of the sample input data chosen for this execution trace (in Hebrew)."
        ),
    )
    steps: list[TraceStepSchema] = Field(
        min_length=1,
        description="Step by step execution flow.",
    )
    final_output: str = Field(
        alias="finalOutput",
        description="The final output of the code execution.",
    )

    def to_trace(self) -> ExecutionTrace:
        """Convert to the domain model."""
        return ExecutionTrace(
            input_description=self.input_description,
            steps=tuple(
                TraceStep(
                    step=s.step,
                    line_content=s.line_content,
                    variables=tuple(VariableState(name=v.name, value=v.value) for v in s.variables),
                    explanation=s.explanation,
                )
                for s in self.steps
            ),
            final_output=self.final_output,
        )

    @classmethod
    def from_trace(cls, trace: ExecutionTrace) -> TraceSchema:
        """Build the wire model from a domain model."""
        return cls(
            input_description=trace.input_description,
            steps=[
                TraceStepSchema(
                    step=s.step,
                    line_content=s.line_content,
                    variables=[VariableSchema(name=v.name, value=v.value) for v in s.variables],
                    explanation=s.explanation,
                )
                for s in trace.steps
            ],
            final_output=trace.final_output,
        )


# =============================================================================
# Refinement
# =============================================================================


class RefineSchema(_WireModel):
    """Replacement code plus a description of the change."""

    new_code: str = Field(alias="newCode", description="The full updated code.")
    explanation: str = Field(description="What was changed and why, in Hebrew.")

    def to_result(self) -> RefineResult:
        """Convert to the domain model."""
        return RefineResult(new_code=self.new_code, explanation=self.explanation)


_SCHEMAS: dict[RequestKind, type[_WireModel]] = {
    RequestKind.ANALYZE: AnalysisSchema,
    RequestKind.TRACE: TraceSchema,
    RequestKind.REFINE: RefineSchema,
}


def response_schema(kind: RequestKind) -> dict[str, Any]:
    """Return the JSON Schema a reply of this kind must satisfy."""
    return _SCHEMAS[kind].model_json_schema(by_alias=True)


def validate_reply(text: str | None, model: type[M]) -> M:
    """Parse a raw model reply strictly as a JSON document of the given shape.

    Markdown fences or prose around the JSON are not stripped; such
    replies are malformed.

    Args:
        text: Raw reply text, or None if the model returned nothing.
        model: Pydantic model the reply must satisfy.

    Returns:
        Validated model instance.

    Raises:
        EmptyResponseError: If the reply is absent or blank.
        MalformedResponseError: If the reply is not valid JSON of the declared shape.
    """
    if text is None or not text.strip():
        raise EmptyResponseError("No response from the model")

    if len(text) > MAX_RESPONSE_LENGTH:
        raise MalformedResponseError(f"Response exceeds maximum length: {len(text)}")

    try:
        return model.model_validate_json(text)
    except ValidationError as e:
        log.error(
            LogEventNames.LLM_RESPONSE_MALFORMED,
            schema=model.__name__,
            errors=e.error_count(),
            error=str(e),
            response_preview=text[:200],
        )
        raise MalformedResponseError(f"Model response failed validation: {e}") from e


def parse_analysis(text: str | None) -> AnalysisResult:
    """Parse an analyze reply into an AnalysisResult."""
    return validate_reply(text, AnalysisSchema).to_result()


def parse_trace(text: str | None) -> ExecutionTrace:
    """Parse a trace reply into an ExecutionTrace."""
    return validate_reply(text, TraceSchema).to_trace()


def parse_refine(text: str | None) -> RefineResult:
    """Parse a refine reply into a RefineResult."""
    return validate_reply(text, RefineSchema).to_result()


def dump_analysis(result: AnalysisResult) -> dict[str, Any]:
    """Serialize an AnalysisResult in its wire shape."""
    return AnalysisSchema.from_result(result).model_dump(by_alias=True)


def dump_trace(trace: ExecutionTrace) -> dict[str, Any]:
    """Serialize an ExecutionTrace in its wire shape."""
    return TraceSchema.from_trace(trace).model_dump(by_alias=True)

