"""Request orchestration: build, send, validate, and classify the outcome.

CodeMentor is the only component that talks to the LLM provider. Every
action resolves to an Outcome; the failure taxonomy never escapes as an
exception, so callers update their state from the returned value alone.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import TYPE_CHECKING, TypeVar

import structlog

from code_mentor.config.schema import TemperatureConfig
from code_mentor.core.prompts import (
    build_analyze_request,
    build_refine_request,
    build_trace_request,
)
from code_mentor.core.schemas import parse_analysis, parse_refine, parse_trace
from code_mentor.models.outcome import Failure, FailureKind, Outcome, Success
from code_mentor.models.request import ModelRequest, RequestKind
from code_mentor.utils.errors import (
    EmptyResponseError,
    MalformedResponseError,
    MissingCredentialError,
    TransportError,
)
from code_mentor.utils.logging import LogEventNames

if TYPE_CHECKING:
    from code_mentor.interfaces.llm import LLMProvider
    from code_mentor.models.analysis import AnalysisResult
    from code_mentor.models.refine import RefineResult
    from code_mentor.models.trace import ExecutionTrace

log = structlog.get_logger()

T = TypeVar("T")

MISSING_CREDENTIAL_MESSAGE = "מפתח ה-API חסר. יש להגדיר את ANTHROPIC_API_KEY ולהפעיל מחדש את השרת."

FAILURE_MESSAGES: dict[RequestKind, str] = {
    RequestKind.ANALYZE: "אירעה שגיאה בניתוח הקוד. אנא נסה שנית.",
    RequestKind.TRACE: "אירעה שגיאה בסימולציית הריצה.",
    RequestKind.REFINE: "לא ניתן היה לעדכן את הקוד. אנא נסה שנית.",
}


class CodeMentor:
    """Runs analyze, trace and refine requests against an LLM provider.

    Example:
        mentor = CodeMentor(AnthropicAdapter(config.llm.anthropic))
        outcome = await mentor.analyze(code)
        if isinstance(outcome, Failure):
            show(outcome.message)
    """

    def __init__(
        self,
        llm: LLMProvider,
        temperatures: TemperatureConfig | None = None,
    ) -> None:
        """Initialize CodeMentor.

        Args:
            llm: Provider used for every model call
            temperatures: Sampling temperature per request kind
        """
        self._llm = llm
        self._temperatures = temperatures or TemperatureConfig()

    @property
    def model_name(self) -> str:
        """Model identifier of the underlying provider."""
        return self._llm.model_name

    async def analyze(self, code: str) -> Outcome[AnalysisResult]:
        """Request a structured code review."""
        return await self._run(
            RequestKind.ANALYZE,
            lambda: build_analyze_request(code, temperature=self._temperatures.analyze),
            parse_analysis,
        )

    async def trace(self, code: str) -> Outcome[ExecutionTrace]:
        """Request a simulated step-by-step execution."""
        return await self._run(
            RequestKind.TRACE,
            lambda: build_trace_request(code, temperature=self._temperatures.trace),
            parse_trace,
        )

    async def refine(self, current_code: str, instruction: str) -> Outcome[RefineResult]:
        """Request an edit of the current corrected code."""
        return await self._run(
            RequestKind.REFINE,
            lambda: build_refine_request(
                current_code, instruction, temperature=self._temperatures.refine
            ),
            parse_refine,
        )

    async def _run(
        self,
        kind: RequestKind,
        build: Callable[[], ModelRequest],
        parse: Callable[[str | None], T],
    ) -> Outcome[T]:
        """Check credentials, build the request, send it and parse the reply."""
        try:
            self._llm.check_credentials()
        except MissingCredentialError as e:
            return self._missing_credential(kind, e)

        request = build()
        start = time.monotonic()

        try:
            text = await self._llm.generate(request)
            value = parse(text)
        except MissingCredentialError as e:
            return self._missing_credential(kind, e)
        except EmptyResponseError as e:
            log.error(LogEventNames.LLM_RESPONSE_EMPTY, kind=kind.value)
            return Failure(FailureKind.EMPTY_RESPONSE, FAILURE_MESSAGES[kind], str(e))
        except MalformedResponseError as e:
            # Diagnostics were logged by the parser
            return Failure(FailureKind.MALFORMED_RESPONSE, FAILURE_MESSAGES[kind], str(e))
        except TransportError as e:
            log.error(
                LogEventNames.LLM_REQUEST_ERROR,
                kind=kind.value,
                error_type=type(e).__name__,
                error=str(e),
            )
            return Failure(FailureKind.TRANSPORT_FAILURE, FAILURE_MESSAGES[kind], str(e))

        log.info(
            LogEventNames.LLM_REQUEST_COMPLETE,
            kind=kind.value,
            model=self._llm.model_name,
            duration_ms=round((time.monotonic() - start) * 1000, 1),
        )
        return Success(value)

    def _missing_credential(self, kind: RequestKind, error: MissingCredentialError) -> Failure:
        log.error(LogEventNames.LLM_MISSING_CREDENTIAL, kind=kind.value, error=str(error))
        return Failure(FailureKind.MISSING_CREDENTIAL, MISSING_CREDENTIAL_MESSAGE, str(error))
