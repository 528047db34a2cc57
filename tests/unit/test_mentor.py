"""Tests for CodeMentor request orchestration."""

from __future__ import annotations

from code_mentor.config.schema import TemperatureConfig
from code_mentor.core.mentor import FAILURE_MESSAGES, MISSING_CREDENTIAL_MESSAGE, CodeMentor
from code_mentor.models.analysis import AnalysisResult
from code_mentor.models.outcome import Failure, FailureKind, Success
from code_mentor.models.request import RequestKind
from code_mentor.models.trace import ExecutionTrace
from code_mentor.utils.errors import RateLimitError, TransportError


class TestCodeMentorSuccess:
    """Test successful model calls."""

    async def test_analyze(self, mentor: CodeMentor, fake_llm) -> None:
        """Test that a valid reply resolves to Success."""
        outcome = await mentor.analyze("def f(): pass")

        assert isinstance(outcome, Success)
        assert isinstance(outcome.value, AnalysisResult)
        assert fake_llm.requests[0].kind == RequestKind.ANALYZE
        assert "def f(): pass" in fake_llm.requests[0].prompt

    async def test_trace(self, mentor: CodeMentor) -> None:
        """Test a trace call."""
        outcome = await mentor.trace("x = 1")

        assert isinstance(outcome, Success)
        assert isinstance(outcome.value, ExecutionTrace)
        assert outcome.value.step_count == 3

    async def test_refine(self, mentor: CodeMentor, fake_llm) -> None:
        """Test a refine call embeds code and instruction."""
        outcome = await mentor.refine("x = 1", "add comments")

        assert isinstance(outcome, Success)
        assert "add comments" in fake_llm.requests[0].prompt

    async def test_uses_configured_temperatures(self, fake_llm) -> None:
        """Test that per-kind temperatures come from configuration."""
        mentor = CodeMentor(fake_llm, TemperatureConfig(analyze=0.7, trace=0.0, refine=0.9))

        await mentor.analyze("a")
        await mentor.trace("a")
        await mentor.refine("a", "b")

        assert [r.temperature for r in fake_llm.requests] == [0.7, 0.0, 0.9]

    def test_model_name(self, mentor: CodeMentor) -> None:
        """Test that the provider's model name is exposed."""
        assert mentor.model_name == "fake-model"


class TestCodeMentorFailures:
    """Test classification of failures into Failure outcomes."""

    async def test_missing_credential_fails_before_request(self, llm_factory) -> None:
        """Test that a missing key never reaches the provider."""
        llm = llm_factory(has_key=False)
        mentor = CodeMentor(llm)

        for outcome in (
            await mentor.analyze("a"),
            await mentor.trace("a"),
            await mentor.refine("a", "b"),
        ):
            assert isinstance(outcome, Failure)
            assert outcome.kind == FailureKind.MISSING_CREDENTIAL
            assert outcome.message == MISSING_CREDENTIAL_MESSAGE

        assert llm.requests == []

    async def test_empty_reply(self, llm_factory) -> None:
        """Test that a reply without body is an empty-response failure."""
        mentor = CodeMentor(llm_factory({RequestKind.ANALYZE: None}))

        outcome = await mentor.analyze("a")

        assert isinstance(outcome, Failure)
        assert outcome.kind == FailureKind.EMPTY_RESPONSE
        assert outcome.message == FAILURE_MESSAGES[RequestKind.ANALYZE]

    async def test_malformed_reply(self, llm_factory) -> None:
        """Test that invalid JSON is a malformed-response failure with diagnostics."""
        mentor = CodeMentor(llm_factory({RequestKind.TRACE: "not json"}))

        outcome = await mentor.trace("a")

        assert isinstance(outcome, Failure)
        assert outcome.kind == FailureKind.MALFORMED_RESPONSE
        assert outcome.message == FAILURE_MESSAGES[RequestKind.TRACE]
        assert outcome.detail

    async def test_transport_failure(self, llm_factory) -> None:
        """Test that transport errors map to the generic per-kind message."""
        mentor = CodeMentor(llm_factory({RequestKind.REFINE: TransportError("boom")}))

        outcome = await mentor.refine("a", "b")

        assert isinstance(outcome, Failure)
        assert outcome.kind == FailureKind.TRANSPORT_FAILURE
        assert outcome.message == FAILURE_MESSAGES[RequestKind.REFINE]
        assert outcome.detail == "boom"

    async def test_rate_limit_is_transport_failure(self, llm_factory) -> None:
        """Test that rate limiting is not retried and maps to a transport failure."""
        llm = llm_factory({RequestKind.ANALYZE: RateLimitError("slow down", retry_after=5)})
        mentor = CodeMentor(llm)

        outcome = await mentor.analyze("a")

        assert isinstance(outcome, Failure)
        assert outcome.kind == FailureKind.TRANSPORT_FAILURE
        assert len(llm.requests) == 1

    async def test_messages_are_not_diagnostics(self, llm_factory) -> None:
        """Test that raw parse errors never reach the user-facing message."""
        mentor = CodeMentor(llm_factory({RequestKind.ANALYZE: '{"summary": 1}'}))

        outcome = await mentor.analyze("a")

        assert isinstance(outcome, Failure)
        assert "validation" not in outcome.message
        assert "validation" in outcome.detail
