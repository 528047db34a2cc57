"""Shared test fixtures for CodeMentor."""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from code_mentor.config.schema import MentorConfig
from code_mentor.core.mentor import CodeMentor
from code_mentor.models.request import ModelRequest, RequestKind
from code_mentor.utils.errors import MissingCredentialError

# Get the fixtures directory
FIXTURES_DIR = Path(__file__).parent / "fixtures"
RESPONSES_DIR = FIXTURES_DIR / "responses"


class FakeLLMProvider:
    """In-memory LLMProvider returning canned replies per request kind.

    Attributes:
        replies: Reply text (or None) per kind; an exception instance is raised instead
        gate: When set, generate() waits on it before replying
        requests: Every request received, in order
        active: Calls currently in flight
        max_active: Highest number of concurrent calls seen
    """

    def __init__(
        self,
        replies: dict[RequestKind, str | None | Exception] | None = None,
        has_key: bool = True,
    ) -> None:
        self.replies: dict[RequestKind, str | None | Exception] = dict(replies or {})
        self.has_key = has_key
        self.gate: asyncio.Event | None = None
        self.requests: list[ModelRequest] = []
        self.active = 0
        self.max_active = 0

    @property
    def model_name(self) -> str:
        return "fake-model"

    def check_credentials(self) -> None:
        if not self.has_key:
            raise MissingCredentialError("no key")

    async def generate(self, request: ModelRequest) -> str | None:
        self.requests.append(request)
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            if self.gate is not None:
                await self.gate.wait()
            reply = self.replies.get(request.kind)
            if isinstance(reply, Exception):
                raise reply
            return reply
        finally:
            self.active -= 1


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the path to the fixtures directory."""
    return FIXTURES_DIR


@pytest.fixture
def analysis_reply() -> str:
    """Load a valid analyze reply."""
    return (RESPONSES_DIR / "analysis.json").read_text(encoding="utf-8")


@pytest.fixture
def trace_reply() -> str:
    """Load a valid three-step trace reply."""
    return (RESPONSES_DIR / "trace.json").read_text(encoding="utf-8")


@pytest.fixture
def refine_reply() -> str:
    """Load a valid refine reply."""
    return (RESPONSES_DIR / "refine.json").read_text(encoding="utf-8")


@pytest.fixture
def fake_llm(analysis_reply: str, trace_reply: str, refine_reply: str) -> FakeLLMProvider:
    """Fake provider answering every kind with a valid reply."""
    return FakeLLMProvider(
        {
            RequestKind.ANALYZE: analysis_reply,
            RequestKind.TRACE: trace_reply,
            RequestKind.REFINE: refine_reply,
        }
    )


@pytest.fixture
def mentor(fake_llm: FakeLLMProvider) -> CodeMentor:
    """CodeMentor backed by the fake provider."""
    return CodeMentor(fake_llm)


@pytest.fixture
def config() -> MentorConfig:
    """Default configuration with a dummy key."""
    cfg = MentorConfig()
    cfg.llm.anthropic.api_key = "sk-ant-test-key-123"
    return cfg


@pytest.fixture
def llm_factory() -> type[FakeLLMProvider]:
    """Return the fake provider class for tests that need custom replies."""
    return FakeLLMProvider
