"""FastAPI application factory.

Wires configuration, the LLM adapter, the session store and the routers
into one app. Each browser gets a session through an HTTP-only cookie.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import TYPE_CHECKING

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from fastapi.templating import Jinja2Templates
from starlette.middleware.base import BaseHTTPMiddleware

from code_mentor._version import __version__
from code_mentor.adapters.llm.anthropic import AnthropicAdapter
from code_mentor.core.mentor import CodeMentor
from code_mentor.core.session import MentorSession, SessionStore
from code_mentor.utils.errors import EmptyInputError, RequestRejectedError, UnsupportedFileError
from code_mentor.utils.logging import LogEventNames, bind_context, clear_context

if TYPE_CHECKING:
    from code_mentor.config.schema import MentorConfig
    from code_mentor.interfaces.llm import LLMProvider

log = structlog.get_logger()

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))


def create_llm_provider(config: MentorConfig) -> LLMProvider:
    """Create the LLM adapter named by the configuration."""
    provider = config.llm.provider
    if provider == "anthropic":
        return AnthropicAdapter(config.llm.anthropic)
    raise ValueError(f"Unsupported LLM provider: {provider}")


class SessionCookieMiddleware(BaseHTTPMiddleware):
    """Attach a MentorSession to every request via a cookie."""

    def __init__(self, app: FastAPI, store: SessionStore, cookie_name: str, max_age: int) -> None:
        super().__init__(app)
        self._store = store
        self._cookie_name = cookie_name
        self._max_age = max_age

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        session, created = self._store.get_or_create(request.cookies.get(self._cookie_name))
        request.state.session = session
        bind_context(session_id=session.session_id[:8])
        try:
            response = await call_next(request)
        finally:
            clear_context()

        if created:
            response.set_cookie(
                key=self._cookie_name,
                value=session.session_id,
                max_age=self._max_age,
                httponly=True,
                secure=False,
                samesite="lax",
            )
        return response


def get_session(request: Request) -> MentorSession:
    """Dependency: the caller's session."""
    session: MentorSession = request.state.session
    return session


def get_mentor(request: Request) -> CodeMentor:
    """Dependency: the shared request orchestrator."""
    mentor: CodeMentor = request.app.state.mentor
    return mentor


def get_config(request: Request) -> MentorConfig:
    """Dependency: the loaded configuration."""
    config: MentorConfig = request.app.state.config
    return config


async def _empty_input_handler(request: Request, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=400, content={"detail": str(exc)})


async def _rejected_handler(request: Request, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=409, content={"detail": str(exc)})


async def _unsupported_file_handler(request: Request, exc: Exception) -> JSONResponse:
    log.info(LogEventNames.UPLOAD_REJECTED, error=str(exc))
    return JSONResponse(status_code=400, content={"detail": str(exc)})


def create_app(
    config: MentorConfig,
    llm: LLMProvider | None = None,
    store: SessionStore | None = None,
) -> FastAPI:
    """Create the CodeMentor web application.

    Args:
        config: Loaded configuration
        llm: LLM provider; defaults to the one named in the configuration
        store: Session store; defaults to one sized from the configuration

    Returns:
        Configured FastAPI app
    """
    from code_mentor.web import api, pages

    app = FastAPI(title="CodeMentor", version=__version__)

    app.state.config = config
    app.state.mentor = CodeMentor(
        llm or create_llm_provider(config),
        temperatures=config.llm.temperatures,
    )
    app.state.sessions = store or SessionStore(
        max_sessions=config.server.max_sessions,
        ttl=config.server.session_ttl,
    )

    app.add_middleware(
        SessionCookieMiddleware,
        store=app.state.sessions,
        cookie_name=config.server.session_cookie,
        max_age=config.server.session_ttl,
    )

    # Page routes handle these themselves; only the JSON API reaches the handlers
    app.add_exception_handler(EmptyInputError, _empty_input_handler)
    app.add_exception_handler(RequestRejectedError, _rejected_handler)
    app.add_exception_handler(UnsupportedFileError, _unsupported_file_handler)

    app.include_router(pages.router)
    app.include_router(api.router)

    return app
