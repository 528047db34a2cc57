"""HTML page routes.

Every action is a form POST that redirects back to the page (303).
Empty input and actions the current state does not allow are no-ops.
"""

from __future__ import annotations

from contextlib import suppress
from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from fastapi.responses import HTMLResponse, RedirectResponse, Response

from code_mentor.config.schema import MentorConfig
from code_mentor.core.mentor import CodeMentor
from code_mentor.core.session import MentorSession
from code_mentor.core.state import StepAction
from code_mentor.core.uploads import decode_upload
from code_mentor.utils.errors import EmptyInputError, RequestRejectedError, UnsupportedFileError
from code_mentor.utils.logging import LogEventNames
from code_mentor.web.app import get_config, get_mentor, get_session, templates
from code_mentor.web.views import UPLOAD_REJECTED_MESSAGE, page_context

log = structlog.get_logger()

router = APIRouter(tags=["pages"])

SessionDep = Annotated[MentorSession, Depends(get_session)]
MentorDep = Annotated[CodeMentor, Depends(get_mentor)]
ConfigDep = Annotated[MentorConfig, Depends(get_config)]


def _back_to_index(request: Request) -> RedirectResponse:
    return RedirectResponse(url=str(request.url_for("index")), status_code=303)


def _render(
    request: Request,
    session: MentorSession,
    config: MentorConfig,
    status_code: int = 200,
    **extra: object,
) -> HTMLResponse:
    context = page_context(
        session,
        accept=",".join(config.uploads.allowed_extensions),
        **extra,
    )
    return templates.TemplateResponse(request, "index.html", context, status_code=status_code)


@router.get("/", response_class=HTMLResponse, name="index")
async def index(request: Request, session: SessionDep, config: ConfigDep) -> HTMLResponse:
    """Render the workspace for the caller's session."""
    return _render(request, session, config)


@router.post("/analyze")
async def analyze(
    request: Request,
    session: SessionDep,
    mentor: MentorDep,
    code: Annotated[str, Form()] = "",
) -> Response:
    with suppress(EmptyInputError, RequestRejectedError):
        await session.analyze(mentor, code)
    return _back_to_index(request)


@router.post("/trace")
async def trace(
    request: Request,
    session: SessionDep,
    mentor: MentorDep,
    code: Annotated[str, Form()] = "",
) -> Response:
    with suppress(EmptyInputError, RequestRejectedError):
        await session.run_trace(mentor, code)
    return _back_to_index(request)


# Declared before /trace/{action} so "close" is not read as a step action
@router.post("/trace/close")
async def close_trace(request: Request, session: SessionDep) -> Response:
    with suppress(RequestRejectedError):
        session.close_trace()
    return _back_to_index(request)


@router.post("/trace/{action}")
async def step_trace(request: Request, session: SessionDep, action: StepAction) -> Response:
    with suppress(RequestRejectedError):
        session.step_trace(action)
    return _back_to_index(request)


@router.post("/refine")
async def refine(
    request: Request,
    session: SessionDep,
    mentor: MentorDep,
    instruction: Annotated[str, Form()] = "",
) -> Response:
    with suppress(EmptyInputError, RequestRejectedError):
        await session.refine_code(mentor, instruction)
    return _back_to_index(request)


@router.post("/upload")
async def upload(
    request: Request,
    session: SessionDep,
    config: ConfigDep,
    file: Annotated[UploadFile, File()],
) -> Response:
    """Load a local file into the editor; re-render with 400 if it is rejected."""
    # Read at most one byte past the limit
    content = await file.read(config.uploads.max_bytes + 1)
    filename = file.filename or ""
    try:
        text = decode_upload(
            filename,
            content,
            config.uploads.allowed_extensions,
            config.uploads.max_bytes,
        )
    except UnsupportedFileError as e:
        log.info(LogEventNames.UPLOAD_REJECTED, filename=filename, error=str(e))
        return _render(
            request, session, config, status_code=400, upload_error=UPLOAD_REJECTED_MESSAGE
        )

    session.load_code(text)
    log.info(LogEventNames.UPLOAD_ACCEPTED, filename=filename, size=len(content))
    return _back_to_index(request)


@router.post("/clear")
async def clear(request: Request, session: SessionDep) -> Response:
    with suppress(RequestRejectedError):
        session.clear()
    return _back_to_index(request)
