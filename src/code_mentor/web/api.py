"""JSON API routes.

State documents reuse the camelCase wire shapes the model replies in.
Model call failures are not HTTP errors: they show up as an "error"
status in the returned state. Empty input is a 400 and actions the
current state does not allow are a 409 (see the app's exception handlers).
"""

from __future__ import annotations

from typing import Annotated, Any

import structlog
from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from code_mentor.config.schema import MentorConfig
from code_mentor.core.mentor import CodeMentor
from code_mentor.core.schemas import dump_analysis, dump_trace
from code_mentor.core.session import MentorSession
from code_mentor.core.state import StepAction
from code_mentor.core.uploads import decode_upload
from code_mentor.utils.health import HealthChecker
from code_mentor.utils.logging import LogEventNames
from code_mentor.web.app import get_config, get_mentor, get_session

log = structlog.get_logger()

router = APIRouter(prefix="/api", tags=["api"])

SessionDep = Annotated[MentorSession, Depends(get_session)]
MentorDep = Annotated[CodeMentor, Depends(get_mentor)]
ConfigDep = Annotated[MentorConfig, Depends(get_config)]


class CodeRequest(BaseModel):
    """Body for analyze and trace; omit code to reuse the editor text."""

    code: str | None = None


class RefineRequest(BaseModel):
    instruction: str


def session_state(session: MentorSession) -> dict[str, Any]:
    """Serialize a session for the API."""
    analysis = session.analysis
    trace = session.trace
    refine = session.refine
    stepper = trace.stepper

    return {
        "code": session.code,
        "busy": session.busy,
        "analysis": {
            "status": analysis.status.value,
            "data": dump_analysis(analysis.data) if analysis.data is not None else None,
            "error": analysis.error,
        },
        "trace": {
            "status": trace.status.value,
            "data": dump_trace(trace.data) if trace.data is not None else None,
            "error": trace.error,
            "currentStepIndex": stepper.index if stepper else None,
            "isFirst": stepper.is_first if stepper else None,
            "isLast": stepper.is_last if stepper else None,
            "showFinalOutput": trace.show_final_output,
        },
        "refine": {
            "currentCode": refine.current_code,
            "instruction": refine.instruction,
            "explanation": refine.explanation,
            "error": refine.error,
            "pending": refine.pending,
        },
    }


@router.get("/state")
async def get_state(session: SessionDep) -> dict[str, Any]:
    return session_state(session)


@router.post("/analyze")
async def analyze(body: CodeRequest, session: SessionDep, mentor: MentorDep) -> dict[str, Any]:
    await session.analyze(mentor, body.code)
    return session_state(session)


@router.post("/trace")
async def trace(body: CodeRequest, session: SessionDep, mentor: MentorDep) -> dict[str, Any]:
    await session.run_trace(mentor, body.code)
    return session_state(session)


@router.delete("/trace")
async def close_trace(session: SessionDep) -> dict[str, Any]:
    session.close_trace()
    return session_state(session)


@router.post("/trace/{action}")
async def step_trace(action: StepAction, session: SessionDep) -> dict[str, Any]:
    session.step_trace(action)
    return session_state(session)


@router.post("/refine")
async def refine(body: RefineRequest, session: SessionDep, mentor: MentorDep) -> dict[str, Any]:
    await session.refine_code(mentor, body.instruction)
    return session_state(session)


@router.post("/upload")
async def upload(
    file: Annotated[UploadFile, File()],
    session: SessionDep,
    config: ConfigDep,
) -> dict[str, Any]:
    # Read at most one byte past the limit
    content = await file.read(config.uploads.max_bytes + 1)
    filename = file.filename or ""
    text = decode_upload(
        filename,
        content,
        config.uploads.allowed_extensions,
        config.uploads.max_bytes,
    )
    session.load_code(text)
    log.info(LogEventNames.UPLOAD_ACCEPTED, filename=filename, size=len(content))
    return session_state(session)


@router.post("/clear")
async def clear(session: SessionDep) -> dict[str, Any]:
    session.clear()
    return session_state(session)


@router.get("/health")
async def health(config: ConfigDep) -> JSONResponse:
    """Report configuration and credential health; 503 when unhealthy."""
    report = await HealthChecker(config).run_all_checks()
    return JSONResponse(status_code=200 if report.healthy else 503, content=report.to_dict())
