"""Session endpoints: input, submission, voice, read-aloud, feedback, output.

All state lives in the process-wide SessionController. Analysis failures are
not HTTP errors; the returned snapshot carries the message in ``error``.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response

from companion.api.dependencies import get_session
from companion.api.models import (
    BlockModel,
    FeedbackUpdate,
    ImageUpload,
    ModesResponse,
    ModeUpdate,
    RenderResponse,
    SessionResponse,
    TextUpdate,
)
from companion.assist.modes import DEFAULT_MODE
from companion.assist.renderer import render_html
from companion.assist.session import SessionController
from companion.observability.logging import get_logger

router = APIRouter(prefix="/api", tags=["session"])
logger = get_logger(__name__)


@router.get("/modes", response_model=ModesResponse)
async def list_modes() -> ModesResponse:
    return ModesResponse.build(DEFAULT_MODE)


@router.get("/session", response_model=SessionResponse)
async def get_session_state(session: SessionController = Depends(get_session)) -> SessionResponse:
    return SessionResponse.from_snapshot(session.snapshot())


@router.put("/session/mode", response_model=SessionResponse)
async def select_mode(
    payload: ModeUpdate, session: SessionController = Depends(get_session)
) -> SessionResponse:
    session.select_mode(payload.mode)
    return SessionResponse.from_snapshot(session.snapshot())


@router.put("/session/text", response_model=SessionResponse)
async def set_text(
    payload: TextUpdate, session: SessionController = Depends(get_session)
) -> SessionResponse:
    session.set_text(payload.text)
    return SessionResponse.from_snapshot(session.snapshot())


@router.post("/session/image", response_model=SessionResponse)
async def attach_image(
    payload: ImageUpload, session: SessionController = Depends(get_session)
) -> SessionResponse:
    """Select an image. Non-image input -> 415 via the CompanionError handler."""
    session.attach_image(payload.data, payload.mime_type)
    return SessionResponse.from_snapshot(session.snapshot())


@router.delete("/session/image", response_model=SessionResponse)
async def clear_image(session: SessionController = Depends(get_session)) -> SessionResponse:
    session.clear_image()
    return SessionResponse.from_snapshot(session.snapshot())


@router.post("/session/submit", response_model=SessionResponse)
async def submit(session: SessionController = Depends(get_session)) -> SessionResponse:
    """
    Run one analysis.

    409 while another submission is in flight. Empty input and backend
    failures come back as a snapshot with ``error`` set.
    """
    snapshot = await session.submit()
    return SessionResponse.from_snapshot(snapshot)


@router.post("/session/voice", response_model=SessionResponse)
async def toggle_voice(session: SessionController = Depends(get_session)) -> SessionResponse:
    session.toggle_voice()
    return SessionResponse.from_snapshot(session.snapshot())


@router.post("/session/read-aloud", response_model=SessionResponse)
async def toggle_read_aloud(
    session: SessionController = Depends(get_session),
) -> SessionResponse:
    session.toggle_read_aloud()
    return SessionResponse.from_snapshot(session.snapshot())


@router.put("/session/feedback", response_model=SessionResponse)
async def set_feedback(
    payload: FeedbackUpdate, session: SessionController = Depends(get_session)
) -> SessionResponse:
    session.set_feedback(payload.value)
    return SessionResponse.from_snapshot(session.snapshot())


@router.get("/session/render", response_model=RenderResponse)
async def render_result(session: SessionController = Depends(get_session)) -> RenderResponse:
    blocks = session.render()
    return RenderResponse(
        blocks=[BlockModel(**block.to_dict()) for block in blocks],
        html=render_html(blocks),
    )


@router.get("/session/export")
async def export_result(session: SessionController = Depends(get_session)) -> Response:
    filename, content = session.export()
    if not content:
        raise HTTPException(status_code=404, detail="No result to export")
    return Response(
        content=content,
        media_type="text/plain; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
