"""Pydantic request/response models for the Accessibility Companion API."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from companion.assist.modes import APP_MODES
from companion.assist.session import SessionSnapshot
from companion.assist.types import Feedback, HistoryItem, Mode, SessionState, VoiceState

# Text input limit; comfortably above any pasted page of content
MAX_TEXT_LENGTH = 50_000


# =============================================================================
# REQUESTS
# =============================================================================


class ModeUpdate(BaseModel):
    mode: Mode


class TextUpdate(BaseModel):
    text: str = Field(default="", max_length=MAX_TEXT_LENGTH)


class ImageUpload(BaseModel):
    """Image as base64 or a data URL; MIME type may come from the data URL."""

    data: str = Field(..., min_length=1)
    mime_type: str | None = None


class FeedbackUpdate(BaseModel):
    value: Feedback | None = None


# =============================================================================
# RESPONSES
# =============================================================================


class ModeInfo(BaseModel):
    id: Mode
    title: str
    description: str
    icon: str
    aria_label: str


class ModesResponse(BaseModel):
    modes: list[ModeInfo]
    default: Mode

    @classmethod
    def build(cls, default: Mode) -> ModesResponse:
        return cls(
            modes=[
                ModeInfo(
                    id=m.id,
                    title=m.title,
                    description=m.description,
                    icon=m.icon,
                    aria_label=m.aria_label,
                )
                for m in APP_MODES
            ],
            default=default,
        )


class SessionResponse(BaseModel):
    state: SessionState
    mode: Mode
    text: str
    has_image: bool
    image_mime_type: str | None = None
    result: str
    error: str | None = None
    voice: VoiceState
    speaking: bool
    feedback: Feedback | None = None
    history_count: int

    @classmethod
    def from_snapshot(cls, snapshot: SessionSnapshot) -> SessionResponse:
        return cls(
            state=snapshot.state,
            mode=snapshot.mode,
            text=snapshot.text,
            has_image=snapshot.has_image,
            image_mime_type=snapshot.image_mime_type,
            result=snapshot.result,
            error=snapshot.error,
            voice=snapshot.voice,
            speaking=snapshot.speaking,
            feedback=snapshot.feedback,
            history_count=snapshot.history_count,
        )


class RunModel(BaseModel):
    text: str
    bold: bool


class BlockModel(BaseModel):
    kind: str
    text: str
    runs: list[RunModel]


class RenderResponse(BaseModel):
    blocks: list[BlockModel]
    html: str


class HistoryEntry(BaseModel):
    id: str
    timestamp: datetime
    mode: Mode
    label: str
    input_text: str
    response_text: str
    has_image: bool

    @classmethod
    def from_item(cls, item: HistoryItem) -> HistoryEntry:
        return cls(
            id=item.id,
            timestamp=item.timestamp,
            mode=item.mode,
            label=item.label,
            input_text=item.input_text,
            response_text=item.response_text,
            has_image=item.has_image,
        )


class HistoryResponse(BaseModel):
    items: list[HistoryEntry]
    count: int
