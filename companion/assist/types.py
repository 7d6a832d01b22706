"""
Module: types
Purpose: Shared domain types for the assist pipeline.

Stable import boundary: composer, client, history store, session controller
and routes all import from here, so this module depends on nothing else in
the package.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator


class Mode(str, Enum):
    """Interaction mode controlling the backend task instruction.

    Extends str so JSON serialization produces the raw identifier.
    """

    DESCRIBE = "DESCRIBE"
    SIMPLIFY = "SIMPLIFY"
    GUIDE = "GUIDE"


@dataclass(frozen=True)
class ModeConfig:
    """Display metadata for one mode."""

    id: Mode
    title: str
    description: str
    icon: str
    aria_label: str


@dataclass(frozen=True)
class ImagePayload:
    """Base64 image bytes (optionally wrapped in a data URL) plus MIME type."""

    data: str
    mime_type: str


@dataclass(frozen=True)
class AnalysisRequest:
    """One submission: optional text, optional image, selected mode."""

    mode: Mode
    text: str = ""
    image: ImagePayload | None = None

    @property
    def is_empty(self) -> bool:
        return not self.text and self.image is None


@dataclass(frozen=True)
class AnalysisResponse:
    """Outcome of one analysis.

    Exactly one side is meaningful: non-empty ``markdown`` on success, or
    ``error`` on failure (with ``markdown == ""``).
    """

    markdown: str = ""
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, markdown: str) -> AnalysisResponse:
        return cls(markdown=markdown)

    @classmethod
    def failure(cls, error: str) -> AnalysisResponse:
        return cls(markdown="", error=error)


class HistoryItem(BaseModel):
    """One past successful analysis.

    Image bytes are never kept, only ``has_image``.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    timestamp: datetime
    mode: Mode
    # camelCase names and epoch-millisecond timestamps are the browser-era format
    input_text: str = Field(default="", validation_alias=AliasChoices("input_text", "inputText"))
    response_text: str = Field(validation_alias=AliasChoices("response_text", "response"))
    has_image: bool = Field(default=False, validation_alias=AliasChoices("has_image", "hasImage"))

    @classmethod
    def create(
        cls, mode: Mode, input_text: str, response_text: str, has_image: bool
    ) -> HistoryItem:
        return cls(
            id=uuid.uuid4().hex,
            timestamp=datetime.now(UTC),
            mode=mode,
            input_text=input_text,
            response_text=response_text,
            has_image=has_image,
        )

    @property
    def label(self) -> str:
        """Short caption for history listings."""
        if self.input_text:
            return self.input_text
        return "Image Analysis" if self.has_image else "Empty Request"


class HistoryRecord(BaseModel):
    """Serialized form of the whole history sequence (newest first)."""

    items: list[HistoryItem] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _accept_bare_list(cls, data: Any) -> Any:
        # Browser-era records hold the item list itself
        if isinstance(data, list):
            return {"items": data}
        return data


class SessionState(str, Enum):
    """Main session state machine.

    SUCCEEDED and FAILED are idle states carrying a result or an error.
    """

    IDLE = "idle"
    SUBMITTING = "submitting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class VoiceState(str, Enum):
    """Dictation state, orthogonal to SessionState."""

    NOT_LISTENING = "not_listening"
    LISTENING = "listening"


class Feedback(str, Enum):
    UP = "up"
    DOWN = "down"
