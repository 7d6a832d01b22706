"""
Prompt Composer - builds the ordered content segments for one model call.

Pure and deterministic: no I/O, never fails. The caller rejects empty
submissions before reaching this stage.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from companion.assist.types import ImagePayload, Mode
from companion.llm.prompts import get_task_instruction

IMAGE_ONLY_PREAMBLE = "Analyze the provided image."


@dataclass(frozen=True)
class ImageSegment:
    """Inline image: MIME type plus raw base64 (no data URL prefix)."""

    mime_type: str
    data: str


@dataclass(frozen=True)
class TextSegment:
    text: str


Segment = Union[ImageSegment, TextSegment]


@dataclass(frozen=True)
class CompositeRequest:
    """Ordered segments sent to the model in one call."""

    segments: tuple[Segment, ...]

    @property
    def text(self) -> str:
        """The single text segment (always last)."""
        last = self.segments[-1]
        assert isinstance(last, TextSegment)
        return last.text

    @property
    def has_image(self) -> bool:
        return any(isinstance(s, ImageSegment) for s in self.segments)


def build_prompt_text(mode: Mode, text: str | None = None) -> str:
    """Quoted user text (or the image-only preamble) followed by the mode's task."""
    if text:
        prompt = f'User Input: "{text}"\n\n'
    else:
        prompt = f"{IMAGE_ONLY_PREAMBLE}\n\n"
    return prompt + get_task_instruction(mode)


def compose(
    mode: Mode,
    text: str | None = None,
    image: ImagePayload | None = None,
) -> CompositeRequest:
    """
    Build the composite request for one analysis.

    Args:
        mode: Selected interaction mode
        text: Optional free text from the user
        image: Optional image, already stripped of any data URL prefix.
            Included only when both payload and MIME type are non-empty.

    Returns:
        CompositeRequest: [image segment if present] + [one text segment]
    """
    segments: list[Segment] = []

    if image is not None and image.data and image.mime_type:
        segments.append(ImageSegment(mime_type=image.mime_type, data=image.data))

    segments.append(TextSegment(text=build_prompt_text(mode, text)))
    return CompositeRequest(segments=tuple(segments))
