"""Unit tests for prompt composition"""

from __future__ import annotations

from companion.assist.composer import ImageSegment, TextSegment, build_prompt_text, compose
from companion.assist.types import ImagePayload, Mode
from companion.llm.prompts import get_task_instruction


def test_text_only_request_is_single_quoted_text_segment():
    composite = compose(Mode.SIMPLIFY, "Hello")

    assert len(composite.segments) == 1
    assert composite.text == (
        'User Input: "Hello"\n\n'
        "Task: Perform a 'Simplify' analysis. "
        "Extract text and rewrite it in plain, simple language with bullet points."
    )
    assert not composite.has_image


def test_image_only_request_puts_image_first():
    composite = compose(Mode.DESCRIBE, "", ImagePayload(data="AAAA", mime_type="image/png"))

    assert composite.segments[0] == ImageSegment(mime_type="image/png", data="AAAA")
    assert composite.segments[1] == TextSegment(
        "Analyze the provided image.\n\n" + get_task_instruction(Mode.DESCRIBE)
    )
    assert composite.has_image


def test_text_and_image_keeps_quoted_text():
    image = ImagePayload(data="AAAA", mime_type="image/jpeg")
    composite = compose(Mode.GUIDE, "Fill the form", image)

    assert isinstance(composite.segments[0], ImageSegment)
    assert composite.text.startswith('User Input: "Fill the form"\n\n')
    assert composite.text.endswith(get_task_instruction(Mode.GUIDE))


def test_image_without_mime_type_is_omitted():
    composite = compose(Mode.DESCRIBE, "hi", ImagePayload(data="AAAA", mime_type=""))

    assert composite.segments == (TextSegment(build_prompt_text(Mode.DESCRIBE, "hi")),)


def test_image_without_data_is_omitted():
    composite = compose(Mode.DESCRIBE, "hi", ImagePayload(data="", mime_type="image/png"))

    assert not composite.has_image


def test_text_is_embedded_verbatim():
    text = 'She said "hi"\nand left'
    assert build_prompt_text(Mode.DESCRIBE, text).startswith(f'User Input: "{text}"\n\n')


def test_compose_is_deterministic():
    image = ImagePayload(data="AAAA", mime_type="image/png")
    assert compose(Mode.GUIDE, "x", image) == compose(Mode.GUIDE, "x", image)
