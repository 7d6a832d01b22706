"""Unit tests for Gemini credential resolution and response handling"""

from __future__ import annotations

import pytest

from companion.assist.composer import ImageSegment, TextSegment
from companion.llm.gemini import (
    MISSING_API_KEY_MESSAGE,
    GeminiConfigurationError,
    resolve_credentials,
    response_text,
    to_sdk_parts,
)


def test_genai_credentials(monkeypatch):
    monkeypatch.setenv("GEMINI_BACKEND", "genai")
    monkeypatch.setenv("GOOGLE_API_KEY", "k")

    credentials = resolve_credentials()

    assert credentials.backend == "genai"
    assert credentials.api_key == "k"


def test_missing_key_raises_configuration_error(monkeypatch):
    monkeypatch.setenv("GEMINI_BACKEND", "genai")
    monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
    monkeypatch.delenv("API_KEY", raising=False)

    with pytest.raises(GeminiConfigurationError, match=MISSING_API_KEY_MESSAGE):
        resolve_credentials()


def test_vertex_requires_project(monkeypatch):
    monkeypatch.setenv("GEMINI_BACKEND", "vertexai")
    monkeypatch.delenv("GOOGLE_CLOUD_PROJECT", raising=False)

    with pytest.raises(GeminiConfigurationError):
        resolve_credentials()


def test_vertex_credentials(monkeypatch):
    monkeypatch.setenv("GEMINI_BACKEND", "vertexai")
    monkeypatch.setenv("GOOGLE_CLOUD_PROJECT", "proj")
    monkeypatch.setenv("GEMINI_LOCATION", "europe-west4")

    credentials = resolve_credentials()

    assert credentials.project == "proj"
    assert credentials.location == "europe-west4"


def test_unknown_backend(monkeypatch):
    monkeypatch.setenv("GEMINI_BACKEND", "openai")

    with pytest.raises(GeminiConfigurationError, match="Unknown GEMINI_BACKEND"):
        resolve_credentials()


def test_genai_parts_decode_image():
    parts = to_sdk_parts("genai", (ImageSegment("image/gif", "R0lG"), TextSegment("t")))

    assert parts == [{"mime_type": "image/gif", "data": b"GIF"}, "t"]


class _BlockedResponse:
    @property
    def text(self):
        raise ValueError("no text parts")


class _TextResponse:
    text = None


def test_response_text_handles_blocked_candidates():
    assert response_text(_BlockedResponse()) == ""


def test_response_text_handles_none():
    assert response_text(_TextResponse()) == ""
