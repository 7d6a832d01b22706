"""Unit tests for AnalysisClient

Tests cover:
- Success path and generation config
- Empty model output
- Missing credentials
- SDK exceptions converted to error responses
- Image handling (data URL stripping, decoded bytes)
"""

from __future__ import annotations

import asyncio
import base64

from companion.assist.types import AnalysisRequest, ImagePayload, Mode
from companion.llm.client import (
    EMPTY_RESPONSE_MESSAGE,
    UNEXPECTED_ERROR_MESSAGE,
    AnalysisClient,
)
from companion.llm.gemini import MISSING_API_KEY_MESSAGE
from companion.llm.prompts import get_system_instruction
from companion.observability.telemetry import get_counter

PNG_BYTES = b"\x89PNG\r\n\x1a\nfake"
PNG_B64 = base64.b64encode(PNG_BYTES).decode()


def _analyze(client, request):
    return asyncio.run(client.analyze(request))


def test_success_returns_model_text(gemini_env, client, fake_model):
    fake_model.reply = "# Done"

    response = _analyze(client, AnalysisRequest(mode=Mode.SIMPLIFY, text="Hello"))

    assert response.ok
    assert response.markdown == "# Done"
    assert get_counter("analysis.success") == 1


def test_sends_low_temperature_and_prompt(gemini_env, client, fake_model):
    _analyze(client, AnalysisRequest(mode=Mode.SIMPLIFY, text="Hello"))

    call = fake_model.calls[0]
    assert call["generation_config"] == {"temperature": 0.2}
    assert call["contents"] == [
        'User Input: "Hello"\n\n'
        "Task: Perform a 'Simplify' analysis. "
        "Extract text and rewrite it in plain, simple language with bullet points."
    ]


def test_model_built_with_system_instruction(gemini_env, client, model_provider):
    _analyze(client, AnalysisRequest(mode=Mode.DESCRIBE, text="x"))

    credentials, system_instruction, model_name = model_provider.requests[0]
    assert credentials.api_key == "test-key"
    assert system_instruction == get_system_instruction()
    assert model_name


def test_model_name_override(gemini_env, monkeypatch, client, model_provider):
    monkeypatch.setenv("GEMINI_MODEL", "gemini-test")

    _analyze(client, AnalysisRequest(mode=Mode.DESCRIBE, text="x"))

    assert model_provider.requests[0][2] == "gemini-test"


def test_empty_output_is_an_error(gemini_env, client, fake_model):
    fake_model.reply = ""

    response = _analyze(client, AnalysisRequest(mode=Mode.GUIDE, text="x"))

    assert response.markdown == ""
    assert response.error == EMPTY_RESPONSE_MESSAGE
    assert get_counter("analysis.empty_response") == 1


def test_missing_api_key_never_calls_model(monkeypatch, client, fake_model):
    monkeypatch.setenv("GEMINI_BACKEND", "genai")
    monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
    monkeypatch.delenv("API_KEY", raising=False)

    response = _analyze(client, AnalysisRequest(mode=Mode.DESCRIBE, text="x"))

    assert response.error == MISSING_API_KEY_MESSAGE
    assert fake_model.calls == []
    assert get_counter("analysis.config_error") == 1


def test_api_key_fallback_variable(monkeypatch, client, model_provider):
    monkeypatch.setenv("GEMINI_BACKEND", "genai")
    monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
    monkeypatch.setenv("API_KEY", "fallback-key")

    response = _analyze(client, AnalysisRequest(mode=Mode.DESCRIBE, text="x"))

    assert response.ok
    assert model_provider.requests[0][0].api_key == "fallback-key"


def test_sdk_exception_message_is_surfaced(gemini_env, client, fake_model):
    fake_model.error = RuntimeError("quota exhausted")

    response = _analyze(client, AnalysisRequest(mode=Mode.DESCRIBE, text="x"))

    assert response.error == "quota exhausted"
    assert response.markdown == ""
    assert get_counter("analysis.error") == 1


def test_exception_without_message_uses_generic_text(gemini_env, client, fake_model):
    fake_model.error = RuntimeError()

    response = _analyze(client, AnalysisRequest(mode=Mode.DESCRIBE, text="x"))

    assert response.error == UNEXPECTED_ERROR_MESSAGE


def test_model_initialization_failure_is_an_error(gemini_env):
    def broken_provider(credentials, system_instruction, model_name):
        raise RuntimeError("SDK exploded")

    response = _analyze(
        AnalysisClient(model_provider=broken_provider),
        AnalysisRequest(mode=Mode.DESCRIBE, text="x"),
    )

    assert response.error == "SDK exploded"


def test_data_url_prefix_stripped_before_sending(gemini_env, client, fake_model):
    image = ImagePayload(data=f"data:image/png;base64,{PNG_B64}", mime_type="image/png")

    _analyze(client, AnalysisRequest(mode=Mode.DESCRIBE, image=image))

    image_part, text_part = fake_model.calls[0]["contents"]
    assert image_part == {"mime_type": "image/png", "data": PNG_BYTES}
    assert text_part.startswith("Analyze the provided image.\n\n")


def test_raw_base64_image_sent_unchanged(gemini_env, client, fake_model):
    image = ImagePayload(data=PNG_B64, mime_type="image/png")

    _analyze(client, AnalysisRequest(mode=Mode.DESCRIBE, text="what is this", image=image))

    assert fake_model.calls[0]["contents"][0]["data"] == PNG_BYTES
