"""
Pytest configuration for companion tests

Provides in-memory storage, a fake Gemini model and fake speech capabilities
so no test touches the network, a microphone or a speaker.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import pytest
from fastapi.testclient import TestClient

from companion.api.app import create_app
from companion.assist.session import SessionController
from companion.llm.client import AnalysisClient
from companion.observability.telemetry import reset_counters
from companion.storage.backends import InMemoryBackend
from companion.storage.history import HistoryStore


@dataclass
class FakeResponse:
    text: str


@dataclass
class FakeModel:
    """Stands in for a GenerativeModel; records every call."""

    reply: str = "## Summary\n\n* Point one"
    error: Exception | None = None
    calls: list[dict[str, Any]] = field(default_factory=list)

    async def generate_content_async(self, contents, generation_config=None):
        self.calls.append({"contents": contents, "generation_config": generation_config})
        if self.error is not None:
            raise self.error
        return FakeResponse(self.reply)


@dataclass
class FakeModelProvider:
    model: FakeModel
    requests: list[tuple[Any, str | None, str]] = field(default_factory=list)

    def __call__(self, credentials, system_instruction, model_name):
        self.requests.append((credentials, system_instruction, model_name))
        return self.model


class FakeRecognizer:
    def __init__(self, available: bool = True):
        self.available = available
        self.started = 0
        self.stopped = 0
        self.on_transcript = None
        self.on_error = None
        self.on_end = None

    def is_available(self) -> bool:
        return self.available

    def start(self, on_transcript, on_error, on_end) -> None:
        self.started += 1
        self.on_transcript = on_transcript
        self.on_error = on_error
        self.on_end = on_end

    def stop(self) -> None:
        self.stopped += 1


class FakeSynthesizer:
    def __init__(self, available: bool = True):
        self.available = available
        self.spoken: list[str] = []
        self.cancelled = 0
        self.on_done = None

    def is_available(self) -> bool:
        return self.available

    def speak(self, text, on_done) -> None:
        self.spoken.append(text)
        self.on_done = on_done

    def cancel(self) -> None:
        self.cancelled += 1


@pytest.fixture(autouse=True)
def reset_telemetry():
    reset_counters()
    yield
    reset_counters()


@pytest.fixture
def gemini_env(monkeypatch):
    """A configured genai backend with a dummy key."""
    monkeypatch.setenv("GEMINI_BACKEND", "genai")
    monkeypatch.setenv("GOOGLE_API_KEY", "test-key")
    monkeypatch.delenv("API_KEY", raising=False)


@pytest.fixture
def fake_model() -> FakeModel:
    return FakeModel()


@pytest.fixture
def model_provider(fake_model) -> FakeModelProvider:
    return FakeModelProvider(fake_model)


@pytest.fixture
def client(model_provider) -> AnalysisClient:
    return AnalysisClient(model_provider=model_provider)


@pytest.fixture
def backend() -> InMemoryBackend:
    return InMemoryBackend()


@pytest.fixture
def history(backend) -> HistoryStore:
    return HistoryStore(backend)


@pytest.fixture
def recognizer() -> FakeRecognizer:
    return FakeRecognizer()


@pytest.fixture
def synthesizer() -> FakeSynthesizer:
    return FakeSynthesizer()


@pytest.fixture
def session(gemini_env, client, history, recognizer, synthesizer) -> SessionController:
    return SessionController(
        client=client,
        history=history,
        recognizer=recognizer,
        synthesizer=synthesizer,
    )


@pytest.fixture
def api(session):
    """TestClient running the app lifespan around the fake-backed session"""
    with TestClient(create_app(lambda: session)) as test_client:
        yield test_client
