"""Unit tests for SessionController

Tests cover:
- Empty submissions rejected without a backend call
- Success appends exactly one history item; failure appends none
- Busy rejection while a submission is in flight
- History restore, clear, feedback, voice, read-aloud, export, close
"""

from __future__ import annotations

import asyncio
import base64
import threading
from datetime import date

import pytest

from companion.assist.dictation import DENIED_MESSAGE, UNSUPPORTED_MESSAGE
from companion.assist.errors import (
    HistoryItemNotFoundError,
    SessionBusyError,
    UnsupportedInputError,
)
from companion.assist.session import EMPTY_SUBMISSION_MESSAGE, SessionController
from companion.assist.types import Feedback, Mode, SessionState, VoiceState
from companion.llm.client import AnalysisClient
from companion.storage.history import HistoryStore
from companion.utils.validators import INVALID_IMAGE_MESSAGE

PNG_B64 = base64.b64encode(b"\x89PNG\r\n\x1a\nfake").decode()


def _submit(session):
    return asyncio.run(session.submit())


def test_initial_state(session):
    snapshot = session.snapshot()

    assert snapshot.state is SessionState.IDLE
    assert snapshot.mode is Mode.DESCRIBE
    assert snapshot.result == ""
    assert snapshot.error is None
    assert snapshot.voice is VoiceState.NOT_LISTENING
    assert snapshot.history_count == 0


def test_empty_submission_rejected_without_backend_call(session, fake_model):
    snapshot = _submit(session)

    assert snapshot.state is SessionState.IDLE
    assert snapshot.error == EMPTY_SUBMISSION_MESSAGE
    assert fake_model.calls == []
    assert snapshot.history_count == 0


def test_successful_submission_appends_history(session, fake_model):
    fake_model.reply = "# Summary"
    session.select_mode(Mode.SIMPLIFY)
    session.set_text("Hello")

    snapshot = _submit(session)

    assert snapshot.state is SessionState.SUCCEEDED
    assert snapshot.result == "# Summary"
    assert snapshot.error is None
    item = session.history.items[0]
    assert (item.mode, item.input_text, item.response_text, item.has_image) == (
        Mode.SIMPLIFY,
        "Hello",
        "# Summary",
        False,
    )


def test_image_only_submission_records_has_image(session, fake_model):
    session.attach_image(f"data:image/png;base64,{PNG_B64}", "image/png")

    snapshot = _submit(session)

    assert snapshot.state is SessionState.SUCCEEDED
    assert session.history.items[0].has_image
    assert session.history.items[0].label == "Image Analysis"


def test_failed_submission_adds_no_history(session, fake_model):
    fake_model.error = RuntimeError("backend down")
    session.set_text("Hello")

    snapshot = _submit(session)

    assert snapshot.state is SessionState.FAILED
    assert snapshot.error == "backend down"
    assert snapshot.result == ""
    assert snapshot.history_count == 0


def test_new_submission_clears_previous_error_and_feedback(session, fake_model):
    fake_model.error = RuntimeError("first fails")
    session.set_text("Hello")
    _submit(session)

    fake_model.error = None
    session.set_feedback(Feedback.DOWN)
    snapshot = _submit(session)

    assert snapshot.error is None
    assert snapshot.feedback is None
    assert snapshot.state is SessionState.SUCCEEDED


class GatedModel:
    """Blocks generate_content_async until released."""

    def __init__(self):
        self.release = asyncio.Event()
        self.calls = 0

    async def generate_content_async(self, contents, generation_config=None):
        self.calls += 1
        await self.release.wait()
        return type("Response", (), {"text": "done"})()


def test_second_submit_while_busy_is_rejected(gemini_env, history):
    async def scenario():
        model = GatedModel()
        session = SessionController(
            client=AnalysisClient(model_provider=lambda *args: model),
            history=history,
        )
        session.set_text("Hello")

        first = asyncio.create_task(session.submit())
        while not session.busy:
            await asyncio.sleep(0)

        with pytest.raises(SessionBusyError):
            await session.submit()

        model.release.set()
        snapshot = await first
        return model, snapshot

    model, snapshot = asyncio.run(scenario())

    assert model.calls == 1
    assert snapshot.state is SessionState.SUCCEEDED
    assert len(history) == 1


def test_broken_client_does_not_stay_submitting(history):
    class ExplodingClient:
        async def analyze(self, request):
            raise RuntimeError("bug")

    session = SessionController(client=ExplodingClient(), history=history)
    session.set_text("Hello")

    with pytest.raises(RuntimeError):
        _submit(session)

    assert session.state is SessionState.FAILED


def test_attach_invalid_image_sets_error_and_keeps_previous(session):
    session.attach_image(PNG_B64, "image/png")

    with pytest.raises(UnsupportedInputError):
        session.attach_image("aGVsbG8=", "application/pdf")

    snapshot = session.snapshot()
    assert snapshot.error == INVALID_IMAGE_MESSAGE
    assert snapshot.has_image
    assert snapshot.image_mime_type == "image/png"


def test_clear_image(session):
    session.attach_image(PNG_B64, "image/png")
    session.clear_image()

    assert not session.snapshot().has_image


def test_load_history_restores_and_clears_image(session, fake_model):
    fake_model.reply = "## Steps"
    session.select_mode(Mode.GUIDE)
    session.set_text("Form help")
    _submit(session)
    item_id = session.history.items[0].id

    session.select_mode(Mode.DESCRIBE)
    session.set_text("something else")
    session.attach_image(PNG_B64, "image/png")

    first = session.load_history(item_id)
    second = session.load_history(item_id)

    assert first == second
    assert first.mode is Mode.GUIDE
    assert first.text == "Form help"
    assert first.result == "## Steps"
    assert first.state is SessionState.SUCCEEDED
    assert not first.has_image
    assert first.history_count == 1


def test_load_unknown_history_item(session):
    with pytest.raises(HistoryItemNotFoundError):
        session.load_history("nope")


def test_clear_history(session):
    session.set_text("Hello")
    _submit(session)

    session.clear_history()

    assert session.snapshot().history_count == 0


def test_history_loaded_on_construction(gemini_env, client, history, backend):
    history_session = SessionController(client=client, history=history)
    history_session.set_text("Hello")
    _submit(history_session)

    fresh = SessionController(client=client, history=HistoryStore(backend))

    assert fresh.snapshot().history_count == 1


def test_feedback_toggles(session):
    assert session.set_feedback("up") is Feedback.UP
    assert session.set_feedback(Feedback.UP) is None
    assert session.set_feedback(Feedback.DOWN) is Feedback.DOWN
    assert session.set_feedback(Feedback.UP) is Feedback.UP
    assert session.set_feedback(None) is None


def test_voice_appends_transcripts(session, recognizer):
    session.set_text("Hello")

    assert session.toggle_voice() is VoiceState.LISTENING
    recognizer.on_transcript("world")
    recognizer.on_transcript("again")

    assert session.snapshot().text == "Hello world again"


def test_voice_toggle_off_stops_recognizer(session, recognizer):
    session.toggle_voice()

    assert session.toggle_voice() is VoiceState.NOT_LISTENING
    assert recognizer.stopped == 1


def test_voice_unsupported(session, recognizer):
    recognizer.available = False

    state = session.toggle_voice()

    assert state is VoiceState.NOT_LISTENING
    assert session.snapshot().error == UNSUPPORTED_MESSAGE


def test_voice_permission_denied(session, recognizer):
    session.toggle_voice()

    recognizer.on_error("not-allowed")

    snapshot = session.snapshot()
    assert snapshot.voice is VoiceState.NOT_LISTENING
    assert snapshot.error == DENIED_MESSAGE


def test_starting_voice_clears_error(session):
    _submit(session)
    assert session.error == EMPTY_SUBMISSION_MESSAGE

    session.toggle_voice()

    assert session.error is None


def test_read_aloud_toggles_and_submit_cancels(session, synthesizer):
    session.set_text("Hello")
    _submit(session)

    assert session.toggle_read_aloud() is True
    assert synthesizer.spoken == [session.result]

    _submit(session)

    assert session.snapshot().speaking is False
    assert synthesizer.cancelled >= 1


def test_read_aloud_without_result_is_noop(session, synthesizer):
    assert session.toggle_read_aloud() is False
    assert synthesizer.spoken == []


def test_render_and_export(session, fake_model):
    fake_model.reply = "# Title\n- item"
    session.set_text("Hello")
    _submit(session)

    assert [b.text for b in session.render()] == ["Title", "item"]
    assert session.export(date(2025, 1, 2)) == (
        "accessibility-companion-result-2025-01-02.txt",
        "# Title\n- item",
    )


def test_close_stops_voice_and_speech(session, recognizer, synthesizer):
    session.set_text("Hello")
    _submit(session)
    session.toggle_voice()
    session.toggle_read_aloud()

    session.close()

    snapshot = session.snapshot()
    assert snapshot.voice is VoiceState.NOT_LISTENING
    assert snapshot.speaking is False
    assert recognizer.stopped == 1
    assert synthesizer.cancelled >= 1


def test_concurrent_transcripts_are_all_kept(session, recognizer):
    session.toggle_voice()

    def dictate(worker: int) -> None:
        for n in range(50):
            recognizer.on_transcript(f"w{worker}-{n}")

    threads = [threading.Thread(target=dictate, args=(i,)) for i in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    words = session.snapshot().text.split(" ")
    assert len(words) == 400
    assert len(set(words)) == 400
