"""
Session Controller - the submission state machine and its surrounding state.

States:
    IDLE --submit(valid)--> SUBMITTING --error--> FAILED
                                       --ok-----> SUCCEEDED (history appended)
    any idle state --loadHistory--> SUCCEEDED (image cleared)

Voice dictation and read-aloud are independent of this state. Submitting
cancels read-aloud but leaves dictation running; ``close`` releases both.
The controller is the only writer of the history sequence.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from datetime import UTC, date, datetime

from companion.assist.dictation import VoiceInput, append_transcript
from companion.assist.errors import SessionBusyError, UnsupportedInputError
from companion.assist.modes import DEFAULT_MODE
from companion.assist.read_aloud import ReadAloud
from companion.assist.renderer import Block, export_filename, render
from companion.assist.types import (
    AnalysisRequest,
    Feedback,
    HistoryItem,
    ImagePayload,
    Mode,
    SessionState,
    VoiceState,
)
from companion.contracts.speech import SpeechRecognizer, SpeechSynthesizer
from companion.llm.client import AnalysisClient
from companion.observability.logging import get_logger
from companion.observability.telemetry import counter, log_event
from companion.storage.history import HistoryStore
from companion.utils.validators import validate_image_upload

logger = get_logger(__name__)

EMPTY_SUBMISSION_MESSAGE = "Please provide either text or an image to analyze."


@dataclass(frozen=True)
class SessionSnapshot:
    """Everything the view needs to draw the current session."""

    state: SessionState
    mode: Mode
    text: str
    has_image: bool
    image_mime_type: str | None
    result: str
    error: str | None
    voice: VoiceState
    speaking: bool
    feedback: Feedback | None
    history_count: int


class SessionController:
    """
    Orchestrates input, submission, result display and history.

    Args:
        client: Analysis client used for every submission
        history: History store owned by this session (loaded on construction)
        recognizer: Optional speech-to-text capability
        synthesizer: Optional text-to-speech capability
    """

    def __init__(
        self,
        client: AnalysisClient,
        history: HistoryStore,
        recognizer: SpeechRecognizer | None = None,
        synthesizer: SpeechSynthesizer | None = None,
    ) -> None:
        self._client = client
        self.history = history
        self.history.load()

        self.state = SessionState.IDLE
        self.mode: Mode = DEFAULT_MODE
        self.text = ""
        # Dictation transcripts arrive on the recognizer thread
        self._text_lock = threading.Lock()
        self.image: ImagePayload | None = None
        self.result = ""
        self.error: str | None = None
        self.feedback: Feedback | None = None

        self.read_aloud = ReadAloud(synthesizer)
        self.voice = VoiceInput(
            recognizer,
            on_transcript=self._append_dictation,
            on_error=self._set_error,
        )

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------

    def select_mode(self, mode: Mode | str) -> None:
        self.mode = Mode(mode)

    def set_text(self, text: str) -> None:
        with self._text_lock:
            self.text = text

    def attach_image(self, data: str, mime_type: str | None) -> ImagePayload:
        """
        Select an image for the next submission.

        Raises:
            UnsupportedInputError: Not an acceptable image; the message is
                also placed in the error slot and the current image is kept
        """
        try:
            payload = validate_image_upload(data, mime_type)
        except UnsupportedInputError as e:
            counter("session.unsupported_input")
            self.error = e.message
            raise

        self.error = None
        self.image = payload
        return payload

    def clear_image(self) -> None:
        self.image = None

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    @property
    def busy(self) -> bool:
        return self.state is SessionState.SUBMITTING

    async def submit(self) -> SessionSnapshot:
        """
        Run one analysis with the current input.

        Empty input (no text, no image) is rejected before dispatch: the
        state returns to IDLE with a validation error and history is untouched.

        Raises:
            SessionBusyError: A submission is already in flight
        """
        if self.busy:
            raise SessionBusyError()

        request = AnalysisRequest(mode=self.mode, text=self.text, image=self.image)
        if request.is_empty:
            counter("session.validation_error")
            self.state = SessionState.IDLE
            self.error = EMPTY_SUBMISSION_MESSAGE
            return self.snapshot()

        self.state = SessionState.SUBMITTING
        self.error = None
        self.result = ""
        self.feedback = None
        self.read_aloud.cancel()

        try:
            response = await self._client.analyze(request)
        except Exception:
            # analyze never raises; a broken client must not leave us SUBMITTING
            self.state = SessionState.FAILED
            raise

        if not response.ok:
            self.state = SessionState.FAILED
            self.error = response.error
            log_event("session.failed", mode=request.mode.value)
            return self.snapshot()

        self.state = SessionState.SUCCEEDED
        self.result = response.markdown
        self.history.append(
            HistoryItem.create(
                mode=request.mode,
                input_text=request.text,
                response_text=response.markdown,
                has_image=request.image is not None,
            )
        )
        log_event("session.succeeded", mode=request.mode.value, history_count=len(self.history))
        return self.snapshot()

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    def load_history(self, item_id: str) -> SessionSnapshot:
        """
        Restore mode, text and response of a past item.

        The image is always cleared: image bytes are never kept in history.

        Raises:
            HistoryItemNotFoundError: Unknown ``item_id``
        """
        item = self.history.get(item_id)
        self.mode = item.mode
        with self._text_lock:
            self.text = item.input_text
        self.result = item.response_text
        self.error = None
        self.image = None
        self.state = SessionState.SUCCEEDED
        return self.snapshot()

    def clear_history(self) -> None:
        self.history.clear()

    # ------------------------------------------------------------------
    # Voice, read-aloud, feedback
    # ------------------------------------------------------------------

    def toggle_voice(self) -> VoiceState:
        if not self.voice.listening:
            self.error = None
        return self.voice.toggle()

    def toggle_read_aloud(self) -> bool:
        return self.read_aloud.toggle(self.result)

    def set_feedback(self, value: Feedback | str | None) -> Feedback | None:
        """Select thumbs up/down; selecting the active value clears it."""
        value = Feedback(value) if value is not None else None
        self.feedback = None if value is None or value == self.feedback else value
        return self.feedback

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def render(self) -> list[Block]:
        return render(self.result)

    def export(self, today: date | None = None) -> tuple[str, str]:
        """Return (file name, raw response text) for download."""
        return export_filename(today or datetime.now(UTC).date()), self.result

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            state=self.state,
            mode=self.mode,
            text=self.text,
            has_image=self.image is not None,
            image_mime_type=self.image.mime_type if self.image else None,
            result=self.result,
            error=self.error,
            voice=self.voice.state,
            speaking=self.read_aloud.speaking,
            feedback=self.feedback,
            history_count=len(self.history),
        )

    def close(self) -> None:
        """Tear down: stop dictation and cancel speech unconditionally."""
        self.voice.stop()
        self.read_aloud.cancel()
        logger.info("Session closed")

    # ------------------------------------------------------------------

    def _append_dictation(self, transcript: str) -> None:
        with self._text_lock:
            self.text = append_transcript(self.text, transcript)

    def _set_error(self, message: str) -> None:
        self.error = message
