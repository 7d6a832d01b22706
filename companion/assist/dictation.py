"""Voice dictation controller over a SpeechRecognizer.

Runs orthogonally to the submission state machine: Listening/NotListening.
"""

from __future__ import annotations

from collections.abc import Callable

from companion.assist.types import VoiceState
from companion.config import DICTATION_LANGUAGE
from companion.contracts.speech import SpeechRecognizer
from companion.observability.logging import get_logger
from companion.observability.telemetry import counter, log_event

logger = get_logger(__name__)

UNSUPPORTED_MESSAGE = "Voice input is not supported in this environment."
DENIED_MESSAGE = (
    "Microphone access was denied. Please allow microphone access to use voice input."
)


def append_transcript(current: str, transcript: str) -> str:
    """Append dictated text, separated by one space unless none is needed."""
    if not transcript:
        return current
    spacer = " " if current and not current[-1].isspace() else ""
    return current + spacer + transcript


def error_message(code: str) -> str | None:
    """User-facing message for a recognizer error code; None means ignore."""
    if code == "not-allowed":
        return DENIED_MESSAGE
    if code == "no-speech":
        return None
    return f"Voice input error: {code}"


class VoiceInput:
    """
    Dictation toggle.

    Args:
        recognizer: Injected speech-to-text capability (None = unsupported)
        on_transcript: Receives each final transcript
        on_error: Receives user-facing error messages
    """

    def __init__(
        self,
        recognizer: SpeechRecognizer | None,
        on_transcript: Callable[[str], None],
        on_error: Callable[[str], None],
        language: str = DICTATION_LANGUAGE,
    ) -> None:
        self._recognizer = recognizer
        self._on_transcript = on_transcript
        self._on_error = on_error
        self.language = language
        self.state = VoiceState.NOT_LISTENING

    @property
    def listening(self) -> bool:
        return self.state is VoiceState.LISTENING

    @property
    def available(self) -> bool:
        return self._recognizer is not None and self._recognizer.is_available()

    def toggle(self) -> VoiceState:
        if self.listening:
            self.stop()
        else:
            self.start()
        return self.state

    def start(self) -> None:
        """
        Begin dictation.

        An unavailable recognizer reports UNSUPPORTED_MESSAGE through
        ``on_error`` and stays NotListening.
        """
        if self.listening:
            return
        if not self.available:
            counter("voice.unsupported")
            self._on_error(UNSUPPORTED_MESSAGE)
            return

        self.state = VoiceState.LISTENING
        counter("voice.start")
        log_event("voice.start", language=self.language)
        try:
            self._recognizer.start(
                on_transcript=self._handle_transcript,
                on_error=self._handle_error,
                on_end=self._handle_end,
            )
        except Exception as e:
            logger.error("Speech recognition failed to start: %s", e)
            self.state = VoiceState.NOT_LISTENING
            self._on_error(f"Voice input error: {e}")

    def stop(self) -> None:
        """Stop dictation. Safe when not listening."""
        if self._recognizer is not None and self.listening:
            self._recognizer.stop()
            counter("voice.stop")
        self.state = VoiceState.NOT_LISTENING

    def _handle_transcript(self, transcript: str) -> None:
        if transcript:
            self._on_transcript(transcript)

    def _handle_error(self, code: str) -> None:
        logger.warning("Speech recognition error: %s", code)
        counter("voice.error")
        self.state = VoiceState.NOT_LISTENING
        message = error_message(code)
        if message:
            self._on_error(message)

    def _handle_end(self) -> None:
        self.state = VoiceState.NOT_LISTENING
