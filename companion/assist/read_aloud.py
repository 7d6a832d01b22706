"""Read-aloud toggle over a SpeechSynthesizer."""

from __future__ import annotations

from companion.contracts.speech import SpeechSynthesizer
from companion.observability.logging import get_logger
from companion.observability.telemetry import counter

logger = get_logger(__name__)


class ReadAloud:
    """
    At most one utterance at a time.

    ``toggle`` starts speaking when silent and cancels when speaking.
    Completion or a synthesizer error returns to not-speaking.
    """

    def __init__(self, synthesizer: SpeechSynthesizer | None = None) -> None:
        self._synthesizer = synthesizer
        self._speaking = False
        # Guards against a late on_done from a cancelled utterance
        self._utterance = 0

    @property
    def speaking(self) -> bool:
        return self._speaking

    @property
    def available(self) -> bool:
        return self._synthesizer is not None and self._synthesizer.is_available()

    def toggle(self, text: str) -> bool:
        """
        Start or stop reading ``text``. Returns the new speaking state.

        No-op (stays silent) when there is nothing to read or no synthesizer.
        """
        if self._speaking:
            self.cancel()
            return False

        if not text or not self.available:
            return False

        self._utterance += 1
        utterance = self._utterance
        self._speaking = True
        counter("read_aloud.start")
        try:
            self._synthesizer.speak(text, on_done=lambda: self._finished(utterance))
        except Exception as e:
            logger.error("Read-aloud failed to start: %s", e)
            self._speaking = False
        return self._speaking

    def cancel(self) -> None:
        """Cancel any current or pending speech."""
        self._utterance += 1
        if self._synthesizer is not None:
            self._synthesizer.cancel()
        if self._speaking:
            counter("read_aloud.cancel")
        self._speaking = False

    def _finished(self, utterance: int) -> None:
        if utterance == self._utterance:
            self._speaking = False
