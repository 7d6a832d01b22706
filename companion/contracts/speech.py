"""
Speech Protocols

Speech-to-text (dictation) and text-to-speech (read-aloud) capabilities.
Both expose explicit availability probing so the session can report an
unsupported environment before starting anything.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol

TranscriptCallback = Callable[[str], None]
ErrorCallback = Callable[[str], None]


class SpeechRecognizer(Protocol):
    """Continuous dictation delivering final transcripts only."""

    def is_available(self) -> bool:
        """True when dictation can be started in this environment."""
        ...

    def start(
        self,
        on_transcript: TranscriptCallback,
        on_error: ErrorCallback,
        on_end: Callable[[], None],
    ) -> None:
        """Begin listening.

        ``on_error`` receives an error code ("not-allowed", "no-speech",
        "network", ...). ``on_end`` fires once when listening stops for any
        reason other than an explicit ``stop()``.
        """
        ...

    def stop(self) -> None:
        """Stop listening. Safe to call when not listening."""
        ...


class SpeechSynthesizer(Protocol):
    """Text-to-speech output."""

    def is_available(self) -> bool:
        ...

    def speak(self, text: str, on_done: Callable[[], None]) -> None:
        """Start speaking ``text``; ``on_done`` fires on completion or error."""
        ...

    def cancel(self) -> None:
        """Cancel current and pending speech. Safe to call when silent."""
        ...
