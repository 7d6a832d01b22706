"""
Capability contracts for the Accessibility Companion

Protocol-based interfaces for the collaborators the session controller
depends on but does not own: the persisted key/value record behind history,
and the speech-to-text / text-to-speech facilities of the runtime.

Concrete implementations live in companion.storage.backends and
companion.speech.engines; tests supply in-memory fakes.
"""

from companion.contracts.speech import (
    ErrorCallback,
    SpeechRecognizer,
    SpeechSynthesizer,
    TranscriptCallback,
)
from companion.contracts.storage import KeyValueBackend

__all__ = [
    "ErrorCallback",
    "KeyValueBackend",
    "SpeechRecognizer",
    "SpeechSynthesizer",
    "TranscriptCallback",
]
