"""
Local speech engines.

MicrophoneRecognizer wraps the SpeechRecognition package (microphone capture
via PyAudio, Google Web Speech recognition). Pyttsx3Synthesizer wraps pyttsx3
for offline text-to-speech. Both libraries are optional ("speech" extra):
when a library or audio device is missing, ``is_available`` reports False and
the session surfaces the unsupported-capability message.
"""

from __future__ import annotations

import importlib.util
import threading
from collections.abc import Callable
from typing import Any

from companion.config import DICTATION_LANGUAGE, SPEECH_RATE
from companion.contracts.speech import ErrorCallback, TranscriptCallback
from companion.observability.logging import get_logger

logger = get_logger(__name__)


def _module_installed(name: str) -> bool:
    return importlib.util.find_spec(name) is not None


class MicrophoneRecognizer:
    """Continuous background dictation from the default microphone."""

    def __init__(self, language: str = DICTATION_LANGUAGE, phrase_time_limit: float = 10.0):
        self.language = language
        self.phrase_time_limit = phrase_time_limit
        self._stop_listening: Callable[..., None] | None = None

    def is_available(self) -> bool:
        if not (_module_installed("speech_recognition") and _module_installed("pyaudio")):
            return False
        import speech_recognition as sr

        try:
            return bool(sr.Microphone.list_microphone_names())
        except (OSError, AttributeError) as e:
            logger.info("No microphone available: %s", e)
            return False

    def start(
        self,
        on_transcript: TranscriptCallback,
        on_error: ErrorCallback,
        on_end: Callable[[], None],
    ) -> None:
        import speech_recognition as sr

        recognizer = sr.Recognizer()

        def callback(rec: sr.Recognizer, audio: sr.AudioData) -> None:
            try:
                text = rec.recognize_google(audio, language=self.language)
            except sr.UnknownValueError:
                # Unintelligible phrase; keep listening
                return
            except sr.RequestError as e:
                logger.warning("Speech recognition request failed: %s", e)
                on_error("network")
                self._halt()
                on_end()
                return
            on_transcript(text)

        try:
            microphone = sr.Microphone()
            with microphone as source:
                recognizer.adjust_for_ambient_noise(source)
        except OSError as e:
            logger.warning("Microphone could not be opened: %s", e)
            on_error("not-allowed")
            return

        self._stop_listening = recognizer.listen_in_background(
            microphone, callback, phrase_time_limit=self.phrase_time_limit
        )

    def stop(self) -> None:
        self._halt()

    def _halt(self) -> None:
        if self._stop_listening is not None:
            self._stop_listening(wait_for_stop=False)
            self._stop_listening = None


class Pyttsx3Synthesizer:
    """
    Offline text-to-speech; each utterance runs on its own worker thread.

    pyttsx3 allows one run loop at a time, so a new utterance first stops the
    previous engine and waits for its worker to exit.

    Args:
        rate: Words per minute
        engine_factory: Returns a pyttsx3-compatible engine; defaults to
            ``pyttsx3.init``
        join_timeout: Seconds to wait for the previous worker
    """

    def __init__(
        self,
        rate: int = SPEECH_RATE,
        engine_factory: Callable[[], Any] | None = None,
        join_timeout: float = 2.0,
    ):
        self.rate = rate
        self.join_timeout = join_timeout
        self._engine_factory = engine_factory
        self._engine = None
        self._worker: threading.Thread | None = None
        self._cancelled = threading.Event()
        self._lock = threading.Lock()

    def is_available(self) -> bool:
        return self._engine_factory is not None or _module_installed("pyttsx3")

    def speak(self, text: str, on_done: Callable[[], None]) -> None:
        previous = self._worker
        if previous is not None and previous.is_alive():
            self.cancel()
            previous.join(timeout=self.join_timeout)
            if previous.is_alive():
                logger.warning("Previous utterance still running after %.1fs", self.join_timeout)

        cancelled = threading.Event()
        worker = threading.Thread(target=self._run, args=(text, on_done, cancelled), daemon=True)
        with self._lock:
            self._cancelled = cancelled
        self._worker = worker
        worker.start()

    def cancel(self) -> None:
        with self._lock:
            self._cancelled.set()
            engine = self._engine
        if engine is not None:
            engine.stop()

    def _create_engine(self):
        if self._engine_factory is not None:
            return self._engine_factory()
        import pyttsx3

        return pyttsx3.init()

    def _run(
        self, text: str, on_done: Callable[[], None], cancelled: threading.Event
    ) -> None:
        try:
            engine = self._create_engine()
            engine.setProperty("rate", self.rate)
            with self._lock:
                self._engine = engine
            if cancelled.is_set():
                return
            engine.say(text)
            engine.runAndWait()
        except Exception as e:
            logger.error("Speech synthesis failed: %s", e)
        finally:
            with self._lock:
                self._engine = None
            on_done()
