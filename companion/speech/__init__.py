"""Speech - concrete dictation and read-aloud engines"""

from companion.speech.engines import MicrophoneRecognizer, Pyttsx3Synthesizer

__all__ = ["MicrophoneRecognizer", "Pyttsx3Synthesizer"]
