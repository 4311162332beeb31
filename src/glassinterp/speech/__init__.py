"""Speech recognition and synthesis wrappers."""

from glassinterp.speech.recognizer import (
    MockRecognitionEngine,
    RecognitionResult,
    ScriptedRecognitionEngine,
    SpeechRecognitionEngine,
    SpeechRecognizer,
)
from glassinterp.speech.synthesizer import (
    EspeakSynthesisEngine,
    MockSynthesisEngine,
    SpeechSynthesisEngine,
    SpeechSynthesizer,
    Utterance,
    Voice,
)

__all__ = [
    "MockRecognitionEngine",
    "RecognitionResult",
    "ScriptedRecognitionEngine",
    "SpeechRecognitionEngine",
    "SpeechRecognizer",
    "EspeakSynthesisEngine",
    "MockSynthesisEngine",
    "SpeechSynthesisEngine",
    "SpeechSynthesizer",
    "Utterance",
    "Voice",
]
