"""Exceptions raised by the translation pipeline components."""


class PipelineError(Exception):
    """Base class for pipeline errors."""


class MicrophonePermissionError(PipelineError, PermissionError):
    """Microphone access was denied or no input device exists."""


class RecognitionUnsupportedError(PipelineError):
    """No speech recognition engine is available in this environment."""


class EngineAlreadyStartedError(PipelineError):
    """The recognition engine was asked to start while already running."""


class TranslationError(PipelineError):
    """The translation provider failed to produce a translation."""
