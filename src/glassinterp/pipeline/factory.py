"""Pipeline construction from configuration."""

from __future__ import annotations

from typing import Sequence

from glassinterp.audio import (
    AudioCapture,
    AudioLevelMonitor,
    MockAudioCapture,
    SoundDeviceAudioCapture,
)
from glassinterp.common import get_logger
from glassinterp.config import Config, load_config
from glassinterp.pipeline.pipeline import SimultaneousPipeline
from glassinterp.speech import (
    EspeakSynthesisEngine,
    MockSynthesisEngine,
    ScriptedRecognitionEngine,
    SpeechRecognitionEngine,
    SpeechRecognizer,
    SpeechSynthesisEngine,
    SpeechSynthesizer,
)
from glassinterp.translation import (
    GatewayTranslationProvider,
    MockTranslationProvider,
    OpenAICompatibleTranslationProvider,
    TranslationProvider,
    Translator,
)

logger = get_logger("pipeline_factory")


def create_translation_provider(
    config: Config, mock_mode: bool | None = None
) -> TranslationProvider:
    """Create the configured translation provider.

    Args:
        config: Configuration.
        mock_mode: Override config.mock_mode.
    """
    settings = config.translation
    if mock_mode is None:
        mock_mode = config.mock_mode

    if mock_mode or settings.provider == "mock":
        return MockTranslationProvider()
    if settings.provider == "gateway":
        return GatewayTranslationProvider(
            endpoint=settings.gateway_endpoint,
            api_key=settings.api_key,
            timeout_seconds=settings.timeout_seconds,
        )
    return OpenAICompatibleTranslationProvider(
        endpoint=settings.openai_endpoint,
        api_key=settings.api_key,
        model=settings.model,
        temperature=settings.temperature,
        timeout_seconds=settings.timeout_seconds,
    )


async def create_pipeline(
    config: Config | None = None,
    *,
    mock_mode: bool | None = None,
    capture: AudioCapture | None = None,
    recognition_engine: SpeechRecognitionEngine | None = None,
    translation_provider: TranslationProvider | None = None,
    synthesis_engine: SpeechSynthesisEngine | None = None,
    script: Sequence[str] | None = None,
) -> SimultaneousPipeline:
    """Build a pipeline, choosing mock or real components.

    Explicitly passed components always win. Outside mock mode there is no
    built-in recognition engine: without one the pipeline reports
    recognition as unsupported on start().

    Args:
        config: Configuration. Loaded from file/env if None.
        mock_mode: Override config.mock_mode.
        capture: Microphone capture.
        recognition_engine: Speech recognition engine.
        translation_provider: Translation provider.
        synthesis_engine: Speech synthesis engine.
        script: Utterances replayed by the mock recognition engine.

    Returns:
        Ready to start pipeline.
    """
    config = config or load_config()
    if mock_mode is None:
        mock_mode = config.mock_mode

    audio = config.audio

    if capture is None:
        if mock_mode:
            capture = MockAudioCapture(
                sample_rate=audio.sample_rate,
                channels=audio.channels,
                blocksize=audio.blocksize,
            )
        else:
            capture = SoundDeviceAudioCapture(
                sample_rate=audio.sample_rate,
                channels=audio.channels,
                blocksize=audio.blocksize,
                device=audio.device,
            )

    if recognition_engine is None and mock_mode:
        recognition_engine = ScriptedRecognitionEngine(
            script if script is not None else config.pipeline.mock_script,
            interval_seconds=config.pipeline.mock_script_interval_seconds,
        )

    if translation_provider is None:
        translation_provider = create_translation_provider(config, mock_mode=mock_mode)

    if synthesis_engine is None:
        if mock_mode:
            synthesis_engine = MockSynthesisEngine()
        else:
            synthesis_engine = EspeakSynthesisEngine(config.synthesis.espeak_binary)

    await synthesis_engine.setup()

    monitor = AudioLevelMonitor(
        capture,
        fft_size=audio.fft_size,
        frame_rate_hz=audio.frame_rate_hz,
        gain=audio.level_gain,
        min_decibels=audio.min_decibels,
        max_decibels=audio.max_decibels,
    )
    recognizer = SpeechRecognizer(
        recognition_engine,
        continuous=config.recognition.continuous,
        interim_results=config.recognition.interim_results,
    )
    translator = Translator(
        translation_provider,
        min_chars=config.translation.min_chars,
        error_marker=config.translation.error_marker,
    )
    synthesizer = SpeechSynthesizer(
        synthesis_engine,
        enabled=config.synthesis.enabled,
        rate=config.synthesis.rate,
        volume=config.synthesis.volume,
    )

    logger.info(
        "pipeline_created",
        mock_mode=mock_mode,
        capture=type(capture).__name__,
        recognition=type(recognition_engine).__name__ if recognition_engine else None,
        translation=type(translation_provider).__name__,
        synthesis=type(synthesis_engine).__name__,
    )

    return SimultaneousPipeline(monitor, recognizer, translator, synthesizer)
