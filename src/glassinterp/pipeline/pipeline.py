"""Simultaneous speech translation pipeline."""

from __future__ import annotations

import asyncio
from typing import Any, Callable

from glassinterp.audio import AudioLevelMonitor
from glassinterp.common import get_logger
from glassinterp.errors import MicrophonePermissionError, RecognitionUnsupportedError
from glassinterp.languages import get_lang_code
from glassinterp.models import PipelineState, TranscriptSegment, TranslationEvent
from glassinterp.speech import SpeechRecognizer, SpeechSynthesizer
from glassinterp.translation import Translator

PERMISSION_DENIED_MESSAGE = "Microphone permission denied."
UNSUPPORTED_MESSAGE = "Speech recognition is not supported on this device."
START_FAILED_MESSAGE = "Failed to start listening."


class SimultaneousPipeline:
    """Microphone -> recognition -> translation -> speech orchestrator.

    State machine::

        IDLE --start()--> LISTENING
        LISTENING --pause()--> PAUSED
        PAUSED --start()--> LISTENING
        LISTENING/PAUSED --stop()--> IDLE
        LISTENING --(permission or engine-init failure)--> ERROR
        ERROR --start()--> LISTENING

    Every final segment spawns its own translation task; translations are
    never awaited by the recognition stream and may complete out of order.
    Each start, pause and stop advances a generation counter, and a
    translation result is only acted upon if its generation is still
    current and the pipeline is still listening.

    UI callbacks are plain attributes. The control methods never raise:
    failures reach the caller through ``on_error``.

    Example:
        pipeline = await create_pipeline(config)
        pipeline.on_translation = lambda event: print(event.text)

        pipeline.prepare_audio()
        await pipeline.start("English", "Vietnamese")
        ...
        await pipeline.stop()
    """

    def __init__(
        self,
        monitor: AudioLevelMonitor,
        recognizer: SpeechRecognizer,
        translator: Translator,
        synthesizer: SpeechSynthesizer,
    ) -> None:
        self._monitor = monitor
        self._recognizer = recognizer
        self._translator = translator
        self._synthesizer = synthesizer

        self._status = PipelineState.IDLE
        self._source_language = "English"
        self._target_language = "Vietnamese"
        self._generation = 0
        self._tasks: set[asyncio.Task] = set()

        self.on_status_change: Callable[[PipelineState], None] | None = None
        self.on_audio_level: Callable[[float], None] | None = None
        self.on_source_transcript: Callable[[TranscriptSegment], None] | None = None
        self.on_translation: Callable[[TranslationEvent], None] | None = None
        self.on_error: Callable[[str], None] | None = None

        self.logger = get_logger("pipeline")

        self._unsubscribers = [
            monitor.subscribe(self._handle_audio_level),
            recognizer.subscribe(self._handle_transcript),
            recognizer.subscribe_fatal(self._handle_recognizer_fatal),
        ]

    @property
    def status(self) -> PipelineState:
        """Get current pipeline state."""
        return self._status

    @property
    def source_language(self) -> str:
        return self._source_language

    @property
    def target_language(self) -> str:
        return self._target_language

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def pending_translations(self) -> int:
        return len(self._tasks)

    def prepare_audio(self) -> None:
        """Unlock audio output. Call from the user interaction handler before start()."""
        try:
            self._synthesizer.warmup()
        except Exception as e:
            self.logger.warning("audio_warmup_failed", error=str(e))

    def set_audio_output(self, enabled: bool) -> None:
        """Enable or mute spoken translations."""
        self._synthesizer.set_enabled(enabled)

    async def start(
        self,
        source_language: str = "English",
        target_language: str = "Vietnamese",
    ) -> None:
        """Start (or resume) listening with the given language pair."""
        if self._status == PipelineState.LISTENING:
            return

        self._source_language = source_language
        self._target_language = target_language
        self._generation += 1
        generation = self._generation

        self.logger.info(
            "pipeline_starting",
            source=source_language,
            target=target_language,
            generation=generation,
        )

        try:
            self._recognizer.set_language(get_lang_code(source_language))
            self._set_status(PipelineState.LISTENING)
            self._synthesizer.stop()
            self._recognizer.start()
        except Exception as e:
            self.logger.error("pipeline_start_failed", error=str(e))
            self._monitor.stop()
            if isinstance(e, RecognitionUnsupportedError):
                self._fail(UNSUPPORTED_MESSAGE)
            else:
                self._fail(START_FAILED_MESSAGE)
            return

        try:
            await self._monitor.start()
        except MicrophonePermissionError as e:
            if generation != self._generation:
                return
            self.logger.error("microphone_permission_denied", error=str(e))
            self._recognizer.stop()
            self._fail(PERMISSION_DENIED_MESSAGE)
        except Exception as e:
            # The level meter is cosmetic; recognition keeps running
            self.logger.warning("audio_monitor_failed", error=str(e))

    async def pause(self) -> None:
        """Pause listening; start() resumes."""
        if self._status != PipelineState.LISTENING:
            self.logger.debug("pause_ignored", status=self._status.value)
            return

        self._generation += 1
        self._set_status(PipelineState.PAUSED)
        self._halt()

    async def stop(self) -> None:
        """End the session."""
        self._generation += 1
        self._set_status(PipelineState.IDLE)
        self._halt()

    async def wait_for_pending(self) -> None:
        """Wait until every in-flight translation task completed."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def close(self) -> None:
        """Stop, drain in-flight translations, release the synthesis engine and detach."""
        await self.stop()
        await self.wait_for_pending()
        try:
            await self._synthesizer.close()
        except Exception as e:
            self.logger.warning("synthesizer_close_failed", error=str(e))
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers.clear()

    def _halt(self) -> None:
        for name, stop in (
            ("monitor", self._monitor.stop),
            ("recognizer", self._recognizer.stop),
            ("synthesizer", self._synthesizer.stop),
        ):
            try:
                stop()
            except Exception as e:
                self.logger.warning("component_stop_failed", component=name, error=str(e))

    def _set_status(self, status: PipelineState) -> None:
        if status == self._status:
            return
        self._status = status
        self.logger.debug("pipeline_status", status=status.value)
        self._notify(self.on_status_change, status)

    def _fail(self, message: str) -> None:
        self._set_status(PipelineState.ERROR)
        self._notify(self.on_error, message)

    def _notify(self, callback: Callable[[Any], None] | None, value: Any) -> None:
        if callback is None:
            return
        try:
            callback(value)
        except Exception as e:
            self.logger.exception("pipeline_callback_failed", error=str(e))

    def _handle_audio_level(self, level: float) -> None:
        self._notify(self.on_audio_level, level)

    def _handle_recognizer_fatal(self, error: Exception) -> None:
        if self._status != PipelineState.LISTENING:
            return

        self.logger.error("recognizer_fatal_error", error=str(error))
        self._generation += 1
        self._monitor.stop()
        self._synthesizer.stop()
        self._fail(PERMISSION_DENIED_MESSAGE)

    def _handle_transcript(self, segment: TranscriptSegment) -> None:
        self._notify(self.on_source_transcript, segment)

        if not segment.is_final or not segment.text:
            return
        if self._status != PipelineState.LISTENING:
            self.logger.debug("late_segment_skipped", source_id=segment.id)
            return

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self.logger.error("no_event_loop_for_translation", source_id=segment.id)
            return

        task = loop.create_task(
            self._translate_segment(
                segment,
                self._generation,
                self._source_language,
                self._target_language,
            )
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _translate_segment(
        self,
        segment: TranscriptSegment,
        generation: int,
        source_language: str,
        target_language: str,
    ) -> None:
        try:
            translated = await self._translator.translate(
                segment.text, source_language, target_language
            )
        except Exception as e:
            self.logger.warning("translation_partial_failure", source_id=segment.id, error=str(e))
            return

        if generation != self._generation or self._status != PipelineState.LISTENING:
            self.logger.debug(
                "stale_translation_discarded",
                source_id=segment.id,
                generation=generation,
                current_generation=self._generation,
            )
            return
        if not translated:
            return

        self._notify(
            self.on_translation,
            TranslationEvent(source_id=segment.id, text=translated, language=target_language),
        )

        try:
            self._synthesizer.speak(translated, target_language)
        except Exception as e:
            self.logger.warning("speak_failed", source_id=segment.id, error=str(e))
