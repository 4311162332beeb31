"""Continuous speech recognition with supervised auto-restart."""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from typing import Callable, Sequence

from glassinterp.common import ListenerRegistry, Unsubscribe, get_logger
from glassinterp.errors import (
    EngineAlreadyStartedError,
    MicrophonePermissionError,
    RecognitionUnsupportedError,
)
from glassinterp.models import INTERIM_SEGMENT_ID, TranscriptSegment

# Engine error codes meaning the user or platform refused microphone access
FATAL_ERROR_CODES = frozenset({"not-allowed", "service-not-allowed"})


@dataclass
class RecognitionResult:
    """One hypothesis reported by a recognition engine."""

    transcript: str
    is_final: bool
    confidence: float = 0.0


ResultHandler = Callable[[Sequence[RecognitionResult], int], None]


class SpeechRecognitionEngine:
    """Abstract continuous speech recognition engine.

    Engines report through three handlers assigned by the owner:
    ``on_result(results, result_index)`` with every result from
    ``result_index`` onwards changed, ``on_end()`` whenever recognition
    stops (requested or not) and ``on_error(code)``.
    """

    def __init__(self) -> None:
        self.lang = "en-US"
        self.continuous = True
        self.interim_results = True
        self.on_result: ResultHandler | None = None
        self.on_end: Callable[[], None] | None = None
        self.on_error: Callable[[str], None] | None = None

    def start(self) -> None:
        """Start recognition.

        Raises:
            EngineAlreadyStartedError: Recognition is already running.
        """
        raise NotImplementedError

    def stop(self) -> None:
        """Request recognition to stop."""
        raise NotImplementedError


class MockRecognitionEngine(SpeechRecognitionEngine):
    """Mock engine driven by the test or demo code."""

    def __init__(self) -> None:
        super().__init__()
        self.started = False
        self.start_count = 0
        self.stop_count = 0
        self.fail_on_start: Exception | None = None
        self._results: list[RecognitionResult] = []

    def start(self) -> None:
        if self.fail_on_start is not None:
            raise self.fail_on_start
        if self.started:
            raise EngineAlreadyStartedError("recognition has already started")

        self.started = True
        self.start_count += 1
        self._results = []

    def stop(self) -> None:
        self.stop_count += 1
        if not self.started:
            return
        self.started = False
        if self.on_end:
            self.on_end()

    def emit(self, text: str, is_final: bool = False, confidence: float = 0.9) -> None:
        """Report a hypothesis.

        A non-final result is revised in place until it becomes final.
        """
        result = RecognitionResult(transcript=text, is_final=is_final, confidence=confidence)
        if self._results and not self._results[-1].is_final:
            self._results[-1] = result
        else:
            self._results.append(result)

        if self.on_result:
            self.on_result(list(self._results), len(self._results) - 1)

    def end(self) -> None:
        """Simulate engine-initiated termination (silence timeout, platform stop)."""
        self.started = False
        if self.on_end:
            self.on_end()

    def error(self, code: str) -> None:
        """Simulate an engine error; the engine ends right after, like real ones."""
        if self.on_error:
            self.on_error(code)
        self.end()


class ScriptedRecognitionEngine(MockRecognitionEngine):
    """Mock engine replaying scripted utterances word by word.

    Once the script is exhausted the engine times out once, the way real
    continuous engines stop after a stretch of silence.
    """

    def __init__(self, script: Sequence[str], interval_seconds: float = 1.5) -> None:
        super().__init__()
        self._script = list(script)
        self._interval = interval_seconds
        self._position = 0
        self._timed_out = False
        self._task: asyncio.Task | None = None

    def start(self) -> None:
        super().start()
        self._task = asyncio.get_running_loop().create_task(self._replay())

    def stop(self) -> None:
        task, self._task = self._task, None
        if task is not None:
            task.cancel()
        super().stop()

    async def _replay(self) -> None:
        while self._position < len(self._script):
            line = self._script[self._position]
            words = line.split()
            step = self._interval / max(len(words), 1)

            for count in range(1, len(words)):
                await asyncio.sleep(step)
                self.emit(" ".join(words[:count]))

            await asyncio.sleep(step)
            self._position += 1
            self.emit(line, is_final=True)

        if not self._timed_out:
            self._timed_out = True
            await asyncio.sleep(self._interval)
            self._task = None
            self.end()


class SpeechRecognizer:
    """Turns engine results into transcript segments.

    Keeps a desired-running flag: an engine ``end`` while the flag is set is
    treated as an unrequested stop and the engine is restarted, so the
    session looks uninterrupted to the caller.
    """

    def __init__(
        self,
        engine: SpeechRecognitionEngine | None,
        continuous: bool = True,
        interim_results: bool = True,
    ) -> None:
        self._engine = engine
        self._continuous = continuous
        self._interim_results = interim_results
        self._language = "en-US"
        self._should_run = False
        self._sequence = 0
        self._listeners: ListenerRegistry[TranscriptSegment] = ListenerRegistry("transcript")
        self._fatal_listeners: ListenerRegistry[Exception] = ListenerRegistry("recognizer_fatal")
        self.logger = get_logger("speech_recognizer")

        if engine is not None:
            engine.on_result = self._handle_result
            engine.on_end = self._handle_end
            engine.on_error = self._handle_error

    @property
    def supported(self) -> bool:
        return self._engine is not None

    @property
    def running(self) -> bool:
        """Whether recognition is logically running."""
        return self._should_run

    @property
    def language(self) -> str:
        return self._language

    def set_language(self, code: str) -> None:
        """Set the locale used by the next start."""
        self._language = code
        if self._engine is not None:
            self._engine.lang = code

    def subscribe(self, callback: Callable[[TranscriptSegment], None]) -> Unsubscribe:
        """Subscribe to transcript segments."""
        return self._listeners.subscribe(callback)

    def subscribe_fatal(self, callback: Callable[[Exception], None]) -> Unsubscribe:
        """Subscribe to errors that end recognition for good."""
        return self._fatal_listeners.subscribe(callback)

    def start(self) -> None:
        """Begin continuous recognition.

        Raises:
            RecognitionUnsupportedError: No engine is available.
        """
        if self._engine is None:
            raise RecognitionUnsupportedError(
                "Speech recognition is not supported in this environment."
            )

        self._should_run = True
        self._engine.lang = self._language
        self._engine.continuous = self._continuous
        self._engine.interim_results = self._interim_results

        try:
            self._engine.start()
        except EngineAlreadyStartedError:
            self.logger.debug("recognizer_already_started")
        except Exception:
            self._should_run = False
            raise
        else:
            self.logger.info("recognizer_started", language=self._language)

    def stop(self) -> None:
        """Stop recognition and prevent auto-restart."""
        self._should_run = False
        if self._engine is None:
            return

        try:
            self._engine.stop()
        except Exception as e:
            self.logger.debug("recognizer_stop_ignored", error=str(e))

    def _handle_result(self, results: Sequence[RecognitionResult], result_index: int) -> None:
        for index in range(result_index, len(results)):
            result = results[index]
            timestamp = time.time()

            if result.is_final:
                self._sequence += 1
                segment_id = f"trans_{int(timestamp * 1000)}_{index}_{self._sequence}"
            else:
                segment_id = INTERIM_SEGMENT_ID

            self._listeners.emit(
                TranscriptSegment(
                    id=segment_id,
                    text=result.transcript.strip(),
                    is_final=result.is_final,
                    timestamp=timestamp,
                )
            )

    def _handle_end(self) -> None:
        if not self._should_run:
            self.logger.debug("recognizer_ended")
            return

        self.logger.debug("recognizer_auto_restart", language=self._language)
        try:
            self._engine.start()
        except EngineAlreadyStartedError:
            pass
        except Exception as e:
            self.logger.warning("recognizer_restart_failed", error=str(e))

    def _handle_error(self, code: str) -> None:
        if code not in FATAL_ERROR_CODES:
            self.logger.warning("recognition_error", error=code)
            return

        self.logger.error("recognition_permission_denied", error=code)
        self._should_run = False
        self._fatal_listeners.emit(
            MicrophonePermissionError(f"Speech recognition permission denied ({code})")
        )
