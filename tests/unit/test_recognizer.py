"""Tests for the speech recognizer wrapper."""

import asyncio
from unittest.mock import MagicMock

import pytest

from glassinterp.errors import (
    EngineAlreadyStartedError,
    MicrophonePermissionError,
    RecognitionUnsupportedError,
)
from glassinterp.models import INTERIM_SEGMENT_ID
from glassinterp.speech import MockRecognitionEngine, ScriptedRecognitionEngine, SpeechRecognizer


@pytest.fixture
def recognizer(recognition_engine: MockRecognitionEngine) -> SpeechRecognizer:
    return SpeechRecognizer(recognition_engine)


class TestSpeechRecognizer:
    """Tests for SpeechRecognizer."""

    def test_start_applies_settings(
        self, recognizer: SpeechRecognizer, recognition_engine: MockRecognitionEngine
    ):
        """Test that start configures the engine locale and mode."""
        recognizer.set_language("vi-VN")
        recognizer.start()

        assert recognition_engine.started
        assert recognition_engine.lang == "vi-VN"
        assert recognition_engine.continuous is True
        assert recognition_engine.interim_results is True
        assert recognizer.running

    def test_unsupported_without_engine(self):
        """Test that start fails when no engine exists."""
        recognizer = SpeechRecognizer(None)

        assert not recognizer.supported
        with pytest.raises(RecognitionUnsupportedError):
            recognizer.start()

    def test_already_started_is_silent(
        self, recognizer: SpeechRecognizer, recognition_engine: MockRecognitionEngine
    ):
        """Test that starting a running engine is tolerated."""
        recognizer.start()
        recognizer.start()

        assert recognition_engine.start_count == 1
        assert recognizer.running

    def test_start_failure_propagates(
        self, recognizer: SpeechRecognizer, recognition_engine: MockRecognitionEngine
    ):
        """Test that other engine start errors are raised and clear the flag."""
        recognition_engine.fail_on_start = RuntimeError("audio capture busy")

        with pytest.raises(RuntimeError):
            recognizer.start()

        assert not recognizer.running

    def test_interim_and_final_segments(
        self, recognizer: SpeechRecognizer, recognition_engine: MockRecognitionEngine
    ):
        """Test segment ids and text for interim and final results."""
        segments = []
        recognizer.subscribe(segments.append)
        recognizer.start()

        recognition_engine.emit(" Hello ")
        recognition_engine.emit("Hello there ")
        recognition_engine.emit("Hello there", is_final=True)
        recognition_engine.emit("General", is_final=False)
        recognition_engine.emit("General Kenobi", is_final=True)

        assert [s.id for s in segments[:2]] == [INTERIM_SEGMENT_ID, INTERIM_SEGMENT_ID]
        assert segments[0].text == "Hello"
        assert segments[1].text == "Hello there"

        finals = [s for s in segments if s.is_final]
        assert [s.text for s in finals] == ["Hello there", "General Kenobi"]
        assert all(s.id.startswith("trans_") for s in finals)
        assert len({s.id for s in finals}) == 2
        assert segments[3].id == INTERIM_SEGMENT_ID

    def test_final_ids_unique_across_restarts(
        self, recognizer: SpeechRecognizer, recognition_engine: MockRecognitionEngine
    ):
        """Test that result indices restarting at zero never reuse an id."""
        segments = []
        recognizer.subscribe(segments.append)
        recognizer.start()

        for _ in range(5):
            recognition_engine.emit("again", is_final=True)
            recognition_engine.end()

        ids = [s.id for s in segments]
        assert len(ids) == 5
        assert len(set(ids)) == 5

    def test_auto_restart_on_engine_end(
        self, recognizer: SpeechRecognizer, recognition_engine: MockRecognitionEngine
    ):
        """Test that an unrequested end restarts the engine."""
        recognizer.start()

        recognition_engine.end()

        assert recognition_engine.started
        assert recognition_engine.start_count == 2

    def test_restart_failure_is_logged(
        self, recognizer: SpeechRecognizer, recognition_engine: MockRecognitionEngine
    ):
        """Test that a failing restart does not raise out of the end handler."""
        recognizer.start()
        recognition_engine.fail_on_start = RuntimeError("engine crashed")

        recognition_engine.end()

        assert not recognition_engine.started
        assert recognizer.running

    def test_stop_prevents_restart(
        self, recognizer: SpeechRecognizer, recognition_engine: MockRecognitionEngine
    ):
        """Test that a requested stop is not undone by the end event."""
        recognizer.start()
        recognizer.stop()

        assert not recognition_engine.started
        assert recognition_engine.start_count == 1
        assert not recognizer.running

    def test_stop_tolerates_engine_errors(self):
        """Test that engine stop errors are swallowed."""
        engine = MockRecognitionEngine()
        engine.stop = MagicMock(side_effect=RuntimeError("already stopped"))
        recognizer = SpeechRecognizer(engine)
        recognizer.start()

        recognizer.stop()

        engine.stop.assert_called_once()
        assert not recognizer.running

    def test_stop_without_engine(self):
        SpeechRecognizer(None).stop()

    def test_permission_error_suppresses_restart(
        self, recognizer: SpeechRecognizer, recognition_engine: MockRecognitionEngine
    ):
        """Test that a fatal permission error clears the flag and notifies."""
        fatal = []
        recognizer.subscribe_fatal(fatal.append)
        recognizer.start()

        recognition_engine.error("not-allowed")

        assert not recognizer.running
        assert not recognition_engine.started
        assert recognition_engine.start_count == 1
        assert len(fatal) == 1
        assert isinstance(fatal[0], MicrophonePermissionError)

    def test_transient_error_restarts(
        self, recognizer: SpeechRecognizer, recognition_engine: MockRecognitionEngine
    ):
        """Test that non-permission errors keep the session alive."""
        fatal = []
        recognizer.subscribe_fatal(fatal.append)
        recognizer.start()

        recognition_engine.error("no-speech")

        assert recognizer.running
        assert recognition_engine.started
        assert fatal == []


class TestMockRecognitionEngine:
    """Tests for the mock engine itself."""

    def test_double_start_raises(self, recognition_engine: MockRecognitionEngine):
        recognition_engine.start()
        with pytest.raises(EngineAlreadyStartedError):
            recognition_engine.start()


class TestScriptedRecognitionEngine:
    """Tests for ScriptedRecognitionEngine."""

    @pytest.mark.asyncio
    async def test_replays_script(self):
        """Test that scripted lines arrive as interim then final segments."""
        engine = ScriptedRecognitionEngine(["good morning everyone", "thanks"], interval_seconds=0.03)
        recognizer = SpeechRecognizer(engine)
        segments = []
        recognizer.subscribe(segments.append)

        recognizer.start()
        await asyncio.sleep(0.2)
        recognizer.stop()

        finals = [s.text for s in segments if s.is_final]
        interims = [s.text for s in segments if not s.is_final]
        assert finals == ["good morning everyone", "thanks"]
        assert interims == ["good", "good morning"]

    @pytest.mark.asyncio
    async def test_silence_timeout_restarts(self):
        """Test that the scripted silence timeout is absorbed by auto-restart."""
        engine = ScriptedRecognitionEngine(["hi there"], interval_seconds=0.02)
        recognizer = SpeechRecognizer(engine)

        recognizer.start()
        await asyncio.sleep(0.15)

        assert engine.start_count == 2
        assert engine.started

        recognizer.stop()
        assert not engine.started
