"""Text-to-speech with single active utterance ownership."""

from __future__ import annotations

import asyncio
import uuid
from dataclasses import dataclass, field
from typing import Callable

from glassinterp.common import get_logger
from glassinterp.languages import base_language, get_lang_code

# Error codes engines report for utterances removed by cancel()
CANCEL_ERROR_CODES = frozenset({"canceled", "interrupted"})


@dataclass
class Voice:
    """Installed synthesis voice."""

    name: str
    lang: str
    default: bool = False


@dataclass(eq=False)
class Utterance:
    """One speech request handed to a synthesis engine."""

    text: str
    lang: str = "en-US"
    voice: Voice | None = None
    rate: float = 1.0
    volume: float = 1.0
    on_end: Callable[[], None] | None = None
    on_error: Callable[[str], None] | None = None
    utterance_id: str = field(default_factory=lambda: uuid.uuid4().hex)

    def finish(self) -> None:
        if self.on_end:
            self.on_end()

    def fail(self, error: str) -> None:
        if self.on_error:
            self.on_error(error)


class SpeechSynthesisEngine:
    """Abstract speech synthesis engine."""

    async def setup(self) -> None:
        """Setup engine resources (voice catalog)."""
        pass

    async def teardown(self) -> None:
        """Teardown engine resources."""
        pass

    def get_voices(self) -> list[Voice]:
        """List installed voices."""
        raise NotImplementedError

    def speak(self, utterance: Utterance) -> None:
        """Queue an utterance for playback."""
        raise NotImplementedError

    def cancel(self) -> None:
        """Drop every queued or playing utterance."""
        raise NotImplementedError

    @property
    def speaking(self) -> bool:
        raise NotImplementedError


MOCK_VOICES = [
    Voice(name="Mock Samantha", lang="en-US", default=True),
    Voice(name="Mock Daniel", lang="en-GB"),
    Voice(name="Mock Linh", lang="vi-VN"),
    Voice(name="Mock Monica", lang="es-ES"),
    Voice(name="Mock Kyoko", lang="ja-JP"),
    Voice(name="Mock Thomas", lang="fr"),
]


class MockSynthesisEngine(SpeechSynthesisEngine):
    """Mock engine keeping a playback queue in memory."""

    def __init__(self, voices: list[Voice] | None = None) -> None:
        self._voices = list(MOCK_VOICES if voices is None else voices)
        self.queue: list[Utterance] = []
        self.spoken: list[Utterance] = []
        self.cancel_count = 0
        self.torn_down = False
        self.logger = get_logger("mock_synthesis_engine")

    async def teardown(self) -> None:
        self.cancel()
        self.torn_down = True

    def get_voices(self) -> list[Voice]:
        return list(self._voices)

    def speak(self, utterance: Utterance) -> None:
        self.queue.append(utterance)
        self.spoken.append(utterance)
        self.logger.debug(
            "mock_speak",
            text=utterance.text,
            lang=utterance.lang,
            voice=utterance.voice.name if utterance.voice else None,
        )

    def cancel(self) -> None:
        self.cancel_count += 1
        pending, self.queue = self.queue, []
        for utterance in pending:
            utterance.fail("canceled")

    def finish(self) -> Utterance | None:
        """Complete playback of the utterance at the head of the queue."""
        if not self.queue:
            return None
        utterance = self.queue.pop(0)
        utterance.finish()
        return utterance

    @property
    def speaking(self) -> bool:
        return bool(self.queue)


class EspeakSynthesisEngine(SpeechSynthesisEngine):
    """Speech synthesis through the espeak-ng command line."""

    def __init__(self, binary: str = "espeak-ng") -> None:
        self.binary = binary
        self._voices: list[Voice] = []
        self._task: asyncio.Task | None = None
        self._process: asyncio.subprocess.Process | None = None
        self.logger = get_logger("espeak_synthesis_engine")

    async def setup(self) -> None:
        """Load the installed voice catalog."""
        try:
            proc = await asyncio.create_subprocess_exec(
                self.binary, "--voices",
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
            stdout, _ = await proc.communicate()
        except FileNotFoundError:
            self.logger.warning("espeak_not_available", binary=self.binary)
            return

        self._voices = self.parse_voices(stdout.decode(errors="replace"))
        self.logger.info("voices_loaded", count=len(self._voices))

    async def teardown(self) -> None:
        self.cancel()

    @staticmethod
    def parse_voices(listing: str) -> list[Voice]:
        """Parse ``espeak-ng --voices`` output.

        Columns: Pty Language Age/Gender VoiceName File Other Languages
        """
        voices = []
        for line in listing.splitlines()[1:]:
            parts = line.split()
            if len(parts) >= 4:
                voices.append(Voice(name=parts[3], lang=parts[1]))
        return voices

    def get_voices(self) -> list[Voice]:
        return list(self._voices)

    def speak(self, utterance: Utterance) -> None:
        self._task = asyncio.get_running_loop().create_task(self._play(utterance))

    async def _play(self, utterance: Utterance) -> None:
        if not utterance.text:
            utterance.finish()
            return

        voice = utterance.voice.name if utterance.voice else base_language(utterance.lang)
        try:
            proc = await asyncio.create_subprocess_exec(
                self.binary,
                "-v", voice,
                "-s", str(int(175 * utterance.rate)),
                "-a", str(int(100 * utterance.volume)),
                utterance.text,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError:
            utterance.fail("synthesis-unavailable")
            return

        self._process = proc
        try:
            _, stderr = await proc.communicate()
        except asyncio.CancelledError:
            self._terminate(proc)
            utterance.fail("canceled")
            raise
        finally:
            if self._process is proc:
                self._process = None

        if proc.returncode == 0:
            utterance.finish()
        else:
            utterance.fail(stderr.decode(errors="replace").strip() or "synthesis-failed")

    def _terminate(self, proc: asyncio.subprocess.Process) -> None:
        if proc.returncode is not None:
            return
        try:
            proc.terminate()
        except ProcessLookupError:
            pass

    def cancel(self) -> None:
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()
        if self._process is not None:
            self._terminate(self._process)

    @property
    def speaking(self) -> bool:
        return self._task is not None and not self._task.done()


class SpeechSynthesizer:
    """Speaks translations, one utterance at a time.

    Every new utterance cancels the previous one (last segment wins). The
    synthesizer owns the active utterance until the engine reports it
    finished, failed or cancelled, so engines never lose it mid-playback.
    """

    def __init__(
        self,
        engine: SpeechSynthesisEngine | None,
        enabled: bool = True,
        rate: float = 1.0,
        volume: float = 1.0,
    ) -> None:
        self._engine = engine
        self._enabled = enabled
        self.rate = rate
        self.volume = volume
        self._current: Utterance | None = None
        self.logger = get_logger("speech_synthesizer")

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def current_utterance(self) -> Utterance | None:
        return self._current

    def set_enabled(self, enabled: bool) -> None:
        """Mute or unmute; muting stops current playback."""
        self._enabled = enabled
        if not enabled:
            self.stop()

    def warmup(self) -> None:
        """Speak a silent, empty utterance to unlock audio output.

        Call synchronously from the user interaction handler.
        """
        if self._engine is None:
            return
        self._engine.speak(Utterance(text="", volume=0.0))

    def speak(self, text: str, language_name: str) -> None:
        """Speak text in the given language, interrupting older speech."""
        if not self._enabled or not text:
            return
        if self._engine is None:
            self.logger.warning("tts_not_supported")
            return

        self._engine.cancel()

        lang_code = get_lang_code(language_name)
        utterance = Utterance(text=text, lang=lang_code, rate=self.rate, volume=self.volume)

        voice = self.select_voice(lang_code)
        if voice is not None:
            utterance.voice = voice
            self.logger.debug("tts_voice_selected", voice=voice.name, lang=voice.lang)
        else:
            self.logger.info("tts_default_voice", lang=lang_code)

        utterance.on_end = lambda: self._release(utterance)
        utterance.on_error = lambda error: self._handle_error(utterance, error)

        self._current = utterance
        self._engine.speak(utterance)

    def select_voice(self, lang_code: str) -> Voice | None:
        """Pick a voice by exact locale, then base language, else None (engine default)."""
        voices = self._engine.get_voices() if self._engine is not None else []

        wanted = lang_code.lower()
        for voice in voices:
            if voice.lang.lower() == wanted:
                return voice

        base = base_language(lang_code)
        for voice in voices:
            if voice.lang.lower().startswith(base):
                return voice

        return None

    def stop(self) -> None:
        """Cancel playback and drop the active utterance."""
        if self._engine is not None:
            self._engine.cancel()
        self._current = None

    async def close(self) -> None:
        """Stop playback and release engine resources."""
        self.stop()
        if self._engine is not None:
            await self._engine.teardown()

    def _release(self, utterance: Utterance) -> None:
        if self._current is utterance:
            self._current = None

    def _handle_error(self, utterance: Utterance, error: str) -> None:
        if error not in CANCEL_ERROR_CODES:
            self.logger.warning("tts_error", error=error, lang=utterance.lang)
        self._release(utterance)
