"""Rolling microphone loudness for level meter widgets."""

from __future__ import annotations

import asyncio

import numpy as np

from glassinterp.audio.capture import AudioCapture
from glassinterp.common import ListenerRegistry, Unsubscribe, get_logger


class AudioLevelMonitor:
    """Polls the microphone at animation-frame cadence and emits a level in [0, 100].

    The level mirrors a browser analyser node: the magnitude spectrum of a
    short FFT window is mapped from decibels onto a byte scale, averaged over
    the bins and amplified with head-room.
    """

    def __init__(
        self,
        capture: AudioCapture,
        fft_size: int = 32,
        frame_rate_hz: float = 60.0,
        gain: float = 2.0,
        min_decibels: float = -100.0,
        max_decibels: float = -30.0,
    ) -> None:
        self._capture = capture
        self.fft_size = fft_size
        self.frame_rate_hz = frame_rate_hz
        self.gain = gain
        self.min_decibels = min_decibels
        self.max_decibels = max_decibels
        self._window = np.blackman(fft_size)
        self._listeners: ListenerRegistry[float] = ListenerRegistry("audio_level")
        self._task: asyncio.Task | None = None
        self._opening: asyncio.Future | None = None
        self._cancel_open = False
        self.logger = get_logger("audio_level_monitor")

    @property
    def running(self) -> bool:
        return self._task is not None

    @property
    def capture(self) -> AudioCapture:
        return self._capture

    def subscribe(self, callback) -> Unsubscribe:
        """Subscribe to level updates."""
        return self._listeners.subscribe(callback)

    async def start(self) -> None:
        """Open the microphone and begin polling.

        Raises:
            MicrophonePermissionError: Access denied or no input device.
        """
        if self._task is not None:
            return
        if self._opening is not None:
            # Concurrent callers share the pending open and its outcome
            self._cancel_open = False
            await asyncio.shield(self._opening)
            return

        self._cancel_open = False
        self._opening = asyncio.ensure_future(self._capture.open())
        try:
            await self._opening
        finally:
            self._opening = None

        if self._cancel_open:
            self._capture.close()
            self.logger.debug("monitor_start_cancelled")
            return

        self._task = asyncio.create_task(self._poll_loop())
        self.logger.debug("monitor_started", frame_rate_hz=self.frame_rate_hz)

    def stop(self) -> None:
        """Stop polling, release the microphone and reset meters to zero.

        Idempotent and never raises.
        """
        if self._opening is not None:
            self._cancel_open = True

        task, self._task = self._task, None
        if task is not None:
            task.cancel()

        try:
            self._capture.close()
        except Exception as e:
            self.logger.warning("capture_close_failed", error=str(e))

        self._listeners.emit(0.0)

    async def _poll_loop(self) -> None:
        interval = 1.0 / self.frame_rate_hz
        while True:
            block = self._capture.read_block()
            if block is not None:
                self._listeners.emit(self.compute_level(block))
            await asyncio.sleep(interval)

    def compute_level(self, block: np.ndarray) -> float:
        """Compute the meter level of one block of samples."""
        samples = np.asarray(block, dtype=np.float64).ravel()
        if samples.size < self.fft_size:
            samples = np.concatenate([np.zeros(self.fft_size - samples.size), samples])

        frame = samples[-self.fft_size:] * self._window
        magnitudes = np.abs(np.fft.rfft(frame))[: self.fft_size // 2] / self.fft_size

        with np.errstate(divide="ignore"):
            decibels = 20 * np.log10(magnitudes)

        span = self.max_decibels - self.min_decibels
        byte_values = np.clip((decibels - self.min_decibels) / span * 255.0, 0.0, 255.0)
        average = float(byte_values.mean())

        return min(100.0, average / 255.0 * 100.0 * self.gain)
