"""Microphone capture backends."""

from __future__ import annotations

import numpy as np

from glassinterp.common import get_logger
from glassinterp.errors import MicrophonePermissionError


class AudioCapture:
    """Abstract microphone capture.

    ``open`` acquires the hardware, ``read_block`` returns the most recent
    block of mono float samples in [-1, 1] (or None when nothing is
    available yet) and ``close`` releases every track.
    """

    sample_rate: int = 16000

    async def open(self) -> None:
        """Open the microphone.

        Raises:
            MicrophonePermissionError: Access denied or no input device.
        """
        raise NotImplementedError

    def read_block(self) -> np.ndarray | None:
        """Return the latest captured block."""
        raise NotImplementedError

    def close(self) -> None:
        """Stop and release all tracks. Safe to call when not open."""
        raise NotImplementedError

    @property
    def active_tracks(self) -> int:
        """Number of hardware tracks currently held."""
        raise NotImplementedError


class MockAudioCapture(AudioCapture):
    """Mock capture producing a sine tone."""

    def __init__(
        self,
        sample_rate: int = 16000,
        channels: int = 1,
        blocksize: int = 512,
        amplitude: float = 0.2,
        frequency: float = 440.0,
        permission_denied: bool = False,
        device_available: bool = True,
    ) -> None:
        self.sample_rate = sample_rate
        self.channels = channels
        self.blocksize = blocksize
        self.amplitude = amplitude
        self.frequency = frequency
        self.permission_denied = permission_denied
        self.device_available = device_available
        self.open_count = 0
        self._tracks = 0
        self._offset = 0

    async def open(self) -> None:
        """Open mock microphone."""
        if self.permission_denied:
            raise MicrophonePermissionError("Microphone access denied")
        if not self.device_available:
            raise MicrophonePermissionError("No audio input device found")

        self.open_count += 1
        self._tracks = self.channels
        self._offset = 0

    def read_block(self) -> np.ndarray | None:
        """Generate the next block of the tone."""
        if not self._tracks:
            return None

        t = (np.arange(self.blocksize) + self._offset) / self.sample_rate
        self._offset += self.blocksize
        return (self.amplitude * np.sin(2 * np.pi * self.frequency * t)).astype(np.float32)

    def close(self) -> None:
        """Release mock tracks."""
        self._tracks = 0

    @property
    def active_tracks(self) -> int:
        return self._tracks


class SoundDeviceAudioCapture(AudioCapture):
    """Microphone capture via PortAudio (sounddevice)."""

    def __init__(
        self,
        sample_rate: int = 16000,
        channels: int = 1,
        blocksize: int = 512,
        device: str | None = None,
    ) -> None:
        self.sample_rate = sample_rate
        self.channels = channels
        self.blocksize = blocksize
        self.device = device
        self._stream = None
        self._latest: np.ndarray | None = None
        self.logger = get_logger("sounddevice_capture")

    async def open(self) -> None:
        """Open the PortAudio input stream."""
        if self._stream is not None:
            return

        try:
            import sounddevice as sd
        except ImportError:
            self.logger.error("sounddevice_not_available")
            raise RuntimeError("sounddevice is not installed")

        try:
            sd.query_devices(self.device, kind="input")
        except (ValueError, sd.PortAudioError) as e:
            raise MicrophonePermissionError("No audio input device found") from e

        try:
            stream = sd.InputStream(
                samplerate=self.sample_rate,
                channels=self.channels,
                dtype="float32",
                blocksize=self.blocksize,
                device=self.device,
                callback=self._callback,
            )
            stream.start()
        except sd.PortAudioError as e:
            raise MicrophonePermissionError(f"Unable to open microphone: {e}") from e

        self._stream = stream
        self.logger.info("microphone_opened", sample_rate=self.sample_rate, device=self.device)

    def _callback(self, indata, frames, time_info, status) -> None:
        # Runs on the PortAudio thread; only the latest block is kept
        if status:
            self.logger.debug("capture_status", status=str(status))
        self._latest = indata.mean(axis=1).copy()

    def read_block(self) -> np.ndarray | None:
        return self._latest

    def close(self) -> None:
        """Stop and close the input stream."""
        stream, self._stream = self._stream, None
        self._latest = None
        if stream is None:
            return

        try:
            stream.stop()
            stream.close()
        except Exception as e:
            self.logger.warning("microphone_close_failed", error=str(e))
        else:
            self.logger.info("microphone_closed")

    @property
    def active_tracks(self) -> int:
        return self.channels if self._stream is not None else 0
