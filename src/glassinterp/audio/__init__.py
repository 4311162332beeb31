"""Microphone capture and audio level metering."""

from glassinterp.audio.capture import AudioCapture, MockAudioCapture, SoundDeviceAudioCapture
from glassinterp.audio.monitor import AudioLevelMonitor

__all__ = [
    "AudioCapture",
    "MockAudioCapture",
    "SoundDeviceAudioCapture",
    "AudioLevelMonitor",
]
