"""Simultaneous translation pipeline orchestration."""

from glassinterp.pipeline.factory import create_pipeline, create_translation_provider
from glassinterp.pipeline.pipeline import SimultaneousPipeline
from glassinterp.pipeline.recorder import SessionRecorder

__all__ = [
    "SimultaneousPipeline",
    "SessionRecorder",
    "create_pipeline",
    "create_translation_provider",
]
