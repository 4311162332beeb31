"""Glass Interpreter - simultaneous speech translation for AI glasses."""

__version__ = "0.1.0"
__author__ = "AI Glasses Team"

from glassinterp.config import Config, load_config
from glassinterp.models import PipelineState, TranscriptSegment, TranslationEvent
from glassinterp.pipeline import SimultaneousPipeline, create_pipeline

__all__ = [
    "Config",
    "load_config",
    "PipelineState",
    "TranscriptSegment",
    "TranslationEvent",
    "SimultaneousPipeline",
    "create_pipeline",
    "__version__",
]
