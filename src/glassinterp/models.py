"""Data model of the simultaneous translation pipeline."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum

from pydantic import BaseModel, Field

# Interim hypotheses all carry this id so consumers replace the previous one
INTERIM_SEGMENT_ID = "interim_current"


class PipelineState(str, Enum):
    """Pipeline state enum."""

    IDLE = "idle"
    LISTENING = "listening"
    PROCESSING = "processing"
    PAUSED = "paused"
    ERROR = "error"


@dataclass
class TranscriptSegment:
    """Speech-to-text segment."""

    id: str
    text: str
    is_final: bool
    timestamp: float = field(default_factory=time.time)


@dataclass
class TranslationEvent:
    """Translation of one final transcript segment."""

    source_id: str
    text: str
    language: str


class SourceEntry(BaseModel):
    """Final source segment stored in a session record."""

    id: str
    text: str
    timestamp: float


class TranslatedEntry(BaseModel):
    """Translation stored in a session record, keyed by its source segment."""

    id: str
    text: str


class TranslationSession(BaseModel):
    """Recorded translation session.

    Built by the caller after the fact; the pipeline itself keeps no history.
    """

    id: str
    start_time: float
    end_time: float
    source_lang: str
    target_lang: str
    source_transcript: list[SourceEntry] = Field(default_factory=list)
    translated_transcript: list[TranslatedEntry] = Field(default_factory=list)
