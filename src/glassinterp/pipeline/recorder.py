"""Caller-side accumulation of a translation session."""

from __future__ import annotations

import time

from glassinterp.models import (
    INTERIM_SEGMENT_ID,
    SourceEntry,
    TranscriptSegment,
    TranslatedEntry,
    TranslationEvent,
    TranslationSession,
)


class SessionRecorder:
    """Buffers transcripts and translations the way a live caption view does.

    The latest interim segment replaces the previous one, final segments are
    kept in order, and translations are placed by ``source_id`` so that out
    of order completions land next to the right source line.
    """

    def __init__(self) -> None:
        self._segments: list[TranscriptSegment] = []
        self._translations: dict[str, str] = {}
        self._start_time: float | None = None

    def attach(self, pipeline) -> None:
        """Record everything a pipeline emits, keeping its existing callbacks."""
        previous_transcript = pipeline.on_source_transcript
        previous_translation = pipeline.on_translation

        def on_source_transcript(segment: TranscriptSegment) -> None:
            self.record_transcript(segment)
            if previous_transcript:
                previous_transcript(segment)

        def on_translation(event: TranslationEvent) -> None:
            self.record_translation(event)
            if previous_translation:
                previous_translation(event)

        pipeline.on_source_transcript = on_source_transcript
        pipeline.on_translation = on_translation

    def record_transcript(self, segment: TranscriptSegment) -> None:
        if self._start_time is None:
            self._start_time = segment.timestamp

        self._segments = [s for s in self._segments if s.id != INTERIM_SEGMENT_ID]
        self._segments.append(segment)

    def record_translation(self, event: TranslationEvent) -> None:
        self._translations[event.source_id] = event.text

    @property
    def segments(self) -> list[TranscriptSegment]:
        """All buffered segments, at most one interim at the end."""
        return list(self._segments)

    @property
    def final_segments(self) -> list[TranscriptSegment]:
        return [s for s in self._segments if s.is_final]

    @property
    def interim_text(self) -> str:
        if self._segments and not self._segments[-1].is_final:
            return self._segments[-1].text
        return ""

    def translation_for(self, source_id: str) -> str | None:
        return self._translations.get(source_id)

    def translations(self) -> list[tuple[str, str]]:
        """(source_id, text) pairs in source order."""
        return [
            (s.id, self._translations[s.id])
            for s in self.final_segments
            if s.id in self._translations
        ]

    def to_session(self, source_lang: str, target_lang: str) -> TranslationSession:
        """Export the buffers as a session record."""
        now = time.time()
        start_time = self._start_time or now
        return TranslationSession(
            id=str(int(start_time * 1000)),
            start_time=start_time,
            end_time=now,
            source_lang=source_lang,
            target_lang=target_lang,
            source_transcript=[
                SourceEntry(id=s.id, text=s.text, timestamp=s.timestamp)
                for s in self.final_segments
            ],
            translated_transcript=[
                TranslatedEntry(id=source_id, text=text)
                for source_id, text in self.translations()
            ],
        )

    def clear(self) -> None:
        self._segments = []
        self._translations = {}
        self._start_time = None
