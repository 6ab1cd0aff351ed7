"""Data models for the ingestion pipeline."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from pathlib import Path


def round_half_up(value: float) -> int:
    """Round .5 up (30.5 -> 31); the builtin ``round`` would give 30."""
    return math.floor(value + 0.5)


@dataclass
class UploadArtifact:
    """An uploaded audio file held on local disk for the length of one request."""

    path: Path
    filename: str
    content_type: str

    def read_bytes(self) -> bytes:
        return self.path.read_bytes()


@dataclass(frozen=True)
class TranscriptSegment:
    """A time-bounded span of the transcript. ``index`` is the chronological position."""

    index: int
    start: float
    end: float
    text: str
    speaker: str | None = None


@dataclass(frozen=True)
class WordTiming:
    word: str
    start: float
    end: float


@dataclass
class Transcription:
    """Output of the speech-to-text stage."""

    text: str
    segments: list[TranscriptSegment] = field(default_factory=list)
    words: list[WordTiming] = field(default_factory=list)
    duration: float | None = None

    @property
    def rounded_duration(self) -> int:
        return round_half_up(self.duration) if self.duration else 0
