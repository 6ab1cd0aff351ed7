"""Data models for tone analysis results."""

from __future__ import annotations

from dataclasses import dataclass

EMOTIONS: tuple[str, ...] = ("happy", "neutral", "stressed", "angry", "confident")

DEFAULT_SEGMENT_EMOTION = "neutral"
DEFAULT_SEGMENT_SCORE = 0.5


@dataclass
class ToneAnalysis:
    """Overall tone of a meeting. All fields are None when the analysis did not run or failed."""

    mood_score: int | None = None  # 0-100
    dominant_emotion: str | None = None
    emotion_breakdown: dict[str, float] | None = None

    @classmethod
    def empty(cls) -> ToneAnalysis:
        return cls()

    @property
    def is_empty(self) -> bool:
        return self.mood_score is None and self.dominant_emotion is None


@dataclass(frozen=True)
class SegmentLabel:
    """A validated per-segment classification, before it is joined to its segment."""

    emotion: str
    score: float


@dataclass(frozen=True)
class SegmentEmotion:
    segment_index: int
    start: float
    end: float
    emotion: str
    score: float  # always within [0, 1]
