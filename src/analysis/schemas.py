"""Pydantic schemas that validate tone-analysis output from the language model."""

from __future__ import annotations

import math
from typing import Any, Literal

from pydantic import BaseModel, Field, StrictInt, field_validator

from src.analysis.models import (
    DEFAULT_SEGMENT_EMOTION,
    DEFAULT_SEGMENT_SCORE,
    EMOTIONS,
    ToneAnalysis,
)
from src.ingestion.models import round_half_up

Emotion = Literal["happy", "neutral", "stressed", "angry", "confident"]


def _clamp(value: float, low: float, high: float) -> float:
    return min(max(value, low), high)


class OverallToneOutput(BaseModel):
    """Whole-transcript tone as returned by the classifier."""

    overall_mood_score: float = Field(allow_inf_nan=False)
    dominant_emotion: Emotion
    emotion_breakdown: dict[str, float] = {}

    @field_validator("dominant_emotion", mode="before")
    @classmethod
    def _normalise_label(cls, value: Any) -> Any:
        return value.strip().lower() if isinstance(value, str) else value

    def to_analysis(self) -> ToneAnalysis:
        """Convert to the canonical 0-100 scale, filling missing emotions with 0."""
        breakdown: dict[str, float] = {}
        for emotion in EMOTIONS:
            weight = self.emotion_breakdown.get(emotion, 0.0)
            breakdown[emotion] = _clamp(weight, 0.0, 100.0) if math.isfinite(weight) else 0.0
        return ToneAnalysis(
            mood_score=round_half_up(_clamp(self.overall_mood_score, 0.0, 100.0)),
            dominant_emotion=self.dominant_emotion,
            emotion_breakdown=breakdown,
        )


class SegmentLabelOutput(BaseModel):
    """One per-segment classification. Bad labels and scores fall back to defaults."""

    index: StrictInt
    emotion: str = DEFAULT_SEGMENT_EMOTION
    score: float = DEFAULT_SEGMENT_SCORE

    @field_validator("emotion", mode="before")
    @classmethod
    def _default_emotion(cls, value: Any) -> str:
        if isinstance(value, str) and value.strip().lower() in EMOTIONS:
            return value.strip().lower()
        return DEFAULT_SEGMENT_EMOTION

    @field_validator("score", mode="before")
    @classmethod
    def _default_score(cls, value: Any) -> float:
        # bool is an int subclass but never a valid confidence
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return DEFAULT_SEGMENT_SCORE
        if not math.isfinite(value) or not 0.0 <= value <= 1.0:
            return DEFAULT_SEGMENT_SCORE
        return float(value)


class SegmentToneOutput(BaseModel):
    """Envelope of the per-segment response. Entries are validated one by one."""

    segments: list[Any]
