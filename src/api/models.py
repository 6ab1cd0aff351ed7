"""Pydantic request/response schemas for the Meeting Minutes API.

JSON keys are camelCase; Python attributes stay snake_case.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from src.ingestion.pipeline import PipelineResult


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SegmentOut(CamelModel):
    start: float
    end: float
    text: str


class WordOut(CamelModel):
    word: str
    start: float
    end: float


class SegmentEmotionOut(CamelModel):
    segment_index: int
    start: float
    end: float
    emotion: str
    score: float


class EmotionOut(CamelModel):
    mood_score: int | None = None
    dominant_emotion: str | None = None
    emotion_breakdown: dict[str, float] | None = None
    segment_emotions: list[SegmentEmotionOut] = []


class SummaryOut(CamelModel):
    bullets: list[str] = []
    decisions: list[str] = []
    risks: list[str] = []
    follow_up_questions: list[str] = []


class TaskOut(CamelModel):
    title: str
    description: str = ""
    owner: str = ""
    due_date: str = ""
    priority: str = "medium"
    status: str = "todo"


class TranscribeResponse(CamelModel):
    """Response body for /api/transcribe.

    ``summary`` and ``tasks`` are only present when extraction ran; the route
    serialises with ``exclude_unset`` so they are omitted otherwise.
    """

    meeting_id: str
    transcript: str
    segments: list[SegmentOut]
    words: list[WordOut]
    emotion: EmotionOut
    summary: SummaryOut | None = None
    tasks: list[TaskOut] | None = None

    @classmethod
    def from_result(cls, result: PipelineResult) -> TranscribeResponse:
        transcription = result.transcription
        fields: dict[str, Any] = {
            "meeting_id": result.meeting_id,
            "transcript": transcription.text,
            "segments": [
                SegmentOut(start=s.start, end=s.end, text=s.text) for s in transcription.segments
            ],
            "words": [WordOut(word=w.word, start=w.start, end=w.end) for w in transcription.words],
            "emotion": EmotionOut(
                mood_score=result.tone.mood_score,
                dominant_emotion=result.tone.dominant_emotion,
                emotion_breakdown=result.tone.emotion_breakdown,
                segment_emotions=[
                    SegmentEmotionOut(
                        segment_index=e.segment_index,
                        start=e.start,
                        end=e.end,
                        emotion=e.emotion,
                        score=e.score,
                    )
                    for e in result.segment_emotions
                ],
            ),
        }
        if result.extraction is not None:
            summary = result.extraction.summary
            fields["summary"] = SummaryOut(
                bullets=summary.bullets,
                decisions=summary.decisions,
                risks=summary.risks,
                follow_up_questions=summary.follow_up_questions,
            )
            fields["tasks"] = [
                TaskOut(
                    title=t.title,
                    description=t.description,
                    owner=t.owner,
                    due_date=t.due_date,
                    priority=t.priority,
                    status=t.status,
                )
                for t in result.extraction.tasks
            ]
        return cls(**fields)


class MeetingListItem(CamelModel):
    """Summary representation of a meeting for list views."""

    id: str
    title: str
    meeting_type: str | None = None
    duration: int | None = None
    mood_score: int | None = None
    dominant_emotion: str | None = None
    created_at: str | None = None


class TranscriptRowOut(CamelModel):
    start_time: float | None = None
    end_time: float | None = None
    transcript_text: str
    speaker: str | None = None
    emotion: str | None = None
    emotion_score: float | None = None


class MeetingDetail(MeetingListItem):
    """Full meeting detail including transcript rows, emotions, summary, and tasks."""

    transcript: str | None = None
    emotion_breakdown: dict[str, float] | None = None
    transcripts: list[TranscriptRowOut] = []
    segment_emotions: list[SegmentEmotionOut] = []
    summary: SummaryOut | None = None
    tasks: list[TaskOut] = []
