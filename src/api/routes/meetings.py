"""Meeting endpoints: list and detail views."""

from __future__ import annotations

from typing import Any, cast

from fastapi import APIRouter, HTTPException

from src.api.models import (
    MeetingDetail,
    MeetingListItem,
    SegmentEmotionOut,
    SummaryOut,
    TaskOut,
    TranscriptRowOut,
)
from src.ingestion.storage import (
    EMOTION_SEGMENTS_TABLE,
    MEETINGS_TABLE,
    SUMMARIES_TABLE,
    TASKS_TABLE,
    TRANSCRIPTS_TABLE,
    get_supabase_client,
)

router = APIRouter()


def _rows(result: Any) -> list[dict[str, Any]]:
    # Supabase .data is typed as JSON (broad union); cast to concrete type.
    return cast(list[dict[str, Any]], result.data or [])


@router.get("/api/meetings", response_model=list[MeetingListItem])
async def list_meetings() -> list[MeetingListItem]:
    """List all meetings ordered by creation date (newest first)."""
    client = get_supabase_client()
    result = client.table(MEETINGS_TABLE).select("*").order("created_at", desc=True).execute()

    return [
        MeetingListItem(
            id=str(m["id"]),
            title=m["title"],
            meeting_type=m.get("meeting_type"),
            duration=m.get("duration"),
            mood_score=m.get("mood_score"),
            dominant_emotion=m.get("dominant_emotion"),
            created_at=m.get("created_at"),
        )
        for m in _rows(result)
    ]


@router.get("/api/meetings/{meeting_id}", response_model=MeetingDetail)
async def get_meeting(meeting_id: str) -> MeetingDetail:
    """Get a meeting with its transcript rows, segment emotions, summary, and tasks."""
    client = get_supabase_client()
    meetings = _rows(client.table(MEETINGS_TABLE).select("*").eq("id", meeting_id).execute())
    if not meetings:
        raise HTTPException(status_code=404, detail="Meeting not found")

    m = meetings[0]

    transcripts = _rows(
        client.table(TRANSCRIPTS_TABLE)
        .select("*")
        .eq("meeting_id", meeting_id)
        .order("start_time")
        .execute()
    )
    emotions = _rows(
        client.table(EMOTION_SEGMENTS_TABLE)
        .select("*")
        .eq("meeting_id", meeting_id)
        .order("segment_index")
        .execute()
    )
    summaries = _rows(
        client.table(SUMMARIES_TABLE).select("*").eq("meeting_id", meeting_id).execute()
    )
    tasks = _rows(client.table(TASKS_TABLE).select("*").eq("meeting_id", meeting_id).execute())

    summary = summaries[0] if summaries else None

    return MeetingDetail(
        id=str(m["id"]),
        title=m["title"],
        meeting_type=m.get("meeting_type"),
        duration=m.get("duration"),
        mood_score=m.get("mood_score"),
        dominant_emotion=m.get("dominant_emotion"),
        created_at=m.get("created_at"),
        transcript=m.get("transcript"),
        emotion_breakdown=m.get("emotion_breakdown"),
        transcripts=[
            TranscriptRowOut(
                start_time=t.get("start_time"),
                end_time=t.get("end_time"),
                transcript_text=t.get("transcript_text") or "",
                speaker=t.get("speaker"),
                emotion=t.get("emotion"),
                emotion_score=t.get("emotion_score"),
            )
            for t in transcripts
        ],
        segment_emotions=[
            SegmentEmotionOut(
                segment_index=e["segment_index"],
                start=e.get("start_time") or 0.0,
                end=e.get("end_time") or 0.0,
                emotion=e["emotion"],
                score=e["score"],
            )
            for e in emotions
        ],
        summary=(
            SummaryOut(
                bullets=summary.get("bullets") or [],
                decisions=summary.get("decisions") or [],
                risks=summary.get("risks") or [],
                follow_up_questions=summary.get("follow_up_questions") or [],
            )
            if summary
            else None
        ),
        tasks=[
            TaskOut(
                title=t["title"],
                description=t.get("description") or "",
                owner=t.get("owner") or "",
                due_date=t.get("due_date") or "",
                priority=t.get("priority") or "medium",
                status=t.get("status") or "todo",
            )
            for t in tasks
        ],
    )
