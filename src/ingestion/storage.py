"""Supabase storage helpers for meetings and their dependent rows.

The meetings row is written first and its id is the only join key for every
other table. Dependent writes are not transactional with it or with each
other: a failed write raises DependentWriteFailure and leaves earlier rows in
place.
"""

from __future__ import annotations

from typing import Any, cast

from supabase import Client, create_client
from supabase.lib.client_options import SyncClientOptions

from src.analysis.models import SegmentEmotion, ToneAnalysis
from src.config import settings
from src.extraction.models import MeetingSummary, Task
from src.ingestion.errors import DependentWriteFailure, MeetingCreateFailure
from src.ingestion.models import TranscriptSegment

MEETINGS_TABLE = "meetings"
TRANSCRIPTS_TABLE = "transcripts"
EMOTION_SEGMENTS_TABLE = "emotion_segments"
SUMMARIES_TABLE = "summaries"
TASKS_TABLE = "tasks"

BATCH_SIZE = 50
UNKNOWN_SPEAKER = "Unknown"


def get_supabase_client() -> Client:
    """Create a Supabase client whose PostgREST calls use the configured timeout."""
    return create_client(
        settings.supabase_url,
        settings.supabase_key,
        options=SyncClientOptions(postgrest_client_timeout=settings.supabase_timeout_seconds),
    )


def store_meeting(
    client: Client,
    title: str,
    meeting_type: str,
    duration: int,
    tone: ToneAnalysis,
    transcript: str,
) -> str:
    """Insert the meetings row and return its generated id.

    Raises:
        MeetingCreateFailure: the insert raised or returned no row.
    """
    try:
        result = (
            client.table(MEETINGS_TABLE)
            .insert(
                {
                    "title": title,
                    "meeting_type": meeting_type,
                    "duration": duration,
                    "mood_score": tone.mood_score,
                    "dominant_emotion": tone.dominant_emotion,
                    "emotion_breakdown": tone.emotion_breakdown,
                    "transcript": transcript,
                    "cloud_path": None,
                }
            )
            .execute()
        )
    except Exception as exc:
        raise MeetingCreateFailure(str(exc)) from exc

    rows = cast(list[dict[str, Any]], result.data or [])
    if not rows or rows[0].get("id") is None:
        raise MeetingCreateFailure("Insert returned no meeting row")
    return str(rows[0]["id"])


def transcript_rows(
    meeting_id: str,
    segments: list[TranscriptSegment],
    emotions: list[SegmentEmotion],
) -> list[dict[str, Any]]:
    """Build ``transcripts`` rows with each segment's emotion inline (null when absent)."""
    by_index = {e.segment_index: e for e in emotions}
    rows: list[dict[str, Any]] = []
    for seg in segments:
        emotion = by_index.get(seg.index)
        rows.append(
            {
                "meeting_id": meeting_id,
                "start_time": seg.start,
                "end_time": seg.end,
                "transcript_text": seg.text,
                "speaker": seg.speaker or UNKNOWN_SPEAKER,
                "emotion": emotion.emotion if emotion else None,
                "emotion_score": emotion.score if emotion else None,
            }
        )
    return rows


def emotion_segment_rows(meeting_id: str, emotions: list[SegmentEmotion]) -> list[dict[str, Any]]:
    return [
        {
            "meeting_id": meeting_id,
            "segment_index": e.segment_index,
            "start_time": e.start,
            "end_time": e.end,
            "emotion": e.emotion,
            "score": e.score,
        }
        for e in emotions
    ]


def task_rows(meeting_id: str, tasks: list[Task]) -> list[dict[str, Any]]:
    return [
        {
            "meeting_id": meeting_id,
            "title": t.title,
            "description": t.description,
            "owner": t.owner,
            "due_date": t.due_date,
            "priority": t.priority,
            "status": t.status,
        }
        for t in tasks
    ]


def _insert_batched(client: Client, table: str, rows: list[dict[str, Any]]) -> int:
    """Insert rows in batches of 50.

    Raises:
        DependentWriteFailure: any batch failed. Earlier batches stay written.
    """
    try:
        for i in range(0, len(rows), BATCH_SIZE):
            client.table(table).insert(rows[i : i + BATCH_SIZE]).execute()
    except Exception as exc:
        raise DependentWriteFailure(table, str(exc)) from exc
    return len(rows)


def store_transcript_segments(
    client: Client,
    meeting_id: str,
    segments: list[TranscriptSegment],
    emotions: list[SegmentEmotion],
) -> int:
    if not segments:
        return 0
    return _insert_batched(client, TRANSCRIPTS_TABLE, transcript_rows(meeting_id, segments, emotions))


def store_segment_emotions(client: Client, meeting_id: str, emotions: list[SegmentEmotion]) -> int:
    if not emotions:
        return 0
    return _insert_batched(client, EMOTION_SEGMENTS_TABLE, emotion_segment_rows(meeting_id, emotions))


def store_summary(client: Client, meeting_id: str, summary: MeetingSummary) -> None:
    try:
        client.table(SUMMARIES_TABLE).insert(
            {
                "meeting_id": meeting_id,
                "bullets": summary.bullets,
                "decisions": summary.decisions,
                "risks": summary.risks,
                "follow_up_questions": summary.follow_up_questions,
            }
        ).execute()
    except Exception as exc:
        raise DependentWriteFailure(SUMMARIES_TABLE, str(exc)) from exc


def store_tasks(client: Client, meeting_id: str, tasks: list[Task]) -> int:
    if not tasks:
        return 0
    return _insert_batched(client, TASKS_TABLE, task_rows(meeting_id, tasks))
