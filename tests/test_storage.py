"""Tests for Supabase storage helpers and temporary upload handling."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from conftest import FakeSupabase

from src.analysis.models import SegmentEmotion, ToneAnalysis
from src.config import settings
from src.extraction.models import MeetingSummary, Task
from src.ingestion.errors import DependentWriteFailure, MeetingCreateFailure
from src.ingestion.models import TranscriptSegment
from src.ingestion.storage import (
    BATCH_SIZE,
    emotion_segment_rows,
    get_supabase_client,
    store_meeting,
    store_segment_emotions,
    store_summary,
    store_tasks,
    store_transcript_segments,
    transcript_rows,
)
from src.ingestion.tempstore import temporary_upload

TONE = ToneAnalysis(mood_score=60, dominant_emotion="neutral", emotion_breakdown={"neutral": 100.0})


class TestSupabaseClient:
    @patch("src.ingestion.storage.create_client")
    def test_postgrest_timeout_from_settings(self, mock_create: MagicMock) -> None:
        get_supabase_client()

        options = mock_create.call_args.kwargs["options"]
        assert options.postgrest_client_timeout == settings.supabase_timeout_seconds


class TestStoreMeeting:
    def test_returns_generated_id(self) -> None:
        db = FakeSupabase()
        meeting_id = store_meeting(db, "Sync", "generic", 30, TONE, "Hello")  # type: ignore[arg-type]

        assert meeting_id == "meeting-1"
        row = db.rows("meetings")[0]
        assert row["mood_score"] == 60
        assert row["emotion_breakdown"] == {"neutral": 100.0}

    def test_insert_error_raises(self) -> None:
        db = FakeSupabase(fail_tables=("meetings",))
        with pytest.raises(MeetingCreateFailure):
            store_meeting(db, "Sync", "generic", 30, TONE, "Hello")  # type: ignore[arg-type]

    def test_no_row_raises(self) -> None:
        db = FakeSupabase(meeting_returns_no_row=True)
        with pytest.raises(MeetingCreateFailure, match="no meeting row"):
            store_meeting(db, "Sync", "generic", 30, ToneAnalysis.empty(), "")  # type: ignore[arg-type]


class TestDependentRows:
    def test_transcript_rows_null_emotion_when_unmatched(self) -> None:
        segments = [
            TranscriptSegment(index=0, start=0.0, end=1.0, text="a", speaker="Speaker A"),
            TranscriptSegment(index=1, start=1.0, end=2.0, text="b"),
        ]
        emotions = [SegmentEmotion(0, 0.0, 1.0, "happy", 0.7)]
        rows = transcript_rows("m1", segments, emotions)

        assert rows[0]["speaker"] == "Speaker A"
        assert rows[0]["emotion_score"] == 0.7
        assert rows[1]["speaker"] == "Unknown"
        assert rows[1]["emotion"] is None
        assert rows[1]["emotion_score"] is None

    def test_emotion_segment_rows(self) -> None:
        rows = emotion_segment_rows("m1", [SegmentEmotion(3, 9.0, 12.0, "stressed", 0.4)])
        assert rows == [
            {
                "meeting_id": "m1",
                "segment_index": 3,
                "start_time": 9.0,
                "end_time": 12.0,
                "emotion": "stressed",
                "score": 0.4,
            }
        ]

    def test_large_inserts_are_batched(self) -> None:
        db = FakeSupabase()
        segments = [
            TranscriptSegment(index=i, start=float(i), end=float(i + 1), text="x")
            for i in range(BATCH_SIZE + 5)
        ]
        count = store_transcript_segments(db, "m1", segments, [])  # type: ignore[arg-type]

        assert count == BATCH_SIZE + 5
        assert [len(rows) for _, rows in db.writes] == [BATCH_SIZE, 5]

    def test_empty_inputs_write_nothing(self) -> None:
        db = FakeSupabase()
        assert store_transcript_segments(db, "m1", [], []) == 0  # type: ignore[arg-type]
        assert store_segment_emotions(db, "m1", []) == 0  # type: ignore[arg-type]
        assert store_tasks(db, "m1", []) == 0  # type: ignore[arg-type]
        assert db.writes == []

    def test_write_failure_names_table(self) -> None:
        db = FakeSupabase(fail_tables=("tasks",))
        with pytest.raises(DependentWriteFailure) as exc_info:
            store_tasks(db, "m1", [Task(title="Fix CI")])  # type: ignore[arg-type]
        assert exc_info.value.table == "tasks"

    def test_summary_row(self) -> None:
        db = FakeSupabase()
        store_summary(db, "m1", MeetingSummary(bullets=["b"], risks=["r"]))  # type: ignore[arg-type]
        assert db.rows("summaries") == [
            {
                "meeting_id": "m1",
                "bullets": ["b"],
                "decisions": [],
                "risks": ["r"],
                "follow_up_questions": [],
            }
        ]


class TestTemporaryUpload:
    def test_file_exists_inside_block_and_removed_after(self, tmp_path: Path) -> None:
        with temporary_upload(b"audio", "call.m4a", "audio/mp4", tmp_path) as artifact:
            assert artifact.path.exists()
            assert artifact.path.suffix == ".m4a"
            assert artifact.read_bytes() == b"audio"
        assert not artifact.path.exists()

    def test_removed_when_block_raises(self, tmp_path: Path) -> None:
        with pytest.raises(RuntimeError):
            with temporary_upload(b"audio", "call.mp3", "audio/mpeg", tmp_path) as artifact:
                raise RuntimeError("pipeline failed")
        assert not artifact.path.exists()

    def test_each_upload_gets_distinct_path(self, tmp_path: Path) -> None:
        with (
            temporary_upload(b"a", "same.mp3", "audio/mpeg", tmp_path) as first,
            temporary_upload(b"b", "same.mp3", "audio/mpeg", tmp_path) as second,
        ):
            assert first.path != second.path

    def test_creates_missing_directory(self, tmp_path: Path) -> None:
        target = tmp_path / "nested" / "uploads"
        with temporary_upload(b"a", "x.wav", "audio/wav", target) as artifact:
            assert artifact.path.parent == target

    def test_unsafe_suffix_dropped(self, tmp_path: Path) -> None:
        with temporary_upload(b"a", "recording.mp3;rm", "audio/mpeg", tmp_path) as artifact:
            assert artifact.path.suffix == ""
