"""Shared fakes for Supabase and Claude so no test touches a live service."""

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace
from typing import Any

import pytest
from fastapi.testclient import TestClient

from src.api.main import app
from src.config import settings
from src.ingestion.models import Transcription, TranscriptSegment, WordTiming


class FakeTable:
    def __init__(self, db: FakeSupabase, name: str) -> None:
        self._db = db
        self._name = name
        self._pending: Any = None

    def insert(self, rows: Any) -> FakeTable:
        self._pending = rows
        return self

    def execute(self) -> SimpleNamespace:
        if self._name in self._db.fail_tables:
            raise RuntimeError(f"insert into {self._name} failed")
        rows = self._pending if isinstance(self._pending, list) else [self._pending]
        if self._name == "meetings":
            if self._db.meeting_returns_no_row:
                return SimpleNamespace(data=[])
            rows = [{**row, "id": f"meeting-{len(self._db.rows('meetings')) + 1}"} for row in rows]
        self._db.writes.append((self._name, rows))
        return SimpleNamespace(data=rows)


class FakeSupabase:
    """Records every insert in order as ``(table, rows)``."""

    def __init__(self, fail_tables: tuple[str, ...] = (), meeting_returns_no_row: bool = False):
        self.fail_tables = set(fail_tables)
        self.meeting_returns_no_row = meeting_returns_no_row
        self.writes: list[tuple[str, list[dict[str, Any]]]] = []

    def table(self, name: str) -> FakeTable:
        return FakeTable(self, name)

    def rows(self, table: str) -> list[dict[str, Any]]:
        return [row for name, rows in self.writes if name == table for row in rows]

    @property
    def tables_written(self) -> list[str]:
        return [name for name, _ in self.writes]


def tool_response(name: str, data: Any) -> SimpleNamespace:
    """A Claude response holding one tool_use block."""
    return SimpleNamespace(content=[SimpleNamespace(type="tool_use", name=name, input=data)])


class FakeAnthropic:
    """Answers each forced tool call from ``outputs`` keyed by tool name.

    A value that is an exception instance is raised instead.
    """

    def __init__(self, outputs: dict[str, Any]) -> None:
        self.outputs = outputs
        self.calls: list[dict[str, Any]] = []
        self.messages = SimpleNamespace(create=self._create)

    def _create(self, **kwargs: Any) -> SimpleNamespace:
        self.calls.append(kwargs)
        name = kwargs["tool_choice"]["name"]
        output = self.outputs[name]
        if isinstance(output, Exception):
            raise output
        return tool_response(name, output)

    def tools_called(self) -> list[str]:
        return [call["tool_choice"]["name"] for call in self.calls]


OVERALL_TONE = {
    "overall_mood_score": 78,
    "dominant_emotion": "confident",
    "emotion_breakdown": {"happy": 30, "neutral": 20, "stressed": 5, "angry": 0, "confident": 45},
}

SEGMENT_TONE = {
    "segments": [
        {"index": 0, "emotion": "happy", "score": 0.9},
        {"index": 1, "emotion": "confident", "score": 0.8},
    ]
}

EXTRACTION = {
    "summary": {
        "bullets": ["Team made great progress"],
        "decisions": ["Ship on Friday"],
        "risks": [],
        "follow_up_questions": ["Who owns the release notes?"],
    },
    "tasks": [
        {
            "title": "Write release notes",
            "description": "Draft notes for Friday's release",
            "owner": "Alice",
            "due_date": "Friday",
            "priority": "high",
            "status": "todo",
        }
    ],
}


def make_transcription(
    text: str = "Hello team, great progress this week",
    segments: int = 2,
) -> Transcription:
    return Transcription(
        text=text,
        segments=[
            TranscriptSegment(index=i, start=i * 15.0, end=(i + 1) * 15.0, text=f"Part {i}")
            for i in range(segments)
        ],
        words=[WordTiming(word="Hello", start=0.0, end=0.4)] if text else [],
        duration=30.2,
    )


@pytest.fixture(autouse=True)
def upload_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Keep uploaded temp files inside the test's tmp dir."""
    directory = tmp_path / "uploads"
    monkeypatch.setattr(settings, "upload_dir", str(directory))
    return directory


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


@pytest.fixture
def fake_supabase() -> FakeSupabase:
    return FakeSupabase()


@pytest.fixture
def fake_claude() -> FakeAnthropic:
    return FakeAnthropic(
        {
            "report_meeting_tone": OVERALL_TONE,
            "report_segment_emotions": SEGMENT_TONE,
            "store_meeting_minutes": EXTRACTION,
        }
    )
