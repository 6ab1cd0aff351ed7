"""Data models for summary and action-item extraction."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

from pydantic import BaseModel, field_validator

PRIORITIES = ("low", "medium", "high")
STATUSES = ("todo", "in_progress", "done")


class MeetingSummary(BaseModel):
    bullets: list[str] = []
    decisions: list[str] = []
    risks: list[str] = []
    follow_up_questions: list[str] = []


class Task(BaseModel):
    """An action item. ``due_date`` is free text; an empty string means unknown."""

    title: str
    description: str = ""
    owner: str = ""
    due_date: str = ""
    priority: Literal["low", "medium", "high"] = "medium"
    status: Literal["todo", "in_progress", "done"] = "todo"

    @field_validator("description", "owner", "due_date", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("priority", mode="before")
    @classmethod
    def _normalise_priority(cls, value: Any) -> str:
        value = value.strip().lower() if isinstance(value, str) else value
        return value if value in PRIORITIES else "medium"

    @field_validator("status", mode="before")
    @classmethod
    def _normalise_status(cls, value: Any) -> str:
        value = value.strip().lower().replace(" ", "_") if isinstance(value, str) else value
        return value if value in STATUSES else "todo"


class ExtractionOutput(BaseModel):
    """Envelope of the extraction tool input. Tasks are validated one by one."""

    summary: MeetingSummary
    tasks: list[Any] = []


@dataclass
class ExtractionResult:
    """Summary and tasks for one meeting; both empty after a degraded extraction."""

    summary: MeetingSummary = field(default_factory=MeetingSummary)
    tasks: list[Task] = field(default_factory=list)

    @classmethod
    def empty(cls) -> ExtractionResult:
        return cls()
