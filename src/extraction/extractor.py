"""Claude-powered structured extraction of a meeting summary and action items."""

from __future__ import annotations

import logging
from typing import Any

from anthropic import Anthropic
from pydantic import ValidationError

from src.analysis.llm import call_tool, get_anthropic_client
from src.config import settings
from src.extraction.models import PRIORITIES, STATUSES, ExtractionOutput, ExtractionResult, Task
from src.ingestion.errors import AnalysisParseFailure

logger = logging.getLogger(__name__)

_STRING_LIST: dict[str, Any] = {"type": "array", "items": {"type": "string"}}

# Tool definition for Claude structured output
EXTRACTION_TOOL: dict[str, Any] = {
    "name": "store_meeting_minutes",
    "description": (
        "Store the summary and action items extracted from a meeting transcript. "
        "Call this once with everything extracted."
    ),
    "input_schema": {
        "type": "object",
        "properties": {
            "summary": {
                "type": "object",
                "properties": {
                    "bullets": {**_STRING_LIST, "description": "Key points, one per bullet."},
                    "decisions": {**_STRING_LIST, "description": "Decisions that were made."},
                    "risks": {**_STRING_LIST, "description": "Risks or blockers raised."},
                    "follow_up_questions": {
                        **_STRING_LIST,
                        "description": "Open questions to follow up on.",
                    },
                },
                "required": ["bullets", "decisions", "risks", "follow_up_questions"],
            },
            "tasks": {
                "type": "array",
                "description": "Action items: tasks someone needs to do.",
                "items": {
                    "type": "object",
                    "properties": {
                        "title": {"type": "string", "description": "Short task title."},
                        "description": {"type": "string"},
                        "owner": {
                            "type": "string",
                            "description": "Person responsible (empty if unassigned).",
                        },
                        "due_date": {
                            "type": "string",
                            "description": "Deadline if mentioned, otherwise an empty string.",
                        },
                        "priority": {"type": "string", "enum": list(PRIORITIES)},
                        "status": {"type": "string", "enum": list(STATUSES)},
                    },
                    "required": ["title", "description", "owner", "due_date", "priority", "status"],
                },
            },
        },
        "required": ["summary", "tasks"],
    },
}

SYSTEM_PROMPT = (
    "You are a meeting minutes assistant. Extract structured information "
    "from the meeting transcript provided.\n\n"
    "Extract:\n"
    "1. **Summary**: key bullets, decisions, risks, and follow-up questions.\n"
    "2. **Tasks**: action items with owner, due date, priority (low/medium/high) "
    "and status (todo/in_progress/done). Leave owner or due_date empty when "
    "the transcript does not say.\n\n"
    "Use the store_meeting_minutes tool to return your results. "
    "Only extract items clearly supported by the transcript."
)


def request_extraction(transcript: str, client: Anthropic) -> ExtractionResult:
    """Extract a summary and tasks from a transcript.

    Raises:
        AnalysisParseFailure: the tool input does not match the expected shape.
    """
    data = call_tool(
        client,
        model=settings.llm_model,
        system=SYSTEM_PROMPT,
        prompt=f"Extract the summary and action items from this meeting transcript:\n\n{transcript}",
        tool=EXTRACTION_TOOL,
        temperature=0.2,
    )
    try:
        output = ExtractionOutput.model_validate(data)
    except ValidationError as exc:
        raise AnalysisParseFailure(f"Extraction output invalid: {exc}") from exc
    return ExtractionResult(summary=output.summary, tasks=parse_tasks(output.tasks))


def parse_tasks(entries: list[Any]) -> list[Task]:
    """Validate tasks individually; malformed entries are dropped."""
    tasks: list[Task] = []
    for entry in entries:
        try:
            tasks.append(Task.model_validate(entry))
        except ValidationError:
            continue
    return tasks


def extract_summary_and_tasks(
    transcript: str,
    client: Anthropic | None = None,
    log: logging.Logger | None = None,
) -> ExtractionResult:
    """Summary and tasks for a transcript, or an empty result on any failure."""
    log = log or logger
    if not transcript.strip():
        return ExtractionResult.empty()

    try:
        result = request_extraction(transcript, client or get_anthropic_client())
    except Exception as exc:
        log.warning(
            "Summary extraction degraded: %s",
            exc,
            extra={"stage": "extraction", "error_type": type(exc).__name__},
        )
        return ExtractionResult.empty()

    log.info("Extracted %d tasks", len(result.tasks), extra={"stage": "extraction"})
    return result
