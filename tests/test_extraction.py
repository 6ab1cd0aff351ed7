"""Tests for summary and action-item extraction (no external APIs required)."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

from conftest import EXTRACTION, FakeAnthropic, tool_response

from src.extraction.extractor import EXTRACTION_TOOL, extract_summary_and_tasks
from src.extraction.models import ExtractionResult, Task


class TestExtractSummaryAndTasks:
    def test_valid_response(self) -> None:
        claude = FakeAnthropic({"store_meeting_minutes": EXTRACTION})
        result = extract_summary_and_tasks("Alice: Let's ship it by Friday.", client=claude)

        assert result.summary.bullets == ["Team made great progress"]
        assert result.summary.follow_up_questions == ["Who owns the release notes?"]
        assert len(result.tasks) == 1
        task = result.tasks[0]
        assert task.title == "Write release notes"
        assert task.owner == "Alice"
        assert task.priority == "high"

    @patch("src.extraction.extractor.get_anthropic_client")
    def test_calls_claude_with_tool_use(self, mock_get_client: MagicMock) -> None:
        """Claude is called with the extraction tool forced via tool_choice."""
        mock_client = MagicMock()
        mock_get_client.return_value = mock_client
        mock_client.messages.create.return_value = tool_response(
            "store_meeting_minutes", EXTRACTION
        )

        result = extract_summary_and_tasks("Alice: Let's ship it by Friday.")

        mock_client.messages.create.assert_called_once()
        call_kwargs = mock_client.messages.create.call_args.kwargs
        assert call_kwargs["tools"] == [EXTRACTION_TOOL]
        assert call_kwargs["tool_choice"] == {"type": "tool", "name": "store_meeting_minutes"}
        assert isinstance(result, ExtractionResult)

    def test_empty_transcript_makes_no_call(self) -> None:
        claude = MagicMock()
        result = extract_summary_and_tasks("", client=claude)

        assert result == ExtractionResult.empty()
        claude.messages.create.assert_not_called()

    def test_malformed_output_degrades_to_empty(self) -> None:
        claude = FakeAnthropic({"store_meeting_minutes": {"summary": "not an object"}})
        result = extract_summary_and_tasks("Some transcript", client=claude)

        assert result.summary.bullets == []
        assert result.summary.decisions == []
        assert result.summary.risks == []
        assert result.summary.follow_up_questions == []
        assert result.tasks == []

    def test_malformed_task_dropped_without_losing_the_rest(self) -> None:
        claude = FakeAnthropic(
            {
                "store_meeting_minutes": {
                    "summary": {"bullets": ["ok"]},
                    "tasks": [{"title": "A", "owner": 5}, {"title": "B"}, "not a task"],
                }
            }
        )
        result = extract_summary_and_tasks("Some transcript", client=claude)

        assert result.summary.bullets == ["ok"]
        assert [t.title for t in result.tasks] == ["B"]

    def test_call_failure_degrades_to_empty(self) -> None:
        claude = FakeAnthropic({"store_meeting_minutes": RuntimeError("overloaded")})
        assert extract_summary_and_tasks("Some transcript", client=claude) == ExtractionResult.empty()


class TestTaskNormalisation:
    def test_out_of_enum_values_fall_back(self) -> None:
        task = Task.model_validate({"title": "Fix CI", "priority": "urgent", "status": "blocked"})
        assert task.priority == "medium"
        assert task.status == "todo"

    def test_status_spelling_normalised(self) -> None:
        task = Task.model_validate({"title": "Fix CI", "priority": "HIGH", "status": "In Progress"})
        assert task.priority == "high"
        assert task.status == "in_progress"

    def test_null_fields_become_empty_strings(self) -> None:
        task = Task.model_validate({"title": "Fix CI", "owner": None, "due_date": None})
        assert task.owner == ""
        assert task.due_date == ""
        assert task.description == ""
