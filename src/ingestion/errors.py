"""Error taxonomy for the meeting ingestion pipeline.

Fatal errors abort the request and are rendered by the API as a JSON error
body. Non-fatal errors are raised and caught inside a single stage, logged,
and replaced by degraded output.
"""

from __future__ import annotations


class PipelineError(Exception):
    """Base class for all ingestion pipeline errors."""

    status_code: int = 500
    message: str = "Failed to process meeting"

    def __init__(self, details: str = "", message: str | None = None) -> None:
        super().__init__(details or message or self.message)
        self.details = details
        if message is not None:
            self.message = message


class UploadMissing(PipelineError):
    """The request carried no audio file."""

    status_code = 400
    message = "No audio file uploaded"


class UploadTooLarge(PipelineError):
    status_code = 413
    message = "Uploaded file is too large"


class TranscriptionFailure(PipelineError):
    """The speech-to-text call failed. Fatal."""

    message = "Failed to process meeting"


class MeetingCreateFailure(PipelineError):
    """The meetings insert failed or returned no row. Fatal."""

    message = "Failed to create meeting record"


class AnalysisParseFailure(PipelineError):
    """A language-model call failed or returned output of the wrong shape. Non-fatal."""


class DependentWriteFailure(PipelineError):
    """An insert into a table that references meetings failed. Non-fatal."""

    def __init__(self, table: str, details: str = "") -> None:
        super().__init__(details, message=f"Failed to write {table} rows")
        self.table = table
