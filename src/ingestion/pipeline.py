"""End-to-end meeting pipeline: transcribe -> analyze tone -> extract -> store."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from supabase import Client

from src.analysis.models import SegmentEmotion, ToneAnalysis
from src.analysis.tone import analyze_overall_tone, analyze_segment_tone, build_segment_emotions
from src.extraction.extractor import extract_summary_and_tasks
from src.extraction.models import ExtractionResult
from src.ingestion.errors import DependentWriteFailure, MeetingCreateFailure, TranscriptionFailure
from src.ingestion.models import Transcription, UploadArtifact
from src.ingestion.storage import (
    get_supabase_client,
    store_meeting,
    store_segment_emotions,
    store_summary,
    store_tasks,
    store_transcript_segments,
)
from src.ingestion.transcription import transcribe_audio

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "Untitled Meeting"
DEFAULT_MEETING_TYPE = "generic"


@dataclass
class PipelineResult:
    """Everything produced for one meeting, including degraded stages."""

    meeting_id: str
    transcription: Transcription
    tone: ToneAnalysis
    segment_emotions: list[SegmentEmotion] = field(default_factory=list)
    extraction: ExtractionResult | None = None  # None when extraction was not requested
    failed_writes: list[str] = field(default_factory=list)


def process_meeting_audio(
    artifact: UploadArtifact,
    title: str | None = None,
    meeting_type: str | None = None,
    extract: bool = False,
    log: logging.Logger | None = None,
) -> PipelineResult:
    """Full pipeline for one uploaded recording.

    Stages run strictly in order. Transcription and the meetings insert are
    fatal (TranscriptionFailure, MeetingCreateFailure). Tone analysis,
    extraction, and every write after the meetings row degrade instead.

    Args:
        artifact: Uploaded audio on local disk. The caller owns its cleanup.
        title: Meeting title; defaults to ``"Untitled Meeting"``.
        meeting_type: Free-text meeting type; defaults to ``"generic"``.
        extract: If True, also extract a summary and tasks.
        log: Logger for stage events; defaults to this module's logger.

    Returns:
        A PipelineResult carrying the new meeting ID.
    """
    log = log or logger

    # 1. Transcribe
    try:
        transcription = transcribe_audio(artifact)
    except TranscriptionFailure:
        log.exception(
            "Transcription failed for %s", artifact.filename, extra={"stage": "transcription"}
        )
        raise
    log.info(
        "Transcribed %s: %d segments, %d words",
        artifact.filename,
        len(transcription.segments),
        len(transcription.words),
        extra={"stage": "transcription", "duration": transcription.duration},
    )

    # 2. Overall tone (skipped for an empty transcript)
    tone = analyze_overall_tone(transcription.text, log=log)

    # 3. Per-segment tone (skipped when there are no segments)
    labels = analyze_segment_tone(transcription.segments, log=log)
    segment_emotions = build_segment_emotions(transcription.segments, labels)

    # 4. Optional summary and tasks
    extraction = extract_summary_and_tasks(transcription.text, log=log) if extract else None

    # 5. Store: meetings row first, then dependents
    try:
        client = get_supabase_client()
        meeting_id = store_meeting(
            client,
            title or DEFAULT_TITLE,
            meeting_type or DEFAULT_MEETING_TYPE,
            transcription.rounded_duration,
            tone,
            transcription.text,
        )
    except MeetingCreateFailure:
        log.exception("Meeting insert failed", extra={"stage": "store_meeting"})
        raise
    except Exception as exc:
        log.exception("Supabase client unavailable", extra={"stage": "store_meeting"})
        raise MeetingCreateFailure(str(exc)) from exc
    log.info("Meeting created", extra={"stage": "store_meeting", "meeting_id": meeting_id})

    failed_writes = _store_dependents(
        client, meeting_id, transcription, segment_emotions, extraction, log
    )

    return PipelineResult(
        meeting_id=meeting_id,
        transcription=transcription,
        tone=tone,
        segment_emotions=segment_emotions,
        extraction=extraction,
        failed_writes=failed_writes,
    )


def _store_dependents(
    client: Client,
    meeting_id: str,
    transcription: Transcription,
    segment_emotions: list[SegmentEmotion],
    extraction: ExtractionResult | None,
    log: logging.Logger,
) -> list[str]:
    """Write every row that hangs off the meeting. Returns the tables whose write failed.

    Each write is independent; a failure is logged and the next write still runs.
    """
    writes = [
        lambda: store_transcript_segments(
            client, meeting_id, transcription.segments, segment_emotions
        ),
        lambda: store_segment_emotions(client, meeting_id, segment_emotions),
    ]
    if extraction is not None:
        writes.append(lambda: store_summary(client, meeting_id, extraction.summary))
        writes.append(lambda: store_tasks(client, meeting_id, extraction.tasks))

    failed: list[str] = []
    for write in writes:
        try:
            write()
        except DependentWriteFailure as exc:
            failed.append(exc.table)
            log.warning(
                "%s: %s",
                exc.message,
                exc.details,
                extra={"stage": "store_dependents", "meeting_id": meeting_id, "table": exc.table},
            )
    return failed
