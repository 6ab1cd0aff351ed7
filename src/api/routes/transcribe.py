"""Transcribe endpoint: upload a meeting recording and run the full pipeline."""

from __future__ import annotations

import asyncio
import logging
from typing import Annotated

from fastapi import APIRouter, File, Form, UploadFile

from src.api.models import TranscribeResponse
from src.config import settings
from src.ingestion.errors import PipelineError, UploadMissing, UploadTooLarge
from src.ingestion.pipeline import process_meeting_audio
from src.ingestion.tempstore import temporary_upload

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/api/transcribe",
    response_model=TranscribeResponse,
    response_model_exclude_unset=True,
)
async def transcribe(
    audio: Annotated[UploadFile | None, File()] = None,
    title: Annotated[str | None, Form()] = None,
    meeting_type: Annotated[str | None, Form()] = None,
    extract: Annotated[bool | None, Form()] = None,
) -> TranscribeResponse:
    """Upload a meeting recording, transcribe it, analyze its tone, and store it.

    ``extract`` turns summary/task extraction on or off for this request; it
    defaults to the ``EXTRACT_SUMMARY`` setting.

    The upload is held in a temporary file that is deleted before the
    response is sent, whether the pipeline succeeded or not.
    """
    if audio is None:
        raise UploadMissing()

    raw = await audio.read()
    max_bytes = settings.max_upload_mb * 1024 * 1024
    if len(raw) > max_bytes:
        raise UploadTooLarge(f"Maximum size is {settings.max_upload_mb} MB.")

    filename = audio.filename or "audio"
    content_type = audio.content_type or "application/octet-stream"
    run_extraction = settings.extract_summary if extract is None else extract

    with temporary_upload(raw, filename, content_type, settings.upload_dir) as artifact:
        try:
            # Synchronous SDKs: run in a thread so the event loop is not blocked.
            result = await asyncio.to_thread(
                process_meeting_audio,
                artifact,
                title,
                meeting_type,
                run_extraction,
            )
        except PipelineError:
            raise
        except Exception as exc:
            logger.exception("Transcription pipeline error")
            raise PipelineError(str(exc)) from exc

    if result.failed_writes:
        logger.warning(
            "Meeting %s stored with partial data",
            result.meeting_id,
            extra={"meeting_id": result.meeting_id, "failed_tables": result.failed_writes},
        )
    return TranscribeResponse.from_result(result)
