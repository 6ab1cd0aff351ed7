"""Speech-to-text: turn an uploaded audio file into text, segments, and word timings."""

from __future__ import annotations

from typing import Any

from openai import OpenAI

from src.config import settings
from src.ingestion.errors import TranscriptionFailure
from src.ingestion.models import Transcription, TranscriptSegment, UploadArtifact, WordTiming

PROVIDERS = ("openai", "assemblyai")


def _get(obj: Any, name: str, default: Any = None) -> Any:
    """Read a field from an SDK object or a plain dict (OpenAI-compatible hosts vary)."""
    if isinstance(obj, dict):
        return obj.get(name, default)
    return getattr(obj, name, default)


def _ordered_segments(segments: list[TranscriptSegment]) -> list[TranscriptSegment]:
    """Sort by start time and renumber from zero so index order is chronological."""
    ordered = sorted(segments, key=lambda s: (s.start, s.end))
    return [
        TranscriptSegment(index=i, start=s.start, end=s.end, text=s.text, speaker=s.speaker)
        for i, s in enumerate(ordered)
    ]


def parse_verbose_json(response: Any) -> Transcription:
    """Convert a Whisper ``verbose_json`` response into a Transcription."""
    segments = [
        TranscriptSegment(
            index=i,
            start=float(_get(seg, "start", 0.0)),
            end=float(_get(seg, "end", 0.0)),
            text=(_get(seg, "text") or "").strip(),
        )
        for i, seg in enumerate(_get(response, "segments") or [])
    ]
    words = [
        WordTiming(
            word=(_get(w, "word") or "").strip(),
            start=float(_get(w, "start", 0.0)),
            end=float(_get(w, "end", 0.0)),
        )
        for w in _get(response, "words") or []
    ]
    duration = _get(response, "duration")
    return Transcription(
        text=(_get(response, "text") or "").strip(),
        segments=_ordered_segments(segments),
        words=words,
        duration=float(duration) if duration is not None else None,
    )


def _transcribe_openai(artifact: UploadArtifact) -> Transcription:
    """Transcribe via an OpenAI-compatible Whisper endpoint.

    Temperature 0 keeps decoding deterministic; ``verbose_json`` with both
    granularities is the only format that carries segment and word timings.
    """
    client = OpenAI(
        api_key=settings.openai_api_key or None,
        base_url=settings.openai_base_url,
        timeout=settings.transcription_timeout_seconds,
        max_retries=0,
    )
    with artifact.path.open("rb") as audio:
        response = client.audio.transcriptions.create(
            model=settings.transcription_model,
            file=(artifact.filename, audio, artifact.content_type),
            response_format="verbose_json",
            timestamp_granularities=["segment", "word"],
            temperature=0,
        )
    return parse_verbose_json(response)


def parse_assemblyai_transcript(transcript: Any) -> Transcription:
    """Convert an AssemblyAI transcript (millisecond timings) into a Transcription.

    Utterances become segments so the diarized speaker label is kept.
    """
    segments = [
        TranscriptSegment(
            index=i,
            start=u.start / 1000,
            end=u.end / 1000,
            text=(u.text or "").strip(),
            speaker=f"Speaker {u.speaker}" if u.speaker else None,
        )
        for i, u in enumerate(transcript.utterances or [])
    ]
    words = [
        WordTiming(word=w.text, start=w.start / 1000, end=w.end / 1000)
        for w in transcript.words or []
    ]
    duration = transcript.audio_duration
    return Transcription(
        text=(transcript.text or "").strip(),
        segments=_ordered_segments(segments),
        words=words,
        duration=float(duration) if duration is not None else None,
    )


def _transcribe_assemblyai(artifact: UploadArtifact) -> Transcription:
    import assemblyai as aai  # type: ignore[import-untyped]  # no stubs; import inside function

    aai.settings.api_key = settings.assemblyai_api_key
    aai.settings.http_timeout = settings.transcription_timeout_seconds
    transcriber = aai.Transcriber()
    # speaker_labels=True enables diarization; utterances are empty without it.
    config = aai.TranscriptionConfig(
        speech_models=["universal-3-pro"],
        speaker_labels=True,
    )
    transcript = transcriber.transcribe(str(artifact.path), config=config)
    if transcript.status == aai.TranscriptStatus.error:
        raise TranscriptionFailure(f"Transcription failed: {transcript.error}")
    return parse_assemblyai_transcript(transcript)


def transcribe_audio(artifact: UploadArtifact, provider: str | None = None) -> Transcription:
    """Transcribe an uploaded recording with segment and word timestamps.

    Args:
        artifact: The uploaded file, already on local disk.
        provider: ``"openai"`` or ``"assemblyai"``; defaults to settings.

    Raises:
        TranscriptionFailure: any error from the speech-to-text service,
            including timeouts. Not retried.
    """
    provider = provider or settings.transcription_provider
    if provider not in PROVIDERS:
        raise TranscriptionFailure(f"Unknown transcription provider: {provider!r}")

    try:
        if provider == "assemblyai":
            return _transcribe_assemblyai(artifact)
        return _transcribe_openai(artifact)
    except TranscriptionFailure:
        raise
    except Exception as exc:
        raise TranscriptionFailure(str(exc)) from exc
