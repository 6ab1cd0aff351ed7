"""Claude-powered emotional tone analysis: whole meeting and per segment.

Two models are used on purpose. The whole-transcript judgment goes to the
accurate model (``settings.llm_model``); the per-segment labels are cheap,
repetitive and batched, so they go to the fast model
(``settings.fast_llm_model``).
"""

from __future__ import annotations

import json
import logging
from typing import Any

from anthropic import Anthropic
from pydantic import ValidationError

from src.analysis.llm import call_tool, get_anthropic_client
from src.analysis.models import (
    DEFAULT_SEGMENT_EMOTION,
    DEFAULT_SEGMENT_SCORE,
    EMOTIONS,
    SegmentEmotion,
    SegmentLabel,
    ToneAnalysis,
)
from src.analysis.schemas import OverallToneOutput, SegmentLabelOutput, SegmentToneOutput
from src.config import settings
from src.ingestion.errors import AnalysisParseFailure
from src.ingestion.models import TranscriptSegment

logger = logging.getLogger(__name__)

OVERALL_TONE_TOOL: dict[str, Any] = {
    "name": "report_meeting_tone",
    "description": "Report the emotional tone of an entire meeting transcript.",
    "input_schema": {
        "type": "object",
        "properties": {
            "overall_mood_score": {
                "type": "number",
                "description": "Overall mood from 0 (very negative) to 100 (very positive).",
            },
            "dominant_emotion": {
                "type": "string",
                "enum": list(EMOTIONS),
                "description": "The single strongest emotion across the meeting.",
            },
            "emotion_breakdown": {
                "type": "object",
                "description": "Percentage weight (0-100) of each emotion; weights sum to 100.",
                "properties": {emotion: {"type": "number"} for emotion in EMOTIONS},
                "required": list(EMOTIONS),
            },
        },
        "required": ["overall_mood_score", "dominant_emotion", "emotion_breakdown"],
    },
}

SEGMENT_TONE_TOOL: dict[str, Any] = {
    "name": "report_segment_emotions",
    "description": "Report one emotion label per transcript segment.",
    "input_schema": {
        "type": "object",
        "properties": {
            "segments": {
                "type": "array",
                "items": {
                    "type": "object",
                    "properties": {
                        "index": {"type": "integer", "description": "Segment index as given."},
                        "emotion": {"type": "string", "enum": list(EMOTIONS)},
                        "score": {
                            "type": "number",
                            "description": "Confidence in the label, 0.0-1.0.",
                        },
                    },
                    "required": ["index", "emotion", "score"],
                },
            },
        },
        "required": ["segments"],
    },
}

OVERALL_SYSTEM_PROMPT = (
    "You are an expert meeting emotion analyst. Read the whole meeting transcript "
    "and judge its emotional tone.\n\n"
    "Use exactly these emotions: happy, neutral, stressed, angry, confident.\n"
    "Give an overall mood score from 0 to 100, the dominant emotion, and a percentage "
    "breakdown across all five emotions.\n\n"
    "Use the report_meeting_tone tool to return your results."
)

SEGMENT_SYSTEM_PROMPT = (
    "You classify the emotion of short meeting transcript segments. "
    "Use exactly these emotions: happy, neutral, stressed, angry, confident. "
    "Return one entry per segment with its index, the emotion, and a confidence score "
    "between 0.0 and 1.0. Use the report_segment_emotions tool."
)


def request_overall_tone(transcript: str, client: Anthropic) -> ToneAnalysis:
    """Classify the tone of a whole transcript.

    Raises:
        AnalysisParseFailure: the tool input does not match the expected shape.
    """
    data = call_tool(
        client,
        model=settings.llm_model,
        system=OVERALL_SYSTEM_PROMPT,
        prompt=f"Analyze the emotional tone of this meeting transcript:\n\n{transcript}",
        tool=OVERALL_TONE_TOOL,
        temperature=0.2,
        max_tokens=1024,
    )
    try:
        return OverallToneOutput.model_validate(data).to_analysis()
    except ValidationError as exc:
        raise AnalysisParseFailure(f"Overall tone output invalid: {exc}") from exc


def analyze_overall_tone(
    transcript: str,
    client: Anthropic | None = None,
    log: logging.Logger | None = None,
) -> ToneAnalysis:
    """Overall tone, or an all-null ToneAnalysis when skipped or failed.

    An empty transcript skips the call entirely.
    """
    log = log or logger
    if not transcript.strip():
        log.info("Transcript empty; skipping overall tone", extra={"stage": "overall_tone"})
        return ToneAnalysis.empty()

    try:
        return request_overall_tone(transcript, client or get_anthropic_client())
    except Exception as exc:
        log.warning(
            "Overall tone analysis degraded: %s",
            exc,
            extra={"stage": "overall_tone", "error_type": type(exc).__name__},
        )
        return ToneAnalysis.empty()


def segment_payload(segments: list[TranscriptSegment]) -> str:
    """Serialise segments as the ``[{index, start, end, text}]`` list sent to the classifier."""
    payload = [
        {"index": s.index, "start": s.start, "end": s.end, "text": s.text} for s in segments
    ]
    return json.dumps(payload, indent=2)


def parse_segment_labels(data: dict[str, Any], segment_count: int) -> dict[int, SegmentLabel]:
    """Validate the per-segment tool input.

    Entries without an integer index, or with an index outside the segment
    range, are dropped. The first entry for a given index wins.

    Raises:
        AnalysisParseFailure: the envelope has no ``segments`` list.
    """
    try:
        envelope = SegmentToneOutput.model_validate(data)
    except ValidationError as exc:
        raise AnalysisParseFailure(f"Segment tone output invalid: {exc}") from exc

    labels: dict[int, SegmentLabel] = {}
    for entry in envelope.segments:
        try:
            item = SegmentLabelOutput.model_validate(entry)
        except ValidationError:
            continue
        if not 0 <= item.index < segment_count or item.index in labels:
            continue
        labels[item.index] = SegmentLabel(emotion=item.emotion, score=item.score)
    return labels


def request_segment_tone(
    segments: list[TranscriptSegment], client: Anthropic
) -> dict[int, SegmentLabel]:
    data = call_tool(
        client,
        model=settings.fast_llm_model,
        system=SEGMENT_SYSTEM_PROMPT,
        prompt=f"Classify emotion for each segment.\n\nSegments:\n{segment_payload(segments)}",
        tool=SEGMENT_TONE_TOOL,
        temperature=0.1,
    )
    return parse_segment_labels(data, len(segments))


def analyze_segment_tone(
    segments: list[TranscriptSegment],
    client: Anthropic | None = None,
    log: logging.Logger | None = None,
) -> dict[int, SegmentLabel] | None:
    """Per-segment labels keyed by segment index.

    Returns None when there are no segments (no call is made) or when the
    call fails; the pipeline then carries no per-segment emotion data.
    """
    log = log or logger
    if not segments:
        return None

    try:
        return request_segment_tone(segments, client or get_anthropic_client())
    except Exception as exc:
        log.warning(
            "Segment tone analysis degraded: %s",
            exc,
            extra={"stage": "segment_tone", "error_type": type(exc).__name__},
        )
        return None


def build_segment_emotions(
    segments: list[TranscriptSegment],
    labels: dict[int, SegmentLabel] | None,
) -> list[SegmentEmotion]:
    """Join labels to segments by index.

    Every segment gets an emotion; unlabelled ones default to neutral/0.5.
    No labels at all (analysis skipped or failed) means no segment emotions.
    """
    if labels is None:
        return []

    emotions: list[SegmentEmotion] = []
    for segment in segments:
        label = labels.get(segment.index)
        emotions.append(
            SegmentEmotion(
                segment_index=segment.index,
                start=segment.start,
                end=segment.end,
                emotion=label.emotion if label else DEFAULT_SEGMENT_EMOTION,
                score=label.score if label else DEFAULT_SEGMENT_SCORE,
            )
        )
    return emotions
