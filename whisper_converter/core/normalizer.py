"""Transcription normalization: raw Whisper record → ProcessedTranscription.

WHY: This module is the bridge between a loosely-typed Whisper JSON
record and the structured result every output consumes. It decodes the
record once, derives per-segment metrics, paragraphs, statistics, time
markers, and word timings, and renders the subtitle exports, so the
formatters and hosts never touch raw input.

HOW: unwrap_payload() peels one level of array nesting. The record is
decoded through TranscriptionRecord.from_dict (all defaults live there).
normalize_segments() derives Segment objects, then the remaining
builders run over the normalized segments. Serializers are called last
to fill the ExportBundle.

RULES:
- Segment id defaults to the segment's position in the input
- Cleaned text: collapse whitespace, drop whole-word fillers
  (um/uh/er/ah, case-insensitive), collapse again, trim
- Texts longer than CLEAN_TEXT_FILLER_LIMIT only get whitespace collapse
- Statistics language defaults to "unknown"; the top-level language
  field passes the raw value through (None when absent)
- Time-marker previews are cut at 50 characters plus "..."
- Word timings are capped at MAX_WORD_TIMINGS, silently
- A payload that is not a mapping after unwrapping raises TypeError
"""

from __future__ import annotations

import re
from typing import Any, List, Mapping, Optional, Sequence, Tuple

from whisper_converter.config import (
    CLEAN_TEXT_FILLER_LIMIT,
    FILLER_WORDS,
    MAX_WORD_TIMINGS,
)
from whisper_converter.core.confidence import (
    high_confidence_words,
    low_confidence_words,
    words_per_second,
)
from whisper_converter.core.ir import (
    ExportBundle,
    ProcessedTranscription,
    Segment,
    Statistics,
    TimeMarker,
    TranscriptionRecord,
    WordTiming,
)
from whisper_converter.core.paragraphs import split_paragraphs
from whisper_converter.formatters.ass_karaoke import generate_ass
from whisper_converter.formatters.srt import generate_srt
from whisper_converter.formatters.vtt import generate_vtt

_WHITESPACE_RE = re.compile(r"\s+")
_FILLER_RE = re.compile(
    r"\b(?:{})\b".format("|".join(FILLER_WORDS)),
    re.IGNORECASE,
)

UNKNOWN_LANGUAGE = "unknown"
PREVIEW_LENGTH = 50
LOW_CONFIDENCE_LOGPROB = -0.5
HIGH_NO_SPEECH_PROB = 0.1


def unwrap_payload(data: Any) -> Any:
    """Unwrap one level of array nesting around a transcription record.

    WHY: Upstream producers sometimes deliver ``[{"data": {...}}]`` or
    ``[{...}]`` instead of the record itself.

    RULES:
    - Non-empty list → first element's "data" field when it is truthy,
      otherwise the first element itself
    - Anything else is returned unchanged
    """
    if isinstance(data, list) and data:
        first = data[0]
        if isinstance(first, Mapping) and first.get("data"):
            return first["data"]
        return first
    return data


def normalize_segments(record: TranscriptionRecord) -> Tuple[Segment, ...]:
    """Derive normalized segments (metrics included) from a decoded record."""
    segments: List[Segment] = []
    for index, raw in enumerate(record.segments):
        duration = raw.end - raw.start
        word_count = len(raw.words)
        segments.append(Segment(
            id=index if raw.id is None else raw.id,
            start=raw.start,
            end=raw.end,
            text=raw.text,
            words=raw.words,
            avg_logprob=raw.avg_logprob,
            no_speech_prob=raw.no_speech_prob,
            temperature=raw.temperature,
            compression_ratio=raw.compression_ratio,
            duration=duration,
            word_count=word_count,
            words_per_second=words_per_second(word_count, duration),
            high_confidence_words=high_confidence_words(raw.words),
            low_confidence_words=low_confidence_words(raw.words),
        ))
    return tuple(segments)


def clean_text(text: str) -> str:
    """Collapse whitespace and remove filler words from a transcript text.

    Filler removal is skipped for texts above CLEAN_TEXT_FILLER_LIMIT
    characters; those only get the whitespace collapse and trim.
    """
    collapsed = _WHITESPACE_RE.sub(" ", text)
    if len(text) > CLEAN_TEXT_FILLER_LIMIT:
        return collapsed.strip()
    without_fillers = _FILLER_RE.sub("", collapsed)
    return _WHITESPACE_RE.sub(" ", without_fillers).strip()


def compute_statistics(
    segments: Sequence[Segment],
    language: Optional[str],
) -> Statistics:
    """Aggregate the statistics block over all normalized segments."""
    count = len(segments)
    if count:
        total_duration = max(s.end for s in segments)
        average_confidence = sum(abs(s.avg_logprob) for s in segments) / count
    else:
        total_duration = 0.0
        average_confidence = 0.0

    return Statistics(
        total_duration=total_duration,
        total_segments=count,
        total_words=sum(s.word_count for s in segments),
        average_confidence=average_confidence,
        language_detected=language or UNKNOWN_LANGUAGE,
        low_confidence_segments=sum(
            1 for s in segments if s.avg_logprob < LOW_CONFIDENCE_LOGPROB
        ),
        high_no_speech_segments=sum(
            1 for s in segments if s.no_speech_prob > HIGH_NO_SPEECH_PROB
        ),
    )


def _preview(text: str) -> str:
    if len(text) > PREVIEW_LENGTH:
        return text[:PREVIEW_LENGTH] + "..."
    return text


def build_time_markers(segments: Sequence[Segment]) -> Tuple[TimeMarker, ...]:
    return tuple(
        TimeMarker(
            segment_id=s.id,
            timestamp=s.start,
            text=_preview(s.text),
            confidence=abs(s.avg_logprob),
        )
        for s in segments
    )


def extract_word_timings(
    segments: Sequence[Segment],
    limit: Optional[int] = None,
) -> Tuple[WordTiming, ...]:
    """Flatten word-level timing across all segments, capped at ``limit``.

    Args:
        segments: Normalized segments in input order.
        limit: Maximum number of entries; defaults to MAX_WORD_TIMINGS.
            Words beyond the cap are dropped without error.
    """
    if limit is None:
        limit = MAX_WORD_TIMINGS

    timings: List[WordTiming] = []
    for segment in segments:
        for word in segment.words:
            if len(timings) >= limit:
                return tuple(timings)
            timings.append(WordTiming(
                word=None if word.word is None else word.word.strip(),
                start=word.start,
                end=word.end,
                duration=(word.end or 0.0) - (word.start or 0.0),
                probability=word.probability,
                segment_id=segment.id,
            ))
    return tuple(timings)


def process_transcription(data: Any) -> ProcessedTranscription:
    """Normalize one raw transcription record into the complete result.

    Args:
        data: The transcription object, or a one-element-deep array
              wrapping it (already unwrapped from any host envelope).

    Returns:
        ProcessedTranscription with segments, paragraphs, statistics,
        time markers, and rendered exports.

    Raises:
        TypeError: If the unwrapped payload is not a JSON object.
    """
    payload = unwrap_payload(data)
    if not isinstance(payload, Mapping):
        raise TypeError(
            "Transcription payload must be a JSON object, got {}".format(
                type(payload).__name__
            )
        )

    record = TranscriptionRecord.from_dict(payload)
    segments = normalize_segments(record)
    cleaned = clean_text(record.text)

    exports = ExportBundle(
        srt=generate_srt(segments),
        vtt=generate_vtt(segments),
        ass=generate_ass(segments),
        plain_text=cleaned,
        word_timings=extract_word_timings(segments),
    )

    return ProcessedTranscription(
        original_text=record.text,
        language=record.language,
        cleaned_text=cleaned,
        paragraphs=tuple(split_paragraphs(segments)),
        segments=segments,
        statistics=compute_statistics(segments, record.language),
        time_markers=build_time_markers(segments),
        exports=exports,
    )
