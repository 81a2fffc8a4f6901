"""Intermediate representation dataclasses for Whisper transcriptions.

WHY: Whisper-style producers emit loosely-typed JSON: fields go missing,
numbers arrive as strings or nulls, and word lists are optional. Every
downstream component (statistics, paragraphs, SRT/VTT/ASS serializers)
needs the same fields with the same defaults. The IR decodes each raw
field exactly once, with the default documented next to the field, so no
algorithm has to guess what an absent value means.

HOW: Two layers of dataclasses:
  RawWord / RawSegment / TranscriptionRecord: decoded input, built by
      ``from_dict`` factory methods that apply the documented defaults
  Segment / LowConfidenceWord / Statistics / TimeMarker / WordTiming /
  ExportBundle / ProcessedTranscription: derived, frozen output built
      by the normalizer

RULES:
- Segment numeric fields default to 0.0 when absent or non-numeric
- Booleans, NaN, infinities and unparseable strings count as non-numeric
- Numeric strings ("1.5") are parsed
- RawWord fields default to None so callers choose their own fallback
- text defaults to "" when absent or not a string
- language is passed through as-is when it is a string, else None
- Derived dataclasses are frozen and hold tuples, never lists
- to_dict() produces the camelCase wire shape consumed by hosts
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Tuple


def decode_number(value: Any) -> Optional[float]:
    """Decode a JSON value into a finite float, or None when non-numeric.

    RULES:
    - int and float values are accepted (bool is rejected)
    - strings are parsed with float() after stripping whitespace
    - NaN and infinities are rejected
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float, str)):
        try:
            number = float(value.strip() if isinstance(value, str) else value)
        except (ValueError, OverflowError):
            return None
        if math.isnan(number) or math.isinf(number):
            return None
        return number
    return None


def _number_or_zero(value: Any) -> float:
    number = decode_number(value)
    return 0.0 if number is None else number


def _decode_id(value: Any) -> Optional[int]:
    """Decode a segment id; only integral numbers are accepted."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


def _decode_text(value: Any) -> str:
    return value if isinstance(value, str) else ""


# ---------------------------------------------------------------------------
# Decoded input
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RawWord:
    """One word-level timestamp from the transcription.

    RULES:
    - word: the token text exactly as produced (often with a leading space),
      or None when absent / not a string
    - start, end, probability: float or None when absent / non-numeric
    """

    word: Optional[str] = None
    start: Optional[float] = None
    end: Optional[float] = None
    probability: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> RawWord:
        word = data.get("word")
        return cls(
            word=word if isinstance(word, str) else None,
            start=decode_number(data.get("start")),
            end=decode_number(data.get("end")),
            probability=decode_number(data.get("probability")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "word": self.word,
            "start": self.start,
            "end": self.end,
            "probability": self.probability,
        }


def _decode_words(value: Any) -> Tuple[RawWord, ...]:
    if not isinstance(value, list):
        return ()
    return tuple(RawWord.from_dict(w) for w in value if isinstance(w, Mapping))


@dataclass(frozen=True)
class RawSegment:
    """One time-aligned segment as decoded from the transcription.

    RULES:
    - id: integer id, or None when absent / not integral (the normalizer
      substitutes the positional index)
    - start, end, avg_logprob, no_speech_prob, temperature,
      compression_ratio: float, 0.0 when absent / non-numeric
    - text: "" when absent / not a string
    - words: empty tuple when absent / not a list; non-object entries skipped
    """

    id: Optional[int]
    start: float
    end: float
    text: str
    words: Tuple[RawWord, ...] = ()
    avg_logprob: float = 0.0
    no_speech_prob: float = 0.0
    temperature: float = 0.0
    compression_ratio: float = 0.0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> RawSegment:
        return cls(
            id=_decode_id(data.get("id")),
            start=_number_or_zero(data.get("start")),
            end=_number_or_zero(data.get("end")),
            text=_decode_text(data.get("text")),
            words=_decode_words(data.get("words")),
            avg_logprob=_number_or_zero(data.get("avg_logprob")),
            no_speech_prob=_number_or_zero(data.get("no_speech_prob")),
            temperature=_number_or_zero(data.get("temperature")),
            compression_ratio=_number_or_zero(data.get("compression_ratio")),
        )


@dataclass(frozen=True)
class TranscriptionRecord:
    """A complete transcription record as produced by a Whisper-style API.

    RULES:
    - text: "" when absent / not a string
    - language: passed through when a string, else None
    - segments: empty when absent / not a list; non-object entries skipped
    """

    text: str
    language: Optional[str]
    segments: Tuple[RawSegment, ...]

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> TranscriptionRecord:
        language = data.get("language")
        raw_segments = data.get("segments")
        if not isinstance(raw_segments, list):
            raw_segments = []
        return cls(
            text=_decode_text(data.get("text")),
            language=language if isinstance(language, str) else None,
            segments=tuple(
                RawSegment.from_dict(s) for s in raw_segments if isinstance(s, Mapping)
            ),
        )


# ---------------------------------------------------------------------------
# Derived output
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LowConfidenceWord:
    """A word flagged for manual review (probability below 0.5)."""

    word: str
    probability: Optional[float]
    start: Optional[float]
    end: Optional[float]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "word": self.word,
            "probability": self.probability,
            "start": self.start,
            "end": self.end,
        }


@dataclass(frozen=True)
class Segment:
    """A normalized segment with derived timing and confidence metrics.

    WHY: Serializers, statistics, and time markers all need the same
    derived values (duration, word count, speaking rate). Computing them
    once keeps every output consistent.

    RULES:
    - id: raw id, or the segment's position in the input
    - duration = end - start (may be negative for malformed input)
    - word_count = number of word-level entries
    - words_per_second = word_count / duration, denominator 1 when
      duration <= 0
    - high_confidence_words: space-joined words with probability > 0.8
    - low_confidence_words: words with probability < 0.5
    """

    id: int
    start: float
    end: float
    text: str
    words: Tuple[RawWord, ...]
    avg_logprob: float
    no_speech_prob: float
    temperature: float
    compression_ratio: float
    duration: float
    word_count: int
    words_per_second: float
    high_confidence_words: str
    low_confidence_words: Tuple[LowConfidenceWord, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "startTime": self.start,
            "endTime": self.end,
            "duration": self.duration,
            "text": self.text,
            "words": [w.to_dict() for w in self.words],
            "avgLogProb": self.avg_logprob,
            "noSpeechProb": self.no_speech_prob,
            "temperature": self.temperature,
            "compressionRatio": self.compression_ratio,
            "wordCount": self.word_count,
            "wordsPerSecond": self.words_per_second,
            "highConfidenceWords": self.high_confidence_words,
            "lowConfidenceWords": [w.to_dict() for w in self.low_confidence_words],
        }


@dataclass(frozen=True)
class Statistics:
    """Aggregate summary of one transcription."""

    total_duration: float
    total_segments: int
    total_words: int
    average_confidence: float
    language_detected: str
    low_confidence_segments: int
    high_no_speech_segments: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalDuration": self.total_duration,
            "totalSegments": self.total_segments,
            "totalWords": self.total_words,
            "averageConfidence": self.average_confidence,
            "languageDetected": self.language_detected,
            "lowConfidenceSegments": self.low_confidence_segments,
            "highNoSpeechSegments": self.high_no_speech_segments,
        }


@dataclass(frozen=True)
class TimeMarker:
    """Navigation marker: where a segment starts and what it says."""

    segment_id: int
    timestamp: float
    text: str
    confidence: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "segmentId": self.segment_id,
            "timestamp": self.timestamp,
            "text": self.text,
            "confidence": self.confidence,
        }


@dataclass(frozen=True)
class WordTiming:
    """One entry of the flat, cross-segment word timing list."""

    word: Optional[str]
    start: Optional[float]
    end: Optional[float]
    duration: float
    probability: Optional[float]
    segment_id: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "word": self.word,
            "start": self.start,
            "end": self.end,
            "duration": self.duration,
            "probability": self.probability,
            "segmentId": self.segment_id,
        }


@dataclass(frozen=True)
class ExportBundle:
    """Rendered subtitle files and flat exports for one transcription."""

    srt: str
    vtt: str
    ass: str
    plain_text: str
    word_timings: Tuple[WordTiming, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "srt": self.srt,
            "vtt": self.vtt,
            "ass": self.ass,
            "plainText": self.plain_text,
            "wordTimings": [w.to_dict() for w in self.word_timings],
        }


@dataclass(frozen=True)
class ProcessedTranscription:
    """The complete normalized result for one transcription record.

    WHY: This is the top-level container that formatters, the CLI, and the
    HTTP API receive. It holds everything needed to produce any output.

    RULES:
    - original_text: the record's text, untouched
    - language: the raw language field (None when absent)
    - cleaned_text: whitespace-collapsed, filler words removed
    - paragraphs: pause-delimited paragraphs in input order
    - segments / time_markers: one entry per input segment, input order
    """

    original_text: str
    language: Optional[str]
    cleaned_text: str
    paragraphs: Tuple[str, ...]
    segments: Tuple[Segment, ...]
    statistics: Statistics
    time_markers: Tuple[TimeMarker, ...]
    exports: ExportBundle

    def to_dict(self) -> Dict[str, Any]:
        return {
            "originalText": self.original_text,
            "language": self.language,
            "cleanedText": self.cleaned_text,
            "paragraphs": list(self.paragraphs),
            "segments": [s.to_dict() for s in self.segments],
            "statistics": self.statistics.to_dict(),
            "timeMarkers": [m.to_dict() for m in self.time_markers],
            "exportFormats": self.exports.to_dict(),
        }
