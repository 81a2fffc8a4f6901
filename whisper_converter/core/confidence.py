"""Per-segment confidence and speaking-rate analysis.

WHY: Reviewers want to see at a glance which words the recognizer was
sure about and which ones need a human ear. Whisper reports a
probability per word; this module partitions words by two fixed
thresholds and computes the speaking rate used by the statistics block.

HOW: Pure functions over a segment's decoded word tuple. Missing
probabilities compare as 0, so an unscored word is treated as low
confidence.

RULES:
- High confidence: probability strictly greater than 0.8
- Low confidence: probability strictly less than 0.5
- Words in [0.5, 0.8] appear in neither list
- High-confidence words are trimmed and joined with single spaces
- Low-confidence words keep probability/start/end as decoded (may be None)
- words_per_second divides by 1 when duration is zero or negative
"""

from __future__ import annotations

from typing import Iterable, Tuple

from whisper_converter.core.ir import LowConfidenceWord, RawWord

HIGH_CONFIDENCE_THRESHOLD = 0.8
LOW_CONFIDENCE_THRESHOLD = 0.5


def _probability(word: RawWord) -> float:
    return 0.0 if word.probability is None else word.probability


def high_confidence_words(words: Iterable[RawWord]) -> str:
    """Join the trimmed text of every word scored above 0.8."""
    texts = []
    for word in words:
        if _probability(word) > HIGH_CONFIDENCE_THRESHOLD:
            text = (word.word or "").strip()
            if text:
                texts.append(text)
    return " ".join(texts)


def low_confidence_words(words: Iterable[RawWord]) -> Tuple[LowConfidenceWord, ...]:
    """Collect every word scored below 0.5 as a review record."""
    return tuple(
        LowConfidenceWord(
            word=(word.word or "").strip(),
            probability=word.probability,
            start=word.start,
            end=word.end,
        )
        for word in words
        if _probability(word) < LOW_CONFIDENCE_THRESHOLD
    )


def words_per_second(word_count: int, duration: float) -> float:
    """Speaking rate; a zero or negative duration counts as one second."""
    denominator = duration if duration > 0 else 1.0
    return word_count / denominator
