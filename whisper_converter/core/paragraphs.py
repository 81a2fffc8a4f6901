"""Pause-based paragraph segmentation.

WHY: Whisper segments are short (a clause or a sentence). Readers want
paragraphs, and the most reliable paragraph signal in speech is a
pause. Grouping contiguous segments until a long silence gives readable
blocks without any language-specific heuristics.

HOW: Walk the segments in order, accumulating trimmed texts. After each
segment, look ahead: if there is no next segment, or the silence before
it exceeds the gap threshold, flush the accumulator as one paragraph.

RULES:
- A paragraph ends when next.start - current.end > gap_s (strictly greater)
- The last segment always closes the current paragraph
- Segment texts are trimmed, joined with single spaces, then trimmed again
- Zero segments yield zero paragraphs
- Pure function of its input; iterating twice gives the same paragraphs
"""

from __future__ import annotations

from typing import Iterator, List, Sequence

from whisper_converter.config import PARAGRAPH_GAP_S
from whisper_converter.core.ir import Segment


def iter_paragraphs(
    segments: Sequence[Segment],
    gap_s: float = PARAGRAPH_GAP_S,
) -> Iterator[str]:
    """Yield paragraphs built from consecutive segments.

    Args:
        segments: Normalized segments in input order.
        gap_s: Silence (seconds) that must be exceeded to start a new paragraph.

    Yields:
        One paragraph string per pause-delimited run of segments.
    """
    current: List[str] = []
    for i, segment in enumerate(segments):
        current.append(segment.text.strip())

        is_last = i + 1 >= len(segments)
        if is_last or segments[i + 1].start - segment.end > gap_s:
            yield " ".join(current).strip()
            current = []


def split_paragraphs(
    segments: Sequence[Segment],
    gap_s: float = PARAGRAPH_GAP_S,
) -> List[str]:
    return list(iter_paragraphs(segments, gap_s))
