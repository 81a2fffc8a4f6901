"""Flat word-timing JSON formatter.

WHY: Animation tools and caption editors that do their own layout only
need the words and when they are spoken, not the segment structure.

HOW: Serializes the capped word-timing list from the export bundle as a
JSON array of ``{word, start, end, duration, probability, segmentId}``.

RULES:
- Never more than MAX_WORD_TIMINGS entries (truncated by the normalizer)
- Output suffix: "-word-timings.json"; media type: "application/json"
"""

from __future__ import annotations

import json
from typing import List

from whisper_converter.core.ir import ProcessedTranscription
from whisper_converter.formatters.base import BaseFormatter, FormatterOutput


class WordTimingsFormatter(BaseFormatter):

    @property
    def name(self) -> str:
        return "Word Timings JSON"

    def format(self, transcript: ProcessedTranscription) -> List[FormatterOutput]:
        timings = [w.to_dict() for w in transcript.exports.word_timings]
        return [
            FormatterOutput(
                suffix="-word-timings.json",
                content=json.dumps(timings, indent=2, ensure_ascii=False),
                media_type="application/json",
            )
        ]
