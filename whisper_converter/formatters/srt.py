"""SubRip (SRT) subtitle serializer and formatter.

WHY: SRT is the lowest common denominator of subtitle formats; every
editor, player, and upload form accepts it. One cue per Whisper segment
keeps the recognizer's own phrasing and timing.

HOW: generate_srt() renders each segment as a numbered block
(``index``, ``START --> END``, trimmed text) and joins blocks with a
blank line. SRTFormatter wraps the rendered string stored in the export
bundle as a downloadable file.

RULES:
- Cue numbers are 1-based and follow input order
- Timestamps use the SRT form ``HH:MM:SS,mmm`` (truncated)
- Each block ends with a newline; blocks are separated by one blank line
- Zero segments produce an empty string
- Output suffix: ".srt"; media type: "application/x-subrip"
"""

from __future__ import annotations

from typing import List, Sequence

from whisper_converter.core.ir import ProcessedTranscription, Segment
from whisper_converter.core.timecode import format_srt_time
from whisper_converter.formatters.base import BaseFormatter, FormatterOutput


def generate_srt(segments: Sequence[Segment]) -> str:
    """Render segments as an SRT document.

    ``generate_srt([Segment(start=0, end=2, text="Hi", ...)])`` returns
    ``"1\\n00:00:00,000 --> 00:00:02,000\\nHi\\n"``.
    """
    blocks = [
        "{}\n{} --> {}\n{}\n".format(
            index,
            format_srt_time(segment.start),
            format_srt_time(segment.end),
            segment.text.strip(),
        )
        for index, segment in enumerate(segments, start=1)
    ]
    return "\n".join(blocks)


class SRTFormatter(BaseFormatter):
    """Formatter that produces one SRT file with a cue per segment."""

    @property
    def name(self) -> str:
        return "SRT Subtitles"

    def format(self, transcript: ProcessedTranscription) -> List[FormatterOutput]:
        return [
            FormatterOutput(
                suffix=".srt",
                content=transcript.exports.srt,
                media_type="application/x-subrip",
            )
        ]
