"""Plain text transcript formatter: cleaned text and pause-based paragraphs.

WHY: Editors need a simple, readable transcript for review, archival,
and quick reference: no timecodes, no JSON. Two views are useful: the
cleaned running text (filler words removed) for search and quoting, and
the paragraph view for reading.

HOW: The cleaned text comes straight from the normalizer. Paragraphs are
written one per block with a blank line between them.

RULES:
- "-cleaned.txt": the cleaned text followed by a newline (empty file when
  there is no text)
- "-paragraphs.txt": paragraphs separated by a blank line, trailing newline
- No trailing whitespace on any line
- Media type: "text/plain"
"""

from __future__ import annotations

from typing import List

from whisper_converter.core.ir import ProcessedTranscription
from whisper_converter.formatters.base import BaseFormatter, FormatterOutput


def _with_newline(content: str) -> str:
    return content + "\n" if content else content


class PlainTextFormatter(BaseFormatter):
    """Formatter that produces the cleaned text and a paragraph view."""

    @property
    def name(self) -> str:
        return "Plain Text"

    def format(self, transcript: ProcessedTranscription) -> List[FormatterOutput]:
        paragraphs = [p for p in transcript.paragraphs if p]
        return [
            FormatterOutput(
                suffix="-cleaned.txt",
                content=_with_newline(transcript.exports.plain_text),
                media_type="text/plain",
            ),
            FormatterOutput(
                suffix="-paragraphs.txt",
                content=_with_newline("\n\n".join(paragraphs)),
                media_type="text/plain",
            ),
        ]
