"""Output formatter registry: pluggable format hub.

WHY: The CLI, the HTTP API, and batch jobs need a single lookup to find
the right formatter by name. A central dict makes it trivial to add new
formats: create the formatter class, import it here, add one line.

HOW: FORMATTERS maps string keys to formatter *classes* (not instances).
Callers instantiate as needed: ``formatter = FORMATTERS["srt"]()``.

RULES:
- Keys are snake_case identifiers (used in CLI flags, API requests, etc.)
- Values are BaseFormatter subclasses (not instances)
- Every formatter listed here must be importable without side effects
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from whisper_converter.formatters.analysis import AnalysisFormatter
from whisper_converter.formatters.ass_karaoke import ASSKaraokeFormatter
from whisper_converter.formatters.plain_text import PlainTextFormatter
from whisper_converter.formatters.srt import SRTFormatter
from whisper_converter.formatters.vtt import VTTFormatter
from whisper_converter.formatters.word_timings import WordTimingsFormatter

if TYPE_CHECKING:
    from whisper_converter.formatters.base import BaseFormatter

FORMATTERS: dict[str, type[BaseFormatter]] = {
    "srt": SRTFormatter,
    "vtt": VTTFormatter,
    "ass_karaoke": ASSKaraokeFormatter,
    "plain_text": PlainTextFormatter,
    "word_timings": WordTimingsFormatter,
    "analysis": AnalysisFormatter,
}
