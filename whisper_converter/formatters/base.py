"""Abstract base formatter and output container.

WHY: Every output format consumes the same ProcessedTranscription but
produces different file content. This base class enforces a consistent
interface so the CLI, the HTTP API, and batch jobs can work with any
formatter generically.

HOW: BaseFormatter is an ABC with two requirements: a ``name`` property
and a ``format()`` method. FormatterOutput is a plain dataclass that
bundles a file suffix with its content (string or bytes) and MIME type.

RULES:
- Subclasses MUST implement ``name`` (human-readable) and ``format()``
- ``format()`` returns a list; every built-in formatter returns one item,
  but the interface allows multi-file formats
- ``suffix`` starts with a hyphen or dot, e.g. ``"-karaoke.ass"``, ``".srt"``
- The caller is responsible for prepending the source filename stem
- Formatters never mutate the transcription they receive
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from whisper_converter.core.ir import ProcessedTranscription


@dataclass
class FormatterOutput:
    """One output file produced by a formatter.

    Attributes:
        suffix: File suffix appended to the source stem,
                e.g. ``".srt"`` → ``"interview.srt"``.
        content: The file content as a string (SRT, ASS, JSON, text)
                 or bytes (future binary formats).
        media_type: MIME type for the content, e.g. ``"text/vtt"``.
    """

    suffix: str
    content: str | bytes
    media_type: str


class BaseFormatter(ABC):
    """Abstract base for all output formatters.

    To add a new output format:
    1. Create a new file in formatters/
    2. Subclass BaseFormatter
    3. Implement format() and name
    4. Register in FORMATTERS dict in formatters/__init__.py
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable format name, e.g. 'WebVTT Subtitles'."""

    @abstractmethod
    def format(self, transcript: ProcessedTranscription) -> list[FormatterOutput]:
        """Convert the processed transcription into one or more output files.

        Args:
            transcript: The complete normalized result for one record,
                        including segments, statistics, and rendered exports.

        Returns:
            List of FormatterOutput objects, each containing a file suffix,
            content string/bytes, and MIME type.
        """
