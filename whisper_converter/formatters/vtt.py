"""WebVTT subtitle serializer and formatter.

WHY: Browsers only play WebVTT through the HTML5 ``<track>`` element, so
web delivery needs it alongside SRT.

HOW: Same cue layout as SRT minus the numeric index line, with the
literal ``WEBVTT`` header and the ``.`` millisecond separator.

RULES:
- Document starts with "WEBVTT" followed by a blank line
- No cue identifiers; timestamps use ``HH:MM:SS.mmm`` (truncated)
- Cue blocks end with a newline and are separated by one blank line
- Output suffix: ".vtt"; media type: "text/vtt"
"""

from __future__ import annotations

from typing import List, Sequence

from whisper_converter.core.ir import ProcessedTranscription, Segment
from whisper_converter.core.timecode import format_vtt_time
from whisper_converter.formatters.base import BaseFormatter, FormatterOutput

VTT_HEADER = "WEBVTT\n\n"


def generate_vtt(segments: Sequence[Segment]) -> str:
    """Render segments as a WebVTT document."""
    cues = [
        "{} --> {}\n{}\n".format(
            format_vtt_time(segment.start),
            format_vtt_time(segment.end),
            segment.text.strip(),
        )
        for segment in segments
    ]
    return VTT_HEADER + "\n".join(cues)


class VTTFormatter(BaseFormatter):

    @property
    def name(self) -> str:
        return "WebVTT Subtitles"

    def format(self, transcript: ProcessedTranscription) -> List[FormatterOutput]:
        return [
            FormatterOutput(
                suffix=".vtt",
                content=transcript.exports.vtt,
                media_type="text/vtt",
            )
        ]
