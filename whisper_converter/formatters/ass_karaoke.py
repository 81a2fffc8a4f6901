"""ASS (Advanced SubStation Alpha) karaoke serializer and formatter.

WHY: Social video and lyric-style captions highlight speech one word at
a time. ASS is the subtitle format that renderers such as libass and
ffmpeg's ``subtitles`` filter burn in with full styling, so each word
becomes its own Dialogue event on the Karaoke style.

HOW: A fixed script header declares the 1920x1080 canvas and two styles
(Default and Karaoke). Then every word becomes one event. Segments with
word-level timestamps use each word's own timing; segments without them
split their text on whitespace and share the segment duration equally
among the tokens.

RULES:
- One Dialogue event per word, never per segment
- At most ``max_events`` events (default MAX_ASS_EVENTS = 5000); words
  beyond the cap are silently dropped
- Word timing falls back to the segment's start/end when absent
- Synthesized timing: duration / token count, or 1 s per token when the
  segment duration is not positive
- Word text is trimmed and newlines become the ASS line break ``\\N``
- Empty tokens are skipped and do not count toward the cap
- Zero segments → one placeholder event "No data available" (0–1 s)
- Segments but no events → one placeholder event
  "Processing error - no dialogue generated"
- Output suffix: "-karaoke.ass"; media type: "text/x-ssa"
"""

from __future__ import annotations

from typing import List, Optional, Sequence

from whisper_converter.config import MAX_ASS_EVENTS
from whisper_converter.core.ir import ProcessedTranscription, Segment
from whisper_converter.core.timecode import format_ass_time
from whisper_converter.formatters.base import BaseFormatter, FormatterOutput

ASS_HEADER = """[Script Info]
Title: Karaoke Subtitles
ScriptType: v4.00+
WrapStyle: 0
ScaledBorderAndShadow: yes
YCbCr Matrix: TV.601
PlayResX: 1920
PlayResY: 1080

[V4+ Styles]
Format: Name, Fontname, Fontsize, PrimaryColour, SecondaryColour, OutlineColour, BackColour, Bold, Italic, Underline, StrikeOut, ScaleX, ScaleY, Spacing, Angle, BorderStyle, Outline, Shadow, Alignment, MarginL, MarginR, MarginV, Encoding
Style: Default,Arial,84,&H00FFFFFF,&H000000FF,&H00000000,&H80000000,1,0,0,0,100,100,0,0,1,4,4,5,50,50,50,1
Style: Karaoke,Arial,84,&H0000FFFF,&H000000FF,&H00000000,&H80000000,1,0,0,0,100,100,0,0,1,4,4,5,50,50,50,1

[Events]
Format: Layer, Start, End, Style, Name, MarginL, MarginR, MarginV, Effect, Text
"""

NO_DATA_EVENT = "Dialogue: 0,0:00:00.00,0:00:01.00,Karaoke,,0,0,0,,No data available\n"
NO_DIALOGUE_EVENT = (
    "Dialogue: 0,0:00:00.00,0:00:01.00,Karaoke,,0,0,0,,"
    "Processing error - no dialogue generated"
)


def _dialogue(start_s: float, end_s: float, text: str) -> str:
    return "Dialogue: 0,{},{},Karaoke,,0,0,0,,{}".format(
        format_ass_time(start_s), format_ass_time(end_s), text,
    )


def _escape(text: str) -> str:
    return text.replace("\n", "\\N")


def _timed_word_events(segment: Segment, budget: int) -> List[str]:
    """Events for a segment that carries word-level timestamps."""
    events: List[str] = []
    for word in segment.words:
        if len(events) >= budget:
            break
        text = _escape((word.word or "").strip())
        if not text:
            continue
        start_s = segment.start if word.start is None else word.start
        end_s = segment.end if word.end is None else word.end
        events.append(_dialogue(start_s, end_s, text))
    return events


def _synthesized_word_events(segment: Segment, budget: int) -> List[str]:
    """Events for a segment without word timing: split the text evenly."""
    tokens = segment.text.strip().split()
    if not tokens:
        return []
    time_per_word = segment.duration / len(tokens) if segment.duration > 0 else 1.0

    events: List[str] = []
    for index, token in enumerate(tokens):
        if len(events) >= budget:
            break
        text = _escape(token)
        if not text:
            continue
        start_s = segment.start + index * time_per_word
        end_s = segment.start + (index + 1) * time_per_word
        events.append(_dialogue(start_s, end_s, text))
    return events


def generate_ass(
    segments: Sequence[Segment],
    max_events: Optional[int] = None,
) -> str:
    """Render segments as an ASS karaoke script with one event per word.

    Args:
        segments: Normalized segments in input order.
        max_events: Event cap; defaults to MAX_ASS_EVENTS.

    Returns:
        The complete ASS script (header plus Dialogue events).
    """
    if max_events is None:
        max_events = MAX_ASS_EVENTS

    if not segments:
        return ASS_HEADER + NO_DATA_EVENT

    events: List[str] = []
    for segment in segments:
        budget = max_events - len(events)
        if budget <= 0:
            break
        if segment.words:
            events.extend(_timed_word_events(segment, budget))
        elif segment.text:
            events.extend(_synthesized_word_events(segment, budget))

    if not events:
        events.append(NO_DIALOGUE_EVENT)

    return ASS_HEADER + "\n".join(events)


class ASSKaraokeFormatter(BaseFormatter):
    """Formatter that produces a word-by-word ASS karaoke track.

    RULES:
    - Uses the ASS script already rendered into the export bundle
    - Single output file with suffix "-karaoke.ass"
    """

    @property
    def name(self) -> str:
        return "ASS Karaoke"

    def format(self, transcript: ProcessedTranscription) -> List[FormatterOutput]:
        return [
            FormatterOutput(
                suffix="-karaoke.ass",
                content=transcript.exports.ass,
                media_type="text/x-ssa",
            )
        ]
