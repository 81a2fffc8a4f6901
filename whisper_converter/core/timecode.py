"""Time-code formatting for SRT, WebVTT, and ASS subtitles.

WHY: Each subtitle format spells timestamps differently: SRT uses
``HH:MM:SS,mmm``, WebVTT ``HH:MM:SS.mmm``, and ASS ``H:MM:SS.cc``. All
three serializers share one decomposition of seconds so they can never
disagree about where a cue starts.

HOW: Seconds are split into hours, minutes, whole seconds, and the
fractional remainder with floor arithmetic. The remainder is scaled to
milliseconds (SRT/VTT) or centiseconds (ASS) and truncated.

RULES:
- Truncate toward zero, never round (2.9999 s is "00:00:02,999")
- Hours are not capped at 24
- SRT/VTT hours are zero-padded to at least 2 digits; ASS hours are unpadded
- Negative, NaN, infinite, or None input is treated as 0
"""

from __future__ import annotations

import math
from typing import Optional, Tuple


def _parts(seconds: Optional[float], scale: int) -> Tuple[int, int, int, int]:
    """Split seconds into (hours, minutes, seconds, sub-second units)."""
    if seconds is None or math.isnan(seconds) or math.isinf(seconds) or seconds < 0:
        seconds = 0.0
    hours = math.floor(seconds / 3600)
    minutes = math.floor((seconds % 3600) / 60)
    secs = math.floor(seconds % 60)
    sub = math.floor((seconds % 1) * scale)
    return hours, minutes, secs, sub


def format_time(seconds: Optional[float], vtt: bool = False) -> str:
    """Format seconds as an SRT (``HH:MM:SS,mmm``) or VTT (``HH:MM:SS.mmm``) time.

    Args:
        seconds: Time offset in seconds.
        vtt: Use the WebVTT ``.`` separator instead of SRT's ``,``.

    Returns:
        The formatted timestamp, e.g. ``format_time(3661.5) == "01:01:01,500"``.
    """
    hours, minutes, secs, ms = _parts(seconds, 1000)
    separator = "." if vtt else ","
    return "{:02d}:{:02d}:{:02d}{}{:03d}".format(hours, minutes, secs, separator, ms)


def format_srt_time(seconds: Optional[float]) -> str:
    return format_time(seconds)


def format_vtt_time(seconds: Optional[float]) -> str:
    return format_time(seconds, vtt=True)


def format_ass_time(seconds: Optional[float]) -> str:
    """Format seconds as an ASS time (``H:MM:SS.cc``).

    ``format_ass_time(3661.5) == "1:01:01.50"``
    """
    hours, minutes, secs, cs = _parts(seconds, 100)
    return "{:d}:{:02d}:{:02d}.{:02d}".format(hours, minutes, secs, cs)
