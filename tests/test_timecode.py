"""Tests for SRT, WebVTT, and ASS time-code formatting.

RULES:
- Values are truncated, never rounded
- Hours are unbounded; SRT/VTT pad to 2 digits, ASS does not pad
- Invalid input (negative, NaN, inf, None) formats as zero
"""

import math

import pytest

from whisper_converter.core.timecode import (
    format_ass_time,
    format_srt_time,
    format_time,
    format_vtt_time,
)


class TestSrtVttTime:

    def test_hour_minute_second_millis(self):
        assert format_time(3661.5) == "01:01:01,500"
        assert format_time(3661.5, vtt=True) == "01:01:01.500"

    def test_wrappers_match_format_time(self):
        assert format_srt_time(3661.5) == "01:01:01,500"
        assert format_vtt_time(3661.5) == "01:01:01.500"

    def test_zero(self):
        assert format_srt_time(0) == "00:00:00,000"

    def test_truncates_instead_of_rounding(self):
        assert format_srt_time(2.9999) == "00:00:02,999"
        assert format_vtt_time(59.9995) == "00:00:59.999"

    def test_hours_above_24_are_not_wrapped(self):
        assert format_srt_time(100 * 3600 + 0.25) == "100:00:00,250"

    def test_integer_input(self):
        assert format_srt_time(2) == "00:00:02,000"


class TestAssTime:

    def test_centiseconds_and_unpadded_hour(self):
        assert format_ass_time(3661.5) == "1:01:01.50"

    def test_zero(self):
        assert format_ass_time(0) == "0:00:00.00"

    def test_truncates_centiseconds(self):
        assert format_ass_time(1.999) == "0:00:01.99"

    def test_multi_digit_hours(self):
        assert format_ass_time(12 * 3600) == "12:00:00.00"


class TestInvalidInput:

    @pytest.mark.parametrize("value", [-1.0, -0.001, math.nan, math.inf, -math.inf, None])
    def test_formats_as_zero(self, value):
        assert format_srt_time(value) == "00:00:00,000"
        assert format_vtt_time(value) == "00:00:00.000"
        assert format_ass_time(value) == "0:00:00.00"
