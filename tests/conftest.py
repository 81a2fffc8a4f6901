"""Shared test fixtures for the whisper_converter test suite.

WHY: Multiple test modules need the same realistic Whisper transcription
record. Centralizing fixtures here avoids duplication and ensures all
tests agree on the sample's expected statistics.

HOW: Pytest fixtures provide the raw record dict (as produced by the
OpenAI verbose_json transcription endpoint), host envelopes around it,
and the processed result.

RULES:
- SAMPLE_RECORD has three segments; the second gap (3.25 s → 6.0 s) is the
  only pause longer than 2 s, so it yields two paragraphs
- Segment 0 carries word timestamps; segments 1 and 2 do not
- Fixtures return fresh copies so tests may mutate them freely
"""

import copy
from typing import Any, Dict

import pytest

from whisper_converter.core.ir import ProcessedTranscription
from whisper_converter.core.normalizer import process_transcription


# ---------------------------------------------------------------------------
# Sample Whisper record
# ---------------------------------------------------------------------------

SAMPLE_RECORD: Dict[str, Any] = {
    "text": " Hello um world. This is a test. Uh, see you later.",
    "language": "english",
    "segments": [
        {
            "id": 0, "start": 0.0, "end": 1.5, "text": " Hello um world.",
            "avg_logprob": -0.25, "no_speech_prob": 0.02,
            "temperature": 0.0, "compression_ratio": 1.1,
            "words": [
                {"word": " Hello", "start": 0.0,  "end": 0.5, "probability": 0.95},
                {"word": " um",    "start": 0.5,  "end": 0.75, "probability": 0.40},
                {"word": " world.", "start": 0.75, "end": 1.5, "probability": 0.70},
            ],
        },
        {
            "id": 1, "start": 1.75, "end": 3.25, "text": " This is a test.",
            "avg_logprob": -0.75, "no_speech_prob": 0.05,
            "temperature": 0.0, "compression_ratio": 1.2,
        },
        {
            "id": 2, "start": 6.0, "end": 8.0, "text": " Uh, see you later.",
            "avg_logprob": -0.5, "no_speech_prob": 0.3,
            "temperature": 0.2, "compression_ratio": 1.0,
        },
    ],
}


@pytest.fixture
def sample_record() -> Dict[str, Any]:
    """A three-segment Whisper record with word timing on the first segment."""
    return copy.deepcopy(SAMPLE_RECORD)


@pytest.fixture
def json_envelope(sample_record):
    """Host item wrapping the record in json.data."""
    return {"json": {"data": sample_record}}


@pytest.fixture
def processed(sample_record) -> ProcessedTranscription:
    """The sample record run through the full normalizer."""
    return process_transcription(sample_record)
