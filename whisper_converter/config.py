"""Configuration constants, safety limits, and .env loading.

WHY: Centralizes all configurable values so they are easy to find,
update, and override. Thresholds, caps, and server defaults are plain
module-level values, not buried in logic, so both humans and coding
agents can modify them confidently.

HOW: python-dotenv loads the .env file on import. Constants are defined
as module-level values. The safety caps and server settings can be
overridden via environment variables; invalid overrides fail loudly.

RULES:
- MAX_ASS_EVENTS and MAX_WORD_TIMINGS are independent tunables
- PARAGRAPH_GAP_S is the pause (seconds) that starts a new paragraph
- CLEAN_TEXT_FILLER_LIMIT disables filler removal for very large texts
- FILLER_WORDS are English-only and matched as whole words
- Invalid integer overrides raise ValueError naming the variable
"""

from __future__ import annotations

import os

from dotenv import load_dotenv

# Load .env from the project root (where the script is run from)
load_dotenv()


def _env_int(name: str, default: int) -> int:
    """Read a positive integer from the environment.

    Raises ValueError when the variable is set but not a positive integer.
    """
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(
            "{} must be an integer, got {!r}. Fix the value in the .env file "
            "or the environment.".format(name, raw)
        )
    if value <= 0:
        raise ValueError("{} must be positive, got {}.".format(name, value))
    return value


# ---------------------------------------------------------------------------
# Text segmentation
# ---------------------------------------------------------------------------

PARAGRAPH_GAP_S = 2.0
"""A pause longer than this between two segments starts a new paragraph."""

CLEAN_TEXT_FILLER_LIMIT = 100_000
"""Texts longer than this (characters) skip filler-word removal."""

FILLER_WORDS: tuple[str, ...] = ("um", "uh", "er", "ah")

# ---------------------------------------------------------------------------
# Safety caps
# ---------------------------------------------------------------------------

MAX_ASS_EVENTS = _env_int("WHISPER_MAX_ASS_EVENTS", 5000)
"""Maximum number of Dialogue events in one ASS karaoke track."""

MAX_WORD_TIMINGS = _env_int("WHISPER_MAX_WORD_TIMINGS", 10_000)
"""Maximum number of entries in the flat word-timing list."""

# ---------------------------------------------------------------------------
# Batch processing and server defaults
# ---------------------------------------------------------------------------

DEFAULT_BATCH_SIZE = _env_int("WHISPER_BATCH_SIZE", 10)
API_HOST = os.getenv("WHISPER_API_HOST", "0.0.0.0")
API_PORT = _env_int("WHISPER_API_PORT", 8000)
LOG_LEVEL = os.getenv("WHISPER_LOG_LEVEL", "INFO").upper()
