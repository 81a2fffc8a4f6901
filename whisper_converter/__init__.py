"""Whisper Transcript Converter: subtitle and analytics hub for Whisper output.

WHY: Whisper-style speech-to-text APIs return a transcript text, timed
segments, and optional per-word timestamps with probabilities. Editors and
automation pipelines need that data as subtitle files (SRT, WebVTT,
ASS karaoke), as readable paragraphs, and as summary analytics. This
package normalizes one raw transcription record into a well-typed result
and renders every output format from it.

HOW: Three-stage pipeline: unwrap (host envelope), normalize (core IR),
format (pluggable formatters). Each stage is independently testable.

RULES:
- All formatters consume the same ProcessedTranscription
- Adding a new output format = one new formatter module, no core changes
- The IR is the stable contract between normalization and formatting
- Every record is processed independently; no state is shared
"""

__version__ = "0.1.0"
