"""Core normalization and intermediate representation modules.

WHY: The core package contains the stable heart of the converter:
the IR dataclasses, time-code formatting, confidence analysis, paragraph
segmentation, and the normalizer that ties them together. These are
consumed by all formatters and must remain backward-compatible.

HOW: ir.py defines the data structures and their explicit field decoding,
timecode.py renders seconds for each subtitle format, confidence.py and
paragraphs.py derive per-segment metrics and paragraphs, normalizer.py
builds the complete result, and batch.py wraps it in the host envelope.

RULES:
- IR dataclasses are the contract; change with care
- Normalization is format-agnostic; subtitle layout lives in formatters/
- No module in core/ touches the network or the filesystem
"""
