"""Command-line interface for the Whisper Transcript Converter.

WHY: Users need a simple way to turn Whisper JSON files into subtitle
files from the terminal. The CLI wires together the full pipeline:
file loading, host-envelope unwrapping, normalization, pluggable
formatter output, and file saving, behind a single command.

HOW: Uses argparse to accept one or more JSON files, an output format
selection, an output directory, and a batch size. Every file becomes one
host item; all items go through process_items() so one broken file never
stops the others. Status messages go to stderr; output files are saved
next to each source (or to --output-dir).

RULES:
- Positional arguments: one or more JSON transcription files
- --formats: comma-separated formatter keys (default: all registered)
- Output naming: {stem}{suffix}, numeric suffix for conflicts (e.g. talk-2.srt)
- Unreadable or invalid JSON files fail individually; siblings continue
- Exit status 1 when any file failed or on invalid arguments
- Status output goes to stderr (not stdout)
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, List, Optional

from whisper_converter.config import DEFAULT_BATCH_SIZE, LOG_LEVEL
from whisper_converter.core.batch import process_items
from whisper_converter.formatters import FORMATTERS
from whisper_converter.formatters.base import FormatterOutput


def _status(msg: str) -> None:
    """Print a status message to stderr.

    WHY: Status output must not pollute stdout so the CLI can be piped.
    """
    print(msg, file=sys.stderr, flush=True)


def _fail(msg: str) -> None:
    print("Error: {}".format(msg), file=sys.stderr)
    sys.exit(1)


def _resolve_output_path(
    stem: str,
    suffix: str,
    output_dir: Path,
) -> Path:
    """Resolve the output file path, adding numeric suffix on conflict.

    WHY: Users may run the converter multiple times on the same file.
    Overwriting previous output would lose work. Numeric suffixes
    (talk-2.srt) prevent data loss.

    HOW: Check if {stem}{suffix} exists. If so, increment a counter
    and insert it before the file extension until a free name is found.

    RULES:
    - First attempt: {stem}{suffix} (e.g. talk-karaoke.ass)
    - Conflict: split suffix at last dot, insert counter before extension
      (e.g. talk-karaoke-2.ass, talk-2.srt)
    - Counter starts at 2 and increments

    Args:
        stem: Source filename stem (without extension).
        suffix: Formatter's suffix (e.g. "-karaoke.ass").
        output_dir: Directory to save the output file.

    Returns:
        A Path that does not yet exist.
    """
    base_path = output_dir / "{}{}".format(stem, suffix)
    if not base_path.exists():
        return base_path

    dot_idx = suffix.rfind(".")
    if dot_idx >= 0:
        suffix_name = suffix[:dot_idx]
        suffix_ext = suffix[dot_idx:]
    else:
        suffix_name = suffix
        suffix_ext = ""

    counter = 2
    while True:
        candidate = output_dir / "{}{}-{}{}".format(stem, suffix_name, counter, suffix_ext)
        if not candidate.exists():
            return candidate
        counter += 1


def _save_output(
    output: FormatterOutput,
    stem: str,
    output_dir: Path,
) -> Path:
    """Save a single formatter output to disk and return its path.

    RULES:
    - String content written as UTF-8 text
    - Bytes content written in binary mode
    """
    path = _resolve_output_path(stem, output.suffix, output_dir)

    if isinstance(output.content, bytes):
        path.write_bytes(output.content)
    else:
        path.write_text(output.content, encoding="utf-8")

    return path


def _load_json(path: Path) -> Any:
    """Read one input file; raises OSError or ValueError on failure."""
    return json.loads(path.read_text(encoding="utf-8"))


def _parse_format_keys(formats: Optional[str]) -> List[str]:
    if not formats:
        return list(FORMATTERS.keys())
    format_keys = [f.strip() for f in formats.split(",") if f.strip()]
    for key in format_keys:
        if key not in FORMATTERS:
            available = ", ".join(sorted(FORMATTERS.keys()))
            _fail("Unknown format '{}'. Available formats: {}".format(key, available))
    return format_keys


def run(args: argparse.Namespace) -> int:
    """Convert every input file and return the number of failed files.

    WHY: This is the core of the CLI, separated from main() so tests can
    inspect the outcome without catching SystemExit.

    HOW: Loads each file, runs all loadable payloads through
    process_items(), then runs the selected formatters for every
    successful result and saves their outputs.
    """
    format_keys = _parse_format_keys(args.formats)

    output_dir: Optional[Path] = None
    if args.output_dir:
        output_dir = Path(args.output_dir).resolve()
        if not output_dir.is_dir():
            _fail("Output directory does not exist: {}".format(output_dir))

    failures = 0
    payloads: List[Any] = []
    sources: List[Path] = []

    _status("Loading {} file(s)...".format(len(args.input_files)))
    for name in args.input_files:
        path = Path(name).resolve()
        if not path.is_file():
            _status("  Failed: {} (file not found)".format(path))
            failures += 1
            continue
        try:
            payloads.append(_load_json(path))
        except (OSError, ValueError) as exc:
            _status("  Failed: {} (invalid JSON: {})".format(path.name, exc))
            failures += 1
            continue
        sources.append(path)

    _status("Processing {} transcription(s)...".format(len(payloads)))
    results = process_items(payloads, batch_size=args.batch_size)

    saved_files: List[Path] = []
    for source, result in zip(sources, results):
        if not result.success or result.transcription is None:
            _status("  Failed: {} ({})".format(source.name, result.error))
            failures += 1
            continue

        stats = result.transcription.statistics
        _status("  {}: {} segments, {} words, {:.1f}s, language: {}".format(
            source.name,
            stats.total_segments,
            stats.total_words,
            stats.total_duration,
            stats.language_detected,
        ))

        target_dir = output_dir or source.parent
        for key in format_keys:
            formatter = FORMATTERS[key]()
            for output in formatter.format(result.transcription):
                saved_path = _save_output(output, source.stem, target_dir)
                saved_files.append(saved_path)
                _status("    Saved: {}".format(saved_path.name))

    _status("")
    _status("Done! Saved {} file(s), {} failed.".format(len(saved_files), failures))
    return failures


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the CLI.

    RULES:
    - Positional: input_files (one or more)
    - Optional: --formats (comma-separated), --output-dir, --batch-size
    """
    parser = argparse.ArgumentParser(
        prog="whisper_converter",
        description="Convert Whisper transcription JSON into subtitles "
                    "(SRT, WebVTT, ASS karaoke), cleaned text, and analytics.",
    )

    parser.add_argument(
        "input_files",
        nargs="+",
        help="Whisper transcription JSON file(s).",
    )

    parser.add_argument(
        "--formats",
        default=None,
        help="Comma-separated list of output formats. "
             "Available: {}. Default: all.".format(", ".join(sorted(FORMATTERS.keys()))),
    )

    parser.add_argument(
        "--output-dir",
        default=None,
        help="Directory to save output files (default: next to each input file).",
    )

    parser.add_argument(
        "--batch-size",
        type=int,
        default=DEFAULT_BATCH_SIZE,
        help="Number of records processed per batch (default: %(default)s).",
    )

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for ``python -m whisper_converter`` and the console script.

    RULES:
    - argv=None means use sys.argv (normal CLI invocation)
    - Explicit argv is for testing
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.batch_size <= 0:
        parser.error("--batch-size must be positive")

    logging.basicConfig(level=LOG_LEVEL, format="%(levelname)s %(name)s: %(message)s")

    if run(args):
        sys.exit(1)


if __name__ == "__main__":
    main()
