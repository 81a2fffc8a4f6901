"""Host-envelope batch processing with per-record error isolation.

WHY: Automation hosts (n8n, Zapier-style flows, the HTTP API) hand the
converter an array of items, and each item wraps its transcription
differently: plain JSON, a ``json`` field with nested ``data``, or a
binary attachment holding the JSON file. One malformed item must never
take down its siblings.

HOW: extract_payload() peels the host envelope off one item.
process_item() runs the normalizer and converts any exception into a
failure result. process_items() walks the items in fixed-size batches;
process_items_async() does the same but yields to the event loop between
batches so long jobs don't starve other coroutines.

RULES:
- Binary payloads may be bytes or str (plain JSON text or base64 of
  UTF-8 JSON); on any decode/parse failure fall back to ``json`` or the
  item itself and log a warning
- ``json`` envelopes unwrap one nested ``data`` field when present
- Every item yields exactly one ItemResult, in input order
- Failure results never keep the original payload
- batchIndex = position // batch_size
- Yielding between batches never changes the results
"""

from __future__ import annotations

import asyncio
import base64
import json
import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from whisper_converter.config import DEFAULT_BATCH_SIZE
from whisper_converter.core.ir import ProcessedTranscription
from whisper_converter.core.normalizer import process_transcription

logger = logging.getLogger(__name__)

INPUT_TYPE_TRANSCRIPTION = "whisper-transcription"
INPUT_TYPE_ERROR = "error"

ProgressCallback = Callable[[int, int], None]


@dataclass
class ItemResult:
    """Outcome of processing one host item.

    RULES:
    - success=True → transcription is set, error is None
    - success=False → transcription is None, error holds the message
    - processing_time_ms is measured from the start of the batch run
    """

    index: int
    batch_index: int
    success: bool
    processed_at: str
    transcription: Optional[ProcessedTranscription] = None
    error: Optional[str] = None
    processing_time_ms: Optional[int] = None

    def to_record(self) -> Dict[str, Any]:
        """Build the host result record for this item."""
        if self.success and self.transcription is not None:
            return {
                "success": True,
                "processed": self.transcription.to_dict(),
                "metadata": {
                    "processedAt": self.processed_at,
                    "processingTime": self.processing_time_ms,
                    "inputType": INPUT_TYPE_TRANSCRIPTION,
                    "batchIndex": self.batch_index,
                },
            }
        return {
            "success": False,
            "error": self.error,
            "originalData": None,
            "metadata": {
                "processedAt": self.processed_at,
                "inputType": INPUT_TYPE_ERROR,
                "batchIndex": self.batch_index,
            },
        }


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _parse_binary(data: Any) -> Any:
    """Decode a binary attachment into a JSON value.

    Raises:
        ValueError: On unsupported types, invalid UTF-8, invalid base64,
            or invalid JSON (all subclasses of ValueError).
    """
    if isinstance(data, (bytes, bytearray)):
        return json.loads(bytes(data).decode("utf-8"))
    if isinstance(data, str):
        try:
            return json.loads(data)
        except ValueError:
            decoded = base64.b64decode(data, validate=True).decode("utf-8")
            return json.loads(decoded)
    raise ValueError(
        "Unsupported binary payload type: {}".format(type(data).__name__)
    )


def extract_payload(item: Any) -> Any:
    """Remove the host envelope from one item and return the transcription payload."""
    if not isinstance(item, Mapping):
        return item

    binary = item.get("binary")
    if isinstance(binary, Mapping) and binary.get("data"):
        try:
            return _parse_binary(binary["data"])
        except ValueError as exc:
            logger.warning("Failed to parse binary data, falling back to JSON: %s", exc)
            return item.get("json") or item

    json_part = item.get("json")
    if json_part:
        if isinstance(json_part, Mapping) and json_part.get("data"):
            return json_part["data"]
        return json_part

    return item


def process_item(
    item: Any,
    index: int = 0,
    batch_index: int = 0,
    started: Optional[float] = None,
) -> ItemResult:
    """Process one host item, converting any failure into a failed result."""
    if started is None:
        started = time.monotonic()
    try:
        transcription = process_transcription(extract_payload(item))
    except Exception as exc:
        logger.warning("Item %d failed: %s", index, exc)
        return ItemResult(
            index=index,
            batch_index=batch_index,
            success=False,
            processed_at=_utc_now_iso(),
            error=str(exc) or type(exc).__name__,
        )

    return ItemResult(
        index=index,
        batch_index=batch_index,
        success=True,
        processed_at=_utc_now_iso(),
        transcription=transcription,
        processing_time_ms=int((time.monotonic() - started) * 1000),
    )


def _check_batch_size(batch_size: int) -> None:
    if batch_size <= 0:
        raise ValueError("batch_size must be positive, got {}".format(batch_size))


def _run_batch(
    items: Sequence[Any],
    batch_start: int,
    batch_size: int,
    started: float,
) -> List[ItemResult]:
    batch_index = batch_start // batch_size
    return [
        process_item(item, batch_start + offset, batch_index, started)
        for offset, item in enumerate(items[batch_start:batch_start + batch_size])
    ]


def process_items(
    items: Sequence[Any],
    batch_size: int = DEFAULT_BATCH_SIZE,
    on_progress: Optional[ProgressCallback] = None,
) -> List[ItemResult]:
    """Process host items sequentially in batches of ``batch_size``.

    Args:
        items: Host items in any accepted envelope shape.
        batch_size: Items per batch (controls batchIndex).
        on_progress: Optional callback ``(done, total)`` after each batch.

    Returns:
        One ItemResult per item, in input order.
    """
    _check_batch_size(batch_size)
    started = time.monotonic()
    results: List[ItemResult] = []
    for batch_start in range(0, len(items), batch_size):
        results.extend(_run_batch(items, batch_start, batch_size, started))
        if on_progress is not None:
            on_progress(len(results), len(items))
    return results


async def process_items_async(
    items: Sequence[Any],
    batch_size: int = DEFAULT_BATCH_SIZE,
    on_progress: Optional[ProgressCallback] = None,
) -> List[ItemResult]:
    """Like process_items(), yielding to the event loop after every batch."""
    _check_batch_size(batch_size)
    started = time.monotonic()
    results: List[ItemResult] = []
    for batch_start in range(0, len(items), batch_size):
        results.extend(_run_batch(items, batch_start, batch_size, started))
        if on_progress is not None:
            on_progress(len(results), len(items))
        await asyncio.sleep(0)
    return results


def to_host_records(results: Sequence[ItemResult]) -> List[Dict[str, Any]]:
    return [r.to_record() for r in results]
