"""Pydantic request/response models for the HTTP API.

WHY: The FastAPI endpoints need typed schemas for request validation,
response serialization, and automatic OpenAPI documentation. Pydantic
models enforce field types at runtime and generate JSON Schema that
appears in the /docs UI.

HOW: Each endpoint pair (request + response) has its own model. Enums
represent closed sets like output format names. All models include
Field descriptions for rich OpenAPI docs.

RULES:
- All models use Field(description=...) for OpenAPI documentation
- Enum values match formatter registry keys exactly
- Result records are passed through as plain dicts; their camelCase
  shape is fixed by ItemResult.to_record() and the analysis schema
- Python 3.9+ compatible (no PEP 604 unions, use Optional from typing)
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from whisper_converter.config import DEFAULT_BATCH_SIZE


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class OutputFormat(str, Enum):
    """Available output format identifiers.

    RULES:
    - Values match keys in whisper_converter.formatters.FORMATTERS exactly
    """

    srt = "srt"
    vtt = "vtt"
    ass_karaoke = "ass_karaoke"
    plain_text = "plain_text"
    word_timings = "word_timings"
    analysis = "analysis"


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class BatchRequest(BaseModel):
    """A batch of host items to convert in the background.

    WHY: Automation hosts forward whole item arrays. Each item may be a
    bare Whisper record, a ``{"json": ...}`` envelope, or a binary
    attachment envelope, so items are accepted as arbitrary JSON.

    RULES:
    - items must contain at least one entry
    - batch_size must be positive (controls batchIndex in results)
    - output_formats defaults to all available formats
    """

    items: List[Any] = Field(
        min_length=1,
        description="Host items, each wrapping one Whisper transcription record.",
    )
    batch_size: int = Field(
        default=DEFAULT_BATCH_SIZE,
        gt=0,
        description="Number of items processed per batch.",
    )
    output_formats: Optional[List[OutputFormat]] = Field(
        default=None,
        description="Output formats to generate per item. Defaults to all available formats.",
    )

    model_config = {"json_schema_extra": {
        "examples": [
            {
                "items": [
                    {"json": {"text": "Hello world", "language": "en", "segments": [
                        {"id": 0, "start": 0.0, "end": 1.5, "text": "Hello world"},
                    ]}},
                ],
                "batch_size": 10,
                "output_formats": ["srt", "vtt"],
            }
        ]
    }}


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class ItemSummary(BaseModel):
    """Per-item outcome inside a batch job.

    RULES:
    - error is only set when success is False
    - statistics and files are only set when success is True
    """

    index: int = Field(description="Position of the item in the submitted batch.")
    batch_index: int = Field(description="Index of the processing batch the item ran in.")
    success: bool = Field(description="Whether the item converted successfully.")
    error: Optional[str] = Field(
        default=None,
        description="Failure message, only present when success is false.",
    )
    statistics: Optional[Dict[str, Any]] = Field(
        default=None,
        description="Statistics block of the processed transcription.",
    )
    files: List[str] = Field(
        default_factory=list,
        description="Output filenames written for this item.",
    )


class JobResponse(BaseModel):
    """Batch job status response.

    WHY: Clients poll this endpoint to track job progress. It exposes
    the current state, per-item outcomes, and error information.

    RULES:
    - id is the job UUID
    - error is only set when status is 'failed'
    - output_files and items are only populated once the job finished
    """

    id: str = Field(description="Unique job identifier (UUID).")
    status: str = Field(description="Current job status.")
    item_count: int = Field(description="Number of items submitted.")
    created_at: float = Field(description="Job creation timestamp (Unix epoch seconds).")
    config: Dict[str, Any] = Field(description="Batch configuration used for this job.")
    progress: Optional[Dict[str, Any]] = Field(
        default=None,
        description="Items processed so far, e.g. {'done': 20, 'total': 50}.",
    )
    succeeded: int = Field(default=0, description="Number of items converted successfully.")
    failed: int = Field(default=0, description="Number of items that failed.")
    error: Optional[str] = Field(
        default=None,
        description="Error message, only present when status is 'failed'.",
    )
    output_files: Optional[List[str]] = Field(
        default=None,
        description="List of output filenames, only present when status is 'completed'.",
    )
    items: Optional[List[ItemSummary]] = Field(
        default=None,
        description="Per-item outcomes, only present once the job finished.",
    )

    model_config = {"json_schema_extra": {
        "examples": [
            {
                "id": "550e8400e29b41d4a716446655440000",
                "status": "processing",
                "item_count": 50,
                "created_at": 1739959200.0,
                "config": {"batch_size": 10, "output_formats": ["srt", "vtt"]},
                "progress": {"done": 20, "total": 50},
                "succeeded": 0,
                "failed": 0,
                "error": None,
                "output_files": None,
                "items": None,
            }
        ]
    }}


class JobCreatedResponse(BaseModel):
    """Response returned when a new batch job is submitted.

    RULES:
    - status is always 'pending' on creation
    """

    id: str = Field(description="Unique job identifier (UUID) for polling status.")
    status: str = Field(description="Initial job status (always 'pending').")
    item_count: int = Field(description="Number of items accepted.")


class FileInfo(BaseModel):
    """Metadata for a single output file."""

    filename: str = Field(description="Output filename.")
    media_type: str = Field(description="MIME type of the file content.")
    size: int = Field(description="File size in bytes.")


class FileListResponse(BaseModel):
    """List of output files for a completed job."""

    job_id: str = Field(description="The job ID these files belong to.")
    files: List[FileInfo] = Field(description="Available output files.")


class FormatInfo(BaseModel):
    """Description of an available output format.

    WHY: Clients can query the /formats endpoint to discover which
    output formats are supported and what files they produce.
    """

    key: str = Field(description="Format identifier used in API requests.")
    name: str = Field(description="Human-readable format name.")
    suffixes: List[str] = Field(description="File suffixes produced (e.g. ['-karaoke.ass']).")


class ErrorResponse(BaseModel):
    """Standard error response body.

    RULES:
    - detail is always a human-readable error message
    """

    detail: str = Field(description="Human-readable error description.")


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(description="Service health status.", json_schema_extra={"example": "ok"})
    version: str = Field(description="API version string.", json_schema_extra={"example": "0.1.0"})
