"""FastAPI application with conversion and batch routes plus OpenAPI docs.

WHY: Automation hosts (n8n, curl, internal dashboards) need an HTTP API
to convert Whisper transcriptions without shelling out to the CLI. Small
payloads are converted inline; large item arrays become background batch
jobs whose output files are downloaded afterwards. FastAPI provides
automatic OpenAPI documentation, request validation, and background task
support.

HOW: POST /transcriptions converts one item and returns its result record.
POST /transcriptions/export/{format_key} returns one rendered file.
POST /batches creates a job in the JobStore and runs process_items_async()
in the background, writing every successful item's formatter outputs to
the job's temp directory. The remaining endpoints poll, list, download,
and delete batch jobs, and describe the available formats.

RULES:
- All endpoints have OpenAPI descriptions on every parameter and response
- Error responses use a consistent ErrorResponse schema
- Bad transcription payloads never produce a 5xx: /transcriptions answers
  with a success=false record, the export endpoint with 422
- Background batches use FastAPI BackgroundTasks
- Batch output files are named item-{index}{suffix}
- The job store is a module-level singleton
- Python 3.9+ compatible (no match/case, no PEP 604 unions)
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Annotated, Any, Dict, List, Optional

from fastapi import BackgroundTasks, Body, FastAPI, HTTPException, Query
from fastapi.responses import Response

from whisper_converter import __version__
from whisper_converter.config import API_HOST, API_PORT, LOG_LEVEL
from whisper_converter.core.batch import ItemResult, process_item, process_items_async
from whisper_converter.core.normalizer import process_transcription
from whisper_converter.formatters import FORMATTERS
from whisper_converter.server.jobs import Job, JobStatus, JobStore
from whisper_converter.server.models import (
    BatchRequest,
    ErrorResponse,
    FileInfo,
    FileListResponse,
    FormatInfo,
    HealthResponse,
    ItemSummary,
    JobCreatedResponse,
    JobResponse,
)

logger = logging.getLogger(__name__)

# Seconds between two expired-job sweeps
CLEANUP_INTERVAL_S = 300

# ---------------------------------------------------------------------------
# App and store setup
# ---------------------------------------------------------------------------

job_store = JobStore()


async def _periodic_cleanup() -> None:
    """Run job cleanup every CLEANUP_INTERVAL_S seconds."""
    while True:
        await asyncio.sleep(CLEANUP_INTERVAL_S)
        removed = job_store.cleanup_expired()
        if removed:
            logger.info("Cleaned up %d expired job(s)", removed)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start periodic cleanup on startup, cancel on shutdown."""
    task = asyncio.create_task(_periodic_cleanup())
    yield
    task.cancel()
    try:
        await task
    except asyncio.CancelledError:
        pass


app = FastAPI(
    lifespan=lifespan,
    title="Whisper Transcript Converter API",
    description=(
        "REST API for converting Whisper transcription JSON into SRT, "
        "WebVTT, and ASS karaoke subtitles, cleaned text, paragraphs, "
        "word timings, and transcript statistics. Convert single records "
        "inline or submit batches and download the results."
    ),
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _infer_media_type(filename: str) -> str:
    """Infer MIME type from filename extension.

    RULES:
    - .srt → application/x-subrip
    - .vtt → text/vtt
    - .ass → text/x-ssa
    - .json → application/json
    - .txt → text/plain
    - fallback → application/octet-stream
    """
    ext = Path(filename).suffix.lower()
    mapping = {
        ".srt": "application/x-subrip",
        ".vtt": "text/vtt",
        ".ass": "text/x-ssa",
        ".json": "application/json",
        ".txt": "text/plain",
    }
    return mapping.get(ext, "application/octet-stream")


def _get_job_or_404(job_id: str) -> Job:
    job = job_store.get_job(job_id)
    if job is None:
        raise HTTPException(status_code=404, detail="Job not found: {}".format(job_id))
    return job


def _require_completed(job: Job) -> None:
    if job.status != JobStatus.COMPLETED:
        raise HTTPException(
            status_code=409,
            detail="Job is not completed (current status: {}).".format(job.status.value),
        )


def _job_to_response(job: Job) -> JobResponse:
    """Convert an internal Job dataclass to a JobResponse Pydantic model."""
    succeeded = sum(1 for item in job.item_results if item.get("success"))
    return JobResponse(
        id=job.id,
        status=job.status.value,
        item_count=job.item_count,
        created_at=job.created_at,
        config=job.config,
        progress=job.progress,
        succeeded=succeeded,
        failed=len(job.item_results) - succeeded,
        error=job.error,
        output_files=job.output_files if job.output_files else None,
        items=[ItemSummary(**item) for item in job.item_results] if job.item_results else None,
    )


def _write_item_outputs(
    result: ItemResult,
    format_keys: List[str],
    output_dir: Path,
) -> List[str]:
    """Run the selected formatters for one successful item and save the files."""
    filenames: List[str] = []
    for key in format_keys:
        formatter = FORMATTERS[key]()
        for output in formatter.format(result.transcription):
            out_filename = "item-{}{}".format(result.index, output.suffix)
            out_path = output_dir / out_filename
            if isinstance(output.content, bytes):
                out_path.write_bytes(output.content)
            else:
                out_path.write_text(output.content, encoding="utf-8")
            filenames.append(out_filename)
    return filenames


def _summarize(result: ItemResult, files: List[str]) -> Dict[str, Any]:
    summary: Dict[str, Any] = {
        "index": result.index,
        "batch_index": result.batch_index,
        "success": result.success,
        "error": result.error,
        "statistics": None,
        "files": files,
    }
    if result.success and result.transcription is not None:
        summary["statistics"] = result.transcription.statistics.to_dict()
    return summary


async def _run_batch_job(job_id: str, items: List[Any], store: JobStore) -> None:
    """Convert every item of a batch job and save the output files.

    WHY: This is the background task behind POST /batches. Items that
    fail conversion are reported per item; they never fail the job.

    RULES:
    - Progress is updated after every processing batch
    - A formatter error on one item marks only that item as failed
    - Any other unexpected exception marks the whole job as failed
    - Output files are saved to the job's output_dir
    """
    job = store.get_job(job_id)
    if job is None:
        return

    format_keys = job.config.get("output_formats") or list(FORMATTERS.keys())
    batch_size = job.config["batch_size"]
    total = len(items)

    def on_progress(done: int, _total: int) -> None:
        store.update_job(job_id, progress={"done": done, "total": total})

    try:
        store.update_job(
            job_id,
            status=JobStatus.PROCESSING,
            progress={"done": 0, "total": total},
        )
        results = await process_items_async(items, batch_size=batch_size, on_progress=on_progress)

        output_files: List[str] = []
        summaries: List[Dict[str, Any]] = []
        for result in results:
            files: List[str] = []
            if result.success:
                try:
                    files = _write_item_outputs(result, format_keys, job.output_dir)
                except Exception as exc:
                    logger.warning("Formatting failed for item %d of job %s: %s",
                                   result.index, job_id, exc)
                    result.success = False
                    result.transcription = None
                    result.error = str(exc) or type(exc).__name__
            output_files.extend(files)
            summaries.append(_summarize(result, files))

        store.update_job(
            job_id,
            status=JobStatus.COMPLETED,
            output_files=output_files,
            item_results=summaries,
        )
        logger.info("Job %s completed: %d item(s), %d file(s)", job_id, total, len(output_files))

    except Exception as exc:
        logger.exception("Batch job %s failed", job_id)
        store.update_job(job_id, status=JobStatus.FAILED, error=str(exc) or type(exc).__name__)


def _run_batch_job_sync(job_id: str, items: List[Any], store: JobStore) -> None:
    """Synchronous wrapper for the async batch job.

    WHY: FastAPI runs synchronous background callables in a worker thread,
    which keeps long batches off the request event loop.
    """
    asyncio.run(_run_batch_job(job_id, items, store))


# ---------------------------------------------------------------------------
# Endpoints: Transcriptions
# ---------------------------------------------------------------------------


@app.post(
    "/transcriptions",
    tags=["transcriptions"],
    summary="Convert one transcription",
    description=(
        "Convert a single Whisper transcription record. The body may be the "
        "bare record, a one-element array wrapping it, or a host item "
        "envelope ({\"json\": ...} or {\"binary\": {\"data\": ...}}). "
        "Returns the result record; conversion failures are reported as "
        "success=false, never as a server error."
    ),
)
async def convert_transcription(
    payload: Annotated[
        Any,
        Body(description="Whisper transcription record or host item envelope."),
    ],
) -> Dict[str, Any]:
    return process_item(payload).to_record()


@app.post(
    "/transcriptions/export/{format_key}",
    tags=["transcriptions"],
    summary="Render one output file",
    description=(
        "Convert a single Whisper transcription record and return the file "
        "produced by one formatter. Formatters that produce several files "
        "(plain_text) select one with the index query parameter."
    ),
    responses={
        400: {"model": ErrorResponse, "description": "Unknown output format"},
        409: {"model": ErrorResponse, "description": "Output index out of range"},
        422: {"model": ErrorResponse, "description": "Transcription could not be processed"},
    },
)
async def export_transcription(
    format_key: str,
    payload: Annotated[
        Any,
        Body(description="Whisper transcription record or host item envelope."),
    ],
    index: Annotated[
        int,
        Query(ge=0, description="Which output file to return when the format produces several."),
    ] = 0,
) -> Response:
    if format_key not in FORMATTERS:
        available = ", ".join(sorted(FORMATTERS.keys()))
        raise HTTPException(
            status_code=400,
            detail="Unknown output format '{}'. Available: {}".format(format_key, available),
        )

    result = process_item(payload)
    if not result.success or result.transcription is None:
        raise HTTPException(status_code=422, detail=result.error or "Invalid transcription")

    outputs = FORMATTERS[format_key]().format(result.transcription)
    if index >= len(outputs):
        raise HTTPException(
            status_code=409,
            detail="Format '{}' produces {} file(s); index {} is out of range.".format(
                format_key, len(outputs), index
            ),
        )

    output = outputs[index]
    filename = "transcription{}".format(output.suffix)
    return Response(
        content=output.content,
        media_type=output.media_type,
        headers={"Content-Disposition": 'attachment; filename="{}"'.format(filename)},
    )


# ---------------------------------------------------------------------------
# Endpoints: Batches
# ---------------------------------------------------------------------------


@app.post(
    "/batches",
    response_model=JobCreatedResponse,
    status_code=201,
    tags=["batches"],
    summary="Submit a batch job",
    description=(
        "Submit an array of host items for background conversion. Returns a "
        "job ID immediately. Poll GET /batches/{id} for progress and per-item "
        "results, then download files from GET /batches/{id}/files/{filename}."
    ),
    responses={
        429: {"model": ErrorResponse, "description": "Too many concurrent jobs"},
    },
)
async def create_batch(
    request: BatchRequest,
    background_tasks: BackgroundTasks,
) -> JobCreatedResponse:
    format_keys: Optional[List[str]] = None
    if request.output_formats:
        format_keys = [f.value for f in request.output_formats]

    config = {
        "batch_size": request.batch_size,
        "output_formats": format_keys,
    }

    try:
        job = job_store.create_job(item_count=len(request.items), config=config)
    except ValueError as exc:
        raise HTTPException(status_code=429, detail=str(exc))

    background_tasks.add_task(_run_batch_job_sync, job.id, list(request.items), job_store)

    return JobCreatedResponse(
        id=job.id,
        status=job.status.value,
        item_count=job.item_count,
    )


@app.get(
    "/batches/{job_id}",
    response_model=JobResponse,
    tags=["batches"],
    summary="Get batch job status",
    description=(
        "Poll this endpoint to track the progress of a batch job. Returns "
        "current status, progress, per-item outcomes, and output files."
    ),
    responses={
        404: {"model": ErrorResponse, "description": "Job not found"},
    },
)
async def get_batch(job_id: str) -> JobResponse:
    return _job_to_response(_get_job_or_404(job_id))


@app.get(
    "/batches/{job_id}/files",
    response_model=FileListResponse,
    tags=["batches"],
    summary="List output files for a completed job",
    description=(
        "Returns metadata for all output files produced by a completed "
        "batch job. Use the filenames to download individual files."
    ),
    responses={
        404: {"model": ErrorResponse, "description": "Job not found"},
        409: {"model": ErrorResponse, "description": "Job not yet completed"},
    },
)
async def list_batch_files(job_id: str) -> FileListResponse:
    job = _get_job_or_404(job_id)
    _require_completed(job)

    files = []
    for fname in job.output_files:
        fpath = job.output_dir / fname
        if fpath.exists():
            files.append(FileInfo(
                filename=fname,
                media_type=_infer_media_type(fname),
                size=fpath.stat().st_size,
            ))

    return FileListResponse(job_id=job.id, files=files)


@app.get(
    "/batches/{job_id}/files/{filename}",
    tags=["batches"],
    summary="Download a single output file",
    description=(
        "Download a specific output file from a completed batch job. The "
        "filename must match one of the files listed in the job's output_files."
    ),
    responses={
        400: {"model": ErrorResponse, "description": "Invalid filename"},
        404: {"model": ErrorResponse, "description": "Job or file not found"},
        409: {"model": ErrorResponse, "description": "Job not yet completed"},
    },
)
async def download_batch_file(job_id: str, filename: str) -> Response:
    # Reject path separators before touching the filesystem
    if "/" in filename or "\\" in filename or ".." in filename:
        raise HTTPException(status_code=400, detail="Invalid filename")

    job = _get_job_or_404(job_id)
    _require_completed(job)

    if filename not in job.output_files:
        raise HTTPException(
            status_code=404,
            detail="File '{}' not found in job output files.".format(filename),
        )

    fpath = job.output_dir / filename
    if not fpath.exists():
        raise HTTPException(
            status_code=404,
            detail="File '{}' not found on disk.".format(filename),
        )

    return Response(
        content=fpath.read_bytes(),
        media_type=_infer_media_type(filename),
        headers={"Content-Disposition": 'attachment; filename="{}"'.format(filename)},
    )


@app.delete(
    "/batches/{job_id}",
    status_code=204,
    tags=["batches"],
    summary="Delete a batch job",
    description="Delete a batch job and all its output files.",
    responses={
        404: {"model": ErrorResponse, "description": "Job not found"},
    },
)
async def delete_batch(job_id: str) -> Response:
    if not job_store.delete_job(job_id):
        raise HTTPException(status_code=404, detail="Job not found: {}".format(job_id))
    return Response(status_code=204)


# ---------------------------------------------------------------------------
# Endpoints: Formats
# ---------------------------------------------------------------------------


@app.get(
    "/formats",
    response_model=List[FormatInfo],
    tags=["formats"],
    summary="List available output formats",
    description=(
        "Returns all supported output formats with their identifiers, "
        "human-readable names, and the file suffixes they produce."
    ),
)
async def list_formats() -> List[FormatInfo]:
    # An empty record is a valid input, so every formatter can report its suffixes
    sample = process_transcription({})
    result = []
    for key, formatter_cls in sorted(FORMATTERS.items()):
        formatter = formatter_cls()
        result.append(FormatInfo(
            key=key,
            name=formatter.name,
            suffixes=[output.suffix for output in formatter.format(sample)],
        ))
    return result


# ---------------------------------------------------------------------------
# Endpoints: Health
# ---------------------------------------------------------------------------


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["health"],
    summary="Health check",
    description="Liveness and readiness check for load balancers and orchestrators.",
)
async def health_check() -> HealthResponse:
    return HealthResponse(status="ok", version=__version__)


def run_api() -> None:
    """Entry point for the whisper-converter-api console script."""
    import uvicorn

    logging.basicConfig(level=LOG_LEVEL, format="%(levelname)s %(name)s: %(message)s")
    uvicorn.run(app, host=API_HOST, port=API_PORT)
