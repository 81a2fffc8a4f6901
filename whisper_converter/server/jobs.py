"""In-memory batch job store with TTL cleanup.

WHY: The HTTP API accepts batches of transcription records that may hold
thousands of segments each. Converting and writing every output file can
take a while, so the API returns a job ID immediately and processes the
batch in the background. An in-memory store is sufficient for a
single-team tool with no persistence requirements.

HOW: Three components work together:
  JobStatus:  enum of valid job states
  Job:        dataclass holding job metadata, status, item results,
              and the temp directory for output files
  JobStore:   thread-safe dict-based store with create/update/get/list/
              delete and TTL cleanup

RULES:
- All store mutations are protected by threading.Lock for thread safety
- Each job gets a dedicated temp directory for output files
- TTL-based expiry removes stale jobs and cleans up their temp directories
- Job IDs are UUID4 hex strings generated at creation time
- Default TTL is 1 hour (3600 seconds)
- A batch job is COMPLETED even when some items failed; per-item
  failures are reported in item_results. FAILED means the job itself
  could not run.
"""

from __future__ import annotations

import enum
import logging
import shutil
import tempfile
import threading
import time
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

# Default time-to-live for completed/failed jobs (seconds)
DEFAULT_TTL_SECONDS = 3600


class JobStatus(str, enum.Enum):
    """Valid states for a batch job.

    HOW: Inherits from str so values serialize cleanly to JSON.

    RULES:
    - pending: job created, not yet started
    - processing: items being normalized and formatted
    - completed: all items handled, output files ready for download
    - failed: the job could not run (per-item failures do not count)
    """

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


_TERMINAL_STATUSES = (JobStatus.COMPLETED, JobStatus.FAILED)


@dataclass
class Job:
    """Metadata and state for a single batch job.

    RULES:
    - id: UUID4 hex string, unique and immutable after creation
    - status: current JobStatus (starts as PENDING)
    - item_count: number of items submitted
    - output_dir: Path to temp directory for output files
    - created_at / updated_at: epoch timestamps
    - completed_at: epoch timestamp when job reached a terminal state, or None
    - error: error message string if status is FAILED, else None
    - progress: optional progress info, e.g. {"done": 20, "total": 50}
    - config: job configuration dict (batch size, formats)
    - output_files: output filenames available for download
    - item_results: one summary dict per item, in input order
    """

    id: str
    status: JobStatus
    item_count: int
    output_dir: Path
    created_at: float
    updated_at: float
    completed_at: Optional[float] = None
    error: Optional[str] = None
    progress: Optional[Dict[str, Any]] = None
    config: Dict[str, Any] = field(default_factory=dict)
    output_files: List[str] = field(default_factory=list)
    item_results: List[Dict[str, Any]] = field(default_factory=list)


class JobStore:
    """Thread-safe in-memory store for batch jobs.

    WHY: API requests and background tasks access job state
    simultaneously. A centralized store with locking prevents race
    conditions and provides a clean interface for CRUD operations.

    RULES:
    - All public methods that mutate state acquire self._lock
    - create_job() raises ValueError when max_jobs is reached
    - get_job() returns None for missing job IDs (no exceptions)
    - update_job() applies only non-None arguments
    - delete_job() removes the job and cleans up its temp directory
    - cleanup_expired() removes terminal jobs past their TTL
    """

    def __init__(
        self,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        max_jobs: int = 100,
    ) -> None:
        self._jobs: Dict[str, Job] = {}
        self._lock = threading.Lock()
        self._ttl_seconds = ttl_seconds
        self.max_jobs = max_jobs

    def create_job(
        self,
        item_count: int,
        config: Optional[Dict[str, Any]] = None,
    ) -> Job:
        """Create a new job in PENDING state with a dedicated temp directory.

        Raises:
            ValueError: If the store already holds max_jobs jobs.
        """
        with self._lock:
            if len(self._jobs) >= self.max_jobs:
                raise ValueError(
                    "Maximum number of concurrent jobs ({}) reached".format(
                        self.max_jobs
                    )
                )

            job_id = uuid.uuid4().hex
            now = time.time()
            output_dir = Path(tempfile.mkdtemp(prefix="whisper_job_"))

            job = Job(
                id=job_id,
                status=JobStatus.PENDING,
                item_count=item_count,
                output_dir=output_dir,
                created_at=now,
                updated_at=now,
                config=config or {},
            )

            self._jobs[job_id] = job

        logger.info("Created job %s for %d item(s)", job_id, item_count)
        return job

    def get_job(self, job_id: str) -> Optional[Job]:
        """Retrieve a job by ID, or None if not found.

        The returned Job object is the live instance (not a copy).
        """
        with self._lock:
            return self._jobs.get(job_id)

    def list_jobs(self) -> List[Job]:
        """Return all jobs ordered by creation time (oldest first)."""
        with self._lock:
            return sorted(self._jobs.values(), key=lambda j: j.created_at)

    def update_job(
        self,
        job_id: str,
        status: Optional[JobStatus] = None,
        error: Optional[str] = None,
        progress: Optional[Dict[str, Any]] = None,
        output_files: Optional[List[str]] = None,
        item_results: Optional[List[Dict[str, Any]]] = None,
    ) -> Optional[Job]:
        """Update a job's mutable fields.

        RULES:
        - Returns the updated Job, or None if job_id not found
        - Only non-None arguments are applied
        - updated_at is always bumped on any change
        - completed_at is set when status becomes COMPLETED or FAILED
        """
        with self._lock:
            job = self._jobs.get(job_id)
            if job is None:
                return None

            now = time.time()

            if status is not None:
                job.status = status
            if error is not None:
                job.error = error
            if progress is not None:
                job.progress = progress
            if output_files is not None:
                job.output_files = output_files
            if item_results is not None:
                job.item_results = item_results

            job.updated_at = now

            if job.status in _TERMINAL_STATUSES:
                job.completed_at = now

            return job

    def delete_job(self, job_id: str) -> bool:
        """Delete a job and clean up its temp directory.

        Returns True if the job was found and deleted, False otherwise.
        The directory is removed outside the lock.
        """
        with self._lock:
            job = self._jobs.pop(job_id, None)

        if job is None:
            return False

        self._cleanup_output_dir(job.output_dir)
        logger.info("Deleted job %s", job_id)
        return True

    def cleanup_expired(self) -> int:
        """Remove all terminal jobs whose completed_at is older than the TTL.

        Returns the count of removed jobs.
        """
        now = time.time()
        expired_jobs: List[Job] = []

        with self._lock:
            for job_id, job in list(self._jobs.items()):
                if job.status not in _TERMINAL_STATUSES:
                    continue
                if job.completed_at is None:
                    continue
                if now - job.completed_at > self._ttl_seconds:
                    expired_jobs.append(self._jobs.pop(job_id))

        for job in expired_jobs:
            self._cleanup_output_dir(job.output_dir)
            logger.info("Expired job %s (completed %.0fs ago)", job.id, now - job.completed_at)

        return len(expired_jobs)

    @staticmethod
    def _cleanup_output_dir(output_dir: Path) -> None:
        """Remove a job's temp directory tree; never raises."""
        if output_dir.exists():
            try:
                shutil.rmtree(output_dir)
            except OSError:
                logger.warning("Failed to clean up temp dir: %s", output_dir)
