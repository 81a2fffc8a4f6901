"""Tests for the FastAPI conversion API.

WHY: Validates that every API endpoint behaves correctly: happy paths,
error cases, and edge cases. Uses FastAPI TestClient for synchronous
in-process testing.

HOW: Inline conversion endpoints run the real normalizer. For batch
endpoints the background runner is patched out so tests control job
state directly; TestBatchRunner drives the real runner against the
store to check the files it writes.

RULES:
- All tests use the FastAPI TestClient (synchronous)
- Each test is independent; the module-level job store is reset
- Tests cover: happy paths, 404 not found, 409 conflict, 400/422 bad
  requests, 429 job limit
"""

from __future__ import annotations

import asyncio
import shutil
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from whisper_converter.server.app import _run_batch_job, app, job_store
from whisper_converter.server.jobs import JobStatus


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_job_store():
    """Clear all jobs before and after each test to ensure isolation."""
    job_store._jobs.clear()
    yield
    for job in list(job_store._jobs.values()):
        if job.output_dir.exists():
            shutil.rmtree(job.output_dir, ignore_errors=True)
    job_store._jobs.clear()


@pytest.fixture
def client():
    """TestClient with the background batch runner patched out."""
    with patch(
        "whisper_converter.server.app._run_batch_job_sync",
        new=lambda job_id, items, store: None,
    ):
        yield TestClient(app)


def _completed_job(files):
    """Create a completed job whose output_dir holds the given files."""
    job = job_store.create_job(item_count=1, config={"batch_size": 10, "output_formats": None})
    for name, content in files.items():
        (job.output_dir / name).write_text(content, encoding="utf-8")
    job_store.update_job(
        job.id,
        status=JobStatus.COMPLETED,
        output_files=list(files),
        item_results=[{
            "index": 0, "batch_index": 0, "success": True, "error": None,
            "statistics": {"totalSegments": 1}, "files": list(files),
        }],
    )
    return job


# ---------------------------------------------------------------------------
# POST /transcriptions
# ---------------------------------------------------------------------------


class TestConvertTranscription:

    def test_bare_record(self, client, sample_record):
        resp = client.post("/transcriptions", json=sample_record)
        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert body["processed"]["statistics"]["totalSegments"] == 3
        assert body["processed"]["exportFormats"]["srt"].startswith("1\n00:00:00,000")
        assert body["metadata"]["inputType"] == "whisper-transcription"

    def test_host_envelope(self, client, json_envelope):
        body = client.post("/transcriptions", json=json_envelope).json()
        assert body["success"] is True
        assert body["processed"]["language"] == "english"

    def test_bad_payload_is_a_failure_record(self, client):
        resp = client.post("/transcriptions", json="not a record")
        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is False
        assert body["error"]
        assert body["originalData"] is None
        assert body["metadata"]["inputType"] == "error"


# ---------------------------------------------------------------------------
# POST /transcriptions/export/{format_key}
# ---------------------------------------------------------------------------


class TestExportTranscription:

    def test_srt_download(self, client, sample_record):
        resp = client.post("/transcriptions/export/srt", json=sample_record)
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("application/x-subrip")
        assert 'filename="transcription.srt"' in resp.headers["content-disposition"]
        assert resp.text.startswith("1\n00:00:00,000 --> 00:00:01,500\nHello um world.\n")

    def test_second_plain_text_file(self, client, sample_record):
        resp = client.post("/transcriptions/export/plain_text?index=1", json=sample_record)
        assert resp.status_code == 200
        assert resp.text == "Hello um world. This is a test.\n\nUh, see you later.\n"
        assert "transcription-paragraphs.txt" in resp.headers["content-disposition"]

    def test_index_out_of_range(self, client, sample_record):
        resp = client.post("/transcriptions/export/srt?index=1", json=sample_record)
        assert resp.status_code == 409

    def test_unknown_format(self, client, sample_record):
        resp = client.post("/transcriptions/export/docx", json=sample_record)
        assert resp.status_code == 400
        assert "Unknown output format" in resp.json()["detail"]

    def test_unprocessable_payload(self, client):
        resp = client.post("/transcriptions/export/srt", json=[1, 2, 3])
        assert resp.status_code == 422
        assert "JSON object" in resp.json()["detail"]


# ---------------------------------------------------------------------------
# POST /batches
# ---------------------------------------------------------------------------


class TestCreateBatch:

    def test_submit_returns_201(self, client, sample_record):
        resp = client.post("/batches", json={"items": [sample_record, sample_record]})
        assert resp.status_code == 201
        body = resp.json()
        assert body["status"] == "pending"
        assert body["item_count"] == 2
        job = job_store.get_job(body["id"])
        assert job is not None
        assert job.config == {"batch_size": 10, "output_formats": None}

    def test_output_formats_stored(self, client, sample_record):
        resp = client.post(
            "/batches",
            json={"items": [sample_record], "batch_size": 3, "output_formats": ["srt", "vtt"]},
        )
        job = job_store.get_job(resp.json()["id"])
        assert job.config == {"batch_size": 3, "output_formats": ["srt", "vtt"]}

    def test_unknown_output_format_rejected(self, client, sample_record):
        resp = client.post("/batches", json={"items": [sample_record], "output_formats": ["docx"]})
        assert resp.status_code == 422

    def test_empty_items_rejected(self, client):
        assert client.post("/batches", json={"items": []}).status_code == 422

    def test_non_positive_batch_size_rejected(self, client, sample_record):
        resp = client.post("/batches", json={"items": [sample_record], "batch_size": 0})
        assert resp.status_code == 422

    def test_job_limit_returns_429(self, client, sample_record, monkeypatch):
        monkeypatch.setattr(job_store, "max_jobs", 1)
        assert client.post("/batches", json={"items": [sample_record]}).status_code == 201
        resp = client.post("/batches", json={"items": [sample_record]})
        assert resp.status_code == 429
        assert "Maximum number of concurrent jobs" in resp.json()["detail"]


# ---------------------------------------------------------------------------
# GET /batches/{id}
# ---------------------------------------------------------------------------


class TestGetBatch:

    def test_pending_job(self, client, sample_record):
        job_id = client.post("/batches", json={"items": [sample_record]}).json()["id"]
        body = client.get("/batches/{}".format(job_id)).json()
        assert body["status"] == "pending"
        assert body["output_files"] is None
        assert body["items"] is None

    def test_completed_job(self, client):
        job = _completed_job({"item-0.srt": "1\n"})
        body = client.get("/batches/{}".format(job.id)).json()
        assert body["status"] == "completed"
        assert body["succeeded"] == 1
        assert body["failed"] == 0
        assert body["output_files"] == ["item-0.srt"]
        assert body["items"][0]["files"] == ["item-0.srt"]

    def test_failed_job_exposes_error(self, client):
        job = job_store.create_job(item_count=1, config={"batch_size": 1})
        job_store.update_job(job.id, status=JobStatus.FAILED, error="disk full")
        body = client.get("/batches/{}".format(job.id)).json()
        assert body["status"] == "failed"
        assert body["error"] == "disk full"

    def test_missing_job(self, client):
        resp = client.get("/batches/nonexistent")
        assert resp.status_code == 404
        assert "Job not found" in resp.json()["detail"]


# ---------------------------------------------------------------------------
# GET /batches/{id}/files and downloads
# ---------------------------------------------------------------------------


class TestBatchFiles:

    def test_list_files(self, client):
        job = _completed_job({"item-0.srt": "1\n", "item-0-analysis.json": "{}"})
        body = client.get("/batches/{}/files".format(job.id)).json()
        files = {f["filename"]: f for f in body["files"]}
        assert files["item-0.srt"]["media_type"] == "application/x-subrip"
        assert files["item-0.srt"]["size"] == 2
        assert files["item-0-analysis.json"]["media_type"] == "application/json"

    def test_list_files_not_completed(self, client):
        job = job_store.create_job(item_count=1)
        resp = client.get("/batches/{}/files".format(job.id))
        assert resp.status_code == 409

    def test_download(self, client):
        job = _completed_job({"item-0.vtt": "WEBVTT\n\n"})
        resp = client.get("/batches/{}/files/item-0.vtt".format(job.id))
        assert resp.status_code == 200
        assert resp.text == "WEBVTT\n\n"
        assert resp.headers["content-type"].startswith("text/vtt")
        assert 'filename="item-0.vtt"' in resp.headers["content-disposition"]

    def test_download_unknown_file(self, client):
        job = _completed_job({"item-0.vtt": "WEBVTT\n\n"})
        resp = client.get("/batches/{}/files/item-9.vtt".format(job.id))
        assert resp.status_code == 404

    def test_download_rejects_traversal(self, client):
        job = _completed_job({"item-0.vtt": "WEBVTT\n\n"})
        resp = client.get("/batches/{}/files/..secret".format(job.id))
        assert resp.status_code == 400

    def test_download_not_completed(self, client):
        job = job_store.create_job(item_count=1)
        resp = client.get("/batches/{}/files/item-0.srt".format(job.id))
        assert resp.status_code == 409


# ---------------------------------------------------------------------------
# DELETE /batches/{id}
# ---------------------------------------------------------------------------


class TestDeleteBatch:

    def test_delete(self, client):
        job = _completed_job({"item-0.srt": "1\n"})
        resp = client.delete("/batches/{}".format(job.id))
        assert resp.status_code == 204
        assert job_store.get_job(job.id) is None
        assert not job.output_dir.exists()

    def test_delete_missing(self, client):
        assert client.delete("/batches/nonexistent").status_code == 404


# ---------------------------------------------------------------------------
# Background batch runner
# ---------------------------------------------------------------------------


class TestBatchRunner:

    def test_writes_item_files_and_reports_failures(self, sample_record):
        job = job_store.create_job(
            item_count=3,
            config={"batch_size": 2, "output_formats": ["srt", "plain_text"]},
        )
        items = [sample_record, "garbage", {"json": {"data": sample_record}}]
        asyncio.run(_run_batch_job(job.id, items, job_store))

        assert job.status == JobStatus.COMPLETED
        assert job.progress == {"done": 3, "total": 3}
        assert job.output_files == [
            "item-0.srt", "item-0-cleaned.txt", "item-0-paragraphs.txt",
            "item-2.srt", "item-2-cleaned.txt", "item-2-paragraphs.txt",
        ]
        for name in job.output_files:
            assert (job.output_dir / name).exists()

        results = job.item_results
        assert [r["success"] for r in results] == [True, False, True]
        assert [r["batch_index"] for r in results] == [0, 0, 1]
        assert results[1]["error"]
        assert results[1]["files"] == []
        assert results[0]["statistics"]["totalSegments"] == 3

    def test_all_formats_by_default(self, sample_record):
        job = job_store.create_job(item_count=1, config={"batch_size": 10, "output_formats": None})
        asyncio.run(_run_batch_job(job.id, [sample_record], job_store))
        assert len(job.output_files) == 7
        assert "item-0-karaoke.ass" in job.output_files

    def test_missing_job_is_ignored(self, sample_record):
        asyncio.run(_run_batch_job("nonexistent", [sample_record], job_store))

    def test_unexpected_error_fails_job(self, sample_record):
        job = job_store.create_job(item_count=1, config={"batch_size": 10})
        with patch(
            "whisper_converter.server.app.process_items_async",
            side_effect=RuntimeError("worker crashed"),
        ):
            asyncio.run(_run_batch_job(job.id, [sample_record], job_store))
        assert job.status == JobStatus.FAILED
        assert job.error == "worker crashed"


# ---------------------------------------------------------------------------
# GET /formats and /health
# ---------------------------------------------------------------------------


class TestFormatsAndHealth:

    def test_list_formats(self, client):
        body = client.get("/formats").json()
        formats = {f["key"]: f for f in body}
        assert set(formats) == {
            "srt", "vtt", "ass_karaoke", "plain_text", "word_timings", "analysis",
        }
        assert formats["plain_text"]["suffixes"] == ["-cleaned.txt", "-paragraphs.txt"]
        assert formats["ass_karaoke"]["name"] == "ASS Karaoke"

    def test_health(self, client):
        assert client.get("/health").json() == {"status": "ok", "version": "0.1.0"}
