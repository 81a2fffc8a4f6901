"""HTTP API package: FastAPI app, request/response models, and job store.

WHY: Automation hosts convert transcriptions over HTTP instead of the CLI.

HOW: app.py defines the routes, models.py the pydantic schemas, jobs.py
the in-memory store backing background batch jobs.
"""
