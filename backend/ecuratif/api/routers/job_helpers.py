"""Shared helpers for shaping job responses."""
from __future__ import annotations

from ecuratif.api.schemas.job import JobStatus
from ecuratif.db.models.import_job import ImportJob


def serialize_job(job: ImportJob, progress_payload: dict | None) -> JobStatus:
    """Combine DB state + cached progress snapshot into a response schema."""
    progress_payload = progress_payload or {}

    progress = progress_payload.get("progress")
    if progress is None and job.status == "completed":
        progress = 1.0

    message = progress_payload.get("message")
    if not message:
        message = job.error_message or f"Import {job.status}"

    # The DB row is authoritative once the job has finished.
    if job.status in ("completed", "failed"):
        status_value = job.status
    else:
        status_value = progress_payload.get("status") or job.status

    return JobStatus(
        id=job.id,
        filename=job.original_filename,
        status=status_value,
        progress=progress,
        message=message,
        total_rows=job.total_rows,
        processed_rows=job.processed_rows,
        error_kind=job.error_kind,
        error_message=job.error_message,
        started_at=job.started_at or job.created_at,
        finished_at=job.finished_at,
        report=job.report,
    )
