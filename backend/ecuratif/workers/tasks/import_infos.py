"""Celery task running a CSV import outside the request cycle."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

from sqlalchemy.orm import Session

from ecuratif.core.config import get_settings
from ecuratif.db.models.import_job import ImportJob
from ecuratif.db.session import get_fresh_session
from ecuratif.services.import_errors import PipelineAbort
from ecuratif.services.import_pipeline import run_import
from ecuratif.services.progress_tracker import ImportProgress, publish_progress
from ecuratif.storage.import_storage import SQLAlchemyImportStorage
from ecuratif.storage.upload_store import open_artifact, release_upload
from ecuratif.workers.celery_app import celery_app

logger = logging.getLogger(__name__)

# Publish a progress snapshot every N written rows
PROGRESS_EVERY = 25


def process_import_job(
    job_id: str,
    file_path: str,
    filename: str,
    session_factory: Callable[[], Session] = get_fresh_session,
) -> dict[str, Any]:
    """Run the import for ``job_id`` and record the outcome on the job row.

    Job bookkeeping and imported records use separate sessions so that a
    rolled-back batch does not undo the job's own status updates.
    """
    settings = get_settings()
    job_session = session_factory()
    job: ImportJob | None = job_session.get(ImportJob, job_id)
    if not job:
        logger.warning(f"Import job {job_id} not found, discarding {file_path}")
        release_upload(file_path, settings.archive_dir)
        job_session.close()
        return {"job_id": job_id, "status": "missing"}

    import_session = session_factory()
    try:
        job.status = "running"
        job.started_at = datetime.now(timezone.utc)
        job_session.commit()
        publish_progress(ImportProgress(job_id, "running", message="Import started"))

        def on_progress(processed: int, total: int) -> None:
            if processed % PROGRESS_EVERY and processed != total:
                return
            publish_progress(
                ImportProgress(
                    job_id,
                    "running",
                    processed=processed,
                    total=total,
                    message=f"Written {processed}/{total} rows",
                )
            )

        with open_artifact(file_path, filename, settings.archive_dir) as artifact:
            try:
                report = run_import(
                    artifact,
                    SQLAlchemyImportStorage(import_session),
                    settings=settings,
                    on_progress=on_progress,
                )
            except PipelineAbort as exc:
                job.status = "failed"
                job.error_kind = exc.kind
                job.error_message = str(exc)
                job.finished_at = datetime.now(timezone.utc)
                job_session.commit()
                publish_progress(
                    ImportProgress(
                        job_id,
                        "failed",
                        message=f"Import failed: {exc}",
                        error_kind=exc.kind,
                    )
                )
                return {"job_id": job_id, "status": "failed", "error_kind": exc.kind}

        job.status = "completed"
        job.total_rows = report.total_rows
        job.processed_rows = report.total_rows
        job.report = report.model_dump(mode="json")
        job.finished_at = datetime.now(timezone.utc)
        job_session.commit()
        publish_progress(
            ImportProgress(
                job_id,
                "completed",
                processed=report.total_rows,
                total=report.total_rows,
                message=report.summary(),
            )
        )
        return {"job_id": job_id, "status": "completed"}
    except Exception as exc:
        logger.error(f"Import job {job_id} crashed: {exc}", exc_info=True)
        import_session.rollback()
        job_session.rollback()
        job.status = "failed"
        job.error_kind = type(exc).__name__
        job.error_message = str(exc)
        job.finished_at = datetime.now(timezone.utc)
        job_session.commit()
        publish_progress(
            ImportProgress(
                job_id,
                "failed",
                message="Import failed",
                error_kind=type(exc).__name__,
            )
        )
        raise
    finally:
        import_session.close()
        job_session.close()


@celery_app.task(bind=True, name="ecuratif.workers.tasks.import_infos")
def import_infos_task(self, job_id: str, file_path: str, filename: str):
    """Worker entry point; see ``process_import_job``."""
    return process_import_job(job_id, file_path, filename)
