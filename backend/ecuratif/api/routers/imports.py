"""Endpoints for CSV import, inline or as a background job."""

from __future__ import annotations

import io
import logging

from fastapi import (
    APIRouter,
    Depends,
    File,
    HTTPException,
    UploadFile,
    status,
)
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ecuratif.api.dependencies.db import get_session
from ecuratif.api.routers.job_helpers import serialize_job
from ecuratif.api.schemas.job import JobStatus
from ecuratif.core.config import get_settings
from ecuratif.db.models.import_job import ImportJob
from ecuratif.services.import_errors import (
    EntityNotFoundError,
    FileFormatError,
    PipelineAbort,
)
from ecuratif.services.import_pipeline import run_import
from ecuratif.services.import_report import ImportReport
from ecuratif.services.progress_tracker import ImportProgress, publish_progress
from ecuratif.storage.import_storage import SQLAlchemyImportStorage
from ecuratif.storage.upload_store import release_upload, save_upload, staged_upload
from ecuratif.utils.csv_validator import verify_file_type
from ecuratif.workers.tasks.import_infos import import_infos_task

logger = logging.getLogger(__name__)

router = APIRouter()


def _abort_status(exc: PipelineAbort) -> int:
    if isinstance(exc, FileFormatError):
        return status.HTTP_400_BAD_REQUEST
    if isinstance(exc, EntityNotFoundError):
        return status.HTTP_404_NOT_FOUND
    return status.HTTP_422_UNPROCESSABLE_ENTITY


def _checked_upload(file: UploadFile) -> io.BytesIO:
    """Gate the upload on its name and size before anything is staged."""
    settings = get_settings()
    try:
        verify_file_type(file.filename, settings.import_allowed_extension)
    except FileFormatError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc

    content = file.file.read(settings.max_upload_bytes + 1)
    if len(content) > settings.max_upload_bytes:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"File exceeds {settings.max_upload_bytes} bytes",
        )
    return io.BytesIO(content)


@router.post(
    "/",
    summary="Import a CSV export and wait for the report",
    response_model=ImportReport,
)
def import_csv(
    file: UploadFile = File(...),
    db: Session = Depends(get_session),
) -> ImportReport:
    """Run the whole import inside the request and return the per-row report."""
    settings = get_settings()
    content = _checked_upload(file)

    with staged_upload(
        content,
        file.filename,
        uploads_dir=settings.uploads_dir,
        archive_dir=settings.archive_dir,
    ) as artifact:
        try:
            report = run_import(artifact, SQLAlchemyImportStorage(db), settings=settings)
        except PipelineAbort as exc:
            raise HTTPException(
                status_code=_abort_status(exc),
                detail={"error_kind": exc.kind, "detail": str(exc)},
            ) from exc
        except SQLAlchemyError as exc:
            logger.error(f"Database error during import: {exc}", exc_info=True)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Database error during import",
            ) from exc

    logger.info(f"Imported {file.filename}: {report.summary()}")
    return report


@router.post(
    "/jobs",
    summary="Start a background CSV import",
    status_code=status.HTTP_202_ACCEPTED,
    response_model=JobStatus,
)
def enqueue_import(
    file: UploadFile = File(...),
    db: Session = Depends(get_session),
) -> JobStatus:
    """Stage the file, create an import job and hand it to the worker."""
    settings = get_settings()
    content = _checked_upload(file)

    try:
        staged_path = save_upload(content, file.filename, settings.uploads_dir)
    except OSError as exc:
        logger.error(f"OS error staging file: {exc}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to save uploaded file",
        ) from exc

    try:
        job = ImportJob(
            original_filename=file.filename,
            uploaded_file_path=str(staged_path),
        )
        db.add(job)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        release_upload(staged_path)
        logger.error(f"Database error creating import job: {exc}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create import job",
        ) from exc

    try:
        publish_progress(ImportProgress(job.id, "pending", message="Queued"))
        import_infos_task.apply_async(
            args=(job.id, str(staged_path), file.filename),
            queue="imports",
        )
    except Exception as exc:
        logger.error(f"Error enqueueing import task: {exc}", exc_info=True)
        release_upload(staged_path)
        job.status = "failed"
        job.error_kind = "EnqueueError"
        job.error_message = str(exc)
        db.commit()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to start import process",
        ) from exc

    logger.info(f"Created import job {job.id} for file {file.filename}")
    return serialize_job(job, progress_payload={"progress": 0.0, "status": "pending"})
