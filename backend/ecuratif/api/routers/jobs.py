"""Import job tracking endpoints."""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ecuratif.api.dependencies.db import get_session
from ecuratif.api.routers.job_helpers import serialize_job
from ecuratif.api.schemas.job import JobStatus
from ecuratif.db.models.import_job import ImportJob
from ecuratif.services.progress_tracker import fetch_progress

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "/",
    summary="List import jobs",
    response_model=list[JobStatus],
)
def list_jobs(
    limit: int = Query(50, ge=1, le=500, description="Maximum number of jobs to return"),
    job_status: str | None = Query(
        None, alias="status", description="Filter by status (pending, running, completed, failed)"
    ),
    db: Session = Depends(get_session),
) -> list[JobStatus]:
    """Return import jobs, newest first, with their latest progress."""
    query = select(ImportJob)
    if job_status:
        query = query.where(ImportJob.status == job_status)
    query = query.order_by(ImportJob.created_at.desc()).limit(limit)

    try:
        jobs = db.scalars(query).all()
    except SQLAlchemyError as exc:
        logger.error(f"Database error listing jobs: {exc}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve jobs",
        ) from exc

    return [serialize_job(job, fetch_progress(job.id)) for job in jobs]


@router.get(
    "/{job_id}",
    summary="Fetch job state, progress and report",
    response_model=JobStatus,
)
def get_job(
    job_id: str,
    db: Session = Depends(get_session),
) -> JobStatus:
    """Polling endpoint for background imports."""
    job = db.get(ImportJob, job_id)
    if not job:
        raise HTTPException(status_code=404, detail="Job not found")
    return serialize_job(job, fetch_progress(job_id))
