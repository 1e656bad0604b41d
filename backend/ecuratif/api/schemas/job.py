"""Async import job payloads."""

from datetime import datetime

from pydantic import BaseModel, Field

from ecuratif.services.import_report import ImportReport


class JobStatus(BaseModel):
    id: str
    filename: str
    status: str = Field(..., description="pending|running|failed|completed")
    progress: float | None = Field(None, description="0-1 range for UI progress bars")
    message: str | None = None
    total_rows: int | None = None
    processed_rows: int | None = None
    error_kind: str | None = None
    error_message: str | None = None
    started_at: datetime | None = None
    finished_at: datetime | None = None
    report: ImportReport | None = None
