"""Import progress snapshots kept in Redis for the job polling endpoints.

Snapshots are best effort: the job row in the database is the record of
truth, so a Redis outage only costs pollers their live counters.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Any

from redis.exceptions import RedisError

from ecuratif.core.config import get_settings
from ecuratif.utils.redis_client import create_redis_client

logger = logging.getLogger(__name__)

settings = get_settings()
redis_client = create_redis_client(settings.redis_url, decode_responses=True)

SNAPSHOT_KEY = "imports:progress:{job_id}"
SNAPSHOT_TTL = timedelta(hours=24)


@dataclass(frozen=True)
class ImportProgress:
    """Where a background import stands."""

    job_id: str
    status: str
    processed: int = 0
    total: int = 0
    message: str | None = None
    error_kind: str | None = None

    @property
    def fraction(self) -> float:
        if self.total:
            return min(self.processed / self.total, 1.0)
        return 1.0 if self.status == "completed" else 0.0

    def to_payload(self) -> dict[str, Any]:
        return {
            "job_id": self.job_id,
            "status": self.status,
            "progress": self.fraction,
            "message": self.message or f"Import {self.status}",
            "meta": {
                "processed": self.processed,
                "total": self.total,
                "error_kind": self.error_kind,
            },
        }


def publish_progress(snapshot: ImportProgress) -> None:
    """Overwrite the job's snapshot; Redis errors are logged and dropped."""
    try:
        redis_client.set(
            SNAPSHOT_KEY.format(job_id=snapshot.job_id),
            json.dumps(snapshot.to_payload()),
            ex=int(SNAPSHOT_TTL.total_seconds()),
        )
    except RedisError as e:
        logger.warning(f"Could not publish progress for job {snapshot.job_id}: {e}")


def fetch_progress(job_id: str) -> dict[str, Any]:
    """Latest snapshot payload for ``job_id``, or ``{}`` if none is readable."""
    try:
        raw = redis_client.get(SNAPSHOT_KEY.format(job_id=job_id))
    except RedisError as e:
        logger.warning(f"Could not fetch progress for job {job_id}: {e}")
        return {}
    if not raw:
        return {}
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        logger.warning(f"Discarding unreadable progress snapshot for job {job_id}")
        return {}
