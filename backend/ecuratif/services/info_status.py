"""Lifecycle vocabulary for maintenance records."""

from __future__ import annotations

from enum import Enum


class InfoStatus(str, Enum):
    """Persisted status strings.

    PENDING, ASSIGNED and RESOLVED are derived on import. ARCHIVED is only
    ever set by an operator. UNKNOWN marks a combination the derivation rule
    does not cover and is never written to the database.
    """

    PENDING = "en attente"
    ASSIGNED = "affecté"
    RESOLVED = "résolu"
    ARCHIVED = "archivé"
    UNKNOWN = "inconnu"

    @classmethod
    def open_statuses(cls) -> tuple["InfoStatus", ...]:
        """Statuses of records that still need work."""
        return (cls.PENDING, cls.ASSIGNED)

    @property
    def persistable(self) -> bool:
        return self is not InfoStatus.UNKNOWN


def _is_empty(value: str | None) -> bool:
    return value is None or not value.strip()


def derive_status(target: str | None, day_done: str | None) -> InfoStatus:
    """Compute a record's status from who it is assigned to and when it was done."""
    if _is_empty(target):
        return InfoStatus.PENDING if _is_empty(day_done) else InfoStatus.UNKNOWN
    if _is_empty(day_done):
        return InfoStatus.ASSIGNED
    return InfoStatus.RESOLVED
