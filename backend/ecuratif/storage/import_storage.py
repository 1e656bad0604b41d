"""
Storage interface consumed by the import pipeline, and its SQLAlchemy adapter.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ecuratif.db.models.info import Info
from ecuratif.db.models.source import Source
from ecuratif.services.csv_ingest import CandidateRecord


class StorageError(Exception):
    """A single write could not be persisted."""


class ImportStorage(ABC):
    """
    What the pipeline needs from persistence: one lookup, one insert, and
    transaction control.
    """

    @abstractmethod
    def find_source_id(self, name: str) -> int | None:
        """
        Return the id of the source called ``name``, or None.
        """

    @abstractmethod
    def insert_info(self, source_id: int, record: CandidateRecord) -> int:
        """
        Persist one record and return its id. Raise StorageError on failure;
        a failed insert must leave earlier inserts intact.
        """

    @abstractmethod
    def commit(self) -> None:
        ...

    @abstractmethod
    def rollback(self) -> None:
        ...


class SQLAlchemyImportStorage(ImportStorage):
    """
    Write records through an ORM session, one savepoint per row.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def find_source_id(self, name: str) -> int | None:
        return self._session.scalar(select(Source.id).where(Source.name == name))

    def insert_info(self, source_id: int, record: CandidateRecord) -> int:
        info = Info(
            source_id=source_id,
            agent=record.agent,
            event=record.event,
            created=record.created,
            material=record.material,
            detail=record.detail,
            target=record.target,
            day_done=record.day_done,
            priority=record.priority,
            estimate=record.estimate,
            oups=record.oups,
            brips=record.brips,
            ameps=record.ameps,
            status=record.status.value,
        )
        try:
            with self._session.begin_nested():
                self._session.add(info)
                self._session.flush()
        except SQLAlchemyError as exc:
            raise StorageError(str(exc.orig if hasattr(exc, "orig") else exc)) from exc
        return info.id

    def commit(self) -> None:
        self._session.commit()

    def rollback(self) -> None:
        self._session.rollback()
