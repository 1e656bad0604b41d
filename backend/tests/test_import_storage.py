"""SQLAlchemy adapter tests against the SQLite test database."""

from __future__ import annotations

from datetime import date

import pytest
from sqlalchemy import func, select

from conftest import FakeCodec, SOURCE_NAME, make_csv, make_row
from ecuratif.db.models.info import Info
from ecuratif.services.csv_ingest import CandidateRecord
from ecuratif.services.import_pipeline import run_import
from ecuratif.services.info_status import InfoStatus
from ecuratif.storage.import_storage import SQLAlchemyImportStorage, StorageError


def _record(row_index: int, source_id: int, **overrides) -> CandidateRecord:
    values = dict(
        row_index=row_index,
        source_id=source_id,
        agent="Dupont",
        event="Fuite",
        created=date(2024, 3, 12),
        material="Vanne",
        detail="Joint",
        target="Martin",
        day_done="",
        priority=1,
        estimate="1h",
        oups="",
        brips="",
        ameps="",
        status=InfoStatus.ASSIGNED,
    )
    values.update(overrides)
    return CandidateRecord(**values)


def test_find_source_id(db_session, source_id) -> None:
    storage = SQLAlchemyImportStorage(db_session)
    assert storage.find_source_id(SOURCE_NAME) == source_id
    assert storage.find_source_id("Inconnue") is None


def test_insert_writes_status_label(db_session, source_id) -> None:
    storage = SQLAlchemyImportStorage(db_session)
    info_id = storage.insert_info(source_id, _record(2, source_id))
    storage.commit()

    info = db_session.get(Info, info_id)
    assert info.status == "affecté"
    assert info.created == date(2024, 3, 12)
    assert info.source_id == source_id


def test_failed_insert_keeps_earlier_rows(db_session, source_id) -> None:
    storage = SQLAlchemyImportStorage(db_session)
    first = storage.insert_info(source_id, _record(2, source_id))
    with pytest.raises(StorageError):
        # Unknown source id violates the foreign key.
        storage.insert_info(9999, _record(3, 9999))
    third = storage.insert_info(source_id, _record(4, source_id))
    storage.commit()

    ids = set(db_session.scalars(select(Info.id)))
    assert ids == {first, third}


def test_rollback_discards_pending_rows(db_session, source_id) -> None:
    storage = SQLAlchemyImportStorage(db_session)
    storage.insert_info(source_id, _record(2, source_id))
    storage.rollback()
    assert db_session.scalar(select(func.count(Info.id))) == 0


def test_pipeline_against_database(db_session, source_id, write_artifact, settings) -> None:
    rows = [
        make_row(),
        make_row(target="Martin"),
        make_row(target="Martin", day_done="20/03/2024"),
        make_row(priority="abc"),
    ]
    report = run_import(
        write_artifact(make_csv(rows)),
        SQLAlchemyImportStorage(db_session),
        codec=FakeCodec(),
        settings=settings,
    )

    assert report.entity_id == source_id
    assert len(report.succeeded) == 3
    statuses = sorted(db_session.scalars(select(Info.status)))
    assert statuses == sorted(["en attente", "affecté", "résolu"])
