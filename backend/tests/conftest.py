"""Shared fixtures for the ecuratif test suite.

Settings are read from the environment on first use, so the test
environment is pinned here before any ``ecuratif`` module is imported.
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

_TMP = Path(tempfile.mkdtemp(prefix="ecuratif-tests-"))
os.environ["DATABASE_URL"] = f"sqlite:///{_TMP / 'test.db'}"
os.environ["REDIS_URL"] = "redis://localhost:6399/15"
os.environ["UPLOADS_DIR"] = str(_TMP / "uploads")
os.environ.pop("ARCHIVE_DIR", None)
os.environ.pop("IMPORT_TRANSACTION_POLICY", None)

import pytest  # noqa: E402

from ecuratif.core.config import ImportTransactionPolicy, Settings, get_settings  # noqa: E402
from ecuratif.services.import_errors import EncodingError  # noqa: E402
from ecuratif.services.import_schema import CURRENT_SCHEMA  # noqa: E402
from ecuratif.storage.import_storage import ImportStorage, StorageError  # noqa: E402
from ecuratif.storage.upload_store import UploadedArtifact  # noqa: E402

SOURCE_NAME = "Chaudière Bât. A"


def make_row(
    *,
    agent: str = "Dupont",
    event: str = "Fuite",
    created: str = "12/03/2024",
    material: str = "Vanne",
    detail: str = "Joint à remplacer",
    target: str = "",
    day_done: str = "",
    priority: str = "2",
    estimate: str = "2h",
    oups: str = "",
    brips: str = "",
    ameps: str = "",
) -> list[str]:
    """Build one data row laid out like the spreadsheet export."""
    row = [""] * CURRENT_SCHEMA.required_width
    values = {
        "agent": agent,
        "event": event,
        "created": created,
        "material": material,
        "detail": detail,
        "target": target,
        "day_done": day_done,
        "priority": priority,
        "estimate": estimate,
        "oups": oups,
        "brips": brips,
        "ameps": ameps,
    }
    for field, value in values.items():
        row[CURRENT_SCHEMA.offsets[field]] = value
    return row


def make_csv(rows: list[list[str]], source_name: str = SOURCE_NAME) -> str:
    """Serialize a full export: source row, label row, then data rows."""
    lines = [f"{source_name},,export du 01/04/2024", "Agent,Evenement,Date"]
    for row in rows:
        lines.append(",".join(row))
    return "\n".join(lines) + "\n"


class FakeCodec:
    """Codec double that reports a fixed encoding."""

    def __init__(self, label: str = "utf-8", fail: bool = False) -> None:
        self.label = label
        self.fail = fail
        self.converted: list[tuple[str, str]] = []

    def detect(self, payload: bytes) -> str:
        if self.fail:
            raise EncodingError("Unable to detect the file encoding")
        return self.label

    def convert(self, payload: bytes, source: str, target: str) -> bytes:
        self.converted.append((source, target))
        return payload.decode(source).encode(target)


class FakeStorage(ImportStorage):
    """In-memory storage double recording every call."""

    def __init__(
        self,
        sources: dict[str, int] | None = None,
        fail_rows: set[int] | None = None,
    ) -> None:
        self.sources = sources if sources is not None else {SOURCE_NAME: 7}
        self.fail_rows = fail_rows or set()
        self.calls: list[str] = []
        self.pending: dict[int, object] = {}
        self.committed: dict[int, object] = {}
        self._next_id = 100

    def find_source_id(self, name: str) -> int | None:
        self.calls.append("find_source_id")
        return self.sources.get(name)

    def insert_info(self, source_id, record) -> int:
        self.calls.append("insert_info")
        if record.row_index in self.fail_rows:
            raise StorageError("duplicate key value violates unique constraint")
        self._next_id += 1
        self.pending[self._next_id] = record
        return self._next_id

    def commit(self) -> None:
        self.calls.append("commit")
        self.committed.update(self.pending)
        self.pending.clear()

    def rollback(self) -> None:
        self.calls.append("rollback")
        self.pending.clear()


class NoCallStorage(ImportStorage):
    """Storage double that fails the test on any call."""

    def find_source_id(self, name):
        raise AssertionError("storage must not be called")

    def insert_info(self, source_id, record):
        raise AssertionError("storage must not be called")

    def commit(self):
        raise AssertionError("storage must not be called")

    def rollback(self):
        raise AssertionError("storage must not be called")


@pytest.fixture
def settings() -> Settings:
    return get_settings()


@pytest.fixture
def all_or_nothing_settings() -> Settings:
    return get_settings().model_copy(
        update={"import_transaction_policy": ImportTransactionPolicy.ALL_OR_NOTHING}
    )


@pytest.fixture
def write_artifact(tmp_path):
    """Write ``content`` to disk and wrap it as an uploaded artifact."""

    def _write(content: str | bytes, filename: str = "export.csv") -> UploadedArtifact:
        path = tmp_path / f"staged-{filename}"
        data = content.encode("utf-8") if isinstance(content, str) else content
        path.write_bytes(data)
        return UploadedArtifact(filename=filename, path=path)

    return _write


@pytest.fixture
def db_engine():
    """Fresh tables on the test database for every test that asks for it."""
    from ecuratif.db.base import Base
    from ecuratif.db.session import engine, init_schema

    Base.metadata.drop_all(engine)
    init_schema(engine)
    yield engine
    Base.metadata.drop_all(engine)


@pytest.fixture
def db_session(db_engine):
    from ecuratif.db.session import SessionLocal

    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def source_id(db_session) -> int:
    from ecuratif.db.models.source import Source

    source = Source(name=SOURCE_NAME, code_gmao="GM-001")
    db_session.add(source)
    db_session.commit()
    return source.id
