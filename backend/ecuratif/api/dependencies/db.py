"""Database session dependency."""

from collections.abc import Generator

from sqlalchemy.orm import Session

from ecuratif.db.session import get_db


def get_session() -> Generator[Session, None, None]:
    """Request-scoped session; each import request gets its own."""
    yield from get_db()
