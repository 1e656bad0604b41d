"""Find the source an import file belongs to."""

from __future__ import annotations

import logging

from ecuratif.services.import_errors import EntityNotFoundError
from ecuratif.storage.import_storage import ImportStorage

logger = logging.getLogger(__name__)


def resolve_source(storage: ImportStorage, name: str) -> int:
    """Return the id of source ``name`` or raise EntityNotFoundError."""
    source_id = storage.find_source_id(name)
    if source_id is None:
        raise EntityNotFoundError(name)
    logger.info(f"Resolved source {name!r} to id {source_id}")
    return source_id
