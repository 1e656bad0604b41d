"""Persist mapped records one by one and record each outcome."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence

from ecuratif.core.config import ImportTransactionPolicy
from ecuratif.services.csv_ingest import CandidateRecord
from ecuratif.services.import_errors import PersistenceError
from ecuratif.services.import_report import ReportBuilder
from ecuratif.storage.import_storage import ImportStorage, StorageError

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]


def insert_all(
    storage: ImportStorage,
    source_id: int,
    candidates: Sequence[CandidateRecord],
    report: ReportBuilder,
    policy: ImportTransactionPolicy = ImportTransactionPolicy.BEST_EFFORT,
    on_progress: ProgressCallback | None = None,
) -> None:
    """Write every candidate, then commit or roll back according to ``policy``.

    Under BEST_EFFORT a failed row is recorded and skipped. Under
    ALL_OR_NOTHING any failure in the report (including rows rejected before
    this stage) undoes the whole batch.
    """
    total = len(candidates)
    for processed, record in enumerate(candidates, start=1):
        try:
            record_id = storage.insert_info(source_id, record)
        except StorageError as exc:
            error = PersistenceError(record.row_index, str(exc))
            logger.warning(f"Insert failed, {error}")
            report.add_failure(error)
        else:
            report.add_success(record.row_index, record_id)
        if on_progress is not None:
            on_progress(processed, total)

    if policy is ImportTransactionPolicy.ALL_OR_NOTHING and report.failure_count:
        failed = report.failure_count
        storage.rollback()
        report.roll_back(f"batch rolled back: {failed} row(s) failed")
        logger.warning(
            f"All-or-nothing import for source {source_id} rolled back "
            f"({failed} failed rows)"
        )
        return

    storage.commit()
    logger.info(
        f"Committed {report.success_count} rows for source {source_id} "
        f"({report.failure_count} failed)"
    )
