from __future__ import annotations

import pytest
from pydantic import ValidationError

from ecuratif.core.config import ImportTransactionPolicy
from ecuratif.services.import_errors import FieldParseError, RowShapeError
from ecuratif.services.import_report import ImportReport, ReportBuilder, RowSuccess


def _builder() -> ReportBuilder:
    return ReportBuilder(entity_id=3, policy=ImportTransactionPolicy.BEST_EFFORT)


def test_entries_are_sorted_by_row_index() -> None:
    builder = _builder()
    builder.add_success(5, 50)
    builder.add_failure(RowShapeError(4, width=3, required=14))
    builder.add_success(2, 20)
    builder.add_failure(FieldParseError(3, "priority", "abc"))

    report = builder.build()

    assert [s.row_index for s in report.succeeded] == [2, 5]
    assert [f.row_index for f in report.failed] == [3, 4]
    assert report.total_rows == 4


def test_report_is_frozen() -> None:
    report = _builder().build()
    with pytest.raises(ValidationError):
        report.total_rows = 10


def test_total_must_match_entries() -> None:
    with pytest.raises(ValidationError):
        ImportReport(
            entity_id=1,
            total_rows=2,
            succeeded=(RowSuccess(row_index=2, record_id=1),),
        )


def test_roll_back_moves_successes_to_failures() -> None:
    builder = _builder()
    builder.add_success(2, 20)
    builder.add_failure(FieldParseError(3, "created", "2024-01-01"))
    builder.roll_back("batch rolled back")

    report = builder.build()

    assert report.rolled_back
    assert report.succeeded == ()
    assert [(f.row_index, f.error_kind) for f in report.failed] == [
        (2, "TransactionRolledBack"),
        (3, "FieldParseError"),
    ]


def test_serializes_to_plain_json() -> None:
    builder = _builder()
    builder.add_success(2, 20)
    builder.add_failure(FieldParseError(3, "priority", "abc"))

    payload = builder.build().model_dump(mode="json")

    assert payload["entity_id"] == 3
    assert payload["policy"] == "best_effort"
    assert payload["succeeded"] == [{"row_index": 2, "record_id": 20}]
    assert payload["failed"][0]["error_kind"] == "FieldParseError"
    assert ImportReport.model_validate(payload).total_rows == 2
