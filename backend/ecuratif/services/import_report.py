"""Per-row outcome of one CSV import run."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ecuratif.core.config import ImportTransactionPolicy
from ecuratif.services.import_errors import RowError

ROLLED_BACK_KIND = "TransactionRolledBack"


class RowSuccess(BaseModel):
    model_config = ConfigDict(frozen=True)

    row_index: int
    record_id: int


class RowFailure(BaseModel):
    model_config = ConfigDict(frozen=True)

    row_index: int
    error_kind: str
    detail: str


class ImportReport(BaseModel):
    """Serializable summary handed back to the caller."""

    model_config = ConfigDict(frozen=True)

    entity_id: int
    total_rows: int
    succeeded: tuple[RowSuccess, ...] = Field(default_factory=tuple)
    failed: tuple[RowFailure, ...] = Field(default_factory=tuple)
    policy: ImportTransactionPolicy = ImportTransactionPolicy.BEST_EFFORT
    rolled_back: bool = False

    @model_validator(mode="after")
    def _rows_accounted_for(self) -> "ImportReport":
        if self.total_rows != len(self.succeeded) + len(self.failed):
            raise ValueError(
                f"total_rows={self.total_rows} but "
                f"{len(self.succeeded)} succeeded + {len(self.failed)} failed"
            )
        return self

    def summary(self) -> str:
        """One-line message suitable for a flash banner."""
        text = (
            f"import completed: {len(self.succeeded)} succeeded, "
            f"{len(self.failed)} skipped"
        )
        if self.failed:
            first = self.failed[0]
            text += f" - row {first.row_index}: {first.detail}"
        return text


class ReportBuilder:
    """Mutable accumulator owned by a single import run."""

    def __init__(self, entity_id: int, policy: ImportTransactionPolicy) -> None:
        self.entity_id = entity_id
        self.policy = policy
        self._succeeded: dict[int, int] = {}
        self._failed: dict[int, RowFailure] = {}
        self._rolled_back = False

    @property
    def success_count(self) -> int:
        return len(self._succeeded)

    @property
    def failure_count(self) -> int:
        return len(self._failed)

    def add_success(self, row_index: int, record_id: int) -> None:
        self._succeeded[row_index] = record_id

    def add_failure(self, error: RowError) -> None:
        self._failed[error.row_index] = RowFailure(
            row_index=error.row_index, error_kind=error.kind, detail=error.detail
        )

    def roll_back(self, reason: str) -> None:
        """Move every success to the failed list; the batch was undone."""
        for row_index in list(self._succeeded):
            del self._succeeded[row_index]
            self._failed[row_index] = RowFailure(
                row_index=row_index, error_kind=ROLLED_BACK_KIND, detail=reason
            )
        self._rolled_back = True

    def build(self) -> ImportReport:
        succeeded = tuple(
            RowSuccess(row_index=idx, record_id=rid)
            for idx, rid in sorted(self._succeeded.items())
        )
        failed = tuple(self._failed[idx] for idx in sorted(self._failed))
        return ImportReport(
            entity_id=self.entity_id,
            total_rows=len(succeeded) + len(failed),
            succeeded=succeeded,
            failed=failed,
            policy=self.policy,
            rolled_back=self._rolled_back,
        )
