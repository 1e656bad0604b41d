"""Turn normalized CSV text into typed candidate records."""

from __future__ import annotations

import csv
import io
import logging
import re
from dataclasses import dataclass
from datetime import date, datetime

from ecuratif.services.import_errors import (
    FieldParseError,
    ParseError,
    RowShapeError,
    UnspecifiedStatusCombination,
)
from ecuratif.services.import_schema import (
    CREATED_DATE_FORMAT,
    CURRENT_SCHEMA,
    SchemaDescriptor,
)
from ecuratif.services.info_status import InfoStatus, derive_status

logger = logging.getLogger(__name__)

# Plain ASCII decimal: no padding, no digit separators
PRIORITY_PATTERN = re.compile(r"[+-]?[0-9]+")

# Row 0 holds the source name, row 1 the column labels.
FIRST_DATA_ROW = 2


@dataclass(frozen=True)
class RawRow:
    index: int
    cells: list[str]


@dataclass(frozen=True)
class ParsedFile:
    entity_name: str
    rows: list[RawRow]


@dataclass(frozen=True)
class CandidateRecord:
    row_index: int
    source_id: int
    agent: str
    event: str
    created: date
    material: str
    detail: str
    target: str
    day_done: str
    priority: int
    estimate: str
    oups: str
    brips: str
    ameps: str
    status: InfoStatus


def _is_blank(cells: list[str]) -> bool:
    return not any(cell.strip() for cell in cells)


def parse_records(payload: bytes | str, delimiter: str = ",") -> ParsedFile:
    """Split an export into its source name and its data rows.

    ``payload`` must already be UTF-8. Blank records are dropped; every
    other record keeps its position in the file as ``RawRow.index``.
    """
    if isinstance(payload, bytes):
        try:
            text = payload.decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise ParseError(f"File is not valid UTF-8: {exc}") from exc
    else:
        text = payload.removeprefix("\ufeff")

    if not text.strip():
        raise ParseError("CSV file appears to be empty")

    try:
        records = list(csv.reader(io.StringIO(text, newline=""), delimiter=delimiter))
    except csv.Error as exc:
        raise ParseError(f"CSV parsing error: {exc}") from exc

    header = records[0] if records else []
    if not header or not header[0].strip():
        raise ParseError("First row must start with the source name")

    rows = [
        RawRow(index=idx, cells=cells)
        for idx, cells in enumerate(records)
        if idx >= FIRST_DATA_ROW and not _is_blank(cells)
    ]
    logger.info(f"Parsed {len(rows)} data rows for source {header[0]!r}")
    return ParsedFile(entity_name=header[0], rows=rows)


def _parse_priority(row: RawRow, raw: str) -> int:
    if not PRIORITY_PATTERN.fullmatch(raw):
        raise FieldParseError(row.index, "priority", raw)
    return int(raw)


def _parse_created(row: RawRow, raw: str) -> date:
    try:
        return datetime.strptime(raw.strip(), CREATED_DATE_FORMAT).date()
    except ValueError:
        raise FieldParseError(row.index, "created", raw) from None


def map_row(
    row: RawRow, source_id: int, schema: SchemaDescriptor = CURRENT_SCHEMA
) -> CandidateRecord:
    """Project one raw row onto the schema and derive its status.

    Raises a RowError subclass when the row cannot become a record.
    """
    if len(row.cells) < schema.required_width:
        raise RowShapeError(row.index, len(row.cells), schema.required_width)

    def cell(field: str) -> str:
        return schema.cell(row.cells, field)

    created = _parse_created(row, cell("created"))
    priority = _parse_priority(row, cell("priority"))

    target = cell("target")
    day_done = cell("day_done")
    status = derive_status(target, day_done)
    if not status.persistable:
        raise UnspecifiedStatusCombination(row.index, day_done)

    return CandidateRecord(
        row_index=row.index,
        source_id=source_id,
        agent=cell("agent"),
        event=cell("event"),
        created=created,
        material=cell("material"),
        detail=cell("detail"),
        target=target,
        day_done=day_done,
        priority=priority,
        estimate=cell("estimate"),
        oups=cell("oups"),
        brips=cell("brips"),
        ameps=cell("ameps"),
        status=status,
    )
