"""Typed failures raised by the CSV import pipeline.

Two families:

* ``PipelineAbort`` subclasses stop the whole import before any row is
  written (wrong file type, undecodable content, unknown source).
* ``RowError`` subclasses concern a single row; they are collected into the
  import report and the batch carries on.
"""

from __future__ import annotations


class InfoImportError(Exception):
    """Base class for every import failure."""

    kind = "InfoImportError"

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


class PipelineAbort(InfoImportError):
    """Precondition failure: nothing is persisted."""


class FileFormatError(PipelineAbort):
    kind = "FileFormatError"


class EncodingError(PipelineAbort):
    kind = "EncodingError"


class ParseError(PipelineAbort):
    kind = "ParseError"


class EntityNotFoundError(PipelineAbort):
    kind = "EntityNotFoundError"

    def __init__(self, name: str) -> None:
        super().__init__(f"No source named {name!r}")
        self.name = name


class RowError(InfoImportError):
    """Failure tied to one row of the file."""

    def __init__(self, row_index: int, detail: str) -> None:
        super().__init__(detail)
        self.row_index = row_index

    def __str__(self) -> str:
        return f"row {self.row_index}: {self.detail}"


class RowShapeError(RowError):
    kind = "RowShapeError"

    def __init__(self, row_index: int, width: int, required: int) -> None:
        super().__init__(
            row_index, f"row has {width} cells, at least {required} required"
        )
        self.width = width
        self.required = required


class FieldParseError(RowError):
    kind = "FieldParseError"

    def __init__(self, row_index: int, field: str, value: str) -> None:
        super().__init__(row_index, f"{field} is not valid: {value!r}")
        self.field = field
        self.value = value


class PersistenceError(RowError):
    kind = "PersistenceError"


class UnspecifiedStatusCombination(RowError):
    kind = "UnspecifiedStatusCombination"

    def __init__(self, row_index: int, day_done: str) -> None:
        super().__init__(
            row_index,
            f"day_done is set ({day_done!r}) but target is empty; status unknown",
        )
