"""Positional layout of the maintenance spreadsheet export.

The export has no usable header: columns are identified by position only.
Offsets are zero-based. Columns 6 and 7 exist in the export but carry
nothing we import.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping


@dataclass(frozen=True)
class SchemaDescriptor:
    version: int
    offsets: Mapping[str, int]

    @property
    def required_width(self) -> int:
        return max(self.offsets.values()) + 1

    def cell(self, row: list[str], field: str) -> str:
        return row[self.offsets[field]]


INFO_SCHEMA_V1 = SchemaDescriptor(
    version=1,
    offsets=MappingProxyType(
        {
            "agent": 0,
            "event": 1,
            "created": 2,
            "material": 3,
            "detail": 4,
            "target": 5,
            "day_done": 8,
            "priority": 9,
            "estimate": 10,
            "oups": 11,
            "brips": 12,
            "ameps": 13,
        }
    ),
)

CURRENT_SCHEMA = INFO_SCHEMA_V1

# Date format of the "created" column.
CREATED_DATE_FORMAT = "%d/%m/%Y"
