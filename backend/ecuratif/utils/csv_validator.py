"""Validate uploaded CSV files before their content is touched."""

from __future__ import annotations

from pathlib import PurePath

from ecuratif.services.import_errors import FileFormatError


def verify_file_type(filename: str | None, allowed_extension: str = ".csv") -> None:
    """Reject anything whose declared extension is not exactly ``allowed_extension``.

    The comparison is case-sensitive: ``export.CSV`` is rejected.
    """
    if not filename:
        raise FileFormatError("Filename is required")
    suffix = PurePath(filename).suffix
    if suffix != allowed_extension:
        raise FileFormatError(
            f"Only {allowed_extension} uploads are supported (got {filename!r})"
        )
