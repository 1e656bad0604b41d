"""Staging area for uploaded CSV files (local filesystem)."""

from __future__ import annotations

import logging
import shutil
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path, PurePath
from typing import BinaryIO

from ecuratif.core.config import get_settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UploadedArtifact:
    """A staged upload: the name the client declared and where the bytes live."""

    filename: str
    path: Path

    def read_bytes(self) -> bytes:
        return self.path.read_bytes()


def save_upload(
    file_obj: BinaryIO, original_name: str | None, uploads_dir: str | Path | None = None
) -> Path:
    """Persist an uploaded file under a fresh name and return its absolute path.

    Names are never reused, so two uploads of ``export.csv`` do not collide.
    """
    target_dir = Path(uploads_dir or get_settings().uploads_dir).resolve()
    target_dir.mkdir(parents=True, exist_ok=True)
    suffix = PurePath(original_name or "").suffix
    target_path = target_dir / f"{uuid.uuid4()}{suffix}"
    file_obj.seek(0)
    with target_path.open("wb") as destination:
        shutil.copyfileobj(file_obj, destination)
    return target_path


def release_upload(path: str | Path, archive_dir: str | Path | None = None) -> None:
    """Delete a staged file, or move it to ``archive_dir`` when one is given."""
    path = Path(path).resolve()
    if not path.exists():
        return
    if archive_dir:
        target_dir = Path(archive_dir)
        target_dir.mkdir(parents=True, exist_ok=True)
        destination = target_dir / path.name
        shutil.move(str(path), destination)
        logger.info(f"Archived upload {path.name} to {target_dir}")
        return
    path.unlink(missing_ok=True)
    logger.info(f"Deleted staged upload {path.name}")


@contextmanager
def open_artifact(
    path: str | Path, filename: str, archive_dir: str | Path | None = None
) -> Iterator[UploadedArtifact]:
    """Hand a staged file to the caller and release it however the block exits."""
    artifact = UploadedArtifact(filename=filename, path=Path(path).resolve())
    try:
        yield artifact
    finally:
        try:
            release_upload(artifact.path, archive_dir)
        except OSError as e:
            logger.warning(f"Failed to release staged upload {artifact.path}: {e}")


@contextmanager
def staged_upload(
    file_obj: BinaryIO,
    filename: str,
    *,
    uploads_dir: str | Path | None = None,
    archive_dir: str | Path | None = None,
) -> Iterator[UploadedArtifact]:
    """Stage ``file_obj`` to disk for the duration of the block."""
    path = save_upload(file_obj, filename, uploads_dir)
    with open_artifact(path, filename, archive_dir) as artifact:
        yield artifact
