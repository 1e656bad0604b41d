from __future__ import annotations

import io

import pytest

from ecuratif.storage.upload_store import open_artifact, save_upload, staged_upload


def test_staged_file_is_deleted_after_use(tmp_path) -> None:
    with staged_upload(io.BytesIO(b"a,b\n"), "export.csv", uploads_dir=tmp_path) as artifact:
        assert artifact.filename == "export.csv"
        assert artifact.read_bytes() == b"a,b\n"
        staged = artifact.path
    assert not staged.exists()


def test_staged_file_is_deleted_on_error(tmp_path) -> None:
    with pytest.raises(RuntimeError):
        with staged_upload(io.BytesIO(b"x"), "export.csv", uploads_dir=tmp_path) as artifact:
            staged = artifact.path
            raise RuntimeError("client went away")
    assert not staged.exists()
    assert list(tmp_path.iterdir()) == []


def test_same_filename_never_overwrites(tmp_path) -> None:
    first = save_upload(io.BytesIO(b"first"), "export.csv", tmp_path)
    second = save_upload(io.BytesIO(b"second"), "export.csv", tmp_path)
    assert first != second
    assert first.read_bytes() == b"first"
    assert second.read_bytes() == b"second"


def test_archive_dir_keeps_processed_upload(tmp_path) -> None:
    uploads = tmp_path / "uploads"
    archive = tmp_path / "archive"
    path = save_upload(io.BytesIO(b"data"), "export.csv", uploads)

    with open_artifact(path, "export.csv", archive_dir=archive):
        pass

    assert not path.exists()
    archived = list(archive.iterdir())
    assert len(archived) == 1
    assert archived[0].read_bytes() == b"data"


def test_staged_name_keeps_extension_but_not_client_path(tmp_path) -> None:
    path = save_upload(io.BytesIO(b"x"), "../../etc/export.csv", tmp_path)
    assert path.parent == tmp_path.resolve()
    assert path.suffix == ".csv"
