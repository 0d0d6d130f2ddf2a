"""
Integration tests for LocalFileStorageRepository on a real filesystem.
"""

from datetime import datetime, timezone
from io import BytesIO

import pytest

from filevault.infrastructure.local_file_storage_repository import (
    CHUNK_SIZE,
    LocalFileStorageRepository,
)


@pytest.fixture
def storage(tmp_path):
    return LocalFileStorageRepository(str(tmp_path / "blobs"))


def test_creates_base_directory(tmp_path):
    LocalFileStorageRepository(str(tmp_path / "nested" / "root"))
    assert (tmp_path / "nested" / "root").is_dir()


def test_save_and_open(storage):
    payload = b"z" * (CHUNK_SIZE * 2 + 17)

    assert storage.save("uploads/a", BytesIO(payload)) == len(payload)
    assert storage.exists("uploads/a")
    assert storage.get_size("uploads/a") == len(payload)

    with storage.open("uploads/a") as handle:
        assert handle.read() == payload


def test_save_leaves_no_temporary_files(storage):
    storage.save("uploads/a", BytesIO(b"data"))
    names = [p.name for p in (storage.base_path / "uploads").iterdir()]
    assert names == ["a"]


def test_failed_save_cleans_up(storage):
    class BrokenStream:
        def read(self, size):
            raise OSError("connection reset")

    with pytest.raises(OSError):
        storage.save("uploads/a", BrokenStream())

    assert not storage.exists("uploads/a")
    assert list((storage.base_path / "uploads").iterdir()) == []


def test_open_missing_returns_none(storage):
    assert storage.open("uploads/missing") is None
    assert storage.get_size("uploads/missing") is None


def test_delete_reports_whether_removed(storage):
    storage.save("uploads/a", BytesIO(b"data"))

    assert storage.delete("uploads/a") is True
    assert storage.delete("uploads/a") is False
    assert not storage.exists("uploads/a")


@pytest.mark.parametrize("path", ["", "   ", "../escape", "uploads/../../escape"])
def test_rejects_paths_outside_root(storage, path):
    with pytest.raises(ValueError):
        storage.save(path, BytesIO(b"x"))
    assert storage.open(path) is None
    assert storage.delete(path) is False


def test_list_blobs(storage):
    before = datetime.now(timezone.utc).replace(microsecond=0)
    storage.save("uploads/a", BytesIO(b"1"))
    storage.save("uploads/b", BytesIO(b"2"))
    storage.save("other/c", BytesIO(b"3"))

    listed = dict(storage.list_blobs("uploads"))

    assert set(listed) == {"uploads/a", "uploads/b"}
    assert all(modified >= before for modified in listed.values())
    assert len(dict(storage.list_blobs())) == 3


def test_list_blobs_missing_prefix(storage):
    assert list(storage.list_blobs("nothing-here")) == []
