"""
Unit tests for the FileObject entity.
"""

from datetime import timedelta

import pytest

from filevault.domain.file_storage.entities import FileObject


def make_file(created_at, **overrides):
    values = dict(
        file_id="abc",
        path="uploads/abc",
        created_at=created_at,
        expires_at=created_at + timedelta(hours=1),
    )
    values.update(overrides)
    return FileObject.create(**values)


class TestFileObjectCreate:
    def test_generate_id_is_unique(self):
        ids = {FileObject.generate_id() for _ in range(100)}
        assert len(ids) == 100

    def test_rejects_expiry_not_after_creation(self, fixed_datetime):
        with pytest.raises(ValueError):
            make_file(fixed_datetime, expires_at=fixed_datetime)

    def test_empty_hash_means_unprotected(self, fixed_datetime):
        file = make_file(fixed_datetime, password_hash="")
        assert file.password_hash is None
        assert not file.is_protected()

    def test_hash_means_protected(self, fixed_datetime):
        assert make_file(fixed_datetime, password_hash="$2b$12$x").is_protected()


class TestFileObjectExpiry:
    def test_not_expired_before_cutoff(self, fixed_datetime):
        file = make_file(fixed_datetime)
        assert not file.is_expired(fixed_datetime + timedelta(minutes=59))

    def test_expired_at_cutoff(self, fixed_datetime):
        file = make_file(fixed_datetime)
        assert file.is_expired(fixed_datetime + timedelta(hours=1))

    def test_remaining_seconds(self, fixed_datetime):
        file = make_file(fixed_datetime)
        assert file.get_remaining_seconds(fixed_datetime) == 3600
        assert file.get_remaining_seconds(fixed_datetime + timedelta(hours=2)) == 0


class TestFileObjectSerialization:
    def test_public_dict_never_contains_hash(self, fixed_datetime):
        file = make_file(fixed_datetime, password_hash="secret-hash", message="hi")
        public = file.to_public_dict()

        assert "secret-hash" not in public.values()
        assert set(public) == {
            "id", "createdAt", "path", "message", "expiresAt", "filename", "size"
        }
        assert public["message"] == "hi"
        assert public["path"].endswith(public["id"])

    def test_storage_dict_round_trip(self, fixed_datetime):
        file = make_file(
            fixed_datetime, password_hash="h", message="m", filename="a.txt", size=5
        )
        assert FileObject.from_dict(file.to_dict()) == file
