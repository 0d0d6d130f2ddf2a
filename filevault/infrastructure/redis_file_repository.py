"""
Redis File Repository Implementation

Concrete Redis-based implementation of the FileRepository interface.
"""

import logging
from typing import List, Optional

from filevault.domain.file_storage.entities import FileObject
from filevault.domain.file_storage.repositories import FileRepository

logger = logging.getLogger(__name__)


class RedisFileRepository(FileRepository):
    """
    Redis-based implementation of FileRepository.

    Each record lives under "file:<id>" as JSON. Records also carry a Redis
    TTL set past their expiry, so metadata cannot outlive a lost timer
    forever; the blob it leaves behind is reclaimed by the orphan sweep.
    """

    def __init__(self, redis_repository, backstop_grace_seconds: int = 3600):
        """
        Initialize with Redis repository.

        Args:
            redis_repository: RedisRepository instance from infrastructure layer
            backstop_grace_seconds: How long past expiry Redis keeps a record
        """
        self.redis_repo = redis_repository
        self.key_prefix = "file"
        self.backstop_grace_seconds = backstop_grace_seconds

    def _key(self, file_id: str) -> str:
        return f"{self.key_prefix}:{file_id}"

    def _deserialize(self, file_id: str, data) -> Optional[FileObject]:
        if data is None:
            return None
        try:
            return FileObject.from_dict(data)
        except (KeyError, TypeError, ValueError) as e:
            logger.error(f"Error deserializing file metadata for {file_id}: {e}")
            return None

    def create(self, file: FileObject) -> bool:
        """Save a new record; refuses to overwrite an existing id."""
        ttl = file.get_remaining_seconds() + self.backstop_grace_seconds
        return self.redis_repo.set_json(
            self._key(file.file_id), file.to_dict(), ttl=ttl, only_if_absent=True
        )

    def get(self, file_id: str) -> Optional[FileObject]:
        """Retrieve a record by id."""
        return self._deserialize(file_id, self.redis_repo.get_json(self._key(file_id)))

    def delete(self, file_id: str) -> Optional[FileObject]:
        """Atomically remove a record and return it."""
        data = self.redis_repo.pop_json(self._key(file_id))
        if data is None:
            return None
        record = self._deserialize(file_id, data)
        if record is None:
            # The key is gone even though its payload was unreadable.
            logger.warning(f"Removed unreadable metadata record {file_id}")
        return record

    def list_all(self) -> List[FileObject]:
        """Return every stored record."""
        keys = self.redis_repo.get_keys_by_pattern(f"{self.key_prefix}:*")
        values = self.redis_repo.get_many_json(keys)

        files = []
        for key, data in zip(keys, values):
            file = self._deserialize(key, data)
            if file is not None:
                files.append(file)

        files.sort(key=lambda file: file.created_at)
        return files

    def delete_all(self) -> int:
        """Delete every record."""
        keys = self.redis_repo.get_keys_by_pattern(f"{self.key_prefix}:*")
        return self.redis_repo.delete(*keys)
