"""
File Storage Repositories

Repository interface for file metadata persistence.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from .entities import FileObject


class FileRepository(ABC):
    """
    Abstract repository interface for file metadata persistence.

    Contract Guarantees:
    - create() never overwrites an existing record
    - delete() is atomic and returns the record it removed, so concurrent
      deleters can tell who won: exactly one caller gets the record back
    - Implementations raise StorageUnavailableError when the backend
      cannot be reached
    """

    @abstractmethod
    def create(self, file: FileObject) -> bool:
        """
        Persist a new file record.

        Args:
            file: FileObject to save

        Returns:
            True if stored, False if a record with the same id already exists
        """
        pass  # pragma: no cover

    @abstractmethod
    def get(self, file_id: str) -> Optional[FileObject]:
        """
        Retrieve a record by id.

        Returns:
            FileObject if found, None otherwise
        """
        pass  # pragma: no cover

    @abstractmethod
    def delete(self, file_id: str) -> Optional[FileObject]:
        """
        Atomically delete a record.

        Returns:
            The deleted FileObject, or None if it was already absent
        """
        pass  # pragma: no cover

    @abstractmethod
    def list_all(self) -> List[FileObject]:
        """Return every stored record."""
        pass  # pragma: no cover

    @abstractmethod
    def delete_all(self) -> int:
        """
        Delete every record.

        Returns:
            Number of records removed
        """
        pass  # pragma: no cover

    def get_expired(self, now=None) -> List[FileObject]:
        """Records whose expiry cutoff has passed."""
        return [file for file in self.list_all() if file.is_expired(now)]
