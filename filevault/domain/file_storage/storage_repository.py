"""
Blob Storage Repository Interface

Abstract interface for physical blob storage operations.
Keeps the domain layer independent of where the bytes actually live.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import BinaryIO, Iterator, Optional, Tuple


class IBlobStorageRepository(ABC):
    """
    Unified interface for blob storage operations.

    Contract Guarantees:
    - Paths are relative to the storage root
    - save() creates parent directories and never leaves a partial blob
      visible under the target path
    - open() returns None for non-existent blobs (no exceptions)
    - delete() is idempotent and reports whether something was removed
    - exists() never raises for invalid paths

    Thread Safety:
    - Implementations must be safe for concurrent use across requests
    """

    @abstractmethod
    def save(self, file_path: str, content: BinaryIO) -> int:
        """
        Store binary content at the given path.

        Args:
            file_path: Relative path for the blob (e.g., 'uploads/<id>')
            content: Binary file-like object, read until exhausted

        Returns:
            Number of bytes written

        Raises:
            ValueError: If file_path is empty or escapes the storage root
            IOError: If the content could not be written
        """
        pass  # pragma: no cover

    @abstractmethod
    def open(self, file_path: str) -> Optional[BinaryIO]:
        """
        Open a blob for streaming reads.

        The caller owns the returned handle and must close it.

        Returns:
            Readable binary stream, or None if the blob does not exist
        """
        pass  # pragma: no cover

    @abstractmethod
    def delete(self, file_path: str) -> bool:
        """
        Delete a blob if it exists.

        Returns:
            True if a blob was removed, False if it was already absent

        Raises:
            IOError: If the blob exists but could not be removed
        """
        pass  # pragma: no cover

    @abstractmethod
    def exists(self, file_path: str) -> bool:
        """Check if a blob exists at the given path."""
        pass  # pragma: no cover

    @abstractmethod
    def get_size(self, file_path: str) -> Optional[int]:
        """Size of the blob in bytes, or None if absent."""
        pass  # pragma: no cover

    @abstractmethod
    def list_blobs(self, prefix: str = "") -> Iterator[Tuple[str, datetime]]:
        """
        Iterate over stored blobs.

        Yields:
            (relative_path, modified_at) tuples
        """
        pass  # pragma: no cover
