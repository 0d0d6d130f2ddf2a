"""
Local File Storage Repository Implementation

Concrete implementation of IBlobStorageRepository for the local filesystem.
"""

import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import BinaryIO, Iterator, Optional, Tuple

from filevault.domain.file_storage.storage_repository import IBlobStorageRepository

CHUNK_SIZE = 64 * 1024


class LocalFileStorageRepository(IBlobStorageRepository):
    """
    Local filesystem implementation of IBlobStorageRepository.

    Blobs are written to a temporary file in the target directory and
    renamed into place, so a reader never sees a partially written blob.

    Attributes:
        base_path: Root directory of the blob store
    """

    def __init__(self, base_path: str = "/tmp/filevault"):
        """
        Args:
            base_path: Root directory for blob storage (default: /tmp/filevault)
        """
        self.base_path = Path(base_path).resolve()
        self._ensure_base_directory()

    def _ensure_base_directory(self) -> None:
        try:
            self.base_path.mkdir(parents=True, exist_ok=True)
        except PermissionError as e:
            raise PermissionError(
                f"Insufficient permissions to create storage directory: {self.base_path}"
            ) from e
        except OSError as e:
            raise OSError(
                f"Failed to create storage directory: {self.base_path}"
            ) from e

    def _resolve(self, file_path: str) -> Path:
        """
        Map a relative blob path to an absolute path inside base_path.

        Raises:
            ValueError: If the path is empty or escapes the storage root
        """
        if not file_path or not file_path.strip():
            raise ValueError("file_path cannot be empty")

        full_path = (self.base_path / file_path).resolve()
        if full_path == self.base_path or self.base_path not in full_path.parents:
            raise ValueError(f"file_path escapes storage root: {file_path}")
        return full_path

    def save(self, file_path: str, content: BinaryIO) -> int:
        full_path = self._resolve(file_path)
        full_path.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(dir=full_path.parent, prefix=".upload-")
        written = 0
        try:
            with os.fdopen(fd, "wb") as f:
                while True:
                    chunk = content.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    f.write(chunk)
                    written += len(chunk)
            os.replace(tmp_name, full_path)
        except BaseException:
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass
            raise

        return written

    def open(self, file_path: str) -> Optional[BinaryIO]:
        try:
            full_path = self._resolve(file_path)
            return open(full_path, "rb")
        except (FileNotFoundError, IsADirectoryError, NotADirectoryError, ValueError):
            return None

    def delete(self, file_path: str) -> bool:
        try:
            full_path = self._resolve(file_path)
        except ValueError:
            return False

        try:
            full_path.unlink()
        except FileNotFoundError:
            return False
        except IsADirectoryError:
            return False

        return True

    def exists(self, file_path: str) -> bool:
        try:
            return self._resolve(file_path).is_file()
        except (OSError, ValueError):
            return False

    def get_size(self, file_path: str) -> Optional[int]:
        try:
            full_path = self._resolve(file_path)
            if full_path.is_file():
                return full_path.stat().st_size
            return None
        except (OSError, ValueError):
            return None

    def list_blobs(self, prefix: str = "") -> Iterator[Tuple[str, datetime]]:
        root = self.base_path / prefix if prefix else self.base_path
        if not root.is_dir():
            return

        for path in root.rglob("*"):
            if not path.is_file() or path.name.startswith(".upload-"):
                continue
            try:
                modified_at = datetime.fromtimestamp(path.stat().st_mtime, tz=timezone.utc)
            except FileNotFoundError:
                continue  # removed while listing
            yield path.relative_to(self.base_path).as_posix(), modified_at
