"""
File Storage Services

Domain services for credential-free file removal: timer expiry,
periodic sweeps and orphaned blob reconciliation.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from ..events import FileExpiredEvent
from .entities import utcnow
from .repositories import FileRepository
from .storage_repository import IBlobStorageRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReapResult:
    """Outcome of removing one file."""
    file_id: str
    metadata_deleted: bool
    blob_deleted: bool

    @property
    def already_gone(self) -> bool:
        """True if another deletion path removed the record first."""
        return not self.metadata_deleted


class FileReaper:
    """
    Domain service that removes files without a credential check.

    Deletes metadata first, through the repository's atomic delete, and
    only the caller that got the record back goes on to remove the blob.
    A record that is already gone means another path won the race and is
    treated as a no-op.
    """

    def __init__(
        self,
        file_repository: FileRepository,
        storage_repository: IBlobStorageRepository,
        event_publisher=None,
    ):
        """
        Args:
            file_repository: Metadata store
            storage_repository: Blob store
            event_publisher: Optional publisher for FileExpiredEvent
        """
        self.file_repo = file_repository
        self.storage_repo = storage_repository
        self.event_publisher = event_publisher

    def reap(self, file_id: str, trigger: str = "timer") -> ReapResult:
        """
        Remove a file's metadata and blob.

        Never raises for missing data: a missing record or blob is logged.
        Storage backend errors on the metadata delete do propagate.

        Args:
            file_id: File identifier
            trigger: What caused the removal, for logging ("timer", "sweep")

        Returns:
            ReapResult describing what was removed
        """
        record = self.file_repo.delete(file_id)
        if record is None:
            logger.debug(f"File {file_id} already removed, nothing to expire")
            return ReapResult(file_id, metadata_deleted=False, blob_deleted=False)

        blob_deleted = False
        try:
            blob_deleted = self.storage_repo.delete(record.path)
            if not blob_deleted:
                logger.warning(
                    f"Blob {record.path} of expired file {file_id} was already missing"
                )
        except OSError as e:
            logger.error(
                f"Could not delete blob {record.path} of expired file {file_id}, "
                f"leaving it to the orphan sweep: {e}"
            )

        if self.event_publisher is not None:
            self.event_publisher.publish(
                FileExpiredEvent(
                    aggregate_id=file_id,
                    occurred_at=utcnow(),
                    path=record.path,
                    blob_missing=not blob_deleted,
                    trigger=trigger,
                )
            )

        return ReapResult(file_id, metadata_deleted=True, blob_deleted=blob_deleted)

    def reap_expired(self, now: Optional[datetime] = None) -> int:
        """
        Remove every file whose expiry cutoff has passed.

        Catches files whose timer was never registered or was lost with
        the process that owned it.

        Returns:
            Number of files removed by this sweep
        """
        now = now or utcnow()
        count = 0

        for file in self.file_repo.get_expired(now):
            try:
                if self.reap(file.file_id, trigger="sweep").metadata_deleted:
                    count += 1
            except Exception as e:
                logger.error(f"Error expiring file {file.file_id}: {e}", exc_info=True)

        return count

    def reap_orphaned_blobs(
        self,
        prefix: str,
        grace: timedelta,
        now: Optional[datetime] = None,
    ) -> int:
        """
        Remove blobs that no metadata record points to.

        Blobs younger than the grace period are skipped since their upload
        may still be writing its record.

        Returns:
            Number of blobs removed
        """
        now = now or utcnow()
        known_paths = {file.path for file in self.file_repo.list_all()}
        count = 0

        for path, modified_at in self.storage_repo.list_blobs(prefix):
            if path in known_paths:
                continue
            if now - modified_at < grace:
                continue
            try:
                if self.storage_repo.delete(path):
                    count += 1
                    logger.info(f"Removed orphaned blob: {path}")
            except OSError as e:
                logger.warning(f"Failed to remove orphaned blob {path}: {e}")

        return count
