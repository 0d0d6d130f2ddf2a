"""
Vault Service

Application service orchestrating the file lifecycle:
upload, metadata lookup, streaming download and deletion,
behind the per-file credential gate.
"""

import logging
from io import BytesIO
from typing import Any, BinaryIO, Callable, Dict, Iterator, List, Optional, Union

from filevault.domain.errors import (
    FileObjectNotFoundError,
    InvalidPasswordError,
    InvalidUploadError,
    PasswordRequiredError,
    StorageUnavailableError,
)
from filevault.domain.events import (
    ExpiryScheduleFailedEvent,
    FileDeletedEvent,
    FileStoredEvent,
)
from filevault.domain.expiry import ExpiryPolicy, ExpiryScheduler
from filevault.domain.file_storage import (
    FileObject,
    FileReaper,
    FileRepository,
    IBlobStorageRepository,
    PasswordHasher,
)
from filevault.domain.file_storage.entities import utcnow

logger = logging.getLogger(__name__)

DOWNLOAD_CHUNK_SIZE = 64 * 1024


class BlobDownload:
    """
    Lazy byte stream over a stored blob.

    Iterating yields chunks; close() releases the underlying handle and is
    safe to call more than once. Usable as a context manager.
    """

    def __init__(self, file: FileObject, handle: BinaryIO, size: Optional[int],
                 chunk_size: int = DOWNLOAD_CHUNK_SIZE):
        self.file = file
        self.size = size
        self.chunk_size = chunk_size
        self._handle = handle

    @property
    def download_name(self) -> str:
        return self.file.filename or self.file.file_id

    def __iter__(self) -> Iterator[bytes]:
        while True:
            chunk = self._handle.read(self.chunk_size)
            if not chunk:
                break
            yield chunk

    def read(self) -> bytes:
        """Read the remaining content at once."""
        return b"".join(self)

    def close(self) -> None:
        self._handle.close()

    def __enter__(self) -> "BlobDownload":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


class VaultService:
    """
    Sole entry point of the transport layer into the vault.

    Upload writes the blob, then the metadata record, then registers the
    expiry timer. If the record cannot be written the blob is removed
    again before the error surfaces. Reads and deletes pass the credential
    gate before touching anything.
    """

    def __init__(
        self,
        file_repository: FileRepository,
        storage_repository: IBlobStorageRepository,
        password_hasher: PasswordHasher,
        expiry_scheduler: ExpiryScheduler,
        expiry_policy: ExpiryPolicy,
        reaper: FileReaper,
        event_publisher=None,
        blob_prefix: str = "uploads",
        clock: Callable = utcnow,
    ):
        """
        Args:
            file_repository: Metadata store
            storage_repository: Blob store
            password_hasher: Credential verifier
            expiry_scheduler: Timer registry; its callback must reap files
            expiry_policy: Computes each file's expiry cutoff
            reaper: Credential-free removal, used for files found expired
            event_publisher: Optional domain event publisher
            blob_prefix: Directory below the blob store root for uploads
            clock: Source of the current time
        """
        self.file_repo = file_repository
        self.storage_repo = storage_repository
        self.password_hasher = password_hasher
        self.scheduler = expiry_scheduler
        self.expiry_policy = expiry_policy
        self.reaper = reaper
        self.event_publisher = event_publisher
        self.blob_prefix = blob_prefix.strip("/")
        self.clock = clock

    # ------------------------------------------------------------------
    # Upload
    # ------------------------------------------------------------------

    def upload(
        self,
        content: Union[bytes, BinaryIO],
        password: Optional[str] = None,
        message: Optional[str] = None,
        filename: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Store a new file.

        Args:
            content: Raw bytes or a readable binary stream
            password: Optional passphrase guarding the file
            message: Optional note returned on every read
            filename: Optional original filename, used as download name

        Returns:
            Public representation of the created record

        Raises:
            InvalidUploadError: If the content is empty
            StorageUnavailableError: If the blob or record could not be written
        """
        if isinstance(content, (bytes, bytearray)):
            content = BytesIO(content)

        file_id = FileObject.generate_id()
        path = f"{self.blob_prefix}/{file_id}" if self.blob_prefix else file_id
        password_hash = self.password_hasher.hash(password) if password else None

        try:
            size = self.storage_repo.save(path, content)
        except (OSError, ValueError) as e:
            logger.error(f"Failed to write blob {path}: {e}")
            self._discard_blob(path)
            raise StorageUnavailableError(f"Could not store blob {path}", original_error=e)

        if size == 0:
            self._discard_blob(path)
            raise InvalidUploadError("Uploaded file is empty")

        created_at = self.clock()
        record = FileObject.create(
            file_id=file_id,
            path=path,
            created_at=created_at,
            expires_at=self.expiry_policy.expires_at(created_at),
            password_hash=password_hash,
            message=message or None,
            filename=filename or None,
            size=size,
        )

        try:
            created = self.file_repo.create(record)
        except StorageUnavailableError:
            self._discard_blob(path)
            raise
        if not created:
            self._discard_blob(path)
            raise StorageUnavailableError(f"Metadata record {file_id} already exists")

        self._schedule_expiry(record)

        self._publish(
            FileStoredEvent(
                aggregate_id=file_id,
                occurred_at=created_at,
                path=path,
                size=size,
                protected=record.is_protected(),
                expires_at=record.expires_at,
            )
        )

        return record.to_public_dict()

    # ------------------------------------------------------------------
    # Credential-gated operations
    # ------------------------------------------------------------------

    def get_metadata(self, file_id: str, password: Optional[str] = None) -> Dict[str, Any]:
        """
        Look up a file's metadata.

        Raises:
            FileObjectNotFoundError: No such file
            PasswordRequiredError: File is protected and no password was given
            InvalidPasswordError: Password does not match
        """
        return self._authorize(file_id, password).to_public_dict()

    def download(self, file_id: str, password: Optional[str] = None) -> BlobDownload:
        """
        Open a file's blob for streaming after the credential gate passes.

        The caller must close the returned BlobDownload.

        Raises:
            FileObjectNotFoundError: No such file, or its blob is unreadable
            PasswordRequiredError: File is protected and no password was given
            InvalidPasswordError: Password does not match
        """
        record = self._authorize(file_id, password)

        handle = self.storage_repo.open(record.path)
        if handle is None:
            logger.error(
                f"Metadata of file {file_id} exists but blob {record.path} is unreadable"
            )
            raise FileObjectNotFoundError(f"Blob of file {file_id} not found")

        size = self.storage_repo.get_size(record.path)
        return BlobDownload(record, handle, size if size is not None else record.size)

    def delete(self, file_id: str, password: Optional[str] = None) -> Dict[str, Any]:
        """
        Delete a file after the credential gate passes.

        The expiry timer is cancelled first, then the record is removed
        atomically, then the blob. If the blob was already gone the delete
        still succeeds and the result carries blobMissing=True.

        Raises:
            FileObjectNotFoundError: No such file, or it expired concurrently
            PasswordRequiredError: File is protected and no password was given
            InvalidPasswordError: Password does not match
        """
        record = self._authorize(file_id, password)

        self.scheduler.cancel(file_id)
        try:
            removed = self.file_repo.delete(file_id)
        except StorageUnavailableError:
            # Record still exists: it must keep its expiry guarantee
            self._schedule_expiry(record)
            raise

        if removed is None:
            raise FileObjectNotFoundError(f"File {file_id} was removed concurrently")

        blob_missing = False
        try:
            blob_missing = not self.storage_repo.delete(removed.path)
        except OSError as e:
            logger.error(
                f"Could not delete blob {removed.path} of file {file_id}, "
                f"leaving it to the orphan sweep: {e}"
            )

        self._publish(
            FileDeletedEvent(
                aggregate_id=file_id,
                occurred_at=self.clock(),
                path=removed.path,
                blob_missing=blob_missing,
            )
        )

        result = removed.to_public_dict()
        result["blobMissing"] = blob_missing
        return result

    # ------------------------------------------------------------------
    # Administrative operations (authorized by the API key, not here)
    # ------------------------------------------------------------------

    def list_all(self) -> List[Dict[str, Any]]:
        """Public representation of every stored record."""
        return [file.to_public_dict() for file in self.file_repo.list_all()]

    def delete_all_metadata(self) -> int:
        """
        Delete every metadata record.

        Blobs and pending timers are left alone: timers firing later find
        the record gone and do nothing, and the orphan sweep reclaims the
        blobs.

        Returns:
            Number of records deleted
        """
        count = self.file_repo.delete_all()
        logger.warning(f"Deleted all {count} metadata records; blobs left to the orphan sweep")
        return count

    def rearm_expiry_timers(self) -> Dict[str, int]:
        """
        Register timers for every stored record.

        Used at startup, since in-process timers do not survive a restart.
        Records already past their cutoff are removed right away.

        Returns:
            Counts of re-armed and expired records
        """
        now = self.clock()
        stats = {"rearmed": 0, "expired": 0}

        for record in self.file_repo.list_all():
            if record.is_expired(now):
                if self.reaper.reap(record.file_id, trigger="sweep").metadata_deleted:
                    stats["expired"] += 1
            elif self._schedule_expiry(record):
                stats["rearmed"] += 1

        logger.info(
            f"Re-armed {stats['rearmed']} expiry timers, expired {stats['expired']} files"
        )
        return stats

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _authorize(self, file_id: str, password: Optional[str]) -> FileObject:
        record = self.file_repo.get(file_id)
        if record is None:
            raise FileObjectNotFoundError(f"File {file_id} not found")

        if record.is_expired(self.clock()):
            # Timer has not fired yet; the file is already gone for callers
            self.reaper.reap(file_id, trigger="access")
            raise FileObjectNotFoundError(f"File {file_id} has expired")

        if record.is_protected():
            if not password:
                raise PasswordRequiredError(f"File {file_id} requires a password")
            if not self.password_hasher.verify(password, record.password_hash):
                raise InvalidPasswordError(f"Wrong password for file {file_id}")

        return record

    def _schedule_expiry(self, record: FileObject) -> bool:
        try:
            self.scheduler.register(record.file_id, record.expires_at)
            return True
        except Exception as e:
            self._publish(
                ExpiryScheduleFailedEvent(
                    aggregate_id=record.file_id,
                    occurred_at=self.clock(),
                    expires_at=record.expires_at,
                    error_message=str(e),
                )
            )
            logger.error(
                f"Failed to schedule expiry of file {record.file_id}: {e}", exc_info=True
            )
            return False

    def _discard_blob(self, path: str) -> None:
        try:
            self.storage_repo.delete(path)
        except (OSError, ValueError) as e:
            logger.error(f"Failed to remove orphaned blob {path}: {e}")

    def _publish(self, event) -> None:
        if self.event_publisher is not None:
            self.event_publisher.publish(event)
