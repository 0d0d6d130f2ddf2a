"""
Expiry Task

Fire target of CeleryExpiryScheduler timers.
"""

import logging

from filevault.celery_app import celery_app
from filevault.infrastructure.celery_expiry_scheduler import EXPIRE_FILE_TASK

logger = logging.getLogger(__name__)


@celery_app.task(bind=True, name=EXPIRE_FILE_TASK)
def expire_file(self, file_id: str):
    """
    Expire one file when its ETA is reached.

    The task only acts if it still owns the file's registry entry; a
    cancelled or replaced timer makes it a no-op.

    Returns:
        dict: Whether the file was expired and its blob removed
    """
    from filevault.celery_app import flask_app
    from filevault.domain.file_storage import FileReaper
    from filevault.domain.errors import StorageUnavailableError
    from filevault.infrastructure.celery_expiry_scheduler import CeleryExpiryScheduler

    container = flask_app.container
    scheduler = container.resolve(CeleryExpiryScheduler)
    reaper = container.resolve(FileReaper)

    if not scheduler.claim(file_id, self.request.id):
        logger.info(f"Expiry task {self.request.id} for {file_id} no longer owns the timer")
        return {"file_id": file_id, "expired": False, "blob_deleted": False}

    try:
        result = reaper.reap(file_id, trigger="timer")
    except StorageUnavailableError as e:
        # Registry entry is consumed; the periodic sweep picks the file up
        logger.error(f"Metadata store unavailable while expiring {file_id}: {e}")
        return {"file_id": file_id, "expired": False, "blob_deleted": False}

    return {
        "file_id": file_id,
        "expired": result.metadata_deleted,
        "blob_deleted": result.blob_deleted,
    }
