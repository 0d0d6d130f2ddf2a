"""
Cleanup Task

Celery beat task reaping expired files and orphaned blobs.
Thin wrapper that delegates to the FileReaper domain service.
"""

import logging

from filevault.celery_app import celery_app

logger = logging.getLogger(__name__)


def run_cleanup(reaper, blob_prefix: str, orphan_grace) -> dict:
    """
    Reap expired files, then orphaned blobs.

    Errors of one step are collected and do not stop the other.

    Returns:
        dict: Cleanup statistics with counts and errors
    """
    cleanup_stats = {
        "expired_files_cleaned": 0,
        "orphaned_blobs_cleaned": 0,
        "errors": [],
    }

    logger.info("Cleaning up expired files...")
    try:
        cleanup_stats["expired_files_cleaned"] = reaper.reap_expired()
    except Exception as e:
        error_msg = f"Error cleaning up expired files: {e}"
        cleanup_stats["errors"].append(error_msg)
        logger.error(error_msg, exc_info=True)

    logger.info("Cleaning up orphaned blobs...")
    try:
        cleanup_stats["orphaned_blobs_cleaned"] = reaper.reap_orphaned_blobs(
            blob_prefix, orphan_grace
        )
    except Exception as e:
        error_msg = f"Error cleaning up orphaned blobs: {e}"
        cleanup_stats["errors"].append(error_msg)
        logger.error(error_msg, exc_info=True)

    logger.info(
        f"Cleanup completed - Files: {cleanup_stats['expired_files_cleaned']}, "
        f"Orphaned: {cleanup_stats['orphaned_blobs_cleaned']}, "
        f"Errors: {len(cleanup_stats['errors'])}"
    )

    if cleanup_stats["errors"]:
        logger.warning(f"Cleanup errors: {cleanup_stats['errors']}")

    return cleanup_stats


@celery_app.task(bind=True, name="filevault.tasks.cleanup_expired_files")
def cleanup_expired_files(self):
    """
    Periodic sweep, run every CLEANUP_INTERVAL_SECONDS by Celery beat.

    Removes files whose expiry passed without their timer firing, then
    blobs no metadata record points to.

    Returns:
        dict: Cleanup statistics with counts and errors
    """
    logger.info("Starting cleanup task")

    from filevault.celery_app import flask_app
    from filevault.domain.file_storage import FileReaper

    config = flask_app.vault_config
    reaper = flask_app.container.resolve(FileReaper)

    return run_cleanup(reaper, config.blob_prefix, config.orphan_grace)
