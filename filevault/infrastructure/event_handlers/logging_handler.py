"""
Logging Event Handler

Infrastructure event handler for logging domain events.
Domain layer remains unaware of logging infrastructure.
"""

import logging

from filevault.domain.events import (
    DomainEvent,
    ExpiryScheduleFailedEvent,
    FileDeletedEvent,
    FileExpiredEvent,
    FileStoredEvent,
)


class LoggingEventHandler:
    """
    Infrastructure event handler for logging domain events.

    Subscribes to domain events and logs them appropriately.
    """

    def __init__(self, logger: logging.Logger):
        """
        Args:
            logger: Python logging.Logger instance
        """
        self.logger = logger

    def handle(self, event: DomainEvent) -> None:
        """Handle domain event by logging it."""
        try:
            if isinstance(event, FileStoredEvent):
                self._handle_file_stored(event)
            elif isinstance(event, FileDeletedEvent):
                self._handle_file_deleted(event)
            elif isinstance(event, FileExpiredEvent):
                self._handle_file_expired(event)
            elif isinstance(event, ExpiryScheduleFailedEvent):
                self._handle_schedule_failed(event)
            else:
                self.logger.debug(
                    f"Unhandled event: {event.__class__.__name__} "
                    f"(aggregate_id={event.aggregate_id})"
                )
        except Exception as e:
            self.logger.error(
                f"Error in logging event handler for {event.__class__.__name__}: {e}",
                exc_info=True,
            )

    def _handle_file_stored(self, event: FileStoredEvent) -> None:
        self.logger.info(
            f"File stored: id={event.aggregate_id}, path={event.path}, "
            f"size={event.size}, protected={event.protected}, "
            f"expires_at={event.expires_at.isoformat()}"
        )

    def _handle_file_deleted(self, event: FileDeletedEvent) -> None:
        if event.blob_missing:
            self.logger.warning(
                f"File deleted but its blob was already missing: "
                f"id={event.aggregate_id}, path={event.path}"
            )
        else:
            self.logger.info(f"File deleted: id={event.aggregate_id}")

    def _handle_file_expired(self, event: FileExpiredEvent) -> None:
        self.logger.info(
            f"File expired ({event.trigger}): id={event.aggregate_id}, "
            f"blob_missing={event.blob_missing}"
        )

    def _handle_schedule_failed(self, event: ExpiryScheduleFailedEvent) -> None:
        self.logger.error(
            f"Could not schedule expiry of file {event.aggregate_id} "
            f"(due {event.expires_at.isoformat()}), left to the periodic sweep: "
            f"{event.error_message}"
        )
