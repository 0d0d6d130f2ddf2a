"""
Domain Events

Immutable records of significant state changes in the domain.
Events decouple side effects (logging, auditing) from core business logic.
"""

from abc import ABC
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class DomainEvent(ABC):
    """
    Base class for all domain events.

    Attributes:
        aggregate_id: ID of the file the event is about
        occurred_at: Timestamp when the event occurred
    """
    aggregate_id: str
    occurred_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary for serialization."""
        return {
            "event_type": self.__class__.__name__,
            "aggregate_id": self.aggregate_id,
            "occurred_at": self.occurred_at.isoformat(),
        }


@dataclass(frozen=True)
class FileStoredEvent(DomainEvent):
    """
    Event emitted when an upload has been recorded.

    Attributes:
        path: Blob location
        size: Blob size in bytes
        protected: Whether a password guards the file
        expires_at: Scheduled expiry
    """
    path: str
    size: int
    protected: bool
    expires_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        base_dict = super().to_dict()
        base_dict.update({
            "path": self.path,
            "size": self.size,
            "protected": self.protected,
            "expires_at": self.expires_at.isoformat(),
        })
        return base_dict


@dataclass(frozen=True)
class FileDeletedEvent(DomainEvent):
    """
    Event emitted when a user deleted a file.

    Attributes:
        path: Blob location
        blob_missing: True if the blob was already gone at delete time
    """
    path: str
    blob_missing: bool

    def to_dict(self) -> Dict[str, Any]:
        base_dict = super().to_dict()
        base_dict.update({
            "path": self.path,
            "blob_missing": self.blob_missing,
        })
        return base_dict


@dataclass(frozen=True)
class FileExpiredEvent(DomainEvent):
    """
    Event emitted when a file was purged by its expiry.

    Attributes:
        path: Blob location
        blob_missing: True if the blob was already gone
        trigger: What purged it ("timer" or "sweep")
    """
    path: str
    blob_missing: bool
    trigger: str

    def to_dict(self) -> Dict[str, Any]:
        base_dict = super().to_dict()
        base_dict.update({
            "path": self.path,
            "blob_missing": self.blob_missing,
            "trigger": self.trigger,
        })
        return base_dict


@dataclass(frozen=True)
class ExpiryScheduleFailedEvent(DomainEvent):
    """
    Event emitted when a timer could not be registered for a stored file.

    The file is still reclaimed by the periodic sweep.
    """
    expires_at: datetime
    error_message: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        base_dict = super().to_dict()
        base_dict.update({
            "expires_at": self.expires_at.isoformat(),
            "error_message": self.error_message,
        })
        return base_dict
