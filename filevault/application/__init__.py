"""
Application Layer

Services orchestrating domain objects for the API and background tasks.
"""

from .dependency_container import DependencyContainer, DependencyNotFoundError
from .event_publisher import EventPublisher
from .vault_service import BlobDownload, VaultService

__all__ = [
    "BlobDownload",
    "DependencyContainer",
    "DependencyNotFoundError",
    "EventPublisher",
    "VaultService",
]
