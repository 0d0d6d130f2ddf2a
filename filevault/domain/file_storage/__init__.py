"""
File Storage Domain

Handles vaulted file records, blob storage contracts, credentials
and credential-free removal.
"""

from .credentials import PasswordHasher
from .entities import FileObject
from .repositories import FileRepository
from .services import FileReaper, ReapResult
from .storage_repository import IBlobStorageRepository

__all__ = [
    "FileObject",
    "FileReaper",
    "FileRepository",
    "IBlobStorageRepository",
    "PasswordHasher",
    "ReapResult",
]
