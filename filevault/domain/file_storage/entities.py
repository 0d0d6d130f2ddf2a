"""
File Storage Entities

Domain entities for vaulted file management.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional


def utcnow() -> datetime:
    """Timezone-aware current UTC time."""
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class FileObject:
    """
    Entity representing one stored file: a blob plus its metadata record.

    Records are immutable once created. The password hash never leaves
    the storage layer; use to_public_dict() for anything returned to callers.
    """
    file_id: str
    created_at: datetime
    path: str
    expires_at: datetime
    password_hash: Optional[str] = None
    message: Optional[str] = None
    filename: Optional[str] = None
    size: Optional[int] = None

    @staticmethod
    def generate_id() -> str:
        """Generate a new globally unique file identifier."""
        return str(uuid.uuid4())

    @classmethod
    def create(
        cls,
        file_id: str,
        path: str,
        created_at: datetime,
        expires_at: datetime,
        password_hash: Optional[str] = None,
        message: Optional[str] = None,
        filename: Optional[str] = None,
        size: Optional[int] = None,
    ) -> "FileObject":
        """
        Factory method to create a new file record.

        Args:
            file_id: Identifier generated for the upload
            path: Blob location relative to the blob store root
            created_at: Creation timestamp
            expires_at: Scheduled expiry computed by the expiry policy
            password_hash: Optional one-way hash of the passphrase
            message: Optional note attached by the uploader
            filename: Optional original filename (download name)
            size: Blob size in bytes

        Returns:
            New FileObject instance
        """
        if expires_at <= created_at:
            raise ValueError("expires_at must be later than created_at")

        return cls(
            file_id=file_id,
            created_at=created_at,
            path=path,
            expires_at=expires_at,
            password_hash=password_hash or None,
            message=message,
            filename=filename,
            size=size,
        )

    def is_protected(self) -> bool:
        """True if a credential is required to access this file."""
        return self.password_hash is not None

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        """Check if the expiry cutoff has been reached."""
        return (now or utcnow()) >= self.expires_at

    def get_remaining_seconds(self, now: Optional[datetime] = None) -> int:
        """Seconds until expiry (0 if expired)."""
        remaining = self.expires_at - (now or utcnow())
        return max(0, int(remaining.total_seconds()))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for persistence (includes the hash)."""
        return {
            "id": self.file_id,
            "created_at": self.created_at.isoformat(),
            "path": self.path,
            "expires_at": self.expires_at.isoformat(),
            "password_hash": self.password_hash,
            "message": self.message,
            "filename": self.filename,
            "size": self.size,
        }

    def to_public_dict(self) -> Dict[str, Any]:
        """Convert to the API representation. Never contains the hash."""
        return {
            "id": self.file_id,
            "createdAt": self.created_at.isoformat(),
            "path": self.path,
            "message": self.message,
            "expiresAt": self.expires_at.isoformat(),
            "filename": self.filename,
            "size": self.size,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FileObject":
        """Create FileObject from its persisted dictionary."""
        return cls(
            file_id=data["id"],
            created_at=datetime.fromisoformat(data["created_at"]),
            path=data["path"],
            expires_at=datetime.fromisoformat(data["expires_at"]),
            password_hash=data.get("password_hash"),
            message=data.get("message"),
            filename=data.get("filename"),
            size=data.get("size"),
        )
