"""
Vault Configuration

Environment-driven settings for storage, expiry, credentials and the API.
"""

import os
from datetime import timedelta
from typing import Optional

from filevault.domain.expiry.policies import (
    ExpiryPolicy,
    FixedDurationPolicy,
    WeeklyCutoffPolicy,
    parse_time_of_day,
)


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


class VaultConfig:
    """Application configuration."""

    def __init__(self):
        self.api_version = os.getenv("API_VERSION", "v1")
        self.flask_env = os.getenv("FLASK_ENV", "development")
        self.is_production = self.flask_env == "production"
        self.log_level = os.getenv("LOG_LEVEL", "INFO")

        # Blob storage
        self.storage_dir = os.getenv("STORAGE_DIR", "/tmp/filevault")
        self.blob_prefix = os.getenv("BLOB_PREFIX", "uploads")
        self.max_upload_size = int(os.getenv("MAX_UPLOAD_SIZE", 100 * 1024 * 1024))

        # Expiry
        self.expiry_policy = os.getenv("EXPIRY_POLICY", "duration").lower()
        self.expiry_ttl_hours = float(os.getenv("EXPIRY_TTL_HOURS", 168))
        self.expiry_weekday = int(os.getenv("EXPIRY_WEEKDAY", 6))
        self.expiry_time = os.getenv("EXPIRY_TIME", "23:59:59")
        self.expiry_scheduler = os.getenv("EXPIRY_SCHEDULER", "thread").lower()
        self.rearm_on_startup = _env_bool("REARM_ON_STARTUP", "true")

        # Background sweeps
        self.cleanup_interval_seconds = int(os.getenv("CLEANUP_INTERVAL_SECONDS", 300))
        self.orphan_grace_seconds = int(os.getenv("ORPHAN_GRACE_SECONDS", 3600))

        # Credentials
        self.password_hash_rounds = int(os.getenv("PASSWORD_HASH_ROUNDS", 12))
        self.admin_api_key: Optional[str] = (
            os.getenv("ADMIN_API_KEY") or os.getenv("API_KEY") or None
        )

    @property
    def orphan_grace(self) -> timedelta:
        return timedelta(seconds=self.orphan_grace_seconds)

    def build_expiry_policy(self) -> ExpiryPolicy:
        """
        Create the configured expiry policy.

        Raises:
            ValueError: If EXPIRY_POLICY is unknown
        """
        if self.expiry_policy == "duration":
            return FixedDurationPolicy(timedelta(hours=self.expiry_ttl_hours))
        if self.expiry_policy == "weekly":
            return WeeklyCutoffPolicy(
                weekday=self.expiry_weekday, at=parse_time_of_day(self.expiry_time)
            )
        raise ValueError(f"Unknown EXPIRY_POLICY: {self.expiry_policy}")
