"""
Expiry Policies

Decide when a newly created file expires.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, time, timedelta, timezone


class ExpiryPolicy(ABC):
    """Computes the expiry cutoff of a file from its creation time."""

    @abstractmethod
    def expires_at(self, created_at: datetime) -> datetime:
        """Return the instant at which a file created at created_at expires."""
        pass  # pragma: no cover


@dataclass(frozen=True)
class FixedDurationPolicy(ExpiryPolicy):
    """Files live for a fixed duration after creation."""
    ttl: timedelta

    def __post_init__(self):
        if self.ttl <= timedelta(0):
            raise ValueError(f"Expiry ttl must be positive, got {self.ttl}")

    def expires_at(self, created_at: datetime) -> datetime:
        return created_at + self.ttl


@dataclass(frozen=True)
class WeeklyCutoffPolicy(ExpiryPolicy):
    """
    Files expire at the next occurrence of a fixed time of the week.

    Every file uploaded during the same week shares one cutoff, regardless
    of its upload time. Weekday follows datetime.weekday() (Monday is 0).
    The default is Sunday 23:59:59 UTC.
    """
    weekday: int = 6
    at: time = time(23, 59, 59)

    def __post_init__(self):
        if not 0 <= self.weekday <= 6:
            raise ValueError(f"Weekday must be between 0 and 6, got {self.weekday}")

    def expires_at(self, created_at: datetime) -> datetime:
        created = created_at.astimezone(timezone.utc)
        days_ahead = (self.weekday - created.weekday()) % 7
        cutoff = datetime.combine(
            created.date() + timedelta(days=days_ahead), self.at, tzinfo=timezone.utc
        )
        if cutoff <= created:
            cutoff += timedelta(days=7)
        return cutoff


def parse_time_of_day(value: str) -> time:
    """Parse 'HH:MM' or 'HH:MM:SS'."""
    parts = [int(part) for part in value.strip().split(":")]
    if len(parts) not in (2, 3):
        raise ValueError(f"Invalid time of day: {value!r}")
    return time(*parts)
