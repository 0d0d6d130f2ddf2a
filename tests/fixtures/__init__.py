"""Shared test doubles for the filevault test suite."""

from tests.fixtures.mock_repositories import (
    InMemoryBlobStorage,
    InMemoryFileRepository,
    ManualExpiryScheduler,
    MutableClock,
    PlainPasswordHasher,
)

__all__ = [
    "InMemoryBlobStorage",
    "InMemoryFileRepository",
    "ManualExpiryScheduler",
    "MutableClock",
    "PlainPasswordHasher",
]
