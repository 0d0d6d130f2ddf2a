"""
Shared pytest fixtures and configuration for the filevault test suite.

This module provides:
- Hypothesis configuration for property-based testing
- In-memory repositories and a manual expiry scheduler
- A fully wired VaultService over those doubles
- Directory-based test markers
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import Mock

import pytest
from hypothesis import HealthCheck, Phase, settings

from filevault.application.event_publisher import EventPublisher
from filevault.application.vault_service import VaultService
from filevault.domain.events import DomainEvent
from filevault.domain.expiry import FixedDurationPolicy
from filevault.domain.file_storage import FileReaper
from tests.fixtures import (
    InMemoryBlobStorage,
    InMemoryFileRepository,
    ManualExpiryScheduler,
    MutableClock,
    PlainPasswordHasher,
)

# Register Hypothesis profiles
settings.register_profile(
    "default",
    max_examples=100,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow, HealthCheck.function_scoped_fixture],
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.target, Phase.shrink],
)
settings.register_profile(
    "ci",
    max_examples=200,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow, HealthCheck.function_scoped_fixture],
)
settings.register_profile(
    "dev",
    max_examples=10,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow, HealthCheck.function_scoped_fixture],
)
settings.load_profile("default")


# =============================================================================
# Time Fixtures
# =============================================================================

@pytest.fixture
def fixed_datetime() -> datetime:
    """A Wednesday noon in UTC."""
    return datetime(2024, 1, 10, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def clock(fixed_datetime) -> MutableClock:
    return MutableClock(fixed_datetime)


# =============================================================================
# Repository Fixtures
# =============================================================================

@pytest.fixture
def file_repository() -> InMemoryFileRepository:
    return InMemoryFileRepository()


@pytest.fixture
def blob_storage(clock) -> InMemoryBlobStorage:
    return InMemoryBlobStorage(clock=clock)


@pytest.fixture
def password_hasher() -> PlainPasswordHasher:
    return PlainPasswordHasher()


@pytest.fixture
def mock_file_repository():
    """
    Provide a mock file repository for unit testing.

    Returns a Mock object with all FileRepository interface methods.
    """
    mock = Mock()
    mock.create.return_value = True
    mock.get.return_value = None
    mock.delete.return_value = None
    mock.list_all.return_value = []
    mock.delete_all.return_value = 0
    return mock


# =============================================================================
# Service Fixtures
# =============================================================================

@pytest.fixture
def published_events():
    """List collecting every event published through event_publisher."""
    return []


@pytest.fixture
def event_publisher(published_events) -> EventPublisher:
    publisher = EventPublisher()
    publisher.subscribe(DomainEvent, published_events.append)
    return publisher


@pytest.fixture
def reaper(file_repository, blob_storage, event_publisher) -> FileReaper:
    return FileReaper(file_repository, blob_storage, event_publisher)


@pytest.fixture
def scheduler(reaper) -> ManualExpiryScheduler:
    return ManualExpiryScheduler(on_expire=reaper.reap)


@pytest.fixture
def expiry_policy() -> FixedDurationPolicy:
    return FixedDurationPolicy(timedelta(hours=168))


@pytest.fixture
def vault_service(
    file_repository,
    blob_storage,
    password_hasher,
    scheduler,
    expiry_policy,
    reaper,
    event_publisher,
    clock,
) -> VaultService:
    return VaultService(
        file_repository=file_repository,
        storage_repository=blob_storage,
        password_hasher=password_hasher,
        expiry_scheduler=scheduler,
        expiry_policy=expiry_policy,
        reaper=reaper,
        event_publisher=event_publisher,
        blob_prefix="uploads",
        clock=clock,
    )


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: Unit tests (fast, no external dependencies)"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests (real filesystem, timers)"
    )
    config.addinivalue_line(
        "markers", "property: Property-based tests using Hypothesis"
    )


def pytest_collection_modifyitems(config, items):
    """
    Automatically mark tests based on their location.

    - tests/unit/* -> @pytest.mark.unit
    - tests/integration/* -> @pytest.mark.integration
    - tests/property/* -> @pytest.mark.property
    """
    for item in items:
        path = str(item.fspath)
        if "/tests/unit/" in path:
            item.add_marker(pytest.mark.unit)
        elif "/tests/integration/" in path:
            item.add_marker(pytest.mark.integration)
        elif "/tests/property/" in path:
            item.add_marker(pytest.mark.property)
