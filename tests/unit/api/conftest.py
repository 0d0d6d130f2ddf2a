"""
Fixtures for API tests: a real app over in-memory services.
"""

import pytest

from filevault.app_factory import create_app
from filevault.application.dependency_container import DependencyContainer
from filevault.application.vault_service import VaultService
from filevault.config.settings import VaultConfig
from filevault.domain.expiry import ExpiryScheduler
from filevault.infrastructure.bcrypt_password_hasher import BcryptPasswordHasher

ADMIN_KEY = "test-admin-key"


@pytest.fixture
def password_hasher():
    """Real bcrypt at minimum cost: the API tests exercise actual hashes."""
    return BcryptPasswordHasher(rounds=4)


@pytest.fixture
def app_config():
    config = VaultConfig()
    config.admin_api_key = ADMIN_KEY
    config.max_upload_size = 4096
    config.rearm_on_startup = False
    return config


@pytest.fixture
def container(vault_service, scheduler):
    container = DependencyContainer()
    container.register_singleton(VaultService, vault_service)
    container.register_singleton(ExpiryScheduler, scheduler)
    return container


@pytest.fixture
def flask_app(app_config, container):
    app = create_app(app_config, container=container)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture
def admin_headers():
    return {"X-API-Key": ADMIN_KEY}
