"""
Unit tests for the web and worker application factories.
"""

from unittest.mock import Mock, patch

import pytest

from filevault.app_factory import create_app, create_worker_app
from filevault.application.dependency_container import DependencyContainer
from filevault.application.vault_service import VaultService
from filevault.config.settings import VaultConfig


@pytest.fixture
def config():
    config = VaultConfig()
    config.rearm_on_startup = True
    return config


@pytest.fixture
def service():
    mock = Mock(spec=VaultService)
    mock.rearm_expiry_timers.return_value = {"rearmed": 2, "expired": 0}
    return mock


@pytest.fixture
def container(service):
    container = DependencyContainer()
    container.register_singleton(VaultService, service)
    return container


def test_web_app_rearms_timers(config, container, service):
    create_app(config, container=container)

    service.rearm_expiry_timers.assert_called_once_with()


def test_worker_app_arms_no_timers(config, container, service):
    app = create_worker_app(config, container=container)

    service.rearm_expiry_timers.assert_not_called()
    assert app.vault_config.rearm_on_startup is False
    assert config.rearm_on_startup is True


def test_rearm_failure_does_not_stop_startup(config, container, service):
    service.rearm_expiry_timers.side_effect = RuntimeError("redis down")

    app = create_app(config, container=container)

    assert app.vault_service is service


def test_worker_app_requires_celery(config):
    with patch("filevault.app_factory.init_redis"), \
            patch("filevault.app_factory.make_celery", side_effect=ImportError("no broker")), \
            patch("filevault.app_factory._initialize_services",
                  return_value=DependencyContainer()):
        with pytest.raises(RuntimeError, match="Celery could not be initialized"):
            create_worker_app(config)


def test_celery_entry_point_uses_worker_app():
    from filevault.celery_app import celery_app, flask_app

    assert flask_app.celery is celery_app
    assert flask_app.vault_config.rearm_on_startup is False
