"""
Application Factory

Creates and configures the Flask application with all dependencies.
Tests pass a prepared DependencyContainer to skip Redis and Celery.
"""

import copy
import logging
from typing import Optional

from flask import Flask, jsonify
from flask_cors import CORS

from filevault.application.dependency_container import DependencyContainer
from filevault.application.event_publisher import EventPublisher
from filevault.application.vault_service import VaultService
from filevault.config.celery_config import make_celery
from filevault.config.redis_config import (
    get_redis_repository,
    init_redis,
    redis_health_check,
)
from filevault.config.settings import VaultConfig
from filevault.domain.expiry import ExpiryPolicy, ExpiryScheduler
from filevault.domain.file_storage import (
    FileReaper,
    FileRepository,
    IBlobStorageRepository,
    PasswordHasher,
)
from filevault.infrastructure.bcrypt_password_hasher import BcryptPasswordHasher
from filevault.infrastructure.celery_expiry_scheduler import CeleryExpiryScheduler
from filevault.infrastructure.local_file_storage_repository import LocalFileStorageRepository
from filevault.infrastructure.redis_file_repository import RedisFileRepository
from filevault.infrastructure.redis_repository import RedisRepository
from filevault.infrastructure.threading_expiry_scheduler import ThreadingExpiryScheduler

logger = logging.getLogger(__name__)


def create_app(
    config: Optional[VaultConfig] = None,
    container: Optional[DependencyContainer] = None,
) -> Flask:
    """
    Create and configure Flask application.

    Args:
        config: Application configuration, uses default if None
        container: Prepared dependency container. When given, Redis and
            Celery are not initialized and services come from it.

    Returns:
        Configured Flask application
    """
    if config is None:
        config = VaultConfig()

    app = Flask(__name__)
    app.vault_config = config
    app.config["MAX_CONTENT_LENGTH"] = config.max_upload_size
    app.config["ADMIN_API_KEY"] = config.admin_api_key
    app.config["RESTX_MASK_SWAGGER"] = False

    CORS(
        app,
        resources={
            r"/*": {
                "origins": "*",
                "methods": ["GET", "POST", "DELETE", "OPTIONS"],
                "allow_headers": ["Content-Type", "Authorization", "X-API-Key"],
                "expose_headers": ["Content-Type", "Content-Disposition", "Content-Length"],
                "max_age": 3600,
            }
        },
    )

    if container is None:
        _initialize_infrastructure(app)
        container = _initialize_services(app, config)
    else:
        app.celery = None

    app.container = container
    app.vault_service = container.try_resolve(VaultService)

    if config.rearm_on_startup and app.vault_service is not None:
        _rearm_timers(app.vault_service)

    _register_blueprints(app, config)
    _register_health_endpoint(app)

    return app


def create_worker_app(
    config: Optional[VaultConfig] = None,
    container: Optional[DependencyContainer] = None,
) -> Flask:
    """
    Create the Flask application hosted by Celery worker and beat processes.

    Expiry timers are owned by the web process. Workers never re-arm them,
    so each live record keeps exactly one outstanding timer; the beat sweep
    reaps anything the web process failed to arm.

    Args:
        config: Application configuration, uses default if None
        container: Prepared dependency container (tests)

    Returns:
        Configured Flask application

    Raises:
        RuntimeError: If Celery cannot be initialized
    """
    config = copy.copy(config) if config is not None else VaultConfig()
    config.rearm_on_startup = False
    app = create_app(config, container=container)

    if container is None and app.celery is None:
        raise RuntimeError(
            "Celery could not be initialized; check CELERY_BROKER_URL and the Celery install"
        )
    return app


def _initialize_infrastructure(app: Flask) -> None:
    """
    Initialize infrastructure components (Redis, Celery).

    Args:
        app: Flask application
    """
    init_redis()
    logger.info("Redis initialized")

    try:
        app.celery = make_celery(app)
        logger.info("Celery initialized")
    except Exception as e:
        logger.warning(f"Could not initialize Celery: {e}")
        app.celery = None


def _build_scheduler(app: Flask, config: VaultConfig, reaper: FileReaper,
                     redis_repo: RedisRepository) -> ExpiryScheduler:
    if config.expiry_scheduler == "thread":
        return ThreadingExpiryScheduler(on_expire=reaper.reap)

    if config.expiry_scheduler == "celery":
        if app.celery is None:
            raise RuntimeError("EXPIRY_SCHEDULER=celery requires a working Celery setup")
        return CeleryExpiryScheduler(
            app.celery, redis_repo, grace_seconds=config.orphan_grace_seconds
        )

    raise ValueError(f"Unknown EXPIRY_SCHEDULER: {config.expiry_scheduler}")


def _initialize_services(app: Flask, config: VaultConfig) -> DependencyContainer:
    """
    Create every service and register it in a DependencyContainer.

    Infrastructure adapters are registered under their domain interface
    and their concrete type; API routes and tasks resolve them from
    app.container.

    Args:
        app: Flask application
        config: Application configuration

    Returns:
        Populated container
    """
    container = DependencyContainer()

    event_publisher = EventPublisher()
    container.setup_event_handlers(event_publisher)
    container.register_singleton(EventPublisher, event_publisher)

    redis_repo = get_redis_repository()
    container.register_singleton(RedisRepository, redis_repo)

    file_repository = RedisFileRepository(
        redis_repo, backstop_grace_seconds=config.orphan_grace_seconds
    )
    storage_repository = LocalFileStorageRepository(config.storage_dir)
    password_hasher = BcryptPasswordHasher(rounds=config.password_hash_rounds)
    expiry_policy = config.build_expiry_policy()

    container.register_singleton(FileRepository, file_repository)
    container.register_singleton(RedisFileRepository, file_repository)
    container.register_singleton(IBlobStorageRepository, storage_repository)
    container.register_singleton(LocalFileStorageRepository, storage_repository)
    container.register_singleton(PasswordHasher, password_hasher)
    container.register_singleton(ExpiryPolicy, expiry_policy)

    reaper = FileReaper(file_repository, storage_repository, event_publisher)
    container.register_singleton(FileReaper, reaper)

    scheduler = _build_scheduler(app, config, reaper, redis_repo)
    container.register_singleton(ExpiryScheduler, scheduler)
    container.register_singleton(type(scheduler), scheduler)

    vault_service = VaultService(
        file_repository=file_repository,
        storage_repository=storage_repository,
        password_hasher=password_hasher,
        expiry_scheduler=scheduler,
        expiry_policy=expiry_policy,
        reaper=reaper,
        event_publisher=event_publisher,
        blob_prefix=config.blob_prefix,
    )
    container.register_singleton(VaultService, vault_service)

    logger.info(
        f"Services initialized: {len(container.registered_types())} registrations, "
        f"{config.expiry_scheduler} expiry scheduler, {config.expiry_policy} expiry policy"
    )
    return container


def _rearm_timers(vault_service: VaultService) -> None:
    try:
        vault_service.rearm_expiry_timers()
    except Exception as e:
        # Beat sweep still reaps whatever is left unarmed
        logger.error(f"Could not re-arm expiry timers at startup: {e}")


def _register_blueprints(app: Flask, config: VaultConfig) -> None:
    """
    Register API blueprints.

    Args:
        app: Flask application
        config: Application configuration
    """
    from filevault.api.v1 import api_v1_bp

    app.register_blueprint(api_v1_bp)

    logger.info(
        f"API {config.api_version} registered at /api/{config.api_version} "
        f"with Swagger UI at /api/{config.api_version}/docs"
    )


def _get_health_status(app: Flask) -> tuple[dict, int]:
    """
    Get health status of all system components.

    Args:
        app: Flask application instance

    Returns:
        Tuple of (health_status_dict, http_status_code)
    """
    health_status = {
        "status": "ok",
        "message": "vault ready",
        "redis": "unknown",
        "celery": "unknown",
        "scheduler": "unknown",
    }

    try:
        if redis_health_check():
            health_status["redis"] = "connected"
        else:
            health_status["redis"] = "disconnected"
            health_status["status"] = "degraded"
    except Exception as e:
        health_status["redis"] = f"error: {str(e)}"
        health_status["status"] = "degraded"

    if getattr(app, "celery", None) is not None:
        health_status["celery"] = "available"
    else:
        health_status["celery"] = "unavailable"

    scheduler = app.container.try_resolve(ExpiryScheduler)
    if scheduler is None:
        health_status["scheduler"] = "not_configured"
        health_status["status"] = "degraded"
    else:
        try:
            health_status["scheduler"] = {
                "type": type(scheduler).__name__,
                "pending": len(scheduler.pending()),
            }
        except Exception as e:
            health_status["scheduler"] = f"error: {str(e)}"
            health_status["status"] = "degraded"

    status_code = 200 if health_status["status"] == "ok" else 503
    return health_status, status_code


def _register_health_endpoint(app: Flask) -> None:
    """
    Register health check endpoint.

    Args:
        app: Flask application
    """

    @app.route("/health", methods=["GET"])
    def health():
        """
        Health check endpoint.
        Returns overall health status of the application and its dependencies.
        """
        health_status, status_code = _get_health_status(app)
        return jsonify(health_status), status_code
