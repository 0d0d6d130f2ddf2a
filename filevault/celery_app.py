"""
Celery Application Instance

Creates the Celery app instance for use by workers and beat scheduler.
Uses the app factory to ensure all services are properly initialized.
"""

from filevault.app_factory import create_worker_app
from filevault.config.logging_config import setup_logging
from filevault.config.settings import VaultConfig

config = VaultConfig()
setup_logging(config.log_level)

# Services come from the dependency container; expiry timers stay with the web process
flask_app = create_worker_app(config)

celery_app = flask_app.celery

# Task modules are imported by name when the worker starts, after
# celery_app exists, since they import it for their decorators.
celery_app.conf.imports = (
    "filevault.tasks.expiry_task",
    "filevault.tasks.cleanup_task",
)
