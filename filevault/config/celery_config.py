"""
Celery Configuration

Configures Celery with Flask integration, Redis broker, and task routing.
"""

import os

from celery import Celery
from kombu import Queue


class CeleryConfig:
    """Celery configuration settings."""

    # Broker settings
    broker_url = os.getenv("CELERY_BROKER_URL", "redis://localhost:6379/0")
    result_backend = os.getenv("CELERY_RESULT_BACKEND", "redis://localhost:6379/0")

    # Expiry tasks carry ETAs up to the expiry horizon; the Redis broker
    # redelivers unacknowledged messages after the visibility timeout.
    broker_transport_options = {
        "visibility_timeout": int(os.getenv("CELERY_VISIBILITY_TIMEOUT", 8 * 24 * 3600))
    }

    # Task settings
    task_serializer = "json"
    accept_content = ["json"]
    result_serializer = "json"
    timezone = "UTC"
    enable_utc = True

    # Worker settings
    worker_prefetch_multiplier = 1
    task_acks_late = True
    worker_max_tasks_per_child = 200

    # Task routing
    task_routes = {
        "filevault.tasks.expire_file": {"queue": "expiry_queue"},
        "filevault.tasks.cleanup_expired_files": {"queue": "cleanup_queue"},
    }

    # Queue definitions
    task_default_queue = "default"
    task_queues = (
        Queue("default", routing_key="default"),
        Queue("expiry_queue", routing_key="expiry"),
        Queue("cleanup_queue", routing_key="cleanup"),
    )

    # Beat schedule for periodic tasks
    beat_schedule = {
        "cleanup-expired-files": {
            "task": "filevault.tasks.cleanup_expired_files",
            "schedule": float(os.getenv("CLEANUP_INTERVAL_SECONDS", 300)),
        },
    }

    task_soft_time_limit = int(os.getenv("CELERY_TASK_SOFT_TIME_LIMIT", 300))
    task_time_limit = int(os.getenv("CELERY_TASK_TIME_LIMIT", 360))

    # Result backend settings
    result_expires = 3600  # 1 hour
    task_ignore_result = True

    worker_concurrency = int(os.getenv("CELERY_WORKER_CONCURRENCY", 2))


def make_celery(app):
    """
    Create Celery instance with Flask app context.

    Args:
        app: Flask application instance

    Returns:
        Configured Celery instance
    """
    celery = Celery(
        app.import_name,
        backend=CeleryConfig.result_backend,
        broker=CeleryConfig.broker_url,
    )

    celery.config_from_object(CeleryConfig)

    class ContextTask(celery.Task):
        """Make celery tasks work with Flask app context."""

        def __call__(self, *args, **kwargs):
            with app.app_context():
                return self.run(*args, **kwargs)

    celery.Task = ContextTask
    return celery
