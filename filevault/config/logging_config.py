"""
Logging Configuration

Configures the root logger once at process startup.
"""

import logging
import sys

logger = logging.getLogger("filevault")


def setup_logging(level: str = "INFO") -> None:
    """
    Configure the root logger for the application.

    Call once at startup (web server or Celery worker).
    """
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - [%(levelname)s] - %(message)s",
        stream=sys.stdout,
    )
    # Silence noisy libraries
    logging.getLogger("werkzeug").setLevel(logging.WARNING)
    logging.getLogger("kombu").setLevel(logging.WARNING)
    logging.getLogger("passlib").setLevel(logging.ERROR)
