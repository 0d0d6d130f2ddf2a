"""
main.py

Development server for the filevault API.

Notes:
  - Requires a Redis server (metadata store, Celery broker)
  - API v1 endpoints available at /api/v1/ with Swagger docs at /api/v1/docs
  - Run a Celery worker and beat for the periodic cleanup sweep:
      celery -A filevault.celery_app:celery_app worker -B
"""

import os

from filevault.app_factory import create_app
from filevault.config.logging_config import setup_logging
from filevault.config.settings import VaultConfig

config = VaultConfig()
setup_logging(config.log_level)

app = create_app(config)

if __name__ == "__main__":
    host = os.getenv("FLASK_HOST", "0.0.0.0")
    port = int(os.getenv("FLASK_PORT", 8000))
    debug = os.getenv("FLASK_DEBUG", "false").lower() == "true"

    # The reloader would start a second process with its own expiry timers
    app.run(host=host, port=port, debug=debug, use_reloader=False)
