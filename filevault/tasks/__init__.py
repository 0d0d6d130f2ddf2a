"""Celery tasks: per-file expiry and the periodic cleanup sweep."""
