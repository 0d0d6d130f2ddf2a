"""
Configuration

Environment-driven settings for the vault, Redis, Celery and logging.
"""
