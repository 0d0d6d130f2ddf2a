"""
Infrastructure Layer

Concrete adapters for Redis, the local filesystem, bcrypt and timers.
"""
