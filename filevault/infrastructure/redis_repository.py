"""
Redis Repository Base Class

Provides atomic JSON operations for record persistence.
Backend failures surface as StorageUnavailableError.
"""

import json
import logging
from typing import Any, Dict, List, Optional

import redis
from redis.exceptions import RedisError

from filevault.domain.errors import StorageUnavailableError

logger = logging.getLogger(__name__)


class RedisRepository:
    """Base Redis repository with atomic JSON operations."""

    def __init__(self, redis_client: redis.Redis, key_prefix: str = ""):
        self.redis = redis_client
        self.key_prefix = key_prefix

    def _make_key(self, key: str) -> str:
        """Create a prefixed key for Redis storage."""
        return f"{self.key_prefix}:{key}" if self.key_prefix else key

    def _strip_key(self, redis_key) -> str:
        if isinstance(redis_key, bytes):
            redis_key = redis_key.decode("utf-8")
        if self.key_prefix:
            return redis_key[len(self.key_prefix) + 1:]
        return redis_key

    @staticmethod
    def _decode(data) -> Optional[Dict[str, Any]]:
        if data is None:
            return None
        if isinstance(data, bytes):
            data = data.decode("utf-8")
        return json.loads(data)

    def _unavailable(self, operation: str, key: str, error: Exception):
        logger.error(f"Redis {operation} failed for key {key}: {error}")
        return StorageUnavailableError(
            f"Redis {operation} failed for key {key}", original_error=error
        )

    def set_json(
        self,
        key: str,
        data: Dict[str, Any],
        ttl: Optional[int] = None,
        only_if_absent: bool = False,
    ) -> bool:
        """
        Atomically set JSON data with optional TTL.

        Args:
            key: Redis key
            data: Dictionary to store as JSON
            ttl: Time to live in seconds
            only_if_absent: Refuse to overwrite an existing key

        Returns:
            True if written, False if only_if_absent and the key existed

        Raises:
            StorageUnavailableError: If Redis cannot be reached
        """
        redis_key = self._make_key(key)
        try:
            result = self.redis.set(
                redis_key, json.dumps(data), ex=ttl or None, nx=only_if_absent
            )
            return bool(result)
        except RedisError as e:
            raise self._unavailable("set", key, e)

    def get_json(self, key: str) -> Optional[Dict[str, Any]]:
        """
        Get JSON data from Redis.

        Returns:
            Dictionary if found, None otherwise
        """
        try:
            return self._decode(self.redis.get(self._make_key(key)))
        except RedisError as e:
            raise self._unavailable("get", key, e)

    def get_many_json(self, keys: List[str]) -> List[Optional[Dict[str, Any]]]:
        """Get several JSON values in one round trip, in key order."""
        if not keys:
            return []
        try:
            values = self.redis.mget([self._make_key(key) for key in keys])
        except RedisError as e:
            raise self._unavailable("mget", ",".join(keys), e)
        return [self._decode(value) for value in values]

    def pop_json(self, key: str) -> Optional[Dict[str, Any]]:
        """
        Atomically read and delete a key.

        GET and DEL run in one MULTI/EXEC transaction, so of several
        concurrent callers exactly one receives the value.

        Returns:
            The removed value, or None if the key did not exist
        """
        redis_key = self._make_key(key)
        try:
            pipe = self.redis.pipeline(transaction=True)
            pipe.get(redis_key)
            pipe.delete(redis_key)
            data, deleted = pipe.execute()
        except RedisError as e:
            raise self._unavailable("getdel", key, e)

        if not deleted:
            return None
        return self._decode(data)

    def delete(self, *keys: str) -> int:
        """
        Delete keys from Redis.

        Returns:
            Number of keys removed
        """
        if not keys:
            return 0
        try:
            return self.redis.delete(*[self._make_key(key) for key in keys])
        except RedisError as e:
            raise self._unavailable("delete", ",".join(keys), e)

    def get_keys_by_pattern(self, pattern: str) -> List[str]:
        """
        Get all keys matching a pattern.

        Args:
            pattern: Redis key pattern (supports wildcards)

        Returns:
            List of matching keys (without prefix)
        """
        try:
            keys = self.redis.scan_iter(match=self._make_key(pattern))
            return [self._strip_key(key) for key in keys]
        except RedisError as e:
            raise self._unavailable("scan", pattern, e)


class RedisConnectionManager:
    """Manages Redis connection with connection pooling."""

    def __init__(self, host: str = "localhost", port: int = 6379, db: int = 0,
                 password: Optional[str] = None, max_connections: int = 20):
        self.connection_pool = redis.ConnectionPool(
            host=host,
            port=port,
            db=db,
            password=password,
            max_connections=max_connections,
            retry_on_timeout=True,
            socket_keepalive=True,
        )
        self._client = None

    @property
    def client(self) -> redis.Redis:
        """Get Redis client instance with connection pooling."""
        if self._client is None:
            self._client = redis.Redis(connection_pool=self.connection_pool)
        return self._client

    def health_check(self) -> bool:
        """Check if Redis connection is healthy."""
        try:
            return self.client.ping()
        except RedisError:
            return False

    def close(self):
        """Close the connection pool."""
        if self.connection_pool:
            self.connection_pool.disconnect()
