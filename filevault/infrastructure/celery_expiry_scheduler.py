"""
Celery Expiry Scheduler

ExpiryScheduler that delegates timers to Celery ETA tasks, so expiry
survives web process restarts and works across several web workers.
"""

import logging
from datetime import datetime
from typing import List

from filevault.domain.expiry.scheduler import ExpiryScheduler
from filevault.domain.file_storage.entities import utcnow

logger = logging.getLogger(__name__)

EXPIRE_FILE_TASK = "filevault.tasks.expire_file"


class CeleryExpiryScheduler(ExpiryScheduler):
    """
    Timer registry kept in Redis, timers executed by Celery workers.

    The registry maps each file id to the id of its pending expire_file
    task. The task must call claim() before expiring anything: a registry
    entry that is gone or points at another task means the timer was
    cancelled or replaced, and the task does nothing. This also makes
    duplicate deliveries of the same ETA task harmless.
    """

    def __init__(self, celery_app, redis_repository, queue: str = "expiry_queue",
                 grace_seconds: int = 3600):
        """
        Args:
            celery_app: Celery application used to send and revoke tasks
            redis_repository: RedisRepository holding the registry
            queue: Queue the expiry tasks are routed to
            grace_seconds: How long past expiry registry entries are kept
        """
        self.celery = celery_app
        self.redis_repo = redis_repository
        self.queue = queue
        self.grace_seconds = grace_seconds
        self.key_prefix = "expiry"

    def _key(self, file_id: str) -> str:
        return f"{self.key_prefix}:{file_id}"

    def register(self, file_id: str, expires_at: datetime) -> None:
        result = self.celery.send_task(
            EXPIRE_FILE_TASK, args=[file_id], eta=expires_at, queue=self.queue
        )

        previous = self.redis_repo.get_json(self._key(file_id))
        remaining = max(0, int((expires_at - utcnow()).total_seconds()))
        self.redis_repo.set_json(
            self._key(file_id),
            {"task_id": result.id, "expires_at": expires_at.isoformat()},
            ttl=remaining + self.grace_seconds,
        )

        if previous and previous.get("task_id") != result.id:
            self.celery.control.revoke(previous["task_id"])

        logger.debug(f"Scheduled expiry task {result.id} for {file_id} at {expires_at}")

    def cancel(self, file_id: str) -> bool:
        data = self.redis_repo.pop_json(self._key(file_id))
        if data is None:
            return False

        self.celery.control.revoke(data["task_id"])
        logger.debug(f"Revoked expiry task {data['task_id']} of {file_id}")
        return True

    def claim(self, file_id: str, task_id: str) -> bool:
        """
        Take the registry entry of a firing task.

        Returns:
            True if task_id still owns the timer of file_id
        """
        data = self.redis_repo.pop_json(self._key(file_id))
        if data is None:
            return False

        if data.get("task_id") != task_id:
            # Replaced by a newer registration; hand the entry back
            expires_at = datetime.fromisoformat(data["expires_at"])
            remaining = max(0, int((expires_at - utcnow()).total_seconds()))
            self.redis_repo.set_json(
                self._key(file_id),
                data,
                ttl=remaining + self.grace_seconds,
                only_if_absent=True,
            )
            return False

        return True

    def pending(self) -> List[str]:
        keys = self.redis_repo.get_keys_by_pattern(f"{self.key_prefix}:*")
        return [key[len(self.key_prefix) + 1:] for key in keys]
