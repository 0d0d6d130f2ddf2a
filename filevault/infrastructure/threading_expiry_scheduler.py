"""
Threading Expiry Scheduler

In-process ExpiryScheduler backed by one threading.Timer per file.
"""

import logging
import threading
from datetime import datetime
from typing import Callable, Dict, List

from filevault.domain.expiry.scheduler import ExpiryCallback, ExpiryScheduler
from filevault.domain.file_storage.entities import utcnow

logger = logging.getLogger(__name__)


class ThreadingExpiryScheduler(ExpiryScheduler):
    """
    Timer registry living in the web process.

    A firing timer first claims its registry entry under the lock, then
    runs the expiry callback. Whichever of cancel() and the timer takes the
    entry first wins; the other becomes a no-op. Timers are lost when the
    process exits, so the application re-arms them at startup and the
    periodic sweep covers the gap.
    """

    def __init__(
        self,
        on_expire: ExpiryCallback,
        clock: Callable[[], datetime] = utcnow,
    ):
        """
        Args:
            on_expire: Called with the file id when its timer fires
            clock: Source of the current time
        """
        self._on_expire = on_expire
        self._clock = clock
        self._timers: Dict[str, threading.Timer] = {}
        self._lock = threading.Lock()

    def register(self, file_id: str, expires_at: datetime) -> None:
        delay = max(0.0, (expires_at - self._clock()).total_seconds())

        timer = threading.Timer(delay, self._fire)
        timer.args = (file_id, timer)
        timer.daemon = True
        timer.name = f"expiry-{file_id}"

        with self._lock:
            previous = self._timers.get(file_id)
            self._timers[file_id] = timer

        if previous is not None:
            previous.cancel()

        timer.start()
        logger.debug(f"Scheduled expiry of {file_id} in {delay:.0f}s")

    def cancel(self, file_id: str) -> bool:
        with self._lock:
            timer = self._timers.pop(file_id, None)

        if timer is None:
            return False

        timer.cancel()
        logger.debug(f"Cancelled expiry timer of {file_id}")
        return True

    def pending(self) -> List[str]:
        with self._lock:
            return list(self._timers)

    def shutdown(self) -> None:
        with self._lock:
            timers = list(self._timers.values())
            self._timers.clear()

        for timer in timers:
            timer.cancel()

    def _fire(self, file_id: str, timer: threading.Timer) -> None:
        with self._lock:
            if self._timers.get(file_id) is not timer:
                return  # cancelled or replaced
            del self._timers[file_id]

        try:
            self._on_expire(file_id)
        except Exception as e:
            # Nobody awaits a fired timer; the sweep retries the removal
            logger.error(f"Expiry of file {file_id} failed: {e}", exc_info=True)
