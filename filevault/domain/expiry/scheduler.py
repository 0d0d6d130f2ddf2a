"""
Expiry Scheduler Interface

Owns exactly one cancelable timer per live file.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Callable, List

ExpiryCallback = Callable[[str], object]


class ExpiryScheduler(ABC):
    """
    Registry of pending expiry timers keyed by file id.

    Contract Guarantees:
    - register() replaces any timer already pending for the same id
    - cancel() is idempotent: cancelling an unknown, fired or already
      cancelled timer is a no-op that returns False
    - cancel() and a firing timer race safely: exactly one of them claims
      the registry entry, so the expiry callback runs at most once per
      registration and never after a successful cancel
    - a fired timer removes its own registry entry
    """

    @abstractmethod
    def register(self, file_id: str, expires_at: datetime) -> None:
        """
        Schedule expiry of a file.

        Raises:
            Exception: If the timer could not be scheduled
        """
        pass  # pragma: no cover

    @abstractmethod
    def cancel(self, file_id: str) -> bool:
        """
        Stop and remove a pending timer.

        Returns:
            True if a pending timer was cancelled, False otherwise
        """
        pass  # pragma: no cover

    @abstractmethod
    def pending(self) -> List[str]:
        """Ids with a timer currently outstanding."""
        pass  # pragma: no cover

    def is_pending(self, file_id: str) -> bool:
        return file_id in self.pending()

    def shutdown(self) -> None:
        """Cancel every outstanding timer."""
        for file_id in self.pending():
            self.cancel(file_id)
