"""
Dependency Injection Container

Manages service lifecycles and dependency resolution.
"""

import logging
import threading
from typing import Any, Dict, List, Optional, Type, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar('T')


class DependencyNotFoundError(Exception):
    """Raised when attempting to resolve an unregistered dependency."""
    pass


class DependencyContainer:
    """
    Dependency injection container for managing service lifecycles.

    Holds singleton registrations plus test overrides. Thread-safe for
    concurrent access.
    """

    def __init__(self):
        self._singletons: Dict[Type, Any] = {}
        self._overrides: Dict[Type, Any] = {}
        self._lock = threading.Lock()

        logger.debug("DependencyContainer initialized")

    def register_singleton(self, interface: Type[T], implementation: T) -> None:
        """
        Register a singleton service (single instance shared across all resolutions).

        Example:
            container.register_singleton(VaultService, vault_service)
        """
        with self._lock:
            self._singletons[interface] = implementation
            logger.debug(f"Registered singleton: {interface.__name__}")

    def resolve(self, interface: Type[T]) -> T:
        """
        Resolve a registered service.

        Raises:
            DependencyNotFoundError: If the interface is not registered
        """
        with self._lock:
            # Overrides first (for testing)
            if interface in self._overrides:
                return self._overrides[interface]

            if interface in self._singletons:
                return self._singletons[interface]

        raise DependencyNotFoundError(
            f"No registration found for type: {interface.__name__}"
        )

    def try_resolve(self, interface: Type[T]) -> Optional[T]:
        """Resolve a service, or return None if it is not registered."""
        try:
            return self.resolve(interface)
        except DependencyNotFoundError:
            return None

    def override(self, interface: Type[T], implementation: T) -> None:
        """
        Override a registered service (primarily for testing).

        Overrides take precedence over singleton registrations.
        """
        with self._lock:
            self._overrides[interface] = implementation
            logger.debug(f"Overridden: {interface.__name__}")

    def clear_overrides(self) -> None:
        """Clear all overrides."""
        with self._lock:
            self._overrides.clear()

    def is_registered(self, interface: Type) -> bool:
        """Check if an interface is registered (singleton or override)."""
        with self._lock:
            return interface in self._singletons or interface in self._overrides

    def registered_types(self) -> List[Type]:
        """All registered interfaces."""
        with self._lock:
            return list({**self._singletons, **self._overrides})

    def setup_event_handlers(self, event_publisher, handlers: Optional[List[Any]] = None) -> None:
        """
        Subscribe infrastructure event handlers to every domain event.

        Args:
            event_publisher: EventPublisher instance to subscribe handlers to
            handlers: Handler instances exposing handle(event). Defaults to
                a LoggingEventHandler on the "filevault" logger.
        """
        from filevault.domain.events import DomainEvent
        from filevault.infrastructure.event_handlers import LoggingEventHandler

        if handlers is None:
            handlers = [LoggingEventHandler(logging.getLogger("filevault"))]

        for handler in handlers:
            event_publisher.subscribe(DomainEvent, handler.handle)
            logger.debug(f"Registered event handler: {handler.__class__.__name__}")
