"""
Service Registry — Lazy, factory-backed singleton container.

Responsibility:
- Map a service id to a factory and build the instance on first use
- Cache instances for the process lifetime (one construction per id)
- Report unknown ids and failing factories as distinct errors

Prohibitions:
- No reflective class lookup: every id is bound explicitly at startup
- No process-wide static instance: callers construct and pass a registry
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable

from shared.errors import ServiceCreationError, ServiceNotFoundError

logger = logging.getLogger(__name__)

ServiceFactory = Callable[["ServiceRegistry"], Any]


class ServiceRegistry:
    """Dependency-injection container with lazily created singletons."""

    def __init__(self) -> None:
        self._factories: dict[str, ServiceFactory] = {}
        self._instances: dict[str, Any] = {}
        # Re-entrant: factories resolve their own dependencies through get().
        self._lock = threading.RLock()

    def register(self, service_id: str, factory: ServiceFactory) -> None:
        """Register (or replace) the factory for a service id."""
        with self._lock:
            self._factories[service_id] = factory
            self._instances.pop(service_id, None)
        logger.debug("Registered service factory: %s", service_id)

    def register_instance(self, service_id: str, instance: Any) -> None:
        """Register an already constructed service."""
        with self._lock:
            self._instances[service_id] = instance
        logger.debug("Registered service instance: %s → %s", service_id, type(instance).__name__)

    def get(self, service_id: str) -> Any:
        """Return the cached instance, constructing it on first access."""
        with self._lock:
            if service_id in self._instances:
                return self._instances[service_id]

            factory = self._factories.get(service_id)
            if factory is None:
                raise ServiceNotFoundError(service_id)

            try:
                instance = factory(self)
            except Exception as e:
                logger.error("Service factory failed for '%s': %s", service_id, e)
                raise ServiceCreationError(service_id, e) from e

            self._instances[service_id] = instance
            logger.info("Created service: %s → %s", service_id, type(instance).__name__)
            return instance

    def has(self, service_id: str) -> bool:
        """True when the id is cached or has a registered factory."""
        with self._lock:
            return service_id in self._instances or service_id in self._factories

    def is_created(self, service_id: str) -> bool:
        with self._lock:
            return service_id in self._instances

    def registered_ids(self, prefix: str = "") -> list[str]:
        with self._lock:
            ids = set(self._factories) | set(self._instances)
        return sorted(service_id for service_id in ids if service_id.startswith(prefix))
