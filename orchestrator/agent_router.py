"""
Agent Router — maps a plan's agent reference to a registered handler.

Responsibility:
- Normalize free-form references ("MemoryAgent", "memory_agent") to registry keys
- Walk a fixed fallback chain when the requested agent is not registered

Prohibitions:
- No reflective instantiation: unknown names are lookup misses, nothing more
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Sequence

from registry.service_registry import ServiceRegistry
from shared.errors import NoHandlerAvailableError
from shared.naming import normalize_agent_name

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Route:
    reference: str
    key: str
    handler: Any
    fallback: bool = False


class AgentRouter:
    """Resolves agent references through the ServiceRegistry."""

    def __init__(
        self,
        services: ServiceRegistry,
        namespace: str = "agent.",
        fallback_chain: Sequence[str] = ("generalist", "memory"),
    ):
        self.services = services
        self.namespace = namespace
        self.fallback_chain = tuple(fallback_chain)

    def resolve(self, reference: str) -> str:
        """Registry key for an agent reference."""
        return f"{self.namespace}{normalize_agent_name(reference)}"

    def route(self, reference: str) -> Route:
        key = self.resolve(reference)
        if self.services.has(key):
            return Route(reference=reference, key=key, handler=self.services.get(key))

        tried = [key]
        for fallback_name in self.fallback_chain:
            fallback_key = self.resolve(fallback_name)
            if fallback_key in tried:
                continue
            tried.append(fallback_key)
            if self.services.has(fallback_key):
                logger.warning(
                    "Agent '%s' (%s) not registered; falling back to %s.",
                    reference,
                    key,
                    fallback_key,
                )
                return Route(
                    reference=reference,
                    key=fallback_key,
                    handler=self.services.get(fallback_key),
                    fallback=True,
                )

        logger.error("No handler available for agent '%s' (tried %s).", reference, tried)
        raise NoHandlerAvailableError(reference, tried)
