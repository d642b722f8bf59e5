"""
Capability Registry — Permissioned access to shared backends ("tools").

Responsibility:
- Register capability factories in the ServiceRegistry under `tool.<name>`
- Keep the per-agent grant table (agent name → capability names)
- Resolve a capability for an agent, returning a grant/deny outcome

Denial is a normal outcome, never an exception. A capability without a
usable backend resolves to a MockCapability so the pipeline keeps running.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Iterable

from registry.service_registry import ServiceRegistry
from shared.naming import normalize_agent_name
from tools.base import MockCapability

logger = logging.getLogger(__name__)

WILDCARD = "*"


@dataclass(frozen=True)
class CapabilityAccess:
    """Outcome of a capability lookup."""

    name: str
    granted: bool
    capability: Any = None
    mock: bool = False
    reason: str = ""


class CapabilityRegistry:
    """Grant table plus lazy capability construction."""

    def __init__(self, services: ServiceRegistry, namespace: str = "tool."):
        self.services = services
        self.namespace = namespace
        self._grants: dict[str, frozenset[str]] = {}
        self._known: set[str] = set()
        self._lock = threading.Lock()

    def service_id(self, name: str) -> str:
        return f"{self.namespace}{name}"

    def register(self, name: str, factory: Callable[[ServiceRegistry], Any]) -> None:
        """Register a capability factory. A factory may return None when its backend is unusable."""
        self.services.register(self.service_id(name), factory)
        self._known.add(name)

    # ─── Permissions ───────────────────────────────────────────

    def grant(self, agent_name: str, capability_names: Iterable[str]) -> None:
        """Replace the agent's full grant set."""
        key = normalize_agent_name(agent_name)
        names = frozenset(str(n).strip() for n in capability_names if str(n).strip())
        with self._lock:
            previous = self._grants.get(key)
            self._grants[key] = names
        if previous is not None and previous != names:
            logger.info(
                "Grant for '%s' replaced: %s → %s", key, sorted(previous), sorted(names)
            )

    def grant_additional(self, agent_name: str, capability_names: Iterable[str]) -> None:
        """Add capabilities to the agent's existing grant set."""
        key = normalize_agent_name(agent_name)
        extra = {str(n).strip() for n in capability_names if str(n).strip()}
        with self._lock:
            self._grants[key] = frozenset(self._grants.get(key, frozenset()) | extra)

    def can_access(self, agent_name: str, capability_name: str) -> bool:
        granted = self._grants.get(normalize_agent_name(agent_name), frozenset())
        return WILDCARD in granted or capability_name in granted

    def available_capabilities(self, agent_name: str) -> list[str]:
        granted = self._grants.get(normalize_agent_name(agent_name), frozenset())
        if WILDCARD in granted:
            return sorted(self._known)
        return sorted(granted)

    @property
    def grants(self) -> dict[str, list[str]]:
        with self._lock:
            return {agent: sorted(names) for agent, names in self._grants.items()}

    # ─── Resolution ────────────────────────────────────────────

    def resolve(self, capability_name: str, requesting_agent: str | None = None) -> CapabilityAccess:
        """
        Resolve a capability instance.
        With a requesting agent the grant table is checked first; without one
        the lookup is internal and unchecked.
        """
        if requesting_agent is not None and not self.can_access(requesting_agent, capability_name):
            logger.warning(
                "Capability access denied: agent=%s capability=%s",
                normalize_agent_name(requesting_agent),
                capability_name,
            )
            return CapabilityAccess(
                name=capability_name,
                granted=False,
                reason=f"Agent '{requesting_agent}' is not allowed to use '{capability_name}'.",
            )

        service_id = self.service_id(capability_name)
        with self._lock:
            if not self.services.has(service_id):
                return self._mock_access(capability_name, "no backend registered")

        instance = self.services.get(service_id)
        if instance is None:
            with self._lock:
                return self._mock_access(capability_name, "backend not configured")
        if isinstance(instance, MockCapability):
            return CapabilityAccess(name=capability_name, granted=True, capability=instance, mock=True)

        if requesting_agent is not None:
            logger.info("Capability accessed: agent=%s capability=%s", requesting_agent, capability_name)
        return CapabilityAccess(name=capability_name, granted=True, capability=instance)

    def _mock_access(self, capability_name: str, reason: str) -> CapabilityAccess:
        mock = MockCapability(capability_name)
        self.services.register_instance(self.service_id(capability_name), mock)
        logger.warning(
            "Capability '%s' has no usable implementation (%s); using mock.", capability_name, reason
        )
        return CapabilityAccess(name=capability_name, granted=True, capability=mock, mock=True, reason=reason)
