"""
Agent base class.

An agent processes one task from the triage plan and returns a component
mapping. Shared backends are requested through the CapabilityRegistry;
a denied or missing capability comes back as None and the agent degrades.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

from registry.capability_registry import CapabilityRegistry
from tools.base import Capability

logger = logging.getLogger(__name__)


class BaseAgent(ABC):
    """Common plumbing for all agents."""

    name: str = "base"
    description: str = ""

    def __init__(
        self,
        capabilities: CapabilityRegistry | None = None,
        config: dict[str, Any] | None = None,
    ):
        self.capabilities = capabilities
        self.config = dict(config or {})

    def process(self, data: dict[str, Any]) -> dict[str, Any]:
        """Process a task's data and return its component mapping."""
        logger.info("[Agent] %s: process_start operation=%s", self.name, data.get("operation"))
        result = self.create_component(data)
        logger.info("[Agent] %s: process_complete type=%s", self.name, result.get("type"))
        return result

    @abstractmethod
    def create_component(self, data: dict[str, Any]) -> dict[str, Any]:
        """Build the response component for this task."""

    def capability(self, name: str) -> Capability | None:
        if self.capabilities is None:
            return None
        access = self.capabilities.resolve(name, requesting_agent=self.name)
        if not access.granted:
            logger.info("%s continuing without '%s': %s", self.name, name, access.reason)
            return None
        return access.capability

    def _generic_component(self, operation: str, data: dict[str, Any]) -> dict[str, Any]:
        return {
            "type": f"{self.name}_component",
            "operation": operation,
            "message": f"{self.name.capitalize()} operation processed",
            "data": data,
        }
