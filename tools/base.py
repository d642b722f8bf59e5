"""
Capability contracts.

Every shared backend (database, weather, search, calendar, ...) is reached
through the same single entry point:

    execute(params) -> {"success": bool, "data": {...}} | {"success": False, "error": "..."}
"""

from __future__ import annotations

import logging
from typing import Any, Protocol

logger = logging.getLogger(__name__)


class Capability(Protocol):
    """Protocol that all capability backends must follow."""

    def execute(self, params: dict[str, Any]) -> dict[str, Any]:
        ...


class MockCapability:
    """Stand-in for a capability with no usable backend; echoes its input."""

    def __init__(self, name: str):
        self.name = name

    def execute(self, params: dict[str, Any]) -> dict[str, Any]:
        logger.debug("Mock capability '%s' echoing params: %s", self.name, params)
        return {
            "success": True,
            "mock": True,
            "capability": self.name,
            "data": dict(params or {}),
        }
