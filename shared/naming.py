"""Agent name normalization shared by the router and the permission table."""

from __future__ import annotations

import re

_NON_ALNUM = re.compile(r"[^a-z0-9]")
_AGENT_SUFFIX = "agent"


def normalize_agent_name(reference: str) -> str:
    """'MemoryAgent', 'memory_agent' and 'memory' all become 'memory'."""
    name = _NON_ALNUM.sub("", str(reference or "").lower())
    # A bare "agent" is kept so normalizing twice gives the same result.
    while name.endswith(_AGENT_SUFFIX) and len(name) > len(_AGENT_SUFFIX):
        name = name[: -len(_AGENT_SUFFIX)]
    return name
