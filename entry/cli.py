"""
CLI Entry Adapter.

Responsibility:
- Receive user input from terminal
- Normalize to EntryRequest contract
- NO planning, NO agent access
"""

import re
import uuid

from shared.models import EntryRequest

_UNSAFE_ID_CHARS = re.compile(r"[^a-zA-Z0-9_-]")


def sanitize_conversation_id(raw: str | None) -> str:
    """Keep [a-zA-Z0-9_-]; empty results become 'default_conversation'."""
    cleaned = _UNSAFE_ID_CHARS.sub("", raw or "")
    return cleaned or "default_conversation"


class CLIAdapter:
    """Command-line entry adapter."""

    def __init__(self, conversation_id: str | None = None, debug_mode: bool = False):
        self.conversation_id = sanitize_conversation_id(conversation_id or f"cli_{uuid.uuid4().hex[:8]}")
        self.debug_mode = debug_mode

    def read_input(self, raw_input: str) -> EntryRequest:
        """Normalize raw CLI input to EntryRequest."""
        return EntryRequest(
            query=raw_input.strip(),
            conversation_id=self.conversation_id,
            debug_mode=self.debug_mode,
            metadata={"source": "cli"},
        )
