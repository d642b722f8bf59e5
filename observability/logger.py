"""
Observability Layer — Structured request events & timings.

Responsibility:
- Emit one JSON line per pipeline event, tagged with request_id and conversation_id
- Track the request's state machine: received → parsed → routed → executed → assembled → sent
- Time individual operations (model calls, task execution)
"""

import json
import logging
import time
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Iterator

logger = logging.getLogger("observability")


class Observability:
    """Event emitter bound to a single request."""

    def __init__(self, request_id: str | None = None, conversation_id: str | None = None):
        self.request_id = request_id or uuid.uuid4().hex[:12]
        self.conversation_id = conversation_id
        self.state: str | None = None
        self._started = time.perf_counter()

    def _elapsed_ms(self) -> float:
        return round((time.perf_counter() - self._started) * 1000, 2)

    def log_event(self, event_type: str, payload: dict[str, Any], level: str = "INFO") -> None:
        record = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "event": event_type,
            "request_id": self.request_id,
            "conversation_id": self.conversation_id,
        }
        record.update(payload)
        emit = getattr(logger, level.lower(), logger.info)
        emit(json.dumps(record, default=str))

    def transition(self, state: str, **details: Any) -> None:
        """Move the request to `state`, logging where it came from and when."""
        previous, self.state = self.state, state
        self.log_event(
            "request_state",
            {"state": state, "from": previous, "elapsed_ms": self._elapsed_ms(), **details},
        )

    @contextmanager
    def measure(self, operation: str, metadata: dict[str, Any] | None = None) -> Iterator[None]:
        """Time the wrapped block; failures are logged at WARNING and re-raised."""
        began = time.perf_counter()
        outcome: dict[str, Any] = {"operation": operation, **(metadata or {})}
        try:
            yield
        except Exception as e:
            outcome.update(success=False, error=f"{type(e).__name__}: {e}")
            raise
        else:
            outcome["success"] = True
        finally:
            outcome["duration_ms"] = round((time.perf_counter() - began) * 1000, 2)
            self.log_event("timing", outcome, level="INFO" if outcome.get("success") else "WARNING")
