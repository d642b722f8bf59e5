"""
Response Assembler — merges task outcomes into the final payload.

The history hook runs after the payload is built; its failures are logged
and never change the response.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Protocol

from shared.models import (
    Component,
    EntryRequest,
    ExecutionPlan,
    ResponsePayload,
    TaskResult,
    TaskSuccess,
)
from shared.naming import normalize_agent_name

logger = logging.getLogger(__name__)


class HistoryHook(Protocol):
    def record(self, request: dict[str, Any], response: dict[str, Any]) -> None:
        ...


class ResponseAssembler:
    """Builds ResponsePayload objects."""

    def __init__(
        self,
        history_hook: HistoryHook | None = None,
        clock: Callable[[], float] = time.time,
    ):
        self.history_hook = history_hook
        self._clock = clock

    def assemble(
        self,
        request: EntryRequest,
        plan: ExecutionPlan,
        results: dict[str, TaskResult],
    ) -> ResponsePayload:
        timestamp = int(self._clock())
        components = {
            key: self._component(result, timestamp) for key, result in results.items()
        }
        payload = ResponsePayload(
            plan=plan,
            components=components,
            response=plan.response,
            timestamp=timestamp,
        )
        self._record_history(request, payload)
        return payload

    @staticmethod
    def _component(result: TaskResult, timestamp: int) -> Component:
        if isinstance(result, TaskSuccess):
            component_type = result.payload.get("type")
            if not isinstance(component_type, str) or not component_type:
                component_type = f"{normalize_agent_name(result.agent) or 'agent'}_component"
            return Component(type=component_type, data=result.payload, timestamp=timestamp)
        return Component(
            type="error",
            data={"agent": result.agent, "error": result.message},
            timestamp=timestamp,
        )

    def _record_history(self, request: EntryRequest, payload: ResponsePayload) -> None:
        if self.history_hook is None:
            return
        try:
            self.history_hook.record(request.model_dump(mode="json"), payload.model_dump(mode="json"))
        except Exception as e:
            logger.warning(
                "History hook failed for conversation %s: %s", request.conversation_id, e
            )
