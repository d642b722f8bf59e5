"""
Plan Parser — Turns raw model text into a validated ExecutionPlan.

Responsibility:
- Accept valid JSON, JSON in a fenced block, JSON wrapped in prose, or garbage
- Repair missing/invalid fields with deterministic defaults
- Always return a usable plan (never raises for malformed input)
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any

from shared.models import ExecutionPlan, TaskSpec

logger = logging.getLogger(__name__)

_FENCED_BLOCK = re.compile(r"```(?:json)?(.*?)```", re.DOTALL | re.IGNORECASE)
_PLAN_KEYS = {"tasks", "response", "suggested_response"}

FALLBACK_INTENT = "information_retrieval"
DEFAULT_INTENT = "general_request"


class PlanParser:
    """Parses and repairs triage plans."""

    def __init__(self, fallback_agent: str = "memory"):
        self.fallback_agent = fallback_agent

    def parse(self, raw_text: str | None, user_query: str = "") -> ExecutionPlan:
        payload = self._extract_payload(raw_text or "")
        if payload is None:
            logger.warning("Failed to parse plan from model response; using fallback plan.")
            logger.debug("Unparseable model response: %s", (raw_text or "")[:500])
            return self.fallback_plan(user_query)
        return self._normalize(payload, user_query)

    def fallback_plan(self, user_query: str) -> ExecutionPlan:
        """Single memory lookup for the original query."""
        return ExecutionPlan(
            tasks=self._fallback_tasks(user_query),
            response=self._echo(user_query),
            intent=FALLBACK_INTENT,
        )

    # ─── Extraction ───────────────────────────────────────────

    def _extract_payload(self, raw_text: str) -> dict[str, Any] | None:
        text = raw_text.strip()
        if not text:
            return None

        payload = self._load_mapping(text)
        if payload is not None:
            return payload

        match = _FENCED_BLOCK.search(text)
        if match:
            payload = self._load_mapping(match.group(1).strip())
            if payload is not None:
                logger.info("Plan extracted from fenced block.")
                return payload

        payload = self._scan_mapping(text)
        if payload is not None:
            logger.info("Plan extracted from surrounding prose.")
        return payload

    @staticmethod
    def _scan_mapping(text: str) -> dict[str, Any] | None:
        """First embedded object with plan keys, else the first embedded object."""
        decoder = json.JSONDecoder()
        first: dict[str, Any] | None = None
        start = text.find("{")
        while start != -1:
            try:
                parsed, _ = decoder.raw_decode(text, start)
            except ValueError:
                parsed = None
            if isinstance(parsed, dict):
                if _PLAN_KEYS & parsed.keys():
                    return parsed
                if first is None:
                    first = parsed
            start = text.find("{", start + 1)
        return first

    @staticmethod
    def _load_mapping(text: str) -> dict[str, Any] | None:
        try:
            parsed = json.loads(text)
        except (json.JSONDecodeError, ValueError):
            return None
        return parsed if isinstance(parsed, dict) else None

    # ─── Normalization ────────────────────────────────────────

    def _normalize(self, payload: dict[str, Any], user_query: str) -> ExecutionPlan:
        tasks = self._normalize_tasks(payload.get("tasks"), user_query)

        response = payload.get("response")
        if not isinstance(response, str) or not response.strip():
            suggested = payload.get("suggested_response")
            if isinstance(suggested, str) and suggested.strip():
                response = suggested
            else:
                logger.warning("Plan has no response text; substituting acknowledgement.")
                response = self._echo(user_query)

        intent = payload.get("intent")
        if not isinstance(intent, str) or not intent.strip():
            intent = DEFAULT_INTENT

        return ExecutionPlan(tasks=tasks, response=response, intent=intent)

    def _normalize_tasks(self, raw_tasks: Any, user_query: str) -> list[TaskSpec]:
        if not isinstance(raw_tasks, list):
            logger.warning("Plan has no task list (%s); using fallback task.", type(raw_tasks).__name__)
            return self._fallback_tasks(user_query)

        tasks: list[TaskSpec] = []
        for index, item in enumerate(raw_tasks):
            if not isinstance(item, dict):
                logger.warning("Dropping task %d: not an object.", index)
                continue
            agent = item.get("agent")
            if not isinstance(agent, str) or not agent.strip():
                logger.warning("Dropping task %d: missing agent name.", index)
                continue
            data = item.get("data")
            if not isinstance(data, dict):
                if data is not None:
                    logger.warning("Task %d (%s) has non-object data; using empty data.", index, agent)
                data = {}
            tasks.append(TaskSpec(agent=agent.strip(), data=data))

        if not tasks:
            logger.warning("Plan contained no usable tasks; using fallback task.")
            return self._fallback_tasks(user_query)
        return tasks

    def _fallback_tasks(self, user_query: str) -> list[TaskSpec]:
        return [
            TaskSpec(
                agent=self.fallback_agent,
                data={"operation": "retrieve", "search": user_query},
            )
        ]

    @staticmethod
    def _echo(user_query: str) -> str:
        return f'I processed your request: "{user_query}"'
