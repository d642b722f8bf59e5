"""
Triage Planner — asks the model for an execution plan.

Responsibility:
- Build the triage prompt from the agent catalog
- Call the Model Layer once per request
- Hand the raw answer to PlanParser (which never fails)

A failed model call degrades to the parser's fallback plan.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable

from planner.plan_parser import PlanParser
from shared.models import ExecutionPlan, ModelPolicy

logger = logging.getLogger(__name__)

OUTPUT_FORMAT = (
    "Respond with ONLY a JSON object of this shape:\n"
    '{"tasks": [{"agent": "<agent name>", "data": {"operation": "<operation>", ...}}],\n'
    ' "response": "<short reply to the user>",\n'
    ' "intent": "<snake_case intent>"}\n'
    "Use one task per distinct thing the user asked for. "
    "Several tasks may target the same agent."
)


class TriagePlanner:
    """Generates an ExecutionPlan for a user query."""

    def __init__(
        self,
        model_selector: Any,
        policy: ModelPolicy,
        agent_catalog: list[dict[str, str]] | None = None,
        parser: PlanParser | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.model_selector = model_selector
        self.policy = policy
        self.agent_catalog = agent_catalog or []
        self.parser = parser or PlanParser()
        self._clock = clock

    def plan(self, query: str, request_id: str | None = None) -> ExecutionPlan:
        prompt = self.build_prompt(query)
        try:
            raw_text = self.model_selector.generate(prompt, self.policy, request_id=request_id)
        except Exception as e:
            logger.error("Triage model call failed; continuing with fallback plan: %s", e)
            raw_text = ""
        return self.parser.parse(raw_text, query)

    def build_prompt(self, query: str) -> str:
        now = self._clock()
        lines = [
            "You are the triage step of a personal assistant.",
            "Split the user's request into tasks for the agents below and draft a reply.",
            "",
            "Available agents:",
        ]
        for entry in self.agent_catalog:
            lines.append(f"- {entry.get('name', '')}: {entry.get('description', '')}")
        lines += [
            "",
            OUTPUT_FORMAT,
            "",
            f"Current date: {now:%Y-%m-%d}",
            f"Current time: {now:%H:%M:%S}",
            "",
            f"User Input: {query}",
        ]
        return "\n".join(lines)
