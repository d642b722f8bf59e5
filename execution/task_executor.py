"""
Task Executor — runs every task of a plan against its routed agent.

Tasks run sequentially in plan order. A failing task is recorded as a
TaskFailure and the next task runs anyway; only registry-level errors
(service lookup/creation) abort the request.
"""

from __future__ import annotations

import logging
from typing import Any

from orchestrator.agent_router import AgentRouter
from shared.errors import NoHandlerAvailableError, ServiceCreationError, ServiceNotFoundError
from shared.models import ExecutionPlan, TaskFailure, TaskResult, TaskSuccess

logger = logging.getLogger(__name__)


class TaskExecutor:
    """Sequential, failure-isolating task runner."""

    def __init__(self, router: AgentRouter):
        self.router = router

    def execute(self, plan: ExecutionPlan) -> dict[str, TaskResult]:
        results: dict[str, TaskResult] = {}
        for task in plan.tasks:
            key = self._result_key(task.agent, results)
            results[key] = self._run_task(task.agent, task.data)
        return results

    def _run_task(self, reference: str, data: dict[str, Any]) -> TaskResult:
        try:
            route = self.router.route(reference)
        except NoHandlerAvailableError as e:
            return TaskFailure(agent=reference, message=e.message)

        try:
            payload = route.handler.process(dict(data))
        except (ServiceNotFoundError, ServiceCreationError):
            raise
        except Exception as e:
            logger.exception("Error executing task with agent '%s' (%s)", reference, route.key)
            return TaskFailure(agent=reference, message=f"Agent '{reference}' failed: {e}")

        if not isinstance(payload, dict):
            logger.error("Agent '%s' returned %s instead of a mapping.", reference, type(payload).__name__)
            return TaskFailure(
                agent=reference,
                message=f"Agent '{reference}' returned an invalid result ({type(payload).__name__}).",
            )
        return TaskSuccess(agent=reference, handler_key=route.key, payload=payload)

    @staticmethod
    def _result_key(reference: str, results: dict[str, TaskResult]) -> str:
        """Keep the model's own reference; number repeats as 'ref#2', 'ref#3'."""
        if reference not in results:
            return reference
        n = 2
        while f"{reference}#{n}" in results:
            n += 1
        return f"{reference}#{n}"
