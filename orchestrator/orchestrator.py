"""
Orchestrator — Runs one request through the triage pipeline.

Responsibility:
- Triage the request into an ExecutionPlan
- Execute the plan's tasks with their agents
- Assemble the unified response (history hook included)

Prohibitions:
- No business logic
- No direct model or capability calls
- No state between requests
"""

import logging

from execution.response_assembler import ResponseAssembler
from execution.task_executor import TaskExecutor
from observability.logger import Observability
from planner.triage import TriagePlanner
from shared.errors import AssistantError
from shared.models import EntryRequest, ResponsePayload, TaskSuccess

logger = logging.getLogger(__name__)


class Orchestrator:
    """Stateless request pipeline: triage → execute → assemble."""

    def __init__(
        self,
        planner: TriagePlanner,
        executor: TaskExecutor,
        assembler: ResponseAssembler,
    ):
        self.planner = planner
        self.executor = executor
        self.assembler = assembler

    def handle_request(self, request: EntryRequest) -> ResponsePayload:
        """
        Process a request end to end.
        Task failures are reported inside the payload; only configuration
        and registry failures raise (as AssistantError).
        """
        obs = Observability(conversation_id=request.conversation_id)
        obs.transition("received", query_length=len(request.query))
        try:
            with obs.measure("triage"):
                plan = self.planner.plan(request.query, request_id=obs.request_id)
            obs.transition("parsed", intent=plan.intent, tasks=len(plan.tasks))

            obs.transition("routed", agents=[task.agent for task in plan.tasks])
            with obs.measure("execute", {"tasks": len(plan.tasks)}):
                results = self.executor.execute(plan)
            failed = [key for key, result in results.items() if not isinstance(result, TaskSuccess)]
            obs.transition("executed", succeeded=len(results) - len(failed), failed=failed)

            payload = self.assembler.assemble(request, plan, results)
            obs.transition("assembled", components=len(payload.components))
            return payload
        except AssistantError as e:
            obs.log_event("request_failed", {"error": e.message}, level="ERROR")
            raise
        except Exception as e:
            logger.exception("Unexpected error while processing request")
            obs.log_event("request_failed", {"error": str(e)}, level="ERROR")
            raise AssistantError(
                f"Error processing request: {e}",
                {"query": request.query, "conversation_id": request.conversation_id},
            ) from e
