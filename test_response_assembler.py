from __future__ import annotations

from execution.response_assembler import ResponseAssembler
from shared.models import EntryRequest, ExecutionPlan, TaskFailure, TaskSpec, TaskSuccess

REQUEST = EntryRequest(query="log 25 for lunch", conversation_id="conv1")
PLAN = ExecutionPlan(
    tasks=[TaskSpec(agent="finance"), TaskSpec(agent="HealthAgent"), TaskSpec(agent="Travel")],
    response="Logged it.",
    intent="log_expense",
)
RESULTS = {
    "finance": TaskSuccess(agent="finance", handler_key="agent.finance", payload={"type": "expense_logged", "amount": 25.0}),
    "HealthAgent": TaskSuccess(agent="HealthAgent", handler_key="agent.health", payload={"value": 1}),
    "Travel": TaskFailure(agent="Travel", message="No handler available"),
}


class RecordingHook:
    def __init__(self):
        self.calls = []

    def record(self, request, response):
        self.calls.append((request, response))


class BrokenHook:
    def record(self, request, response):
        raise OSError("disk full")


def test_assemble_builds_component_per_result():
    payload = ResponseAssembler(clock=lambda: 1700000000.7).assemble(REQUEST, PLAN, RESULTS)

    assert payload.status == "success"
    assert payload.response == "Logged it."
    assert payload.plan == PLAN
    assert payload.timestamp == 1700000000
    assert list(payload.components) == ["finance", "HealthAgent", "Travel"]

    finance = payload.components["finance"]
    assert finance.type == "expense_logged"
    assert finance.data["amount"] == 25.0
    assert finance.timestamp == 1700000000

    assert payload.components["HealthAgent"].type == "health_component"

    failure = payload.components["Travel"]
    assert failure.type == "error"
    assert failure.data == {"agent": "Travel", "error": "No handler available"}


def test_history_hook_receives_request_and_response():
    hook = RecordingHook()
    payload = ResponseAssembler(history_hook=hook).assemble(REQUEST, PLAN, RESULTS)

    assert len(hook.calls) == 1
    request, response = hook.calls[0]
    assert request["conversation_id"] == "conv1"
    assert response["response"] == payload.response
    assert response["components"]["finance"]["type"] == "expense_logged"


def test_history_hook_failure_does_not_change_response():
    baseline = ResponseAssembler(clock=lambda: 5.0).assemble(REQUEST, PLAN, RESULTS)
    payload = ResponseAssembler(history_hook=BrokenHook(), clock=lambda: 5.0).assemble(REQUEST, PLAN, RESULTS)
    assert payload == baseline
