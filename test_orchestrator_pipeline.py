from __future__ import annotations

import json
from pathlib import Path

import pytest

from registry.bootstrap import build_orchestrator, build_services, shutdown
from shared.errors import AssistantError, ServiceCreationError
from shared.models import EntryRequest, ExecutionPlan, TaskSpec
from shared.settings import Settings


class ScriptedSelector:
    def __init__(self, answer: str):
        self.answer = answer

    def generate(self, prompt, policy, request_id=None):
        return self.answer

    def close(self) -> None:
        return None


def _settings(tmp_path: Path, **overrides) -> Settings:
    return Settings(
        memory_db_path=str(tmp_path / "memory.db"),
        history_db_path=str(tmp_path / "history.db"),
        **overrides,
    )


def _services(tmp_path: Path, answer: str, **overrides):
    services = build_services(_settings(tmp_path, **overrides))
    services.register("model.selector", lambda s: ScriptedSelector(answer))
    return services


def test_single_task_routes_to_finance(tmp_path: Path):
    answer = json.dumps(
        {"tasks": [{"agent": "finance", "data": {"amount": 25}}], "response": "ok", "intent": "log_expense"}
    )
    services = _services(tmp_path, answer)
    try:
        payload = build_orchestrator(services).handle_request(EntryRequest(query="spent 25", conversation_id="c1"))

        assert payload.status == "success"
        assert payload.response == "ok"
        assert payload.plan.intent == "log_expense"
        finance = payload.components["finance"]
        assert finance.type == "expense_logged"
        assert finance.data["amount"] == 25.0
        assert finance.data["stored"] is True

        history = services.get("history.conversation").get_history("c1")
        assert len(history) == 1
        assert history[0]["response"]["response"] == "ok"
    finally:
        shutdown(services)


def test_fenced_answer_gives_same_components(tmp_path: Path):
    plain = json.dumps({"tasks": [{"agent": "HealthAgent", "data": {"metric": "steps", "value": 900}}], "response": "ok"})
    services = _services(tmp_path, f"```json\n{plain}\n```")
    try:
        payload = build_orchestrator(services).handle_request(EntryRequest(query="walked"))
        assert payload.components["HealthAgent"].type == "health_metric"
        assert payload.components["HealthAgent"].data["metric"] == "steps"
    finally:
        shutdown(services)


def test_unparseable_answer_runs_memory_lookup(tmp_path: Path):
    services = _services(tmp_path, "Sure! Here's your answer: 42")
    try:
        payload = build_orchestrator(services).handle_request(EntryRequest(query="where are my keys"))

        assert payload.plan.tasks == [TaskSpec(agent="memory", data={"operation": "retrieve", "search": "where are my keys"})]
        assert payload.response == 'I processed your request: "where are my keys"'
        assert payload.components["memory"].type == "memory_results"
    finally:
        shutdown(services)


def test_unroutable_task_fails_alone(tmp_path: Path):
    answer = json.dumps(
        {"tasks": [{"agent": "finance", "data": {"amount": 3}}, {"agent": "TravelAgent", "data": {}}], "response": "ok"}
    )
    services = _services(tmp_path, answer, disabled_agents=frozenset({"generalist", "memory"}))
    try:
        payload = build_orchestrator(services).handle_request(EntryRequest(query="trip"))

        assert payload.components["finance"].type == "expense_logged"
        assert payload.components["TravelAgent"].type == "error"
        assert "TravelAgent" in payload.components["TravelAgent"].data["error"]
    finally:
        shutdown(services)


def test_unknown_agent_falls_back_to_generalist(tmp_path: Path):
    answer = json.dumps({"tasks": [{"agent": "TravelAgent", "data": {"operation": "classify"}}], "response": "ok"})
    services = _services(tmp_path, answer)
    try:
        payload = build_orchestrator(services).handle_request(EntryRequest(query="trip"))
        assert payload.components["TravelAgent"].type == "topic_classification"
    finally:
        shutdown(services)


def test_agent_construction_failure_fails_request(tmp_path: Path):
    answer = json.dumps({"tasks": [{"agent": "finance"}], "response": "ok"})
    services = _services(tmp_path, answer)

    def broken(_services):
        raise RuntimeError("missing credentials")

    services.register("agent.finance", broken)
    try:
        with pytest.raises(ServiceCreationError):
            build_orchestrator(services).handle_request(EntryRequest(query="spent 3"))
    finally:
        shutdown(services)


def test_unexpected_error_is_wrapped(tmp_path: Path):
    class BrokenPlanner:
        def plan(self, query, request_id=None):
            raise KeyError("tasks")

    services = _services(tmp_path, "{}")
    services.register("planner.triage", lambda s: BrokenPlanner())
    try:
        with pytest.raises(AssistantError) as exc_info:
            build_orchestrator(services).handle_request(EntryRequest(query="hello", conversation_id="c9"))
        assert exc_info.value.message.startswith("Error processing request:")
        assert exc_info.value.context == {"query": "hello", "conversation_id": "c9"}
    finally:
        shutdown(services)


def test_plan_model_rejects_empty_tasks():
    with pytest.raises(ValueError):
        ExecutionPlan(tasks=[], response="ok")
