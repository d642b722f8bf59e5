from __future__ import annotations

import pytest

from execution.task_executor import TaskExecutor
from orchestrator.agent_router import AgentRouter
from registry.service_registry import ServiceRegistry
from shared.errors import ServiceCreationError
from shared.models import ExecutionPlan, TaskFailure, TaskSpec, TaskSuccess


class RecordingAgent:
    def __init__(self, name: str, log: list[str]):
        self.name = name
        self.log = log

    def process(self, data):
        self.log.append(self.name)
        return {"type": f"{self.name}_done", "echo": data}


class ExplodingAgent:
    def process(self, data):
        raise RuntimeError("boom")


def _plan(*agents: str) -> ExecutionPlan:
    return ExecutionPlan(tasks=[TaskSpec(agent=a, data={"n": i}) for i, a in enumerate(agents)], response="ok")


def _executor(services: ServiceRegistry, fallback_chain=("generalist", "memory")) -> TaskExecutor:
    return TaskExecutor(AgentRouter(services, fallback_chain=fallback_chain))


def test_failing_task_does_not_stop_later_tasks():
    log: list[str] = []
    services = ServiceRegistry()
    services.register("agent.finance", lambda s: RecordingAgent("finance", log))
    services.register("agent.health", lambda s: ExplodingAgent())
    services.register("agent.planner", lambda s: RecordingAgent("planner", log))

    results = _executor(services).execute(_plan("finance", "health", "planner"))

    assert list(results) == ["finance", "health", "planner"]
    assert isinstance(results["finance"], TaskSuccess)
    assert isinstance(results["health"], TaskFailure)
    assert "boom" in results["health"].message
    assert isinstance(results["planner"], TaskSuccess)
    assert log == ["finance", "planner"]


def test_unroutable_task_becomes_failure_and_others_succeed():
    services = ServiceRegistry()
    services.register("agent.finance", lambda s: RecordingAgent("finance", []))

    results = _executor(services).execute(_plan("finance", "TravelAgent"))

    assert isinstance(results["finance"], TaskSuccess)
    assert results["finance"].payload["echo"] == {"n": 0}
    assert isinstance(results["TravelAgent"], TaskFailure)
    assert "TravelAgent" in results["TravelAgent"].message


def test_duplicate_agent_references_keep_every_result():
    services = ServiceRegistry()
    services.register("agent.memory", lambda s: RecordingAgent("memory", []))

    results = _executor(services).execute(_plan("memory", "memory", "memory"))

    assert list(results) == ["memory", "memory#2", "memory#3"]
    assert results["memory#3"].payload["echo"] == {"n": 2}


def test_fallback_route_records_handler_key():
    services = ServiceRegistry()
    services.register("agent.generalist", lambda s: RecordingAgent("generalist", []))

    results = _executor(services).execute(_plan("TravelAgent"))

    assert results["TravelAgent"].handler_key == "agent.generalist"


def test_non_mapping_result_is_a_failure():
    class BadAgent:
        def process(self, data):
            return ["not", "a", "dict"]

    services = ServiceRegistry()
    services.register("agent.memory", lambda s: BadAgent())

    results = _executor(services).execute(_plan("memory"))

    assert isinstance(results["memory"], TaskFailure)
    assert "list" in results["memory"].message


def test_service_creation_error_aborts_execution():
    def broken(_services):
        raise RuntimeError("misconfigured")

    services = ServiceRegistry()
    services.register("agent.finance", broken)

    with pytest.raises(ServiceCreationError):
        _executor(services).execute(_plan("finance"))
