from __future__ import annotations

from shared.models import Component, ExecutionPlan, ResponsePayload, TaskSpec
from shared.response_formatter import format_component, format_response


def test_format_component_rounds_floats_to_two_decimals():
    component = Component(
        type="expense_logged",
        data={"type": "expense_logged", "amount": 36.88999938964844, "category": "food", "stored": True},
        timestamp=1,
    )
    text = format_component("finance", component)
    assert text == "finance [expense_logged]: amount=36.89; category=food; stored=True"


def test_format_component_error():
    component = Component(type="error", data={"agent": "Travel", "error": "No handler available"}, timestamp=1)
    assert format_component("Travel", component) == "Travel [error]: No handler available"


def test_format_response_lists_components_after_answer():
    payload = ResponsePayload(
        plan=ExecutionPlan(tasks=[TaskSpec(agent="memory")], response="Here is what I found."),
        components={
            "memory": Component(type="memory_results", data={"results": [], "search": None}, timestamp=1),
        },
        response="Here is what I found.",
        timestamp=1,
    )
    text = format_response(payload)
    assert text.splitlines() == [
        "Here is what I found.",
        "  - memory [memory_results]: results=-; search=-",
    ]
