from __future__ import annotations

import json

from planner.plan_parser import PlanParser

QUERY = "I spent 25 on lunch"

VALID = json.dumps(
    {
        "tasks": [{"agent": "finance", "data": {"amount": 25}}],
        "response": "ok",
        "intent": "log_expense",
    }
)


def _assert_fallback(plan, query=QUERY):
    assert len(plan.tasks) == 1
    assert plan.tasks[0].agent == "memory"
    assert plan.tasks[0].data == {"operation": "retrieve", "search": query}
    assert plan.response == f'I processed your request: "{query}"'
    assert plan.intent == "information_retrieval"


def test_parse_valid_json():
    plan = PlanParser().parse(VALID, QUERY)

    assert [t.agent for t in plan.tasks] == ["finance"]
    assert plan.tasks[0].data == {"amount": 25}
    assert plan.response == "ok"
    assert plan.intent == "log_expense"


def test_parse_fenced_block_matches_plain_json():
    fenced = f"```json\n{VALID}\n```"
    assert PlanParser().parse(fenced, QUERY) == PlanParser().parse(VALID, QUERY)


def test_parse_fence_without_language_tag():
    plan = PlanParser().parse(f"Here you go:\n```\n{VALID}\n```\nThanks", QUERY)
    assert plan.intent == "log_expense"


def test_parse_json_inside_prose():
    plan = PlanParser().parse(f"Sure, the plan is {VALID} hope that helps", QUERY)
    assert plan.tasks[0].agent == "finance"


def test_parse_garbage_gives_fallback_plan():
    _assert_fallback(PlanParser().parse("Sure! Here's your answer: 42", QUERY))


def test_parse_empty_and_none_give_fallback_plan():
    _assert_fallback(PlanParser().parse("", QUERY))
    _assert_fallback(PlanParser().parse(None, QUERY))


def test_parse_non_object_json_gives_fallback_plan():
    _assert_fallback(PlanParser().parse("[1, 2, 3]", QUERY))


def test_missing_tasks_uses_fallback_task_but_keeps_response():
    plan = PlanParser().parse(json.dumps({"response": "Noted.", "intent": "chat"}), QUERY)

    assert plan.tasks[0].agent == "memory"
    assert plan.tasks[0].data["search"] == QUERY
    assert plan.response == "Noted."
    assert plan.intent == "chat"


def test_missing_response_uses_suggested_response_then_echo():
    with_suggestion = PlanParser().parse(
        json.dumps({"tasks": [{"agent": "health"}], "suggested_response": "Tracked."}), QUERY
    )
    assert with_suggestion.response == "Tracked."

    without = PlanParser().parse(json.dumps({"tasks": [{"agent": "health"}], "response": "  "}), QUERY)
    assert without.response == f'I processed your request: "{QUERY}"'
    assert without.intent == "general_request"


def test_unusable_task_entries_are_dropped():
    raw = json.dumps(
        {
            "tasks": [
                "finance",
                {"data": {"amount": 1}},
                {"agent": "  "},
                {"agent": "PlannerAgent", "data": "tomorrow"},
                {"agent": "finance", "data": {"amount": 3}},
            ],
            "response": "ok",
        }
    )
    plan = PlanParser().parse(raw, QUERY)

    assert [t.agent for t in plan.tasks] == ["PlannerAgent", "finance"]
    assert plan.tasks[0].data == {}


def test_all_tasks_unusable_gives_fallback_task():
    plan = PlanParser().parse(json.dumps({"tasks": [], "response": "ok"}), QUERY)
    assert plan.tasks[0].agent == "memory"
    assert plan.response == "ok"


def test_custom_fallback_agent():
    plan = PlanParser(fallback_agent="generalist").parse("nope", QUERY)
    assert plan.tasks[0].agent == "generalist"


def test_parse_prose_with_stray_braces_before_plan():
    raw = 'Format {agent}: {"tasks":[{"agent":"finance","data":{}}],"response":"ok"} done {x}'
    plan = PlanParser().parse(raw, QUERY)

    assert plan.tasks[0].agent == "finance"
    assert plan.response == "ok"


def test_parse_prose_prefers_object_with_plan_keys():
    raw = f'Example: {{"note": "ignore me"}} then the real one: {VALID}'
    plan = PlanParser().parse(raw, QUERY)
    assert plan.intent == "log_expense"
