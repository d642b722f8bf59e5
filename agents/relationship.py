"""
Relationship Agent — a small graph of people and how they relate.

Relations are stored through the `database` capability as
`relationship` memories keyed `rel:<subject>:<type>:<object>`.
"""

from __future__ import annotations

import logging
from typing import Any

from agents.base import BaseAgent

logger = logging.getLogger(__name__)

RELATION_ALIASES = {
    "works_at": "employee_of",
    "works_for": "employee_of",
    "spouse": "married_to",
    "wife": "married_to",
    "husband": "married_to",
    "friend": "friend_of",
    "sibling": "sibling_of",
    "brother": "sibling_of",
    "sister": "sibling_of",
    "parent": "parent_of",
    "child": "child_of",
}


def normalize_relation(raw: Any) -> str:
    relation = str(raw or "knows").strip().lower().replace(" ", "_")
    return RELATION_ALIASES.get(relation, relation)


class RelationshipAgent(BaseAgent):
    name = "relationship"
    description = "Who the user knows and how people, places and employers relate."

    def create_component(self, data: dict[str, Any]) -> dict[str, Any]:
        operation = str(data.get("operation", "create")).strip().lower()
        if operation in ("create", "update"):
            return self._create(data)
        if operation in ("query", "analyze"):
            return self._query(data)
        return self._generic_component(operation, data)

    def _create(self, data: dict[str, Any]) -> dict[str, Any]:
        subject = str(data.get("subject", "")).strip()
        target = str(data.get("object", "")).strip()
        relation = normalize_relation(data.get("relation"))
        if not subject or not target:
            return {"type": "relationship_saved", "stored": False, "error": "subject and object are required"}

        edge = {"subject": subject, "relation": relation, "object": target}
        database = self.capability("database")
        if database is None:
            return {"type": "relationship_saved", **edge, "stored": False}
        outcome = database.execute(
            {
                "action": "save",
                "key": f"rel:{subject.lower()}:{relation}:{target.lower()}",
                "value": edge,
                "memory_type": "relationship",
            }
        )
        return {"type": "relationship_saved", **edge, "stored": bool(outcome.get("success"))}

    def _query(self, data: dict[str, Any]) -> dict[str, Any]:
        person = str(data.get("person") or data.get("subject") or "").strip()
        database = self.capability("database")
        if database is None or not person:
            return {"type": "relationship_results", "person": person, "relations": []}
        outcome = database.execute(
            {"action": "search", "query": person, "memory_type": "relationship", "limit": data.get("limit", 20)}
        )
        rows = (outcome.get("data") or {}).get("results", []) if outcome.get("success") else []
        return {
            "type": "relationship_results",
            "person": person,
            "relations": [row["value"] for row in rows],
        }
