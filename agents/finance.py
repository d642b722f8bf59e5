"""Finance Agent — expense logging, categorization and budget summaries."""

from __future__ import annotations

import logging
from typing import Any

from agents.base import BaseAgent

logger = logging.getLogger(__name__)


class FinanceAgent(BaseAgent):
    name = "finance"
    description = "Expenses, income, budgets and spending analysis."

    def create_component(self, data: dict[str, Any]) -> dict[str, Any]:
        operation = str(data.get("operation", "log")).strip().lower()
        if operation in ("log", "log_expense", "expense"):
            return self._log_expense(data)
        if operation == "categorize":
            return self._categorize(data)
        if operation == "analyze":
            return {
                "type": "financial_analysis",
                "trends": ["spending_up", "income_stable"],
                "recommendations": ["reduce_dining_out", "increase_savings"],
                "period": data.get("period", "month"),
            }
        if operation == "budget":
            budget = self._amount(data.get("budget"))
            spent = self._amount(data.get("spent"))
            return {
                "type": "budget_status",
                "total_budget": budget,
                "spent": spent,
                "remaining": budget - spent,
                "categories": data.get("categories", []),
            }
        return self._generic_component(operation, data)

    def _log_expense(self, data: dict[str, Any]) -> dict[str, Any]:
        amount = self._amount(data.get("amount"))
        entry = {
            "amount": amount,
            "description": str(data.get("description", "")),
            "category": str(data.get("category", "uncategorized")),
        }
        stored = False
        database = self.capability("database")
        if database is not None:
            key = f"expense:{entry['category']}:{entry['description'] or amount}"
            outcome = database.execute({"action": "save", "key": key, "value": entry, "memory_type": "task"})
            stored = bool(outcome.get("success"))
        return {"type": "expense_logged", **entry, "stored": stored}

    def _categorize(self, data: dict[str, Any]) -> dict[str, Any]:
        return {
            "type": "transaction_category",
            "category": str(data.get("category", "food_dining")),
            "confidence": 0.95,
            "amount": self._amount(data.get("amount")),
            "description": str(data.get("description", "")),
        }

    @staticmethod
    def _amount(value: Any) -> float:
        try:
            return float(value or 0)
        except (TypeError, ValueError):
            logger.warning("Invalid amount %r; using 0.", value)
            return 0.0
