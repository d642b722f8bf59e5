"""Generalist Agent — catch-all handler and first fallback for unknown agents."""

from __future__ import annotations

from typing import Any

from agents.base import BaseAgent


class GeneralistAgent(BaseAgent):
    name = "generalist"
    description = "General questions, topic classification, web search and weather lookups."

    def create_component(self, data: dict[str, Any]) -> dict[str, Any]:
        operation = str(data.get("operation", "analyze")).strip().lower()
        if operation == "analyze":
            return {
                "type": "content_analysis",
                "sentiment": "neutral",
                "topics": data.get("topics") or ["general"],
                "confidence": 0.8,
            }
        if operation == "classify":
            return {
                "type": "topic_classification",
                "category": str(data.get("category", "general")),
                "subcategory": "information",
                "confidence": 0.75,
            }
        if operation == "search":
            return self._search(data)
        if operation == "weather":
            return self._weather(data)
        return {
            "type": "general_response",
            "operation": operation,
            "message": "General request processed",
            "data": data,
        }

    def _search(self, data: dict[str, Any]) -> dict[str, Any]:
        query = str(data.get("query") or data.get("search") or "")
        search = self.capability("search")
        if search is None:
            return {"type": "search_results", "query": query, "results": [], "available": False}
        outcome = search.execute({"query": query, "limit": data.get("limit", 5)})
        return {
            "type": "search_results",
            "query": query,
            "results": (outcome.get("data") or {}).get("results", []),
            "mock": bool(outcome.get("mock")),
            "available": bool(outcome.get("success")),
        }

    def _weather(self, data: dict[str, Any]) -> dict[str, Any]:
        location = str(data.get("location", ""))
        weather = self.capability("weather")
        if weather is None:
            return {"type": "weather_report", "location": location, "available": False}
        outcome = weather.execute({"location": location, "units": data.get("units", "metric")})
        if not outcome.get("success"):
            return {"type": "weather_report", "location": location, "available": False, "error": outcome.get("error")}
        return {
            "type": "weather_report",
            "location": location,
            "available": True,
            "mock": bool(outcome.get("mock")),
            "report": outcome.get("data", {}),
        }
