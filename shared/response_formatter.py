"""
Response formatting — plain-text rendering of assembled responses.

Used by the CLI; the HTTP API returns the JSON payload as-is.
"""

from __future__ import annotations

from typing import Any

from shared.models import Component, ResponsePayload

_SKIP_KEYS = {"type"}


def _format_value(value: Any) -> str:
    if isinstance(value, float):
        return f"{value:.2f}"
    if isinstance(value, (list, tuple)):
        return ", ".join(_format_value(item) for item in value) or "-"
    if isinstance(value, dict):
        return ", ".join(f"{k}={_format_value(v)}" for k, v in value.items()) or "-"
    if value is None:
        return "-"
    return str(value)


def format_component(key: str, component: Component) -> str:
    """One line per component: 'key [type]: field=value; ...'."""
    if component.type == "error":
        return f"{key} [error]: {component.data.get('error', 'unknown error')}"
    fields = [
        f"{name}={_format_value(value)}"
        for name, value in component.data.items()
        if name not in _SKIP_KEYS
    ]
    return f"{key} [{component.type}]: " + "; ".join(fields)


def format_response(payload: ResponsePayload) -> str:
    lines = [payload.response.strip()]
    for key, component in payload.components.items():
        lines.append(f"  - {format_component(key, component)}")
    return "\n".join(lines)
