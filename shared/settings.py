"""
Runtime configuration read from the environment.

`main.py` loads `.env` before calling `Settings.from_env()`; everything
downstream receives the frozen Settings instance instead of reading
os.environ itself.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any, Callable

from pydantic import BaseModel, Field

from shared.errors import ConfigurationError

logger = logging.getLogger(__name__)

_TRUE_VALUES = ("1", "true", "yes", "on")

DEFAULT_BASE_URLS = {
    "gemini": "https://generativelanguage.googleapis.com",
    "ollama": "http://localhost:11434",
    "openai_compatible": "https://api.openai.com",
}


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in _TRUE_VALUES


def _env_number(name: str, default: str, cast: Callable[[str], Any]) -> Any:
    raw = os.getenv(name, default).strip() or default
    try:
        return cast(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be a number, got '{raw}'.", {"variable": name}) from e


def _parse_csv_set(raw: str) -> set[str]:
    return {item.strip() for item in (raw or "").split(",") if item.strip()}


def _parse_grants(raw: str) -> dict[str, list[str]]:
    if not raw:
        return {}
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ConfigurationError(
            f"CAPABILITY_GRANTS_JSON is not valid JSON: {e}",
            {"value": raw[:200]},
        ) from e
    if not isinstance(parsed, dict):
        raise ConfigurationError("CAPABILITY_GRANTS_JSON must be a JSON object.")

    grants: dict[str, list[str]] = {}
    for agent, names in parsed.items():
        if not isinstance(names, list):
            raise ConfigurationError(
                f"Grant for agent '{agent}' must be a list of capability names.",
                {"agent": agent},
            )
        grants[str(agent)] = [str(name).strip() for name in names if str(name).strip()]
    return grants


class Settings(BaseModel):
    """Application settings."""
    model_config = {"frozen": True, "protected_namespaces": ()}

    model_provider: str = "gemini"
    model_base_url: str = DEFAULT_BASE_URLS["gemini"]
    model_name: str = "gemini-2.5-flash-lite"
    model_api_key: str = ""
    model_timeout_seconds: float = 30.0
    model_max_retries: int = 2

    weather_api_key: str = ""
    weather_base_url: str = "https://api.openweathermap.org"

    memory_db_path: str = "memory.db"
    history_db_path: str = "conversations.db"
    history_max_entries: int = 10

    debug_mode: bool = False
    max_query_length: int = 2000
    log_level: str = "INFO"

    agent_namespace: str = "agent."
    fallback_agents: tuple[str, ...] = ("generalist", "memory")
    disabled_agents: frozenset[str] = Field(default_factory=frozenset)
    capability_grants: dict[str, list[str]] = Field(default_factory=dict)

    @classmethod
    def from_env(cls) -> "Settings":
        provider = os.getenv("MODEL_PROVIDER", "gemini").strip().lower()
        if provider not in DEFAULT_BASE_URLS:
            logger.warning("Unknown MODEL_PROVIDER '%s'; using gemini.", provider)
            provider = "gemini"

        api_key = os.getenv("MODEL_API_KEY", "").strip()
        if not api_key:
            if provider == "gemini":
                api_key = os.getenv("GEMINI_API_KEY", "").strip()
            elif provider == "openai_compatible":
                api_key = os.getenv("OPENAI_API_KEY", "").strip()

        values: dict[str, Any] = {
            "model_provider": provider,
            "model_base_url": (
                os.getenv("MODEL_BASE_URL", "").strip() or DEFAULT_BASE_URLS[provider]
            ).rstrip("/"),
            "model_name": os.getenv("MODEL_NAME", "gemini-2.5-flash-lite").strip() or "gemini-2.5-flash-lite",
            "model_api_key": api_key,
            "model_timeout_seconds": max(1.0, _env_number("MODEL_TIMEOUT_SECONDS", "30", float)),
            "model_max_retries": max(1, _env_number("MODEL_MAX_RETRIES", "2", int)),
            "weather_api_key": os.getenv("WEATHER_API_KEY", "").strip(),
            "memory_db_path": os.getenv("MEMORY_DB_PATH", "memory.db"),
            "history_db_path": os.getenv("HISTORY_DB_PATH", "conversations.db"),
            "history_max_entries": max(1, _env_number("HISTORY_MAX_ENTRIES", "10", int)),
            "debug_mode": _env_bool("DEBUG_MODE"),
            "max_query_length": _env_number("MAX_QUERY_LENGTH", "2000", int),
            "log_level": os.getenv("LOG_LEVEL", "INFO").strip().upper() or "INFO",
            "disabled_agents": frozenset(_parse_csv_set(os.getenv("AGENTS_DISABLED", ""))),
            "capability_grants": _parse_grants(os.getenv("CAPABILITY_GRANTS_JSON", "").strip()),
        }
        return cls(**values)
