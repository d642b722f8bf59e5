from __future__ import annotations

import pytest

from shared.errors import ConfigurationError
from shared.settings import Settings

ENV_KEYS = [
    "MODEL_PROVIDER", "MODEL_BASE_URL", "MODEL_NAME", "MODEL_API_KEY", "GEMINI_API_KEY", "OPENAI_API_KEY",
    "MODEL_TIMEOUT_SECONDS", "MODEL_MAX_RETRIES", "WEATHER_API_KEY", "DEBUG_MODE", "MAX_QUERY_LENGTH",
    "HISTORY_MAX_ENTRIES", "AGENTS_DISABLED", "CAPABILITY_GRANTS_JSON", "LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def test_defaults():
    settings = Settings.from_env()
    assert settings.model_provider == "gemini"
    assert settings.model_base_url == "https://generativelanguage.googleapis.com"
    assert settings.model_name == "gemini-2.5-flash-lite"
    assert settings.max_query_length == 2000
    assert settings.history_max_entries == 10
    assert settings.debug_mode is False
    assert settings.capability_grants == {}


def test_gemini_key_fallback_and_flags(monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "g-key")
    monkeypatch.setenv("DEBUG_MODE", "yes")
    monkeypatch.setenv("AGENTS_DISABLED", "health, planner ,")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    settings = Settings.from_env()

    assert settings.model_api_key == "g-key"
    assert settings.debug_mode is True
    assert settings.disabled_agents == frozenset({"health", "planner"})
    assert settings.log_level == "DEBUG"


def test_ollama_provider_uses_local_default(monkeypatch):
    monkeypatch.setenv("MODEL_PROVIDER", "ollama")
    monkeypatch.setenv("MODEL_MAX_RETRIES", "0")
    settings = Settings.from_env()
    assert settings.model_base_url == "http://localhost:11434"
    assert settings.model_max_retries == 1


def test_capability_grants_json(monkeypatch):
    monkeypatch.setenv("CAPABILITY_GRANTS_JSON", '{"finance": ["database", " weather "]}')
    assert Settings.from_env().capability_grants == {"finance": ["database", "weather"]}


@pytest.mark.parametrize("raw", ["{not json", "[\"database\"]", '{"finance": "database"}'])
def test_invalid_capability_grants_raise(monkeypatch, raw):
    monkeypatch.setenv("CAPABILITY_GRANTS_JSON", raw)
    with pytest.raises(ConfigurationError):
        Settings.from_env()


@pytest.mark.parametrize(
    "name", ["MODEL_TIMEOUT_SECONDS", "MODEL_MAX_RETRIES", "HISTORY_MAX_ENTRIES", "MAX_QUERY_LENGTH"]
)
def test_non_numeric_values_raise_configuration_error(monkeypatch, name):
    monkeypatch.setenv(name, "soon")
    with pytest.raises(ConfigurationError) as exc_info:
        Settings.from_env()
    assert exc_info.value.context == {"variable": name}
