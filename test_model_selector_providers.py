from __future__ import annotations

import httpx
import pytest

from models.selector import ModelSelector
from shared.models import ModelPolicy
from shared.settings import Settings


class DummyResponse:
    def __init__(self, payload: dict):
        self._payload = payload

    def raise_for_status(self) -> None:
        return None

    def json(self) -> dict:
        return self._payload


class DummyClient:
    def __init__(self, payload: dict | None = None, errors: int = 0):
        self.calls: list[dict] = []
        self.payload = payload or {}
        self.errors = errors

    def post(self, path, params=None, json=None, headers=None, timeout=None):
        self.calls.append(
            {
                "path": path,
                "params": params or {},
                "json": json,
                "timeout": timeout,
            }
        )
        if self.errors:
            self.errors -= 1
            raise httpx.ConnectError("connection refused")
        return DummyResponse(self.payload)

    def close(self) -> None:
        return None


POLICY = ModelPolicy(model_name="gemini-2.5-flash-lite", max_retries=2, timeout_seconds=5.0)


def test_gemini_generate_content_roundtrip():
    selector = ModelSelector(provider="gemini", api_key="test-key")
    fake_client = DummyClient({"candidates": [{"content": {"parts": [{"text": "{\"tasks\": []}"}]}}]})
    selector._client = fake_client

    out = selector.generate("plan this", POLICY)

    assert out == "{\"tasks\": []}"
    assert len(fake_client.calls) == 1
    call = fake_client.calls[0]
    assert call["path"] == "/v1beta/models/gemini-2.5-flash-lite:generateContent"
    assert call["params"] == {"key": "test-key"}
    assert call["json"]["contents"][0]["parts"][0]["text"] == "plan this"
    assert call["json"]["generationConfig"]["responseMimeType"] == "application/json"
    assert call["timeout"] == 5.0
    selector.close()


def test_retries_then_succeeds():
    selector = ModelSelector(provider="ollama", base_url="http://localhost:11434")
    fake_client = DummyClient({"message": {"content": "hello"}}, errors=1)
    selector._client = fake_client

    assert selector.generate("hi", POLICY) == "hello"
    assert len(fake_client.calls) == 2
    assert fake_client.calls[0]["json"]["format"] == "json"
    selector.close()


def test_exhausted_retries_raise_last_error():
    selector = ModelSelector(provider="ollama", base_url="http://localhost:11434")
    selector._client = DummyClient(errors=5)

    with pytest.raises(httpx.ConnectError):
        selector.generate("hi", POLICY)
    assert len(selector._client.calls) == 2


def test_gemini_without_key_fails():
    selector = ModelSelector(provider="gemini", api_key="")
    selector._client = DummyClient()

    with pytest.raises(ValueError):
        selector.generate("hi", ModelPolicy(model_name="m", max_retries=1))
    assert selector._client.calls == []


def test_openai_compatible_chat_completions():
    selector = ModelSelector(provider="openai_compatible", base_url="https://api.openai.com", api_key="sk")
    fake_client = DummyClient({"choices": [{"message": {"content": "{}"}}]})
    selector._client = fake_client

    assert selector.generate("hi", POLICY) == "{}"
    call = fake_client.calls[0]
    assert call["path"] == "/v1/chat/completions"
    assert call["json"]["response_format"] == {"type": "json_object"}
    selector.close()


def test_unsupported_provider_rejected():
    with pytest.raises(ValueError):
        ModelSelector(provider="telepathy")


def test_from_settings_uses_provider_and_url():
    settings = Settings(model_provider="ollama", model_base_url="http://ollama:11434/")
    selector = ModelSelector.from_settings(settings)
    assert selector.provider == "ollama"
    assert selector.base_url == "http://ollama:11434"
    selector.close()
