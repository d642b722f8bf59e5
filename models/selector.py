"""
Model Layer — LLM Abstraction & Policy Enforcement.

Responsibility:
- Abstract specific LLM client details (Gemini, Ollama, OpenAI-compatible)
- Enforce timeouts and retries
- Return the raw text answer; parsing belongs to the planner

This is the ONLY place where LLMs are called.
"""

import logging
from typing import Any

import httpx

from observability.logger import Observability
from shared.models import ModelPolicy
from shared.settings import Settings

logger = logging.getLogger(__name__)

SUPPORTED_PROVIDERS = ("gemini", "ollama", "openai_compatible")


class ModelSelector:
    """Manages LLM calls with reliability policies."""

    def __init__(
        self,
        provider: str = "gemini",
        base_url: str = "https://generativelanguage.googleapis.com",
        api_key: str = "",
    ):
        if provider not in SUPPORTED_PROVIDERS:
            raise ValueError(f"Unsupported model provider '{provider}'.")
        self.provider = provider
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key

        base_headers: dict[str, str] = {}
        if self.provider == "openai_compatible" and self.api_key:
            base_headers["Authorization"] = f"Bearer {self.api_key}"

        # Persistent client with connection pooling
        self._client = httpx.Client(
            base_url=self.base_url,
            timeout=60.0,  # default, overridden by policy
            limits=httpx.Limits(max_keepalive_connections=5, max_connections=10),
            headers=base_headers,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "ModelSelector":
        return cls(
            provider=settings.model_provider,
            base_url=settings.model_base_url,
            api_key=settings.model_api_key,
        )

    def generate(
        self,
        prompt: str,
        policy: ModelPolicy,
        request_id: str | None = None,
    ) -> str:
        """
        Execute LLM generation with retry/timeout policy.
        Returns the model's text answer unparsed.
        """
        obs = Observability(request_id=request_id)
        last_error: Exception | None = None

        for attempt in range(1, max(1, policy.max_retries) + 1):
            try:
                with obs.measure(
                    "model_call",
                    {"model": policy.model_name, "attempt": attempt, "provider": self.provider},
                ):
                    return self._call_model(prompt, policy)
            except (httpx.HTTPError, ValueError) as e:
                last_error = e
                logger.warning(
                    "Model call failed (attempt %d/%d): %s",
                    attempt,
                    policy.max_retries,
                    e,
                )

        obs.log_event(
            "model_failure",
            {"error": str(last_error), "policy": policy.model_dump()},
            level="ERROR",
        )
        raise last_error or RuntimeError("Unknown model failure")

    def _call_model(self, prompt: str, policy: ModelPolicy) -> str:
        """Low-level model API call dispatching by configured provider."""
        if self.provider == "gemini":
            return self._call_gemini(prompt, policy)
        if self.provider == "openai_compatible":
            return self._call_openai_chat(prompt, policy)
        return self._call_ollama_chat(prompt, policy)

    def _call_gemini(self, prompt: str, policy: ModelPolicy) -> str:
        """Gemini generateContent call."""
        if not self.api_key:
            raise ValueError("MODEL_API_KEY (or GEMINI_API_KEY) is required when MODEL_PROVIDER=gemini.")

        generation_config: dict[str, Any] = {"temperature": policy.temperature}
        if policy.json_mode:
            generation_config["responseMimeType"] = "application/json"

        response = self._client.post(
            f"/v1beta/models/{policy.model_name}:generateContent",
            params={"key": self.api_key},
            json={
                "contents": [{"role": "user", "parts": [{"text": prompt}]}],
                "generationConfig": generation_config,
            },
            timeout=policy.timeout_seconds,
        )
        response.raise_for_status()
        candidates = response.json().get("candidates") or []
        if not candidates:
            raise ValueError("Gemini response missing candidates")
        parts = (candidates[0].get("content") or {}).get("parts") or []
        text = "".join(str(part.get("text", "")) for part in parts if isinstance(part, dict))
        if not text.strip():
            raise ValueError("Gemini response missing text content")
        return text

    def _call_ollama_chat(self, prompt: str, policy: ModelPolicy) -> str:
        """Low-level Ollama /api/chat call."""
        payload: dict[str, Any] = {
            "model": policy.model_name,
            "messages": [{"role": "user", "content": prompt}],
            "stream": False,
            "options": {"temperature": policy.temperature, "num_ctx": 4096},
        }
        if policy.json_mode:
            payload["format"] = "json"

        response = self._client.post("/api/chat", json=payload, timeout=policy.timeout_seconds)
        response.raise_for_status()
        return str(response.json().get("message", {}).get("content", ""))

    def _call_openai_chat(self, prompt: str, policy: ModelPolicy) -> str:
        """OpenAI-compatible /v1/chat/completions call."""
        payload: dict[str, Any] = {
            "model": policy.model_name,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": policy.temperature,
            "stream": False,
        }
        if policy.json_mode:
            payload["response_format"] = {"type": "json_object"}

        response = self._client.post("/v1/chat/completions", json=payload, timeout=policy.timeout_seconds)
        response.raise_for_status()
        choices = response.json().get("choices") or []
        if not choices:
            raise ValueError("OpenAI-compatible response missing choices")
        return str((choices[0].get("message") or {}).get("content", ""))

    def close(self):
        """Close persistent connections."""
        self._client.close()
