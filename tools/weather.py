"""
Weather capability — current conditions from OpenWeatherMap.

Performance:
- Persistent httpx client with connection pooling
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)


class WeatherCapability:
    """Looks up current weather for a location."""

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.openweathermap.org",
        timeout_seconds: float = 10.0,
        client: httpx.Client | None = None,
    ):
        if not api_key:
            raise ValueError("WeatherCapability requires an API key.")
        self.api_key = api_key
        self._client = client or httpx.Client(
            base_url=base_url.rstrip("/"),
            timeout=timeout_seconds,
            limits=httpx.Limits(max_keepalive_connections=2, max_connections=4),
        )

    def execute(self, params: dict[str, Any]) -> dict[str, Any]:
        location = str(params.get("location", "")).strip()
        if not location:
            return {"success": False, "error": "Missing required parameter: location"}
        units = str(params.get("units", "metric")).strip() or "metric"

        try:
            response = self._client.get(
                "/data/2.5/weather",
                params={"q": location, "appid": self.api_key, "units": units},
            )
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as e:
            logger.warning("Weather lookup failed for '%s': %s", location, e)
            return {"success": False, "error": f"Weather service error: {e}"}
        except ValueError as e:
            logger.warning("Weather service returned a non-JSON body for '%s': %s", location, e)
            return {"success": False, "error": "Weather service returned an invalid response."}
        if not isinstance(payload, dict):
            return {"success": False, "error": "Weather service returned an invalid response."}

        main = payload.get("main") or {}
        conditions = payload.get("weather") or [{}]
        return {
            "success": True,
            "data": {
                "location": payload.get("name", location),
                "temperature": main.get("temp"),
                "feels_like": main.get("feels_like"),
                "humidity": main.get("humidity"),
                "conditions": conditions[0].get("description", ""),
                "units": units,
            },
        }

    def close(self) -> None:
        self._client.close()
