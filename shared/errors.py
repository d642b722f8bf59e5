"""
Error taxonomy for the triage pipeline.

Only registry/configuration failures surface as request-level errors.
Malformed plans, failing tasks and denied capabilities are handled as
values by the components that meet them.
"""

from __future__ import annotations

import traceback
from typing import Any

from shared.models import ErrorPayload


class AssistantError(Exception):
    """Base error carrying a context dict for debug output."""

    default_code = 500

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        code: int | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.context = dict(context or {})
        self.code = code or self.default_code


class ConfigurationError(AssistantError):
    """Invalid startup configuration."""


class RequestValidationError(AssistantError):
    """Inbound request rejected before reaching the pipeline."""

    default_code = 400


class ServiceNotFoundError(AssistantError):
    def __init__(self, service_id: str):
        super().__init__(f"Service '{service_id}' not found.", {"service_id": service_id})
        self.service_id = service_id


class ServiceCreationError(AssistantError):
    def __init__(self, service_id: str, cause: BaseException):
        super().__init__(
            f"Failed to create service '{service_id}': {cause}",
            {"service_id": service_id, "cause": type(cause).__name__},
        )
        self.service_id = service_id
        self.cause = cause


class NoHandlerAvailableError(AssistantError):
    def __init__(self, reference: str, tried: list[str]):
        super().__init__(
            f"No handler available for agent '{reference}' (tried: {', '.join(tried)}).",
            {"agent": reference, "tried": list(tried)},
        )
        self.reference = reference
        self.tried = list(tried)


def build_error_payload(exc: BaseException, debug: bool = False) -> ErrorPayload:
    """Render an exception as the wire-level error envelope."""
    if isinstance(exc, AssistantError):
        message = exc.message
        code = exc.code
    else:
        message = "Internal Server Error"
        code = 500

    debug_info: dict[str, Any] | None = None
    if debug:
        debug_info = {
            "message": str(exc),
            "exception_class": type(exc).__name__,
            "trace": traceback.format_exception(type(exc), exc, exc.__traceback__),
        }
        if isinstance(exc, AssistantError):
            debug_info["context"] = exc.context

    return ErrorPayload(message=message, code=code, debug=debug_info)
