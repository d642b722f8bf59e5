"""
HTTP API for the triage pipeline.

Endpoints:
- GET  /health
- POST /api/query   {"query": "...", "conversation_id": "...", "debug_mode": false}

Registry/configuration failures become error payloads; debug details are
included only when debug mode is on (globally or for the request).
"""

from __future__ import annotations

import logging
import platform
import time
from typing import Any, Callable

from fastapi import FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from entry.cli import sanitize_conversation_id
from observability.logger import Observability
from orchestrator.orchestrator import Orchestrator
from shared.errors import RequestValidationError, build_error_payload
from shared.models import EntryRequest
from shared.settings import Settings

logger = logging.getLogger(__name__)


class QueryRequest(BaseModel):
    query: str | None = None
    conversation_id: str | None = None
    user_id: str | None = None
    debug_mode: bool | None = None


def _dump(model: BaseModel) -> dict[str, Any]:
    data = model.model_dump(mode="json")
    if data.get("debug") is None:
        data.pop("debug", None)
    return data


def validate_query(body: QueryRequest, settings: Settings) -> EntryRequest:
    query = (body.query or "").strip()
    if not query:
        raise RequestValidationError("Missing required parameter: query", {"field": "query"})
    if len(query) > settings.max_query_length:
        raise RequestValidationError(
            f"Query too long. Please limit input to {settings.max_query_length} characters.",
            {"query_length": len(query)},
        )
    debug = settings.debug_mode if body.debug_mode is None else body.debug_mode
    return EntryRequest(
        query=query,
        conversation_id=sanitize_conversation_id(body.conversation_id),
        user_id=body.user_id,
        debug_mode=debug,
        metadata={"source": "api"},
    )


def create_app(
    orchestrator_provider: Callable[[], Orchestrator],
    settings: Settings,
) -> FastAPI:
    """Build the FastAPI app; the orchestrator is fetched per request from the registry."""
    app = FastAPI(title="Triage Orchestrator", version="1.0.0")

    @app.get("/health")
    def health() -> dict[str, Any]:
        return {"status": "ok", "timestamp": int(time.time())}

    # Sync endpoint: FastAPI runs it in its thread pool.
    @app.post("/api/query")
    def query(body: QueryRequest) -> JSONResponse:
        debug = settings.debug_mode if body.debug_mode is None else body.debug_mode
        try:
            request = validate_query(body, settings)
            payload = orchestrator_provider().handle_request(request)
        except RequestValidationError as e:
            logger.info("Rejected request: %s", e.message)
            return JSONResponse(_dump(build_error_payload(e, debug)), status_code=e.code)
        except Exception as e:
            logger.exception("Request failed")
            error = build_error_payload(e, debug)
            return JSONResponse(_dump(error), status_code=error.code)

        if request.debug_mode:
            payload = payload.model_copy(
                update={
                    "debug": {
                        "input": request.model_dump(mode="json"),
                        "python_version": platform.python_version(),
                    }
                }
            )
        Observability(conversation_id=request.conversation_id).transition("sent")
        return JSONResponse(_dump(payload))

    return app
