"""
Shared Pydantic models for all layers.
Plans, results and payloads are immutable (frozen) after creation.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field


# ─── Entry Layer ───────────────────────────────────────────────

class EntryRequest(BaseModel):
    """Normalized input from any entry adapter."""
    model_config = {"frozen": True}

    query: str
    conversation_id: str = "default_conversation"
    user_id: str | None = None
    debug_mode: bool = False
    metadata: dict[str, Any] = Field(default_factory=dict)


# ─── Planner Layer ─────────────────────────────────────────────

class TaskSpec(BaseModel):
    """One unit of work in a triage plan."""
    model_config = {"frozen": True}

    agent: str = Field(..., description="Handler reference as written by the model, e.g. 'MemoryAgent'")
    data: dict[str, Any] = Field(default_factory=dict)


class ExecutionPlan(BaseModel):
    """Structured task list plus the narrative answer for the user."""
    model_config = {"frozen": True}

    tasks: list[TaskSpec] = Field(..., min_length=1)
    response: str = Field(..., min_length=1)
    intent: str = Field(default="general_request")


# ─── Model Layer (Policy) ──────────────────────────────────────

class ModelPolicy(BaseModel):
    """Configuration for Model Layer execution."""
    model_config = {"frozen": True}

    model_name: str
    temperature: float = 0.2
    timeout_seconds: float = 30.0
    max_retries: int = 2
    json_mode: bool = True


# ─── Execution Layer ───────────────────────────────────────────

class TaskSuccess(BaseModel):
    model_config = {"frozen": True}

    status: Literal["success"] = "success"
    agent: str
    handler_key: str
    payload: dict[str, Any] = Field(default_factory=dict)


class TaskFailure(BaseModel):
    model_config = {"frozen": True}

    status: Literal["failure"] = "failure"
    agent: str
    message: str


TaskResult = Annotated[Union[TaskSuccess, TaskFailure], Field(discriminator="status")]


# ─── Response Layer ────────────────────────────────────────────

class Component(BaseModel):
    """One unit of the assembled response, produced from one task outcome."""
    model_config = {"frozen": True}

    type: str
    data: dict[str, Any] = Field(default_factory=dict)
    timestamp: int


class ResponsePayload(BaseModel):
    model_config = {"frozen": True}

    status: Literal["success"] = "success"
    plan: ExecutionPlan
    components: dict[str, Component] = Field(default_factory=dict)
    response: str
    timestamp: int
    debug: dict[str, Any] | None = None


class ErrorPayload(BaseModel):
    model_config = {"frozen": True}

    status: Literal["error"] = "error"
    message: str
    code: int = 500
    success: bool = False
    debug: dict[str, Any] | None = None
