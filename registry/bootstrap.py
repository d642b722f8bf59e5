"""
Bootstrap — Wires every service into a fresh ServiceRegistry.

Responsibility:
- Bind the fixed agent table to `agent.<name>` keys
- Register capability backends and the default grant table
- Register core pipeline services (model, planner, router, executor, assembler)

Nothing is constructed here; instances are created on first `get`.
Call `build_orchestrator()` at startup to surface configuration errors early.
"""

from __future__ import annotations

import logging
from typing import Any

from agents.base import BaseAgent
from agents.finance import FinanceAgent
from agents.generalist import GeneralistAgent
from agents.health import HealthAgent
from agents.learning import LearningAgent
from agents.memory import MemoryAgent
from agents.planner import PlannerAgent
from agents.relationship import RelationshipAgent
from agents.social import SocialAgent
from agents.spiritual import SpiritualAgent
from conversation.manager import ConversationManager
from execution.response_assembler import ResponseAssembler
from execution.task_executor import TaskExecutor
from memory.store import SQLiteMemoryStore
from models.selector import ModelSelector
from orchestrator.agent_router import AgentRouter
from orchestrator.orchestrator import Orchestrator
from planner.plan_parser import PlanParser
from planner.triage import TriagePlanner
from registry.capability_registry import CapabilityRegistry
from registry.service_registry import ServiceRegistry
from shared.models import ModelPolicy
from shared.naming import normalize_agent_name
from shared.settings import Settings
from tools.database import DatabaseCapability
from tools.weather import WeatherCapability

logger = logging.getLogger(__name__)

AGENT_DEFINITIONS: dict[str, type[BaseAgent]] = {
    "memory": MemoryAgent,
    "generalist": GeneralistAgent,
    "finance": FinanceAgent,
    "health": HealthAgent,
    "planner": PlannerAgent,
    "spiritual": SpiritualAgent,
    "social": SocialAgent,
    "learning": LearningAgent,
    "relationship": RelationshipAgent,
}

# One entry per agent; CAPABILITY_GRANTS_JSON entries replace these.
DEFAULT_GRANTS: dict[str, list[str]] = {
    "memory": ["database", "conversation"],
    "generalist": ["*"],
    "finance": ["database", "search", "calendar"],
    "health": ["database", "search", "calendar", "weather"],
    "planner": ["calendar", "database", "search"],
    "spiritual": ["database", "search", "conversation"],
    "social": ["database", "calendar", "search", "conversation"],
    "learning": ["database", "search", "calendar", "conversation"],
    "relationship": ["database"],
}

CLOSEABLE_SERVICES = ("model.selector", "store.memory", "history.conversation", "tool.weather")


def build_services(settings: Settings) -> ServiceRegistry:
    """Create a registry with every factory bound."""
    services = ServiceRegistry()
    services.register_instance("config", settings)

    capabilities = CapabilityRegistry(services)
    services.register_instance("core.capabilities", capabilities)
    _register_capabilities(capabilities, settings)
    _apply_grants(capabilities, settings)
    _register_agents(services, capabilities, settings)
    _register_core(services, settings)
    return services


def build_orchestrator(services: ServiceRegistry) -> Orchestrator:
    return services.get("core.orchestrator")


def agent_catalog(services: ServiceRegistry, namespace: str = "agent.") -> list[dict[str, str]]:
    """Name/description pairs of registered agents, for the triage prompt."""
    catalog = []
    for name, agent_cls in AGENT_DEFINITIONS.items():
        if services.has(f"{namespace}{name}"):
            catalog.append({"name": name, "description": agent_cls.description})
    return catalog


def shutdown(services: ServiceRegistry) -> None:
    """Purge expired memories, then close resources that were actually created."""
    if services.is_created("store.memory"):
        purged = services.get("store.memory").purge_expired()
        if purged:
            logger.info("Purged %d expired memories.", purged)
    for service_id in CLOSEABLE_SERVICES:
        if not services.is_created(service_id):
            continue
        instance = services.get(service_id)
        close = getattr(instance, "close", None)
        if callable(close):
            close()
            logger.debug("Closed service: %s", service_id)


# ─── Registration helpers ──────────────────────────────────────

def _register_capabilities(capabilities: CapabilityRegistry, settings: Settings) -> None:
    capabilities.services.register(
        "store.memory", lambda services: SQLiteMemoryStore(db_path=settings.memory_db_path)
    )
    capabilities.register("database", lambda services: DatabaseCapability(services.get("store.memory")))

    def weather_factory(services: ServiceRegistry) -> Any:
        if not settings.weather_api_key:
            return None
        return WeatherCapability(api_key=settings.weather_api_key, base_url=settings.weather_base_url)

    capabilities.register("weather", weather_factory)


def _apply_grants(capabilities: CapabilityRegistry, settings: Settings) -> None:
    for agent, names in DEFAULT_GRANTS.items():
        capabilities.grant(agent, names)
    for agent, names in settings.capability_grants.items():
        capabilities.grant(agent, names)


def _register_agents(
    services: ServiceRegistry,
    capabilities: CapabilityRegistry,
    settings: Settings,
) -> None:
    disabled = {normalize_agent_name(name) for name in settings.disabled_agents}
    for name, agent_cls in AGENT_DEFINITIONS.items():
        if name in disabled:
            logger.info("Agent disabled by configuration: %s", name)
            continue
        services.register(
            f"{settings.agent_namespace}{name}",
            lambda _services, cls=agent_cls: cls(capabilities=capabilities),
        )


def _register_core(services: ServiceRegistry, settings: Settings) -> None:
    services.register("model.selector", lambda s: ModelSelector.from_settings(settings))
    services.register(
        "history.conversation",
        lambda s: ConversationManager(
            db_path=settings.history_db_path,
            max_entries=settings.history_max_entries,
        ),
    )
    services.register(
        "planner.triage",
        lambda s: TriagePlanner(
            model_selector=s.get("model.selector"),
            policy=ModelPolicy(
                model_name=settings.model_name,
                timeout_seconds=settings.model_timeout_seconds,
                max_retries=settings.model_max_retries,
            ),
            agent_catalog=agent_catalog(s, settings.agent_namespace),
            parser=PlanParser(fallback_agent="memory"),
        ),
    )
    services.register(
        "core.router",
        lambda s: AgentRouter(
            s,
            namespace=settings.agent_namespace,
            fallback_chain=settings.fallback_agents,
        ),
    )
    services.register("core.executor", lambda s: TaskExecutor(s.get("core.router")))
    services.register(
        "core.assembler",
        lambda s: ResponseAssembler(history_hook=s.get("history.conversation")),
    )
    services.register(
        "core.orchestrator",
        lambda s: Orchestrator(
            planner=s.get("planner.triage"),
            executor=s.get("core.executor"),
            assembler=s.get("core.assembler"),
        ),
    )
