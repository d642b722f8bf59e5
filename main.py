"""
Triage Orchestrator — Main CLI Entrypoint.

Wires all layers and runs either a one-shot query, the interactive loop,
or the HTTP API.
"""

import argparse
import json
import logging
import sys

from dotenv import load_dotenv
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from entry.cli import CLIAdapter
from registry.bootstrap import build_orchestrator, build_services, shutdown
from registry.service_registry import ServiceRegistry
from shared.errors import AssistantError, build_error_payload
from shared.models import ResponsePayload
from shared.response_formatter import format_component, format_response
from shared.settings import Settings

# ─── Configuration ──────────────────────────────────────────────

logger = logging.getLogger(__name__)

# Ensure local .env is loaded before reading runtime configuration.
load_dotenv(override=False)

console = Console()


def setup_logging(level: str = "INFO") -> None:
    """Configure logging."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def build_pipeline(settings: Settings) -> ServiceRegistry:
    """Build the registry and construct the orchestrator eagerly.

    Configuration errors surface here, before any request is accepted.
    """
    services = build_services(settings)
    build_orchestrator(services)
    return services


# ─── Rendering ──────────────────────────────────────────────────

def render_response(payload: ResponsePayload) -> None:
    console.print()
    console.print(Panel(
        Text(payload.response, style="bold"),
        title=f"🤖 {payload.plan.intent}",
        border_style="green",
        box=box.ROUNDED,
    ))
    if not payload.components:
        return
    table = Table(box=box.SIMPLE, show_header=True, header_style="bold cyan")
    table.add_column("Agent")
    table.add_column("Component")
    for key, component in payload.components.items():
        style = "red" if component.type == "error" else ""
        table.add_row(key, Text(format_component(key, component), style=style))
    console.print(table)


def run_once(services: ServiceRegistry, cli: CLIAdapter, query: str, debug: bool, plain: bool = False) -> int:
    request = cli.read_input(query)
    try:
        payload = build_orchestrator(services).handle_request(request)
    except AssistantError as e:
        print(json.dumps(build_error_payload(e, debug).model_dump(mode="json"), indent=2))
        return 1
    if plain:
        print(format_response(payload))
        return 0
    print(json.dumps(payload.model_dump(mode="json"), indent=2, ensure_ascii=False))
    return 0


def run_interactive(services: ServiceRegistry, cli: CLIAdapter, settings: Settings) -> None:
    console.print(Panel(
        Text.from_markup(
            "[bold cyan]Triage Orchestrator[/bold cyan]\n"
            f"[dim]Model: {settings.model_provider} • {settings.model_name}[/dim]\n"
            "[dim]Type your request or 'exit' to quit[/dim]"
        ),
        title="🤖",
        border_style="cyan",
        box=box.DOUBLE,
    ))
    console.print(f"[dim]Conversation: {cli.conversation_id}[/dim]")
    console.print(f"[dim]Agents: {services.registered_ids(settings.agent_namespace)}[/dim]")
    console.print()

    orchestrator = build_orchestrator(services)
    while True:
        try:
            raw_input = console.input("[bold cyan]You → [/]")
        except (EOFError, KeyboardInterrupt):
            console.print("\n[dim]Goodbye! 👋[/dim]")
            break

        if raw_input.strip().lower() in ("exit", "quit", "q"):
            console.print("[dim]Goodbye! 👋[/dim]")
            break
        if not raw_input.strip():
            continue

        request = cli.read_input(raw_input)
        try:
            with console.status("[yellow]Thinking...[/yellow]", spinner="dots"):
                payload = orchestrator.handle_request(request)
        except AssistantError as e:
            error = build_error_payload(e, settings.debug_mode)
            console.print(f"[bold red]Error:[/] {error.message}")
            if error.debug:
                console.print(error.debug)
            continue
        render_response(payload)
        console.print()


def run_server(services: ServiceRegistry, settings: Settings, host: str, port: int) -> None:
    import uvicorn

    from api.server import create_app

    app = create_app(lambda: build_orchestrator(services), settings)
    uvicorn.run(app, host=host, port=port)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Triage orchestrator")
    parser.add_argument("--query", "-q", help="Process a single request and print the JSON response")
    parser.add_argument("--conversation", "-c", help="Conversation id")
    parser.add_argument("--plain", action="store_true", help="Print --query results as text instead of JSON")
    parser.add_argument("--debug", action="store_true", help="Include debug details in errors")
    parser.add_argument("--serve", action="store_true", help="Run the HTTP API")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=8000)
    args = parser.parse_args(argv)

    try:
        settings = Settings.from_env()
    except AssistantError as e:
        console.print(f"[bold red]Invalid configuration:[/] {e.message}")
        return 2
    if args.debug:
        settings = settings.model_copy(update={"debug_mode": True})
    setup_logging(settings.log_level)

    try:
        services = build_pipeline(settings)
    except AssistantError as e:
        console.print(f"[bold red]Failed to initialize pipeline:[/] {e.message}")
        return 1

    cli = CLIAdapter(conversation_id=args.conversation, debug_mode=settings.debug_mode)
    try:
        if args.serve:
            run_server(services, settings, args.host, args.port)
            return 0
        if args.query:
            return run_once(services, cli, args.query, settings.debug_mode, plain=args.plain)
        run_interactive(services, cli, settings)
        return 0
    finally:
        shutdown(services)


if __name__ == "__main__":
    sys.exit(main())
