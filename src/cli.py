"""Click CLI: loads config, binds engines to backends, runs one research request."""

import asyncio
import logging
import sys
from pathlib import Path

import click
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn

from config.config_loader import AppConfig, EngineConfig, load_config
from src.models import Engine, EngineResponse, Err, Ok
from src.output import print_result, to_json
from src.pipeline import ResearchResponse, handle_research
from src.providers.anthropic import AnthropicProvider
from src.providers.base import CapabilityClient, ProviderError
from src.providers.gemini import GeminiProvider
from src.providers.openai_provider import OpenAIProvider

logger = logging.getLogger(__name__)

console = Console(legacy_windows=False, stderr=True)

PROVIDER_CLASSES: dict[str, type[CapabilityClient]] = {
    "openai": OpenAIProvider,
    "xai": OpenAIProvider,
    "anthropic": AnthropicProvider,
    "gemini": GeminiProvider,
}


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
    )


def _select_engines(engines: list[EngineConfig], engines_arg: str | None) -> list[EngineConfig]:
    """Restrict to a comma-separated subset of engine ids, keeping configured order."""
    if not engines_arg:
        return engines
    wanted = [e.strip() for e in engines_arg.split(",") if e.strip()]
    known = {e.id for e in engines}
    unknown = [e for e in wanted if e not in known]
    if unknown:
        raise ValueError(f"Unknown engine(s): {', '.join(unknown)}")
    return [e for e in engines if e.id in wanted]


def _build_clients(config: AppConfig, engines: list[EngineConfig]) -> dict[str, CapabilityClient]:
    """Build one client per backend in use. Returns dict keyed by backend name."""
    names = {config.defaults.capability} | {e.backend for e in engines if e.backend}
    clients: dict[str, CapabilityClient] = {}
    for name in sorted(names):
        backend = config.backends[name]
        if backend.sdk not in PROVIDER_CLASSES:
            raise ValueError(f"Backend '{name}' uses unknown sdk '{backend.sdk}'")
        clients[name] = PROVIDER_CLASSES[backend.sdk](backend)
        if not clients[name].configured:
            logger.warning("Backend %s has no API key; engines on it will report it as not configured", name)
    return clients


def _build_engines(
    config: AppConfig,
    engines: list[EngineConfig],
    clients: dict[str, CapabilityClient],
) -> list[Engine]:
    return [
        Engine(
            id=e.id,
            persona=e.persona,
            client=clients[e.backend or config.defaults.capability],
        )
        for e in engines
    ]


async def _run(
    question: str,
    config: AppConfig,
    engines: list[Engine],
    client: CapabilityClient,
    failed_engines: set[str],
) -> ResearchResponse:
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    ) as progress:

        def on_engine_complete(engine_id: str, response: EngineResponse) -> None:
            if isinstance(response, Err):
                failed_engines.add(engine_id)
            mark = "[green]OK[/green]" if isinstance(response, Ok) else "[red]FAIL[/red]"
            progress.print(f"{mark} {engine_id}")

        progress.add_task("Researching...", total=None)
        return await handle_research(
            question,
            engines=engines,
            client=client,
            prompts=config.prompts,
            on_engine_complete=on_engine_complete,
        )


@click.command()
@click.argument("question", required=False)
@click.option("--file", "question_file", type=click.Path(exists=True), help="Read question from a text file")
@click.option("--engines", "engines_arg", default=None, help="Comma-separated engine ids (default: all configured)")
@click.option("--json", "as_json", is_flag=True, help="Print the result as JSON instead of formatted markdown")
@click.option("--verbose", is_flag=True, help="Enable DEBUG-level logging")
def main(
    question: str | None,
    question_file: str | None,
    engines_arg: str | None,
    as_json: bool,
    verbose: bool,
) -> None:
    """Research Orchestrator -- decompose, query every engine, synthesize one report.

    \b
    Examples:
      python -m src.cli "What causes tidal locking?"
      python -m src.cli "Is nuclear fusion viable by 2040?" --json
      python -m src.cli --file question.txt --engines "Kimi K2,Gemini 2.5 Pro"
    """
    if question is not None and question_file:
        raise click.UsageError("Give either QUESTION or --file, not both.")

    load_dotenv()
    _setup_logging(verbose)

    try:
        config = load_config()
    except (FileNotFoundError, ValueError) as exc:
        console.print(f"[bold red]Config error:[/bold red] {exc}")
        sys.exit(1)

    try:
        selected = _select_engines(config.engines, engines_arg)
        clients = _build_clients(config, selected)
    except (ValueError, ProviderError) as exc:
        console.print(f"[bold red]Error:[/bold red] {exc}")
        sys.exit(1)

    engines = _build_engines(config, selected, clients)

    if question_file:
        question = Path(question_file).read_text(encoding="utf-8").strip()

    console.print(f"\n[bold cyan]Research Orchestrator[/bold cyan] — {len(engines)} engines")
    console.print(f"Engines: {', '.join(e.id for e in engines)}\n")

    failed_engines: set[str] = set()
    response = asyncio.run(
        _run(question, config, engines, clients[config.defaults.capability], failed_engines)
    )

    if response.status_code != 200:
        console.print(f"[bold red]Error ({response.status_code}):[/bold red] {response.body['error']}")
        sys.exit(1)

    if as_json:
        click.echo(to_json(response.body))
    else:
        print_result(response.body, failed_engines)


if __name__ == "__main__":
    main()
