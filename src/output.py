"""Rich console output and JSON serialization for research results."""

import json
from typing import Any

from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.rule import Rule

from src.models import REPORT_KEYS

console = Console(legacy_windows=False)

SECTION_TITLES: dict[str, str] = {
    "executiveSummary": "Executive Summary",
    "keyFindings": "Key Findings",
    "toolComparison": "Tool Comparison",
    "risksUncertainties": "Risks & Uncertainties",
    "recommendations": "Recommendations",
}


def _preview(text: str, words: int = 50) -> str:
    """Return first N words of a text."""
    all_words = text.split()
    preview = " ".join(all_words[:words])
    if len(all_words) > words:
        preview += "..."
    return preview


def to_json(body: dict[str, Any]) -> str:
    return json.dumps(body, indent=2, ensure_ascii=False)


def report_markdown(body: dict[str, Any]) -> str:
    """Render the report sections of a result body as one markdown document."""
    parts: list[str] = []
    for key in REPORT_KEYS.values():
        parts.append(f"## {SECTION_TITLES[key]}\n\n{body[key]}")
    if body.get("fullSynthesisRaw"):
        parts.append(f"## Full Synthesis\n\n{body['fullSynthesisRaw']}")
    return "\n\n".join(parts)


def print_engine_summary(tool_responses: dict[str, str], failed_engines: set[str]) -> None:
    """Print a brief preview of each engine's output, failed engines bordered red."""
    console.print(Rule("[bold cyan]Engine Responses[/bold cyan]"))
    for engine_id, text in tool_responses.items():
        console.print(
            Panel(
                _preview(text),
                title=f"[bold]{engine_id}[/bold]",
                border_style="red" if engine_id in failed_engines else "dim",
            )
        )


def print_result(body: dict[str, Any], failed_engines: set[str] | None = None) -> None:
    """Print sub-questions, engine previews and the synthesized report.

    failed_engines holds the ids whose response was an Err; the flattened
    text alone can't tell an error from an answer that starts with "Error: ".
    """
    console.print(Rule("[bold cyan]Sub-questions[/bold cyan]"))
    for idx, sub_question in enumerate(body["subQuestions"], start=1):
        console.print(f"  {idx}. {sub_question}")

    print_engine_summary(body["toolResponses"], failed_engines or set())

    console.print(Rule("[bold green]Master Report[/bold green]"))
    console.print(Markdown(report_markdown(body)))
