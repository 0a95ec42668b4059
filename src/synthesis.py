"""Final synthesis: build the cross-engine prompt, call the backend, parse or degrade."""

import logging

from config.config_loader import PromptsConfig
from src.models import (
    REPORT_KEYS,
    EngineResponse,
    ParseResult,
    Parsed,
    SubQuestion,
    SynthesisReport,
    Unparsed,
    render_response,
)
from src.parsing import parse_json
from src.providers.base import CapabilityClient

logger = logging.getLogger(__name__)

_SUMMARY_PREVIEW_CHARS = 500


def _format_sub_questions(sub_questions: list[SubQuestion]) -> str:
    return "\n".join(f"{idx}. {sq.question}" for idx, sq in enumerate(sub_questions, start=1))


def _format_engine_responses(responses: dict[str, EngineResponse]) -> str:
    """Label every engine's output verbatim, error text included."""
    return "\n".join(
        f"\n=== {engine_id} ===\n{render_response(response)}\n"
        for engine_id, response in responses.items()
    )


def build_synthesis_prompt(
    question: str,
    sub_questions: list[SubQuestion],
    responses: dict[str, EngineResponse],
    prompts: PromptsConfig,
) -> str:
    return prompts.synthesis.format(
        question=question,
        sub_questions=_format_sub_questions(sub_questions),
        engine_responses=_format_engine_responses(responses),
    )


def parse_report(text: str) -> ParseResult:
    """Parsed(SynthesisReport) if text is a JSON object with all five report keys
    holding non-empty strings, else Unparsed(text)."""
    result = parse_json(text)
    if not isinstance(result, Parsed) or not isinstance(result.value, dict):
        return Unparsed(text)

    data = result.value
    for key in REPORT_KEYS.values():
        value = data.get(key)
        if not isinstance(value, str) or not value.strip():
            return Unparsed(text)
    return Parsed(SynthesisReport.from_dict(data))


def fallback_report(raw_text: str) -> SynthesisReport:
    """Degraded report for a reply that isn't the expected JSON. Keeps the full text."""
    return SynthesisReport(
        executive_summary=raw_text[:_SUMMARY_PREVIEW_CHARS] + "...",
        key_findings="See the full synthesis below.",
        tool_comparison="Multiple engines were queried; see the full synthesis below for how they compare.",
        risks_uncertainties="Uncertainties are discussed in the full synthesis below.",
        recommendations="Further investigation recommended; see the full synthesis below.",
        full_synthesis_raw=raw_text,
    )


def failed_report(message: str) -> SynthesisReport:
    """Canned report used when the synthesis call itself failed."""
    return SynthesisReport(
        executive_summary=f"Synthesis failed: {message}",
        key_findings="Unable to synthesize findings",
        tool_comparison="Error during synthesis",
        risks_uncertainties="Synthesis error",
        recommendations="Please try again",
    )


async def synthesize(
    question: str,
    sub_questions: list[SubQuestion],
    responses: dict[str, EngineResponse],
    client: CapabilityClient,
    prompts: PromptsConfig,
) -> SynthesisReport:
    """Run synthesis and return a well-formed SynthesisReport. Never raises.

    Args:
        question: The main research question.
        sub_questions: Sub-questions from the decomposer.
        responses: One Ok | Err per engine, errors included in the prompt.
        client: The backend that performs the synthesis.
        prompts: Prompt templates from config.

    Returns:
        The parsed report, a fallback report carrying the raw text, or a
        canned failure report, in that order of preference.
    """
    synthesis_prompt = build_synthesis_prompt(question, sub_questions, responses, prompts)

    logger.info("Running synthesis via %s", client.name())

    try:
        text = await client.complete(synthesis_prompt, prompts.synthesis_request)
    except Exception as exc:
        logger.warning("Synthesis call failed: %s", exc)
        return failed_report(str(exc) or type(exc).__name__)

    result = parse_report(text)
    if isinstance(result, Parsed):
        return result.value

    logger.warning("Synthesis reply was not the expected JSON object, using fallback report")
    return fallback_report(result.raw_text)
