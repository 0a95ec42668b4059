"""Pipeline coordinator: decompose -> fan-out -> synthesize, plus the request boundary."""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from config.config_loader import PromptsConfig
from src.decomposer import decompose
from src.fanout import run_fanout
from src.models import Engine, EngineResponse, PipelineResult, render_response
from src.providers.base import CapabilityClient
from src.synthesis import synthesize

logger = logging.getLogger(__name__)


class ValidationError(ValueError):
    """Raised when a research request is malformed."""


@dataclass
class ResearchResponse:
    status_code: int
    body: dict[str, Any] = field(default_factory=dict)


def validate_question(question: object) -> str:
    """Return the question if it is a non-empty string, else raise ValidationError."""
    if not isinstance(question, str) or not question:
        raise ValidationError("Valid question is required")
    return question


async def run_pipeline(
    question: str,
    engines: list[Engine],
    client: CapabilityClient,
    prompts: PromptsConfig,
    on_engine_complete: Callable[[str, EngineResponse], None] | None = None,
) -> PipelineResult:
    """Run the three stages for one question.

    Args:
        question: A validated, non-empty question.
        engines: Configured engines for the fan-out.
        client: Shared backend used for decomposition and synthesis.
        prompts: Prompt templates from config.
        on_engine_complete: Optional callback forwarded to the fan-out.

    Returns:
        PipelineResult with one tool response per engine.
    """
    start = time.monotonic()

    sub_questions = await decompose(question, client, prompts)
    responses = await run_fanout(question, sub_questions, engines, on_engine_complete)
    report = await synthesize(question, sub_questions, responses, client, prompts)

    logger.info("Research pipeline finished in %.1fs", time.monotonic() - start)

    return PipelineResult(
        report=report,
        sub_questions=[sq.question for sq in sub_questions],
        tool_responses={engine_id: render_response(r) for engine_id, r in responses.items()},
    )


async def handle_research(
    question: object,
    engines: list[Engine],
    client: CapabilityClient,
    prompts: PromptsConfig,
    on_engine_complete: Callable[[str, EngineResponse], None] | None = None,
) -> ResearchResponse:
    """Validate a request and run the pipeline, mapping outcomes to status codes.

    400 for an invalid question, 200 with the serialized PipelineResult on
    success, 500 for any fault the stages did not absorb.
    """
    try:
        validated = validate_question(question)
    except ValidationError as exc:
        return ResearchResponse(status_code=400, body={"error": str(exc)})

    try:
        result = await run_pipeline(validated, engines, client, prompts, on_engine_complete)
    except Exception as exc:
        logger.exception("Research error")
        return ResearchResponse(status_code=500, body={"error": str(exc) or "Internal server error"})

    return ResearchResponse(status_code=200, body=result.to_dict())
