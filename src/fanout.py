"""Engine fan-out: query every configured engine concurrently, wait for all."""

import asyncio
import logging
from collections.abc import Callable

from src.models import Engine, EngineResponse, Err, Ok, SubQuestion
from src.providers.base import ProviderError

logger = logging.getLogger(__name__)


def build_research_prompt(question: str, sub_questions: list[SubQuestion]) -> str:
    """Main question followed by each sub-question, separated by blank lines."""
    return "\n\n".join([question, *(sq.question for sq in sub_questions)])


async def _query_engine(engine: Engine, prompt: str) -> tuple[str, EngineResponse]:
    """Call a single engine. Never raises; failures come back as Err.

    The engine id is returned alongside its response so results are matched
    by identity, not by position.
    """
    try:
        content = await engine.client.complete(engine.persona, prompt)
    except ProviderError as exc:
        logger.warning("Engine %s failed: %s", engine.id, exc)
        return engine.id, Err(str(exc))
    except Exception as exc:
        logger.warning("Engine %s unexpected failure: %s", engine.id, exc)
        return engine.id, Err(f"Unexpected error: {exc}")
    return engine.id, Ok(content)


async def run_fanout(
    question: str,
    sub_questions: list[SubQuestion],
    engines: list[Engine],
    on_engine_complete: Callable[[str, EngineResponse], None] | None = None,
) -> dict[str, EngineResponse]:
    """Query all engines in parallel and collect one response per engine.

    Args:
        question: The main research question.
        sub_questions: Output of the decomposer, appended to the prompt in order.
        engines: Configured engines; ids must be unique.
        on_engine_complete: Optional callback invoked as each engine settles.

    Returns:
        Dict mapping engine id -> Ok | Err, in configured engine order, with
        exactly one entry per engine.
    """
    prompt = build_research_prompt(question, sub_questions)

    logger.info("Querying %d engines", len(engines))

    async def settle(engine: Engine) -> tuple[str, EngineResponse]:
        engine_id, response = await _query_engine(engine, prompt)
        if on_engine_complete:
            try:
                on_engine_complete(engine_id, response)
            except Exception:
                logger.warning("on_engine_complete callback failed for %s", engine_id, exc_info=True)
        return engine_id, response

    settled = dict(await asyncio.gather(*(settle(e) for e in engines)))
    responses = {e.id: settled[e.id] for e in engines}

    succeeded = sum(1 for r in responses.values() if isinstance(r, Ok))
    logger.info("Fan-out complete: %d/%d engines succeeded", succeeded, len(engines))
    if engines and not succeeded:
        logger.warning("No engine succeeded; synthesis will only see error text")

    return responses
