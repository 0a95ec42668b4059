"""Question decomposition: one main question -> ordered sub-questions."""

import logging

from config.config_loader import PromptsConfig
from src.models import Parsed, SubQuestion
from src.parsing import parse_json
from src.providers.base import CapabilityClient

logger = logging.getLogger(__name__)

_FALLBACK_TEMPLATES: tuple[tuple[str, str], ...] = (
    ("What is {question}?", "Definition and context"),
    ("What are the key aspects of {question}?", "Core components"),
    ("What are the implications of {question}?", "Impact and consequences"),
)


def fallback_sub_questions(question: str) -> list[SubQuestion]:
    """The three fixed sub-questions used whenever decomposition degrades."""
    return [
        SubQuestion(question=template.format(question=question), relevance=relevance)
        for template, relevance in _FALLBACK_TEMPLATES
    ]


def parse_sub_questions(text: str) -> list[SubQuestion]:
    """Extract sub-questions from model text. Returns [] when nothing usable is found.

    Accepts a JSON array whose items are {"question", "relevance"} objects
    or bare strings; other items are skipped.
    """
    result = parse_json(text)
    if not isinstance(result, Parsed) or not isinstance(result.value, list):
        return []

    sub_questions: list[SubQuestion] = []
    for item in result.value:
        if isinstance(item, str) and item.strip():
            sub_questions.append(SubQuestion(question=item.strip()))
        elif isinstance(item, dict):
            question = item.get("question")
            relevance = item.get("relevance")
            if isinstance(question, str) and question.strip():
                sub_questions.append(
                    SubQuestion(
                        question=question.strip(),
                        relevance=relevance if isinstance(relevance, str) else "",
                    )
                )
    return sub_questions


async def decompose(
    question: str,
    client: CapabilityClient,
    prompts: PromptsConfig,
) -> list[SubQuestion]:
    """Split the question into sub-questions. Never raises, never returns [].

    Any call failure or unparseable reply falls back to fallback_sub_questions().
    """
    try:
        text = await client.complete(prompts.decompose, question)
    except Exception as exc:
        logger.warning("Decomposition call failed, using fallback sub-questions: %s", exc)
        return fallback_sub_questions(question)

    sub_questions = parse_sub_questions(text)
    if not sub_questions:
        logger.warning("Decomposition reply was not a usable JSON array, using fallback sub-questions")
        logger.debug("Unusable decomposition reply: %s", text[:500])
        return fallback_sub_questions(question)

    logger.info("Decomposed question into %d sub-questions", len(sub_questions))
    return sub_questions
