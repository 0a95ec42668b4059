"""Tests for src/decomposer.py."""

import json
import logging
from unittest.mock import AsyncMock

from src.decomposer import decompose, fallback_sub_questions, parse_sub_questions
from src.models import SubQuestion
from src.providers.base import ProviderError
from tests.conftest import MockClient


def test_fallback_sub_questions_embed_question_verbatim():
    subs = fallback_sub_questions("quantum error correction")
    assert subs == [
        SubQuestion("What is quantum error correction?", "Definition and context"),
        SubQuestion("What are the key aspects of quantum error correction?", "Core components"),
        SubQuestion("What are the implications of quantum error correction?", "Impact and consequences"),
    ]


def test_parse_sub_questions_objects():
    text = json.dumps([
        {"question": "How do tides form?", "relevance": "Mechanism"},
        {"question": "What is spin-orbit resonance?", "relevance": "Context"},
    ])
    assert parse_sub_questions(text) == [
        SubQuestion("How do tides form?", "Mechanism"),
        SubQuestion("What is spin-orbit resonance?", "Context"),
    ]


def test_parse_sub_questions_skips_unusable_items():
    text = json.dumps([
        {"question": "Kept?", "relevance": 3},
        {"relevance": "no question"},
        {"question": "   "},
        42,
        "A bare string question?",
    ])
    assert parse_sub_questions(text) == [
        SubQuestion("Kept?", ""),
        SubQuestion("A bare string question?", ""),
    ]


def test_parse_sub_questions_non_array():
    assert parse_sub_questions('{"question": "q"}') == []
    assert parse_sub_questions("1. What is X?\n2. Why Y?") == []


async def test_decompose_returns_parsed_sub_questions(sample_prompts_config, sample_question):
    reply = '```json\n[{"question": "How do tidal forces act?", "relevance": "Mechanism"}]\n```'
    client = MockClient("openai", reply)

    subs = await decompose(sample_question, client, sample_prompts_config)

    assert subs == [SubQuestion("How do tidal forces act?", "Mechanism")]
    client._complete.assert_awaited_once_with(sample_prompts_config.decompose, sample_question)


async def test_decompose_falls_back_on_call_failure(sample_prompts_config, sample_question, caplog):
    client = MockClient("openai")
    client._complete = AsyncMock(side_effect=ProviderError("openai", "401 Unauthorized"))

    with caplog.at_level(logging.WARNING):
        subs = await decompose(sample_question, client, sample_prompts_config)

    assert subs == fallback_sub_questions(sample_question)
    assert any("fallback" in msg for msg in caplog.messages)


async def test_decompose_falls_back_on_unexpected_exception(sample_prompts_config, sample_question):
    client = MockClient("openai")
    client._complete = AsyncMock(side_effect=RuntimeError("socket closed"))

    subs = await decompose(sample_question, client, sample_prompts_config)

    assert subs == fallback_sub_questions(sample_question)


async def test_decompose_falls_back_on_prose(sample_prompts_config, sample_question):
    client = MockClient("openai", "Here are some sub-questions: 1. Why? 2. How?")
    subs = await decompose(sample_question, client, sample_prompts_config)
    assert len(subs) == 3
    assert all(sample_question in sq.question for sq in subs)


async def test_decompose_falls_back_on_deeply_nested_reply(sample_prompts_config, sample_question):
    client = MockClient("openai", "[" * 100_000 + "]" * 100_000)
    subs = await decompose(sample_question, client, sample_prompts_config)
    assert subs == fallback_sub_questions(sample_question)


async def test_decompose_falls_back_on_empty_array(sample_prompts_config, sample_question):
    client = MockClient("openai", "[]")
    subs = await decompose(sample_question, client, sample_prompts_config)
    assert subs == fallback_sub_questions(sample_question)


async def test_decompose_without_credential_uses_fallback(sample_prompts_config, sample_question):
    client = MockClient("openai", api_key=None)
    subs = await decompose(sample_question, client, sample_prompts_config)
    assert subs == fallback_sub_questions(sample_question)
    client._complete.assert_not_awaited()


async def test_decompose_keeps_more_than_five(sample_prompts_config, sample_question):
    reply = json.dumps([{"question": f"Q{i}?", "relevance": "r"} for i in range(7)])
    client = MockClient("openai", reply)
    subs = await decompose(sample_question, client, sample_prompts_config)
    assert len(subs) == 7
