"""Tests for src/parsing.py."""

from src.models import Parsed, Unparsed
from src.parsing import parse_json, strip_code_fence


def test_strip_code_fence_with_language():
    assert strip_code_fence('```json\n{"a": 1}\n```') == '{"a": 1}'


def test_strip_code_fence_without_language():
    assert strip_code_fence("```\n[1, 2]\n```") == "[1, 2]"


def test_strip_code_fence_leaves_plain_text():
    assert strip_code_fence("  plain text  ") == "plain text"


def test_parse_json_object():
    assert parse_json('{"a": 1}') == Parsed({"a": 1})


def test_parse_json_fenced_array():
    assert parse_json('```json\n[{"question": "q"}]\n```') == Parsed([{"question": "q"}])


def test_parse_json_prose_is_unparsed_with_original_text():
    text = "## Executive Summary\nThe engines broadly agree."
    assert parse_json(text) == Unparsed(text)


def test_parse_json_empty_is_unparsed():
    assert parse_json("") == Unparsed("")


def test_parse_json_deep_nesting_is_unparsed():
    text = "[" * 100_000 + "]" * 100_000
    assert parse_json(text) == Unparsed(text)


def test_parse_json_oversized_integer_is_unparsed():
    text = '{"executiveSummary": ' + "9" * 5000 + "}"
    assert parse_json(text) == Unparsed(text)
