"""Best-effort JSON parsing of unconstrained model output."""

import json

from src.models import ParseResult, Parsed, Unparsed


def strip_code_fence(text: str) -> str:
    """Remove a surrounding markdown code fence (```json ... ```), if any."""
    text = text.strip()
    if text.startswith("```"):
        parts = text.split("```")
        if len(parts) >= 3:
            text = parts[1]
            if text.startswith("json"):
                text = text[4:]
            text = text.strip()
    return text


def parse_json(text: str) -> ParseResult:
    """Parse model text as JSON.

    Returns Parsed(value) on success and Unparsed(text) otherwise, where text
    is the original, unmodified input.
    """
    try:
        return Parsed(json.loads(strip_code_fence(text)))
    except (ValueError, RecursionError):
        return Unparsed(text)
