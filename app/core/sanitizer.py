"""
Helpers for pulling JSON out of free-text model responses.

Models wrap JSON in prose, code fences or trailing commentary. The extraction
is deliberately simple: first opening bracket to last closing bracket.
"""

import json
import re
from typing import Any, Literal

from app.core.exceptions import MalformedAIResponseError

_BRACKETS = {
    "object": ("{", "}"),
    "array": ("[", "]"),
}

_FENCE_RE = re.compile(r"^```[a-zA-Z]*\s*|\s*```$")


def strip_code_fence(raw_text: str) -> str:
    """Remove a surrounding Markdown code fence (```json ... ```) if present."""
    text = (raw_text or "").strip()
    if text.startswith("```"):
        text = _FENCE_RE.sub("", text).strip()
    return text


def extract_json(raw_text: str, shape: Literal["object", "array"] = "object") -> Any:
    """
    Extract and parse a single JSON object or array from a model response.

    Args:
        raw_text: Raw text returned by the model
        shape: "object" to slice between { and }, "array" for [ and ]

    Returns:
        The parsed dict (object) or list (array)

    Raises:
        MalformedAIResponseError: No bracket pair found, the slice does not
            parse, or the parsed value is not of the requested shape
    """
    if shape not in _BRACKETS:
        raise ValueError(f"Unsupported JSON shape: {shape}")

    open_char, close_char = _BRACKETS[shape]
    text = raw_text or ""
    start = text.find(open_char)
    end = text.rfind(close_char)

    if start == -1 or end == -1 or end < start:
        raise MalformedAIResponseError(
            f"Invalid AI response format: no JSON {shape} found"
        )

    try:
        parsed = json.loads(text[start : end + 1])
    except json.JSONDecodeError as e:
        raise MalformedAIResponseError(
            f"Invalid AI response format: malformed JSON ({e.msg})"
        ) from e

    expected_type = dict if shape == "object" else list
    if not isinstance(parsed, expected_type):
        raise MalformedAIResponseError(
            f"Invalid AI response format: expected a JSON {shape}"
        )

    return parsed
