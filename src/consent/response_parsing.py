"""
Helpers that turn a free-text model reply into a JSON object.

The extraction prompt asks for bare JSON, but replies routinely arrive wrapped
in Markdown code fences or with a sentence of prose around the object. The
functions here recover the object when one is present and raise
:class:`ResponseParseError` when nothing usable can be found.
"""

from __future__ import annotations

import json
import re
from typing import Any, Iterable, Mapping

_FENCE_RE = re.compile(r"```json|```")


class ResponseParseError(ValueError):
    pass


def collect_text(content: Iterable[Any]) -> str:
    """Join every text-typed content part of a Messages API reply."""
    parts: list[str] = []
    for item in content:
        if isinstance(item, Mapping) and item.get("type") == "text" and isinstance(item.get("text"), str):
            parts.append(item["text"])
    return "\n".join(parts)


def strip_code_fences(text: str) -> str:
    return _FENCE_RE.sub("", text).strip()


def first_object_literal(text: str) -> dict[str, Any] | None:
    """Decode the first ``{...}`` in ``text`` that parses as a complete JSON object."""
    decoder = json.JSONDecoder()
    start = text.find("{")
    while start != -1:
        try:
            parsed, _ = decoder.raw_decode(text, start)
        except json.JSONDecodeError:
            start = text.find("{", start + 1)
            continue
        return parsed
    return None


def parse_json_object(text: str) -> dict[str, Any]:
    """Parse ``text`` as a JSON object, salvaging an embedded literal if needed."""
    cleaned = strip_code_fences(text)
    if not cleaned:
        raise ResponseParseError("empty response text")

    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError:
        parsed = first_object_literal(cleaned)
        if parsed is None:
            raise ResponseParseError("no JSON object found in response") from None

    if not isinstance(parsed, dict):
        raise ResponseParseError(f"expected a JSON object, got {type(parsed).__name__}")
    return parsed
