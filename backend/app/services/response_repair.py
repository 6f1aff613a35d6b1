"""Best-effort recovery of a JSON object from model output.

Models occasionally wrap the object in prose or stop mid-object when they hit
the token budget. ``repair_json_object`` tries, in order:

1. the trimmed text as-is when it looks like ``{...}``;
2. the slice between the first ``{`` and the last ``}``;
3. the prefix ending where a string-aware brace scan last returned to depth 0.

Each stage falls through to the next when parsing fails. If nothing yields a
JSON object the caller gets ``ResponseParseError``; a missing field inside a
recovered object is the caller's problem (``IncompleteResponseError``).
"""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional

from app.core.errors import ResponseParseError

logger = logging.getLogger(__name__)

PREVIEW_CHARS = 200


def repair_json_object(text: str | None) -> Dict[str, Any]:
    trimmed = (text or "").strip()
    if not trimmed:
        raise ResponseParseError("Model returned an empty response")

    if trimmed.startswith("{") and trimmed.endswith("}"):
        parsed = _try_parse(trimmed)
        if parsed is not None:
            return parsed

    first = trimmed.find("{")
    last = trimmed.rfind("}")
    if first != -1 and last != -1 and first < last:
        parsed = _try_parse(trimmed[first : last + 1])
        if parsed is not None:
            logger.debug("Recovered JSON object by slicing surrounding text")
            return parsed

    if first != -1:
        end = last_complete_object_end(trimmed, first)
        if end is not None:
            parsed = _try_parse(trimmed[first : end + 1])
            if parsed is not None:
                logger.debug("Recovered JSON object by truncating at index %s", end)
                return parsed

    raise ResponseParseError("Unable to recover a JSON object from model response", preview=trimmed[:PREVIEW_CHARS])


def last_complete_object_end(text: str, start: int = 0) -> Optional[int]:
    """Index of the ``}`` where brace depth last returned to zero, or ``None``.

    Braces inside JSON strings (including escaped quotes) are ignored.
    """
    depth = 0
    in_string = False
    escaped = False
    end: Optional[int] = None
    for index in range(start, len(text)):
        char = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}" and depth > 0:
            depth -= 1
            if depth == 0:
                end = index
    return end


def _try_parse(candidate: str) -> Optional[Dict[str, Any]]:
    try:
        value = json.loads(candidate)
    except ValueError:
        return None
    if not isinstance(value, dict):
        return None
    return value
