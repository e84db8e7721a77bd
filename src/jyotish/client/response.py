"""Decoding of generateContent responses.

Bridges the raw HTTP layer and the reading service:
:func:`extract_text` pulls the answer text out of the response envelope,
and :func:`parse_ai_response` turns text that is supposed to be JSON into
a Python object.  Models like to wrap JSON in prose or Markdown fences,
so the outermost ``{...}`` span is tried before the whole text.
"""

from __future__ import annotations

import json
import re
from typing import Any

from jyotish.exceptions import DecodeError

_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")


def extract_text(payload: Any) -> str:
    """Return the concatenated text parts of the first candidate.

    Thought summaries (parts flagged ``"thought": true``) are skipped.
    A response without candidates -- for instance one blocked by a safety
    filter -- yields an empty string.
    """
    if not isinstance(payload, dict):
        return ""
    candidates = payload.get("candidates")
    if not isinstance(candidates, list) or not candidates or not isinstance(candidates[0], dict):
        return ""
    content = candidates[0].get("content")
    if not isinstance(content, dict):
        return ""
    parts = content.get("parts")
    if not isinstance(parts, list):
        return ""
    return "".join(
        part.get("text", "")
        for part in parts
        if isinstance(part, dict) and not part.get("thought")
    )


def parse_ai_response(text: str) -> Any:
    """Decode model output that should contain a JSON object.

    Raises:
        DecodeError: ``"Empty response."`` for empty text, or
            ``"Decoding failed."`` when no JSON can be recovered.
    """
    if not text or not text.strip():
        raise DecodeError("Empty response.")
    try:
        match = _JSON_OBJECT.search(text)
        if match:
            return json.loads(match.group(0))
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise DecodeError("Decoding failed.") from exc
