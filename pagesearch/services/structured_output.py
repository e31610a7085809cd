"""Defensive parsing of JSON objects embedded in free-form completion text."""
from __future__ import annotations

import json
from typing import Any


def _fenced_body(text: str) -> str | None:
    """Body of a leading code fence, without its language tag."""
    if not text.startswith("```"):
        return None
    parts = text.split("```")
    if len(parts) < 2:
        return None
    body = parts[1]
    if body.startswith("json"):
        body = body[4:]
    return body.strip()


def _decode_object(text: str) -> dict[str, Any] | None:
    start = text.find("{")
    end = text.rfind("}")
    if start < 0 or end <= start:
        return None

    try:
        parsed = json.loads(text[start : end + 1])
    except json.JSONDecodeError:
        parsed = None
    if isinstance(parsed, dict):
        return parsed

    decoder = json.JSONDecoder()
    index = start
    while index >= 0:
        try:
            candidate, _ = decoder.raw_decode(text, index)
        except json.JSONDecodeError:
            candidate = None
        if isinstance(candidate, dict):
            return candidate
        index = text.find("{", index + 1)
    return None


def extract_json_object(raw_text: str) -> dict[str, Any]:
    """Return the first well-formed JSON object found in `raw_text`.

    A leading code fence is tried on its own first; when it holds no object
    (a reasoning block, say) the whole text is scanned instead. Within each
    candidate the widest `{...}` span is tried before scanning for the first
    object that decodes on its own, so prose around the payload or trailing
    braces in the reasoning do not break parsing.
    Raises `json.JSONDecodeError` when no object can be decoded.
    """
    text = (raw_text or "").strip()
    for candidate in (_fenced_body(text), text):
        if candidate is None:
            continue
        parsed = _decode_object(candidate)
        if parsed is not None:
            return parsed
    raise json.JSONDecodeError("no well-formed object", text, 0)


def normalize_text_list(value: Any, *, max_items: int) -> list[str]:
    """Keep non-blank strings, collapse whitespace, drop case-insensitive repeats."""
    if not isinstance(value, list):
        return []
    cleaned: list[str] = []
    seen: set[str] = set()
    for item in value:
        if not isinstance(item, str):
            continue
        text = " ".join(item.split()).strip()
        if not text:
            continue
        key = text.lower()
        if key in seen:
            continue
        seen.add(key)
        cleaned.append(text)
        if len(cleaned) >= max_items:
            break
    return cleaned
