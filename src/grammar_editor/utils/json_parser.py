"""Utility to extract JSON from LLM responses."""

from __future__ import annotations

import json
import re

_FENCE_RE = re.compile(r"```(?:json|JSON)?\s*\n(.*?)\n?```", re.DOTALL)


def extract_json(text: str) -> dict | list:
    """Extract a JSON object or array from an LLM response.

    Tries in order:
    1. The whole text, then the body of the first fenced code block
    2. The outermost bracketed span that opens first
    3. A truncated object closed with the missing brackets
    4. The outermost span of the other bracket type
    """
    text = (text or "").strip()
    body = _strip_fence(text)
    spans = _bracket_spans(body)

    parsed = _first_parsed([text, body] + spans[:1])
    if parsed is not None:
        return parsed

    repaired = _repair_truncated(body)
    if repaired is not None:
        return repaired

    parsed = _first_parsed(spans[1:])
    if parsed is not None:
        return parsed

    raise ValueError(f"Could not extract JSON from text: {text[:200]}...")


def _first_parsed(candidates: list[str]) -> dict | list | None:
    for candidate in candidates:
        if not candidate:
            continue
        try:
            return json.loads(candidate)
        except json.JSONDecodeError:
            continue
    return None


def _strip_fence(text: str) -> str:
    match = _FENCE_RE.search(text)
    if match:
        return match.group(1).strip()
    # Unterminated fence, e.g. a reply cut off by max_tokens
    if text.startswith("```"):
        return text.split("\n", 1)[-1].strip()
    return text


def _bracket_spans(body: str) -> list[str]:
    """Outermost ``{...}`` and ``[...]`` spans, the one opened first leading."""
    spans = []
    for opener, closer in (("{", "}"), ("[", "]")):
        start = body.find(opener)
        end = body.rfind(closer)
        if start != -1 and end > start:
            spans.append((start, body[start : end + 1]))
    return [span for _, span in sorted(spans)]


def _closing_brackets(text: str) -> str | None:
    """Brackets needed to close ``text``, or None if it ends inside a string."""
    stack: list[str] = []
    in_string = escaped = False
    for ch in text:
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
        elif ch == '"':
            in_string = True
        elif ch in "{[":
            stack.append("}" if ch == "{" else "]")
        elif ch in "}]" and stack:
            stack.pop()
    if in_string:
        return None
    return "".join(reversed(stack))


def _repair_truncated(text: str) -> dict | None:
    """Close open brackets on a reply that was cut off mid-object."""
    start = text.find("{")
    if start == -1:
        return None

    candidate = text[start:].rstrip()
    # Fall back to the last complete string value, then the last complete object
    attempts = [candidate]
    for cut in (candidate.rfind('"'), candidate.rfind("}")):
        if cut > 0:
            attempts.append(candidate[: cut + 1])

    for attempt in attempts:
        attempt = attempt.rstrip().rstrip(",").rstrip(":")
        closing = _closing_brackets(attempt)
        if not closing:
            continue
        try:
            return json.loads(attempt + closing)
        except json.JSONDecodeError:
            continue
    return None
