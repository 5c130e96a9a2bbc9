"""Locate suggestion text inside the document's plain-text projection."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Iterator

from grammar_editor.models.suggestion import Suggestion

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Span:
    """Half-open ``[start, end)`` range of plain-text offsets."""

    start: int
    end: int

    def overlaps(self, other: Span) -> bool:
        return (
            (other.start <= self.start < other.end)
            or (other.start < self.end <= other.end)
            or (self.start <= other.start and self.end >= other.end)
        )


class SpanClaims:
    """Spans already assigned to a suggestion during one reconciliation pass."""

    def __init__(self, spans: Iterable[Span] = ()):
        self._spans: list[Span] = list(spans)

    def __iter__(self) -> Iterator[Span]:
        return iter(self._spans)

    def __len__(self) -> int:
        return len(self._spans)

    def overlaps(self, span: Span) -> bool:
        return any(span.overlaps(claimed) for claimed in self._spans)

    def claim(self, span: Span) -> None:
        self._spans.append(span)


@dataclass(frozen=True)
class ResolvedSuggestion:
    suggestion: Suggestion
    span: Span | None

    @property
    def found(self) -> bool:
        return self.span is not None


def find_text_position(text: str, search_text: str, start_from: int = 0) -> Span | None:
    """Leftmost occurrence of ``search_text`` at or after ``start_from``."""
    if not search_text:
        return None
    index = text.find(search_text, start_from)
    if index == -1:
        return None
    return Span(index, index + len(search_text))


def resolve_span(
    text: str,
    search_text: str,
    claims: SpanClaims | None = None,
) -> Span | None:
    """Find the leftmost occurrence of ``search_text`` not overlapping ``claims``.

    When a match collides with a claimed span the search resumes from the end
    of that match. Returns None if no free occurrence exists.
    """
    search_start = 0
    while search_start < len(text):
        span = find_text_position(text, search_text, search_start)
        if span is None:
            return None
        if claims is None or not claims.overlaps(span):
            return span
        search_start = span.end
    return None


def resolve_all(text: str, suggestions: Iterable[Suggestion]) -> list[ResolvedSuggestion]:
    """Resolve suggestions in emission order, each claiming a distinct span."""
    claims = SpanClaims()
    resolved: list[ResolvedSuggestion] = []
    for suggestion in suggestions:
        span = resolve_span(text, suggestion.original, claims)
        if span is None:
            logger.debug("Could not locate suggestion text: %r", suggestion.original)
        else:
            claims.claim(span)
        resolved.append(ResolvedSuggestion(suggestion, span))
    return resolved
