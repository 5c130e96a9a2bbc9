"""Render grammar suggestions as coloured highlight marks in the editor."""

from __future__ import annotations

import logging
from typing import Iterable

from grammar_editor.editor.document import Mark
from grammar_editor.editor.editor import HIGHLIGHT, Editor
from grammar_editor.editor.positions import to_doc_pos
from grammar_editor.models.suggestion import Suggestion, SuggestionKind
from grammar_editor.reconcile.resolver import ResolvedSuggestion, resolve_all

logger = logging.getLogger(__name__)

HIGHLIGHT_COLORS: dict[SuggestionKind, str] = {
    SuggestionKind.GRAMMAR: "#fee2e2",
    SuggestionKind.SPELLING: "#fef08a",
    SuggestionKind.PUNCTUATION: "#bfdbfe",
    SuggestionKind.STYLE: "#e9d5ff",
}

_RESERVED_COLORS = frozenset(HIGHLIGHT_COLORS.values())


def highlight_color(kind: SuggestionKind) -> str:
    try:
        return HIGHLIGHT_COLORS[SuggestionKind(kind)]
    except (KeyError, ValueError):
        raise ValueError(f"No highlight colour for suggestion kind: {kind!r}") from None


def is_grammar_highlight(mark: Mark) -> bool:
    """True for highlight marks in one of the reserved suggestion colours."""
    return mark.type == HIGHLIGHT and mark.color in _RESERVED_COLORS


def clear_highlights(editor: Editor) -> int:
    """Remove every grammar highlight. Other highlights are left alone."""
    return editor.remove_marks(is_grammar_highlight)


def render_highlights(
    editor: Editor,
    suggestions: Iterable[Suggestion],
) -> list[ResolvedSuggestion]:
    """Re-derive all highlights from scratch for ``suggestions``.

    Existing grammar highlights are cleared first, so calling this repeatedly
    with the same input gives the same mark state. Suggestions whose text
    cannot be located are returned unresolved and left unhighlighted.
    """
    clear_highlights(editor)

    resolved = resolve_all(editor.get_text(), suggestions)
    for item in resolved:
        if item.span is None:
            continue
        editor.set_text_selection(to_doc_pos(item.span.start), to_doc_pos(item.span.end))
        editor.set_highlight(highlight_color(item.suggestion.kind))

    missing = sum(1 for item in resolved if not item.found)
    if missing:
        logger.debug("%d of %d suggestions could not be highlighted", missing, len(resolved))
    return resolved
