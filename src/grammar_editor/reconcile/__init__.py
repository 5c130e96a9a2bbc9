"""Reconcile model suggestions with the live document."""

from grammar_editor.reconcile.applier import apply_all, apply_suggestion
from grammar_editor.reconcile.highlights import (
    HIGHLIGHT_COLORS,
    clear_highlights,
    highlight_color,
    render_highlights,
)
from grammar_editor.reconcile.resolver import (
    ResolvedSuggestion,
    Span,
    SpanClaims,
    resolve_all,
    resolve_span,
)

__all__ = [
    "HIGHLIGHT_COLORS",
    "ResolvedSuggestion",
    "Span",
    "SpanClaims",
    "apply_all",
    "apply_suggestion",
    "clear_highlights",
    "highlight_color",
    "render_highlights",
    "resolve_all",
    "resolve_span",
]
