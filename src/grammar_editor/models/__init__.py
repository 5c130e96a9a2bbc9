"""Data models for grammar checking."""

from grammar_editor.models.suggestion import (
    CheckResult,
    DeclaredPosition,
    Suggestion,
    SuggestionKind,
)

__all__ = [
    "CheckResult",
    "DeclaredPosition",
    "Suggestion",
    "SuggestionKind",
]
