"""Apply grammar suggestions to the editor document."""

from __future__ import annotations

import logging

from grammar_editor.editor.editor import Editor
from grammar_editor.editor.positions import to_doc_pos
from grammar_editor.models.suggestion import CheckResult, Suggestion
from grammar_editor.reconcile.highlights import is_grammar_highlight
from grammar_editor.reconcile.resolver import resolve_span

logger = logging.getLogger(__name__)


def apply_suggestion(editor: Editor, suggestion: Suggestion) -> bool:
    """Replace the first occurrence of ``suggestion.original`` in the current text.

    The model's declared position is ignored since the document may have
    changed since the check ran. Returns False, leaving the document
    untouched, when the original text can no longer be found.
    """
    span = resolve_span(editor.get_text(), suggestion.original)
    if span is None:
        logger.info("Suggestion no longer applies: %r", suggestion.original)
        return False

    start, end = to_doc_pos(span.start), to_doc_pos(span.end)
    marks = frozenset(m for m in editor.document.marks_at(start) if not is_grammar_highlight(m))
    editor.set_text_selection(start, end)
    editor.insert_content(suggestion.replacement, marks=marks)
    return True


def apply_all(editor: Editor, result: CheckResult | None) -> bool:
    """Replace the whole document with the model's corrected text.

    Formatting is not preserved. Returns False without touching the document
    when there is no corrected text.
    """
    if result is None or not result.corrected_text:
        logger.warning("Bulk apply skipped: no corrected text available")
        return False

    editor.select_all()
    editor.set_content(result.corrected_text)
    return True
