"""Editing session over an immutable Document with selection and undo history."""

from __future__ import annotations

from typing import Callable

from grammar_editor.editor.document import Document, Mark
from grammar_editor.editor.positions import to_doc_pos

HIGHLIGHT = "highlight"


class Editor:
    """Owns the current document. Every mutating call is one transaction."""

    def __init__(self, document: Document | None = None, history_limit: int = 100):
        self._doc = document if document is not None else Document()
        self._selection = (to_doc_pos(0), to_doc_pos(0))
        self._undo: list[Document] = []
        self._redo: list[Document] = []
        self.history_limit = history_limit

    @property
    def document(self) -> Document:
        return self._doc

    @property
    def selection(self) -> tuple[int, int]:
        return self._selection

    @property
    def can_undo(self) -> bool:
        return bool(self._undo)

    @property
    def can_redo(self) -> bool:
        return bool(self._redo)

    def get_text(self) -> str:
        return self._doc.text

    def _end_pos(self) -> int:
        return to_doc_pos(len(self._doc.text))

    def set_text_selection(self, from_pos: int, to_pos: int) -> None:
        if not to_doc_pos(0) <= from_pos <= to_pos <= self._end_pos():
            raise ValueError(f"Selection [{from_pos}, {to_pos}) is outside the document")
        self._selection = (from_pos, to_pos)

    def select_all(self) -> None:
        self._selection = (to_doc_pos(0), self._end_pos())

    def _dispatch(self, document: Document, *, add_to_history: bool = True) -> bool:
        if document == self._doc:
            return False
        if add_to_history:
            self._undo.append(self._doc)
            del self._undo[: -self.history_limit]
            self._redo.clear()
        self._doc = document
        end = self._end_pos()
        self._selection = (min(self._selection[0], end), min(self._selection[1], end))
        return True

    def insert_content(self, text: str, marks: frozenset[Mark] | None = None) -> None:
        """Replace the selection with ``text``.

        Without explicit ``marks`` the inserted text takes the marks found at
        the start of the selection.
        """
        start, end = self._selection
        if marks is None:
            marks = self._doc.marks_at(start)
        self._dispatch(self._doc.replace_range(start, end, text, marks))
        caret = start + len(text)
        self._selection = (caret, caret)

    def set_content(self, content: Document | str) -> None:
        """Replace the whole document in a single transaction."""
        document = Document.from_text(content) if isinstance(content, str) else content
        self._dispatch(document)
        self.select_all()

    def set_mark(self, mark: Mark, *, add_to_history: bool = True) -> None:
        start, end = self._selection
        self._dispatch(self._doc.add_mark(start, end, mark), add_to_history=add_to_history)

    def set_highlight(self, color: str, *, add_to_history: bool = False) -> None:
        self.set_mark(Mark(HIGHLIGHT, color), add_to_history=add_to_history)

    def remove_marks(
        self,
        predicate: Callable[[Mark], bool],
        *,
        add_to_history: bool = False,
    ) -> int:
        """Remove matching marks across the whole document.

        Returns the number of marked ranges removed.
        """
        ranges = self._doc.find_marks(predicate)
        if ranges:
            cleared = self._doc.remove_marks(to_doc_pos(0), self._end_pos(), predicate)
            self._dispatch(cleared, add_to_history=add_to_history)
        return len(ranges)

    def undo(self) -> bool:
        if not self._undo:
            return False
        self._redo.append(self._doc)
        self._doc = self._undo.pop()
        self.select_all()
        return True

    def redo(self) -> bool:
        if not self._redo:
            return False
        self._undo.append(self._doc)
        self._doc = self._redo.pop()
        self.select_all()
        return True
