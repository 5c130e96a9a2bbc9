"""Structured document and editor host."""

from grammar_editor.editor.document import (
    BOLD,
    CODE,
    ITALIC,
    STRIKE,
    UNDERLINE,
    Block,
    BlockType,
    Document,
    Mark,
    TextRun,
)
from grammar_editor.editor.editor import Editor
from grammar_editor.editor.positions import to_doc_pos, to_text_offset

__all__ = [
    "BOLD",
    "CODE",
    "ITALIC",
    "STRIKE",
    "UNDERLINE",
    "Block",
    "BlockType",
    "Document",
    "Editor",
    "Mark",
    "TextRun",
    "to_doc_pos",
    "to_text_offset",
]
