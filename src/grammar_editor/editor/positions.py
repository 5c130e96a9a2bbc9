"""Offset translation between the plain-text projection and document positions.

Plain-text offsets are 0-based indices into ``Document.text``. Document
positions count structural tokens as well: position 0 sits before the first
block's opening token, so the first character of the document is at position 1.

Blocks are joined by ``"\\n\\n"`` in the projection and each block contributes
one opening and one closing token to the position space. The two separator
characters therefore line up with the close/open token pair, and every
plain-text offset maps to exactly one position one greater than itself.
"""

from __future__ import annotations

# Position of plain-text offset 0
DOC_POSITION_OFFSET = 1


def to_doc_pos(offset: int) -> int:
    """Translate a 0-based plain-text offset to a 1-based document position."""
    if offset < 0:
        raise ValueError(f"Plain-text offset must be non-negative: {offset}")
    return offset + DOC_POSITION_OFFSET


def to_text_offset(pos: int) -> int:
    """Translate a 1-based document position to a 0-based plain-text offset."""
    if pos < DOC_POSITION_OFFSET:
        raise ValueError(f"Document position must be >= {DOC_POSITION_OFFSET}: {pos}")
    return pos - DOC_POSITION_OFFSET
