"""Immutable structured document with inline marks.

A document is a flat sequence of blocks (paragraphs, headings, list items,
quotes, code blocks). Each block holds text runs, and each run carries a set
of marks (bold, italic, highlight, ...). Its plain-text projection joins block
texts with a blank line, and all range operations take 1-based document
positions (see ``grammar_editor.editor.positions``).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterator

from grammar_editor.editor.positions import to_doc_pos, to_text_offset

BLOCK_SEPARATOR = "\n\n"


class BlockType(str, Enum):
    PARAGRAPH = "paragraph"
    HEADING = "heading"
    BULLET_ITEM = "bullet_item"
    ORDERED_ITEM = "ordered_item"
    BLOCKQUOTE = "blockquote"
    CODE_BLOCK = "code_block"


@dataclass(frozen=True)
class Mark:
    """Inline formatting. Marks of the same type exclude each other."""

    type: str
    color: str | None = None


BOLD = Mark("bold")
ITALIC = Mark("italic")
UNDERLINE = Mark("underline")
STRIKE = Mark("strike")
CODE = Mark("code")


@dataclass(frozen=True)
class TextRun:
    text: str
    marks: frozenset[Mark] = frozenset()


def normalize_runs(runs) -> tuple[TextRun, ...]:
    """Drop empty runs and merge neighbours that carry identical marks."""
    merged: list[TextRun] = []
    for run in runs:
        if not run.text:
            continue
        if merged and merged[-1].marks == run.marks:
            merged[-1] = TextRun(merged[-1].text + run.text, run.marks)
        else:
            merged.append(run)
    return tuple(merged)


@dataclass(frozen=True)
class Block:
    type: BlockType = BlockType.PARAGRAPH
    runs: tuple[TextRun, ...] = ()
    level: int = 0

    @property
    def text(self) -> str:
        return "".join(run.text for run in self.runs)

    def slice(self, start: int, end: int) -> tuple[TextRun, ...]:
        """Return the runs covering characters ``[start, end)`` of this block."""
        pieces: list[TextRun] = []
        cursor = 0
        for run in self.runs:
            run_end = cursor + len(run.text)
            lo = max(start, cursor)
            hi = min(end, run_end)
            if lo < hi:
                pieces.append(TextRun(run.text[lo - cursor : hi - cursor], run.marks))
            cursor = run_end
        return tuple(pieces)

    def char_marks(self, index: int) -> frozenset[Mark]:
        cursor = 0
        for run in self.runs:
            if cursor <= index < cursor + len(run.text):
                return run.marks
            cursor += len(run.text)
        return frozenset()

    def map_marks(
        self,
        start: int,
        end: int,
        fn: Callable[[frozenset[Mark]], frozenset[Mark]],
    ) -> Block:
        length = len(self.text)
        middle = tuple(TextRun(r.text, fn(r.marks)) for r in self.slice(start, end))
        runs = self.slice(0, start) + middle + self.slice(end, length)
        return Block(self.type, normalize_runs(runs), self.level)


def _as_runs(parts) -> tuple[TextRun, ...]:
    return normalize_runs(p if isinstance(p, TextRun) else TextRun(p) for p in parts)


def paragraph(*parts: str | TextRun) -> Block:
    return Block(BlockType.PARAGRAPH, _as_runs(parts))


def heading(level: int, *parts: str | TextRun) -> Block:
    return Block(BlockType.HEADING, _as_runs(parts), level)


def bullet_item(*parts: str | TextRun) -> Block:
    return Block(BlockType.BULLET_ITEM, _as_runs(parts))


def ordered_item(*parts: str | TextRun) -> Block:
    return Block(BlockType.ORDERED_ITEM, _as_runs(parts))


@dataclass(frozen=True)
class Document:
    blocks: tuple[Block, ...] = field(default_factory=lambda: (Block(),))

    def __post_init__(self):
        if not self.blocks:
            object.__setattr__(self, "blocks", (Block(),))
        elif not isinstance(self.blocks, tuple):
            object.__setattr__(self, "blocks", tuple(self.blocks))

    @classmethod
    def from_text(cls, text: str) -> Document:
        """Build a document whose projection equals ``text`` exactly."""
        return cls(tuple(Block(runs=_as_runs([chunk])) for chunk in text.split(BLOCK_SEPARATOR)))

    @property
    def text(self) -> str:
        """Plain-text projection used as the matching substrate."""
        return BLOCK_SEPARATOR.join(block.text for block in self.blocks)

    def _block_starts(self) -> Iterator[tuple[int, Block, int]]:
        offset = 0
        for index, block in enumerate(self.blocks):
            yield index, block, offset
            offset += len(block.text) + len(BLOCK_SEPARATOR)

    def _locate(self, offset: int) -> tuple[int, int, int]:
        """Map a plain-text offset to ``(block_index, char_index, gap)``.

        ``gap`` is non-zero only for offsets inside the separator after a
        block: it counts the separator characters before the offset, and the
        char index is then the end of that block.
        """
        previous: tuple[int, int] | None = None
        for index, block, start in self._block_starts():
            length = len(block.text)
            if start <= offset <= start + length:
                return index, offset - start, 0
            if offset < start and previous is not None:
                return previous[0], previous[1], offset - (start - len(BLOCK_SEPARATOR))
            previous = (index, length)
        raise ValueError(f"Offset {offset} is outside the document")

    def _check_range(self, from_pos: int, to_pos: int) -> tuple[int, int]:
        start, end = to_text_offset(from_pos), to_text_offset(to_pos)
        if start > end or end > len(self.text):
            raise ValueError(f"Invalid range [{from_pos}, {to_pos}) for document")
        return start, end

    def marks_at(self, pos: int) -> frozenset[Mark]:
        """Marks of the character at ``pos``, or of the one before a block end."""
        index, char, gap = self._locate(to_text_offset(pos))
        if gap:
            index, char = index + 1, 0
        block = self.blocks[index]
        if char < len(block.text):
            return block.char_marks(char)
        if char > 0:
            return block.char_marks(char - 1)
        return frozenset()

    def replace_range(
        self,
        from_pos: int,
        to_pos: int,
        text: str,
        marks: frozenset[Mark] = frozenset(),
    ) -> Document:
        """Replace ``[from_pos, to_pos)`` with ``text`` carrying ``marks``.

        The projection of the result is always the old projection with exactly
        that range replaced. Blocks fully inside the range are removed and the
        boundary blocks are joined, keeping the first block's type. Separator
        characters left over from a partly covered separator stay in the
        joined block as plain newlines.
        """
        start, end = self._check_range(from_pos, to_pos)
        if start == end and not text:
            return self
        first, first_char, first_gap = self._locate(start)
        last, last_char, last_gap = self._locate(end)
        runs = list(self.blocks[first].slice(0, first_char))
        if first_gap:
            runs.append(TextRun(BLOCK_SEPARATOR[:first_gap]))
        runs.append(TextRun(text, marks))
        if last_gap:
            # The rest of the separator and the whole next block join in
            runs.append(TextRun(BLOCK_SEPARATOR[last_gap:]))
            last, last_char = last + 1, 0
        tail = self.blocks[last]
        runs.extend(tail.slice(last_char, len(tail.text)))
        head = self.blocks[first]
        joined = Block(head.type, normalize_runs(runs), head.level)
        return Document(self.blocks[:first] + (joined,) + self.blocks[last + 1 :])

    def _map_range(
        self,
        from_pos: int,
        to_pos: int,
        fn: Callable[[frozenset[Mark]], frozenset[Mark]],
    ) -> Document:
        start, end = self._check_range(from_pos, to_pos)
        blocks = list(self.blocks)
        for index, block, block_start in self._block_starts():
            lo = max(start, block_start) - block_start
            hi = min(end, block_start + len(block.text)) - block_start
            if lo < hi:
                blocks[index] = block.map_marks(lo, hi, fn)
        return Document(tuple(blocks))

    def add_mark(self, from_pos: int, to_pos: int, mark: Mark) -> Document:
        return self._map_range(
            from_pos,
            to_pos,
            lambda marks: frozenset(m for m in marks if m.type != mark.type) | {mark},
        )

    def remove_marks(
        self,
        from_pos: int,
        to_pos: int,
        predicate: Callable[[Mark], bool],
    ) -> Document:
        return self._map_range(
            from_pos,
            to_pos,
            lambda marks: frozenset(m for m in marks if not predicate(m)),
        )

    def find_marks(self, predicate: Callable[[Mark], bool]) -> list[tuple[int, int, Mark]]:
        """Return ``(from_pos, to_pos, mark)`` for each contiguous marked range."""
        found: list[tuple[int, int, Mark]] = []
        for _, block, block_start in self._block_starts():
            open_ranges: dict[Mark, int] = {}
            cursor = block_start
            for run in block.runs:
                for mark in run.marks:
                    if predicate(mark) and mark not in open_ranges:
                        open_ranges[mark] = cursor
                for mark in list(open_ranges):
                    if mark not in run.marks:
                        found.append((to_doc_pos(open_ranges.pop(mark)), to_doc_pos(cursor), mark))
                cursor += len(run.text)
            for mark, begin in open_ranges.items():
                found.append((to_doc_pos(begin), to_doc_pos(cursor), mark))
        found.sort(key=lambda item: (item[0], item[1]))
        return found
