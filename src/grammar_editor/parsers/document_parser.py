"""Load documents from text or markdown files and write them back as markdown."""

from __future__ import annotations

import re
from pathlib import Path

from grammar_editor.editor.document import (
    BOLD,
    CODE,
    ITALIC,
    Block,
    BlockType,
    Document,
    Mark,
    TextRun,
    normalize_runs,
)

_HEADING_RE = re.compile(r"^(#{1,6})\s+(.*)$")
_BULLET_RE = re.compile(r"^[-*+]\s+(.*)$")
_ORDERED_RE = re.compile(r"^\d+[.)]\s+(.*)$")
_QUOTE_RE = re.compile(r"^>\s?(.*)$")
# Emphasis delimiters must hug the emphasised text
_INLINE_RE = re.compile(
    r"\*\*(?P<bold>[^\s*](?:.*?[^\s*])?)\*\*"
    r"|`(?P<code>[^`]+)`"
    r"|(?<![\w*])\*(?P<star>[^\s*](?:[^*]*?[^\s*])?)\*(?![\w*])"
    r"|(?<![\w_])_(?P<underscore>[^\s_](?:[^_]*?[^\s_])?)_(?![\w_])"
)

# Markdown delimiters emitted for each mark, innermost first
_MARK_DELIMITERS: list[tuple[Mark, str]] = [(CODE, "`"), (ITALIC, "*"), (BOLD, "**")]


def load_document(file_path: str | Path) -> Document:
    """Parse a .txt or .md file into a Document."""
    path = Path(file_path)
    suffix = path.suffix.lower()
    raw = path.read_text(encoding="utf-8").lstrip("\ufeff").replace("\r\n", "\n")
    if suffix == ".txt":
        return Document.from_text(raw.strip("\n"))
    if suffix in (".md", ".markdown"):
        return parse_markdown(raw)
    raise ValueError(f"Unsupported file format: {path.suffix}")


def parse_inline(text: str) -> tuple[TextRun, ...]:
    """Split inline markdown into marked runs (bold, italic, code)."""
    runs: list[TextRun] = []
    cursor = 0
    for match in _INLINE_RE.finditer(text):
        if match.start() > cursor:
            runs.append(TextRun(text[cursor : match.start()]))
        if match.group("bold") is not None:
            runs.append(TextRun(match.group("bold"), frozenset({BOLD})))
        elif match.group("code") is not None:
            runs.append(TextRun(match.group("code"), frozenset({CODE})))
        else:
            italic = match.group("star") if match.group("star") is not None else match.group("underscore")
            runs.append(TextRun(italic, frozenset({ITALIC})))
        cursor = match.end()
    runs.append(TextRun(text[cursor:]))
    return normalize_runs(runs)


def _line_block(line: str) -> Block | None:
    """Single-line block for a heading, list item or quote line."""
    match = _HEADING_RE.match(line)
    if match:
        return Block(BlockType.HEADING, parse_inline(match.group(2)), len(match.group(1)))
    for pattern, block_type in (
        (_BULLET_RE, BlockType.BULLET_ITEM),
        (_ORDERED_RE, BlockType.ORDERED_ITEM),
        (_QUOTE_RE, BlockType.BLOCKQUOTE),
    ):
        match = pattern.match(line)
        if match:
            return Block(block_type, parse_inline(match.group(1)))
    return None


def parse_markdown(text: str) -> Document:
    """Parse a small markdown subset: headings, lists, quotes, code fences, paragraphs."""
    blocks: list[Block] = []
    paragraph: list[str] = []
    code: list[str] | None = None

    def flush_paragraph() -> None:
        if paragraph:
            blocks.append(Block(BlockType.PARAGRAPH, parse_inline(" ".join(paragraph))))
            paragraph.clear()

    for line in text.split("\n"):
        if code is not None:
            if line.strip().startswith("```"):
                blocks.append(Block(BlockType.CODE_BLOCK, normalize_runs([TextRun("\n".join(code))])))
                code = None
            else:
                code.append(line)
            continue

        stripped = line.strip()
        if stripped.startswith("```"):
            flush_paragraph()
            code = []
            continue
        if not stripped:
            flush_paragraph()
            continue

        block = _line_block(stripped)
        if block is None:
            paragraph.append(stripped)
        else:
            flush_paragraph()
            blocks.append(block)

    flush_paragraph()
    if code is not None:
        # Unterminated fence
        blocks.append(Block(BlockType.CODE_BLOCK, normalize_runs([TextRun("\n".join(code))])))
    return Document(tuple(blocks))


def _runs_to_markdown(runs: tuple[TextRun, ...], *, raw: bool = False) -> str:
    if raw:
        return "".join(run.text for run in runs)
    parts = []
    for run in runs:
        text = run.text
        for mark, delimiter in _MARK_DELIMITERS:
            if mark in run.marks:
                text = f"{delimiter}{text}{delimiter}"
        parts.append(text)
    return "".join(parts)


def to_markdown(document: Document) -> str:
    """Serialize a Document to markdown. Highlights are not represented."""
    lines: list[str] = []
    previous: BlockType | None = None
    number = 0
    for block in document.blocks:
        is_item = block.type in (BlockType.BULLET_ITEM, BlockType.ORDERED_ITEM)
        # Keep consecutive list items together
        if lines and not (is_item and previous == block.type):
            lines.append("")
        number = number + 1 if block.type == BlockType.ORDERED_ITEM and previous == block.type else 1

        if block.type == BlockType.CODE_BLOCK:
            lines.append(f"```\n{_runs_to_markdown(block.runs, raw=True)}\n```")
            previous = block.type
            continue

        body = _runs_to_markdown(block.runs)
        if block.type == BlockType.HEADING:
            lines.append(f"{'#' * max(1, min(block.level, 6))} {body}")
        elif block.type == BlockType.BULLET_ITEM:
            lines.append(f"- {body}")
        elif block.type == BlockType.ORDERED_ITEM:
            lines.append(f"{number}. {body}")
        elif block.type == BlockType.BLOCKQUOTE:
            lines.append(f"> {body}")
        else:
            lines.append(body)
        previous = block.type
    return "\n".join(lines) + "\n"


def save_document(document: Document, output_path: str | Path) -> Path:
    """Write a Document as .txt (plain projection) or .md depending on suffix."""
    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    if path.suffix.lower() == ".txt":
        path.write_text(document.text + "\n", encoding="utf-8")
    else:
        path.write_text(to_markdown(document), encoding="utf-8")
    return path
