"""Render a document, with its grammar highlights, to standalone HTML."""

from __future__ import annotations

from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape
from markupsafe import Markup, escape

from grammar_editor.editor.document import Block, BlockType, Document, TextRun
from grammar_editor.editor.editor import HIGHLIGHT
from grammar_editor.reconcile.highlights import HIGHLIGHT_COLORS

HTML_TEMPLATES_DIR = Path(__file__).parent / "templates"

# Innermost first
_INLINE_TAGS = [("code", "code"), ("bold", "strong"), ("italic", "em"), ("underline", "u"), ("strike", "s")]

_LIST_TAGS = {BlockType.BULLET_ITEM: "ul", BlockType.ORDERED_ITEM: "ol"}


def _render_run(run: TextRun) -> Markup:
    html = escape(run.text)
    mark_types = {mark.type for mark in run.marks}
    for mark_type, tag in _INLINE_TAGS:
        if mark_type in mark_types:
            html = Markup(f"<{tag}>{html}</{tag}>")
    for mark in run.marks:
        if mark.type == HIGHLIGHT and mark.color:
            html = Markup(f'<mark style="background-color: {escape(mark.color)}">{html}</mark>')
    return html


def _render_inline(block: Block) -> Markup:
    return Markup("").join(_render_run(run) for run in block.runs)


def _render_block(block: Block) -> Markup:
    body = _render_inline(block)
    if block.type == BlockType.HEADING:
        level = max(1, min(block.level, 6))
        return Markup(f"<h{level}>{body}</h{level}>")
    if block.type in _LIST_TAGS:
        return Markup(f"<li>{body}</li>")
    if block.type == BlockType.BLOCKQUOTE:
        return Markup(f"<blockquote><p>{body}</p></blockquote>")
    if block.type == BlockType.CODE_BLOCK:
        return Markup(f"<pre><code>{body}</code></pre>")
    return Markup(f"<p>{body}</p>")


def render_elements(document: Document) -> list[Markup]:
    """Top-level HTML elements, grouping consecutive list items into lists."""
    elements: list[Markup] = []
    items: list[Markup] = []
    list_type: BlockType | None = None

    for block in document.blocks:
        if list_type is not None and block.type != list_type:
            tag = _LIST_TAGS[list_type]
            elements.append(Markup(f"<{tag}>{Markup('').join(items)}</{tag}>"))
            items, list_type = [], None
        if block.type in _LIST_TAGS:
            list_type = block.type
            items.append(_render_block(block))
        else:
            elements.append(_render_block(block))

    if list_type is not None:
        tag = _LIST_TAGS[list_type]
        elements.append(Markup(f"<{tag}>{Markup('').join(items)}</{tag}>"))
    return elements


def render_to_html(document: Document, title: str = "Document", legend: bool = True) -> str:
    """Render the document to styled HTML, grammar highlights included."""
    env = Environment(
        loader=FileSystemLoader(str(HTML_TEMPLATES_DIR)),
        autoescape=select_autoescape(["html"]),
    )
    template = env.get_template("document.html")
    return template.render(
        title=title,
        elements=render_elements(document),
        legend=[(kind.value, color) for kind, color in HIGHLIGHT_COLORS.items()] if legend else [],
    )


def save_html(html_content: str, output_path: str | Path) -> Path:
    """Save HTML content to file."""
    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(html_content, encoding="utf-8")
    return path
