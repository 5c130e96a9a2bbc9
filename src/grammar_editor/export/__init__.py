"""HTML export for grammar-editor documents."""
from grammar_editor.export.html_renderer import render_to_html, save_html

__all__ = ["render_to_html", "save_html"]
