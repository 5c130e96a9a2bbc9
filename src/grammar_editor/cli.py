"""CLI interface using typer + rich."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from grammar_editor.clients.llm_client import LLMClient
from grammar_editor.config import load_config
from grammar_editor.editor.document import Document
from grammar_editor.editor.editor import Editor
from grammar_editor.export.html_renderer import render_to_html, save_html
from grammar_editor.logging.usage_store import UsageStore
from grammar_editor.parsers.document_parser import load_document, save_document
from grammar_editor.pipeline.grammar_checker import GrammarChecker
from grammar_editor.pipeline.session import CheckSession
from grammar_editor.reconcile.highlights import highlight_color

app = typer.Typer(
    name="grammar-editor",
    help="AI grammar and style checking for rich-text documents",
    no_args_is_help=True,
)
console = Console()


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


async def _run_check(
    session: CheckSession,
    apply: list[int],
    apply_all: bool,
) -> tuple[list[int], bool, Document | None]:
    """Run one check and the requested applies.

    Returns the applied suggestion numbers, whether the bulk apply ran, and
    the highlighted document for the HTML preview.
    """
    applied: list[int] = []
    async with session:
        result = await session.check()
        if result is None:
            return applied, False, None
        _print_result(session)

        if apply_all:
            bulk = session.apply_all()
            return applied, bulk, session.editor.document

        suggestions = list(result.suggestions)
        for number in apply:
            if not 1 <= number <= len(suggestions):
                console.print(f"[yellow]No suggestion #{number}[/yellow]")
                continue
            if session.apply_suggestion(suggestions[number - 1]):
                applied.append(number)
            else:
                console.print(f"[yellow]Suggestion #{number} no longer matches the text[/yellow]")
        # Closing the session clears highlights, so snapshot first
        return applied, False, session.editor.document


def _print_result(session: CheckSession) -> None:
    result = session.result
    if not result.suggestions:
        console.print(Panel(result.summary or "No grammar or spelling issues found.", title="Grammar check"))
        return

    table = Table(title=f"{len(result.suggestions)} issues found", show_lines=False)
    table.add_column("#", justify="right")
    table.add_column("Kind")
    table.add_column("Original")
    table.add_column("Suggestion")
    table.add_column("Explanation")

    located = {id(item.suggestion) for item in session.resolved if item.found}
    for number, suggestion in enumerate(result.suggestions, start=1):
        color = highlight_color(suggestion.kind)
        original = suggestion.original if id(suggestion) in located else f"[dim]{suggestion.original} (not found)[/dim]"
        table.add_row(
            str(number),
            f"[black on {color}] {suggestion.kind.value} [/black on {color}]",
            original,
            suggestion.replacement,
            suggestion.explanation,
        )
    console.print(table)
    if result.summary:
        console.print(f"[dim]{result.summary}[/dim]")
    if session.unresolved:
        console.print(
            f"[yellow]{len(session.unresolved)} suggestion(s) could not be located in the current text.[/yellow]"
        )


@app.command()
def check(
    file: Path = typer.Argument(help="Document to check (.txt or .md)"),
    apply: list[int] = typer.Option([], "--apply", "-a", help="Apply suggestion by number (repeatable)"),
    apply_all: bool = typer.Option(False, "--apply-all", help="Replace the text with the fully corrected version"),
    output: Path = typer.Option(None, "--output", "-o", help="Where to write the edited document"),
    html: Path = typer.Option(None, "--html", help="Write an HTML preview with highlights"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Check a document for grammar, spelling, punctuation and style issues."""
    _setup_logging(verbose)
    if not file.exists():
        console.print(f"[red]File not found: {file}[/red]")
        raise typer.Exit(1)
    try:
        document = load_document(file)
    except ValueError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1)

    config = load_config()
    editor = Editor(document)
    llm = LLMClient(timeout=config.llm.timeout)
    checker = GrammarChecker(
        llm,
        config.llm.model,
        temperature=config.llm.temperature,
        max_tokens=config.llm.max_tokens,
        min_text_length=config.check.min_text_length,
    )
    session = CheckSession(
        editor,
        checker,
        usage_store=UsageStore(config.usage.resolved_db_path),
        session_id=file.stem,
        debounce_seconds=config.check.debounce_seconds,
    )

    if verbose:
        console.print(f"[dim]Document: {len(editor.get_text())} characters, {len(document.blocks)} blocks[/dim]")
        console.print(f"[dim]Model: {config.llm.model}[/dim]")

    with console.status("Checking grammar..."):
        applied, bulk, preview = asyncio.run(_run_check(session, apply, apply_all))

    if session.error:
        console.print(f"[red]Grammar check error: {session.error}[/red]")
        raise typer.Exit(1)

    if html and preview is not None:
        save_html(render_to_html(preview, title=file.stem), html)
        console.print(f"[green]HTML preview saved: {html}[/green]")

    if applied or bulk:
        target = output or file
        save_document(editor.document, target)
        changes = "all suggestions" if bulk else f"{len(applied)} suggestion(s)"
        console.print(f"[green]Applied {changes}, saved: {target}[/green]")


@app.command()
def usage(
    limit: int = typer.Option(10, "--limit", "-n", help="Number of recent checks to show"),
) -> None:
    """Show recent grammar check usage and this month's totals."""
    config = load_config()
    store = UsageStore(config.usage.resolved_db_path)
    logs = store.get_logs(limit=limit)
    if not logs:
        console.print("[yellow]No checks recorded yet.[/yellow]")
        return

    table = Table(title="Recent checks")
    for column in ("When", "Session", "Chars", "Suggestions", "Located", "Tokens", "Cost", "Status"):
        table.add_column(column)
    for log in logs:
        table.add_row(
            log.timestamp.strftime("%Y-%m-%d %H:%M"),
            log.session_id,
            str(log.text_length),
            str(log.suggestion_count),
            str(log.resolved_count),
            f"{log.total_input_tokens}/{log.total_output_tokens}",
            f"${log.estimated_cost_usd:.4f}",
            "[green]ok[/green]" if log.success else f"[red]{log.error_message or 'failed'}[/red]",
        )
    console.print(table)

    stats = store.get_monthly_stats()
    console.print(
        Panel(
            f"Checks: {stats['total_runs']} | Success: {stats['success_rate']:.0f}% | "
            f"Located: {stats['resolve_rate']:.0f}% | Cost: ${stats['total_cost_usd']:.4f}",
            title=f"Month {stats['month']}",
        )
    )


if __name__ == "__main__":
    app()
