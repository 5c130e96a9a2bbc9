"""Per-document grammar check session.

A CheckSession owns the single live CheckResult for one editor. It runs
checks, keeps highlights in sync with the document, and routes apply and
dismiss actions back into the reconciliation layer. Create one per editing
session and call ``close()`` (or use ``async with``) when the editor goes away.
"""

from __future__ import annotations

import asyncio
import logging
import time

from grammar_editor.clients.llm_client import LLMResponse
from grammar_editor.editor.document import Document
from grammar_editor.editor.editor import Editor
from grammar_editor.logging.cost_calculator import calculate_cost
from grammar_editor.logging.models import UsageLog
from grammar_editor.logging.usage_store import UsageStore
from grammar_editor.models.suggestion import CheckResult, Suggestion
from grammar_editor.pipeline.grammar_checker import GrammarChecker, GrammarCheckError
from grammar_editor.reconcile.applier import apply_all, apply_suggestion
from grammar_editor.reconcile.highlights import clear_highlights, render_highlights
from grammar_editor.reconcile.resolver import ResolvedSuggestion

logger = logging.getLogger(__name__)


class CheckSession:
    """Grammar check state for one editor."""

    def __init__(
        self,
        editor: Editor,
        checker: GrammarChecker,
        *,
        usage_store: UsageStore | None = None,
        session_id: str = "anonymous",
        debounce_seconds: float = 1.5,
    ):
        self.editor = editor
        self.checker = checker
        self.usage_store = usage_store
        self.session_id = session_id
        self.debounce_seconds = debounce_seconds

        self.result: CheckResult | None = None
        self.error: str | None = None
        self.is_checking = False
        self.resolved: list[ResolvedSuggestion] = []

        self._applied: set[int] = set()
        self._generation = 0
        self._document_epoch = 0
        self._pending: asyncio.Task | None = None
        self._closed = False

    async def __aenter__(self) -> CheckSession:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    # --- state ---

    @property
    def pending_suggestions(self) -> list[Suggestion]:
        """Suggestions of the live result that have not been applied yet."""
        if self.result is None:
            return []
        return [s for i, s in enumerate(self.result.suggestions) if i not in self._applied]

    @property
    def unresolved(self) -> list[Suggestion]:
        """Pending suggestions whose text is not in the current document."""
        return [item.suggestion for item in self.resolved if not item.found]

    # --- checking ---

    async def check(self) -> CheckResult | None:
        """Check the current document text and render highlights.

        Returns None when the check fails or its reply is stale (the document
        was replaced, or a newer check was started, while it was in flight).
        """
        if self._closed:
            raise RuntimeError("CheckSession is closed")

        text = self.editor.get_text()
        self._generation += 1
        generation = self._generation
        epoch = self._document_epoch
        self.is_checking = True
        self.error = None
        started = time.monotonic()

        try:
            result, response = await self.checker.check(text)
        except GrammarCheckError as exc:
            if generation == self._generation:
                self.error = str(exc)
                self.is_checking = False
            logger.warning("Grammar check failed: %s", exc)
            self._record_usage(text, None, exc.response, started, error=str(exc))
            return None

        if generation != self._generation or epoch != self._document_epoch:
            logger.info("Discarding stale grammar check result (generation %d)", generation)
            self._record_usage(text, result, response, started)
            return None

        self.is_checking = False
        self.result = result
        self._applied.clear()
        resolved = self.render()
        self._record_usage(text, result, response, started, resolved_count=sum(1 for r in resolved if r.found))
        return result

    async def check_debounced(self) -> asyncio.Task:
        """Schedule a check after ``debounce_seconds`` of quiet.

        A new trigger restarts the timer. A check that has already started is
        never cancelled; a stale reply is dropped by ``check()``.
        """
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        self._pending = asyncio.create_task(self._check_after_delay())
        return self._pending

    async def _check_after_delay(self) -> CheckResult | None:
        await asyncio.sleep(self.debounce_seconds)
        # Detach so a later trigger does not cancel the in-flight request
        self._pending = None
        return await self.check()

    # --- reconciliation ---

    def render(self) -> list[ResolvedSuggestion]:
        """Re-derive highlights for the pending suggestions."""
        self.resolved = render_highlights(self.editor, self.pending_suggestions)
        return self.resolved

    def on_document_changed(self) -> None:
        """Call after user edits so highlights follow the text."""
        if self.result is not None:
            self.render()

    def apply_suggestion(self, suggestion: Suggestion) -> bool:
        """Apply one suggestion of the live result and re-render the rest."""
        if self.result is None:
            return False
        index = self._index_of(suggestion)
        if not apply_suggestion(self.editor, suggestion):
            return False
        if index is not None:
            self._applied.add(index)
        self.render()
        return True

    def apply_all(self) -> bool:
        """Replace the document with the corrected text and drop the result."""
        if not apply_all(self.editor, self.result):
            self.error = "No corrected text available"
            return False
        self._drop_result()
        return True

    def dismiss(self) -> None:
        """Drop the live result and every grammar highlight."""
        self._drop_result()
        self.error = None

    def load_document(self, document: Document | str) -> None:
        """Replace the editor content with a new document."""
        self._document_epoch += 1
        self._drop_result()
        self.editor.set_content(document)

    def undo(self) -> bool:
        if not self.editor.undo():
            return False
        self.on_document_changed()
        return True

    async def close(self) -> None:
        """Tear down the session: cancel the debounce timer and clear state."""
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
            try:
                await self._pending
            except asyncio.CancelledError:
                pass
        self._pending = None
        self._drop_result()
        self._closed = True

    # --- internals ---

    def _index_of(self, suggestion: Suggestion) -> int | None:
        for i, candidate in enumerate(self.result.suggestions):
            if candidate is suggestion:
                return i
        for i, candidate in enumerate(self.result.suggestions):
            if i not in self._applied and candidate == suggestion:
                return i
        return None

    def _drop_result(self) -> None:
        self.result = None
        self.resolved = []
        self._applied.clear()
        self.is_checking = False
        clear_highlights(self.editor)

    def _record_usage(
        self,
        text: str,
        result: CheckResult | None,
        response: LLMResponse | None,
        started: float,
        *,
        resolved_count: int = 0,
        error: str | None = None,
    ) -> None:
        if self.usage_store is None:
            return
        # Only the tokens of this request, never those of an overlapping check
        calls = [(response.model, response.input_tokens, response.output_tokens)] if response is not None else []
        log = UsageLog(
            session_id=self.session_id,
            model=self.checker.model,
            text_length=len(text),
            suggestion_count=len(result.suggestions) if result is not None else 0,
            resolved_count=resolved_count,
            elapsed_seconds=round(time.monotonic() - started, 3),
            total_input_tokens=sum(call[1] for call in calls),
            total_output_tokens=sum(call[2] for call in calls),
            estimated_cost_usd=calculate_cost(calls),
            success=error is None,
            error_message=error,
        )
        try:
            self.usage_store.save_log(log)
        except Exception:
            logger.warning("Failed to save usage log", exc_info=True)
