"""Shared test fixtures."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock

import pytest

from grammar_editor.clients.llm_client import LLMClient, LLMResponse
from grammar_editor.editor.document import (
    BOLD,
    Document,
    TextRun,
    bullet_item,
    heading,
    paragraph,
)
from grammar_editor.editor.editor import Editor
from grammar_editor.models.suggestion import CheckResult, Suggestion, SuggestionKind


@pytest.fixture
def rich_document() -> Document:
    """Heading, a paragraph with a bold word, and a bullet item.

    Plain text: "My Title\\n\\nI has a pen.\\n\\nteh cat"
    """
    return Document(
        (
            heading(1, "My Title"),
            paragraph("I ", TextRun("has", frozenset({BOLD})), " a pen."),
            bullet_item("teh cat"),
        )
    )


@pytest.fixture
def rich_editor(rich_document) -> Editor:
    return Editor(rich_document)


@pytest.fixture
def typo_editor() -> Editor:
    return Editor(Document.from_text("teh cat sat on teh mat"))


@pytest.fixture
def teh_suggestion() -> Suggestion:
    return Suggestion(
        kind=SuggestionKind.SPELLING,
        original="teh",
        replacement="the",
        explanation="Misspelling of 'the'",
    )


@pytest.fixture
def sample_check_payload() -> dict:
    """Model reply for the text "I has a pen. Its mine."."""
    return {
        "suggestions": [
            {
                "type": "grammar",
                "original": "has",
                "suggestion": "have",
                "explanation": "Subject-verb agreement",
                "position": {"start": 2, "end": 5},
            },
            {
                "type": "punctuation",
                "original": "Its",
                "suggestion": "It's",
                "explanation": "Contraction of 'it is'",
                "position": {"start": 13, "end": 16},
            },
        ],
        "correctedText": "I have a pen. It's mine.",
        "summary": "Two issues found",
    }


@pytest.fixture
def sample_check_result(sample_check_payload) -> CheckResult:
    return CheckResult.model_validate(sample_check_payload)


def _reply(payload, input_tokens: int = 100, output_tokens: int = 50) -> LLMResponse:
    text = payload if isinstance(payload, str) else json.dumps(payload)
    return LLMResponse(
        text=text,
        input_tokens=input_tokens,
        output_tokens=output_tokens,
        model="claude-haiku-4-5-20251001",
    )


@pytest.fixture
def llm_reply():
    """Factory for model replies carrying a JSON payload."""
    return _reply


@pytest.fixture
def mock_llm_client() -> LLMClient:
    """Create a mock LLM client."""
    client = AsyncMock(spec=LLMClient)
    client.generate = AsyncMock(return_value=_reply({}))
    return client
