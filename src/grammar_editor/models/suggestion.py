"""Pydantic models for grammar check results."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SuggestionKind(str, Enum):
    """Closed set of suggestion categories returned by the checker."""

    GRAMMAR = "grammar"
    SPELLING = "spelling"
    PUNCTUATION = "punctuation"
    STYLE = "style"


class DeclaredPosition(BaseModel):
    """Offsets reported by the model. Advisory only, never used for edits."""

    start: int
    end: int


class Suggestion(BaseModel):
    """A single proposed correction."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    kind: SuggestionKind = Field(alias="type")
    original: str
    replacement: str = Field(alias="suggestion")
    explanation: str = ""
    declared_position: DeclaredPosition | None = Field(default=None, alias="position")

    @field_validator("kind", mode="before")
    @classmethod
    def _normalize_kind(cls, value):
        if isinstance(value, str):
            return value.strip().lower()
        return value


class CheckResult(BaseModel):
    """Output of one grammar check over a plain-text snapshot."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    suggestions: tuple[Suggestion, ...] = ()
    corrected_text: str = Field(default="", alias="correctedText")
    summary: str = ""
