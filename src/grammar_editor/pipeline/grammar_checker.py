"""Grammar checking agent: plain text in, CheckResult out."""

from __future__ import annotations

import logging

from pydantic import ValidationError

from grammar_editor.clients.llm_client import DEFAULT_MODEL, LLMClient, LLMResponse
from grammar_editor.models.suggestion import CheckResult, Suggestion
from grammar_editor.utils.json_parser import extract_json

logger = logging.getLogger(__name__)

CHECK_SYSTEM = """\
You are a professional grammar and spelling checker. Analyze the provided text \
and return suggestions for improvements. Focus on:
1. Grammar errors
2. Spelling mistakes
3. Punctuation issues
4. Style improvements
5. Clarity enhancements

Rules:
- "original" must be copied exactly from the text, character for character.
- Keep each "original" as short as possible while still unambiguous.
- Do not change the meaning of the text.

Return only a JSON object with this structure:
{
  "suggestions": [
    {
      "type": "grammar|spelling|punctuation|style",
      "original": "original text segment",
      "suggestion": "improved text segment",
      "explanation": "brief explanation of the issue",
      "position": {"start": number, "end": number}
    }
  ],
  "correctedText": "full corrected version of the text",
  "summary": "brief summary of issues found"
}

If no issues are found, return an empty suggestions array but still provide \
the original text as correctedText."""


class GrammarCheckError(Exception):
    """The grammar check could not produce a result.

    ``response`` is set when the model did reply, so the tokens it cost can
    still be accounted for.
    """

    def __init__(self, message: str, response: LLMResponse | None = None):
        super().__init__(message)
        self.response = response


class GrammarChecker:
    """Ask the text model for grammar, spelling, punctuation and style fixes."""

    def __init__(
        self,
        llm: LLMClient,
        model: str = DEFAULT_MODEL,
        *,
        temperature: float = 0.1,
        max_tokens: int = 4096,
        min_text_length: int = 3,
    ):
        self.llm = llm
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.min_text_length = min_text_length

    async def check(self, text: str) -> tuple[CheckResult, LLMResponse]:
        """Check ``text`` and return the parsed result with the raw reply.

        The reply carries the token usage of this one request. Raises
        GrammarCheckError for empty or too-short text, a failed model call,
        or a reply that is not a usable JSON object.
        """
        if not text or not text.strip():
            raise GrammarCheckError("No text provided")
        if len(text.strip()) < self.min_text_length:
            raise GrammarCheckError(
                f"Text is too short to check (minimum {self.min_text_length} characters)"
            )

        prompt = f"""Please check this text for grammar and spelling.

<text>
{text}
</text>"""

        try:
            response = await self.llm.generate(
                prompt=prompt,
                system=CHECK_SYSTEM,
                model=self.model,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )
        except Exception as exc:
            raise GrammarCheckError(f"Failed to check grammar and spelling: {exc}") from exc

        try:
            data = extract_json(response.text)
        except ValueError as exc:
            raise GrammarCheckError("Grammar check returned an unreadable response", response) from exc

        try:
            return self._parse_result(data, text), response
        except GrammarCheckError as exc:
            exc.response = response
            raise

    @staticmethod
    def _parse_result(data, source_text: str) -> CheckResult:
        """Parse the model reply, dropping suggestions that fail validation."""
        # A bare suggestion array is accepted in place of the full object
        if isinstance(data, list):
            data = {"suggestions": data}
        if not isinstance(data, dict):
            raise GrammarCheckError("Grammar check returned an unexpected response shape")

        raw_items = data.get("suggestions") or []
        if not isinstance(raw_items, list):
            raw_items = []

        suggestions: list[Suggestion] = []
        for item in raw_items:
            if not isinstance(item, dict):
                continue
            try:
                suggestions.append(Suggestion.model_validate(item))
            except ValidationError as exc:
                logger.debug("Dropping invalid suggestion %r: %s", item, exc)

        corrected = data.get("correctedText", data.get("corrected_text"))
        if not isinstance(corrected, str):
            corrected = source_text if not suggestions else ""

        summary = data.get("summary")
        return CheckResult(
            suggestions=suggestions,
            corrected_text=corrected,
            summary=summary if isinstance(summary, str) else "",
        )
