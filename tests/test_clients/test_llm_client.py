"""Tests for LLMClient (Claude API wrapper)."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import anthropic
import httpx
import pytest

from grammar_editor.clients.llm_client import LLMClient, LLMResponse


def _make_api_message(text: str, input_tokens: int = 100, output_tokens: int = 50) -> MagicMock:
    """Build a mock anthropic Message-like object."""
    message = MagicMock()
    message.usage.input_tokens = input_tokens
    message.usage.output_tokens = output_tokens
    message.content = [MagicMock(text=text)]
    return message


def _connection_error() -> anthropic.APIConnectionError:
    return anthropic.APIConnectionError(request=httpx.Request("POST", "https://api.anthropic.com/v1/messages"))


class TestLLMClientInit:
    def test_init_default_creates_client_with_no_kwargs(self):
        """Creates AsyncAnthropic with no extra kwargs when no args supplied."""
        with patch("grammar_editor.clients.llm_client.anthropic.AsyncAnthropic") as mock_cls:
            LLMClient()
            mock_cls.assert_called_once_with()

    def test_init_with_api_key_passes_key(self):
        with patch("grammar_editor.clients.llm_client.anthropic.AsyncAnthropic") as mock_cls:
            LLMClient(api_key="test-key")
            mock_cls.assert_called_once_with(api_key="test-key")

    def test_init_with_both_params_passes_both(self):
        """Passes both api_key and timeout when both are supplied."""
        with patch("grammar_editor.clients.llm_client.anthropic.AsyncAnthropic") as mock_cls:
            LLMClient(api_key="test-key", timeout=30.0)
            mock_cls.assert_called_once_with(api_key="test-key", timeout=30.0)


class TestLLMClientGenerate:
    async def test_generate_returns_llm_response(self):
        """generate() wraps API response fields into an LLMResponse dataclass."""
        with patch("grammar_editor.clients.llm_client.anthropic.AsyncAnthropic") as mock_cls:
            mock_client = MagicMock()
            mock_client.messages.create = AsyncMock(
                return_value=_make_api_message("hello world", input_tokens=100, output_tokens=50)
            )
            mock_cls.return_value = mock_client

            llm = LLMClient()
            result = await llm.generate("say hello")

        assert isinstance(result, LLMResponse)
        assert result.text == "hello world"
        assert result.input_tokens == 100
        assert result.output_tokens == 50

    async def test_system_prompt_sent_only_when_given(self):
        with patch("grammar_editor.clients.llm_client.anthropic.AsyncAnthropic") as mock_cls:
            mock_client = MagicMock()
            mock_client.messages.create = AsyncMock(return_value=_make_api_message("ok"))
            mock_cls.return_value = mock_client

            llm = LLMClient()
            await llm.generate("no system")
            await llm.generate("with system", system="Be terse.")

        first, second = mock_client.messages.create.call_args_list
        assert "system" not in first.kwargs
        assert second.kwargs["system"] == "Be terse."
        assert second.kwargs["messages"] == [{"role": "user", "content": "with system"}]

    async def test_each_response_carries_its_own_usage(self):
        """Usage is reported per response, tagged with the model that served it."""
        with patch("grammar_editor.clients.llm_client.anthropic.AsyncAnthropic") as mock_cls:
            mock_client = MagicMock()
            mock_client.messages.create = AsyncMock(
                side_effect=[
                    _make_api_message("one", input_tokens=20, output_tokens=8),
                    _make_api_message("two", input_tokens=5, output_tokens=2),
                ]
            )
            mock_cls.return_value = mock_client

            llm = LLMClient()
            first = await llm.generate("prompt", model="claude-sonnet-4-5-20250929")
            second = await llm.generate("prompt two")

        assert (first.model, first.input_tokens, first.output_tokens) == ("claude-sonnet-4-5-20250929", 20, 8)
        assert (second.model, second.input_tokens, second.output_tokens) == ("claude-haiku-4-5-20251001", 5, 2)

    async def test_connection_error_is_retried(self):
        """Transport failures are retried before a reply is returned."""
        with patch("grammar_editor.clients.llm_client.anthropic.AsyncAnthropic") as mock_cls:
            mock_client = MagicMock()
            mock_client.messages.create = AsyncMock(
                side_effect=[_connection_error(), _make_api_message("recovered")]
            )
            mock_cls.return_value = mock_client

            llm = LLMClient()
            result = await llm.generate("prompt")

        assert result.text == "recovered"
        assert mock_client.messages.create.await_count == 2

    async def test_other_errors_are_not_retried(self):
        with patch("grammar_editor.clients.llm_client.anthropic.AsyncAnthropic") as mock_cls:
            mock_client = MagicMock()
            mock_client.messages.create = AsyncMock(side_effect=RuntimeError("bad request"))
            mock_cls.return_value = mock_client

            llm = LLMClient()
            with pytest.raises(RuntimeError):
                await llm.generate("prompt")

        assert mock_client.messages.create.await_count == 1
