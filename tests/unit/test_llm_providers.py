"""Unit tests for LLM provider adapters: OpenAI and Anthropic."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from clipvault.config.settings import Settings
from clipvault.utils.errors import LLMError


# ======================================================================
# Shared helpers
# ======================================================================

def _settings(**overrides) -> Settings:
    defaults = {
        "openai_api_key": "sk-test",
        "openai_base_url": "",
        "openai_text_model": "",
        "openai_vision_model": "",
        "anthropic_api_key": "test-anthropic",
        "anthropic_model": "",
    }
    defaults.update(overrides)
    return Settings(**defaults)


def _openai_response(content: str | None) -> MagicMock:
    response = MagicMock()
    response.choices = [MagicMock(message=MagicMock(content=content))]
    response.usage = MagicMock(total_tokens=42)
    return response


def _anthropic_response(*texts: str) -> MagicMock:
    response = MagicMock()
    response.content = [MagicMock(type="text", text=text) for text in texts]
    response.usage = MagicMock(input_tokens=10, output_tokens=5)
    return response


# ======================================================================
# OpenAI LLM Provider
# ======================================================================


class TestOpenAILLMProvider:
    def test_defaults(self) -> None:
        from clipvault.providers.llm.openai_provider import OpenAILLMProvider

        provider = OpenAILLMProvider(_settings())
        assert provider.get_provider_name() == "openai"
        assert provider.supports_vision() is True
        assert provider.is_available() is True

    def test_without_key(self) -> None:
        from clipvault.providers.llm.openai_provider import OpenAILLMProvider

        assert OpenAILLMProvider(_settings(openai_api_key="")).is_available() is False

    def test_custom_endpoint_without_vision_model(self) -> None:
        from clipvault.providers.llm.openai_provider import OpenAILLMProvider

        provider = OpenAILLMProvider(_settings(openai_base_url="http://localhost:9999/v1"))
        assert provider.get_provider_name() == "openai-compatible"
        assert provider.supports_vision() is False

    @pytest.mark.asyncio
    async def test_complete_success(self) -> None:
        from clipvault.providers.llm.openai_provider import OpenAILLMProvider

        mock_client = AsyncMock()
        mock_client.chat.completions.create = AsyncMock(return_value=_openai_response('{"summary": "x"}'))

        with patch("clipvault.providers.llm.openai_provider.openai.AsyncOpenAI", return_value=mock_client):
            provider = OpenAILLMProvider(_settings())
            result = await provider.complete("system prompt", "user prompt", temperature=0.1, max_tokens=50)

        assert result == '{"summary": "x"}'
        kwargs = mock_client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "gpt-4o-mini"
        assert kwargs["max_tokens"] == 50
        assert kwargs["messages"][0] == {"role": "system", "content": "system prompt"}

    @pytest.mark.asyncio
    async def test_complete_empty_content(self) -> None:
        from clipvault.providers.llm.openai_provider import OpenAILLMProvider

        mock_client = AsyncMock()
        mock_client.chat.completions.create = AsyncMock(return_value=_openai_response(None))

        with patch("clipvault.providers.llm.openai_provider.openai.AsyncOpenAI", return_value=mock_client):
            provider = OpenAILLMProvider(_settings())
            with pytest.raises(LLMError):
                await provider.complete("system", "user")

    @pytest.mark.asyncio
    async def test_complete_api_error_wrapped(self) -> None:
        import openai

        from clipvault.providers.llm.openai_provider import OpenAILLMProvider

        mock_client = AsyncMock()
        mock_client.chat.completions.create = AsyncMock(
            side_effect=openai.APIError(message="Rate limit exceeded", request=MagicMock(), body=None)
        )

        with patch("clipvault.providers.llm.openai_provider.openai.AsyncOpenAI", return_value=mock_client):
            provider = OpenAILLMProvider(_settings())
            with pytest.raises(LLMError, match="Rate limit exceeded") as exc_info:
                await provider.complete("system", "user")

        assert exc_info.value.provider_name == "openai"
        assert isinstance(exc_info.value.__cause__, openai.APIError)

    @pytest.mark.asyncio
    async def test_vision_extract_sends_data_url(self) -> None:
        from clipvault.providers.llm.openai_provider import OpenAILLMProvider

        mock_client = AsyncMock()
        mock_client.chat.completions.create = AsyncMock(return_value=_openai_response("a cat"))

        with patch("clipvault.providers.llm.openai_provider.openai.AsyncOpenAI", return_value=mock_client):
            provider = OpenAILLMProvider(_settings())
            result = await provider.vision_extract(b"\x89PNG\r\n\x1a\nrest", "describe")

        assert result == "a cat"
        kwargs = mock_client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "gpt-4o"
        image_part = kwargs["messages"][0]["content"][1]
        assert image_part["image_url"]["url"].startswith("data:image/png;base64,")

    def test_custom_endpoint_with_vision_model(self) -> None:
        from clipvault.providers.llm.openai_provider import OpenAILLMProvider

        provider = OpenAILLMProvider(
            _settings(openai_base_url="http://localhost:9999/v1", openai_vision_model="llava")
        )
        assert provider.supports_vision() is True

    def test_client_uses_configured_timeout(self) -> None:
        from clipvault.providers.llm.openai_provider import OpenAILLMProvider

        with patch("clipvault.providers.llm.openai_provider.openai.AsyncOpenAI") as client_cls:
            OpenAILLMProvider(_settings(llm_timeout_seconds=12.5))

        timeout = client_cls.call_args.kwargs["timeout"]
        assert timeout.read == 12.5
        assert timeout.connect == 5.0

    @pytest.mark.asyncio
    async def test_vision_extract_passes_token_budget(self) -> None:
        from clipvault.providers.llm.openai_provider import OpenAILLMProvider

        mock_client = AsyncMock()
        mock_client.chat.completions.create = AsyncMock(return_value=_openai_response("a cat"))

        with patch("clipvault.providers.llm.openai_provider.openai.AsyncOpenAI", return_value=mock_client):
            provider = OpenAILLMProvider(_settings())
            await provider.vision_extract(b"GIF89a...", "describe", max_tokens=321)

        kwargs = mock_client.chat.completions.create.call_args.kwargs
        assert kwargs["max_tokens"] == 321
        assert "temperature" not in kwargs
        assert kwargs["messages"][0]["content"][1]["image_url"]["url"].startswith("data:image/gif;")

    @pytest.mark.asyncio
    async def test_complete_blank_content(self) -> None:
        from clipvault.providers.llm.openai_provider import OpenAILLMProvider

        mock_client = AsyncMock()
        mock_client.chat.completions.create = AsyncMock(return_value=_openai_response(""))

        with patch("clipvault.providers.llm.openai_provider.openai.AsyncOpenAI", return_value=mock_client):
            provider = OpenAILLMProvider(_settings())
            with pytest.raises(LLMError, match="empty response"):
                await provider.complete("system", "user")

    @pytest.mark.asyncio
    async def test_vision_unsupported(self) -> None:
        from clipvault.providers.llm.openai_provider import OpenAILLMProvider

        provider = OpenAILLMProvider(_settings(openai_base_url="http://localhost:9999/v1"))
        with pytest.raises(LLMError):
            await provider.vision_extract(b"img", "describe")


# ======================================================================
# Anthropic LLM Provider
# ======================================================================


class TestAnthropicLLMProvider:
    def test_metadata(self) -> None:
        from clipvault.providers.llm.anthropic_provider import AnthropicLLMProvider

        provider = AnthropicLLMProvider(_settings())
        assert provider.get_provider_name() == "anthropic"
        assert provider.supports_vision() is True
        assert provider.is_available() is True
        assert AnthropicLLMProvider(_settings(anthropic_api_key="")).is_available() is False

    @pytest.mark.asyncio
    async def test_complete_joins_text_blocks(self) -> None:
        from clipvault.providers.llm.anthropic_provider import AnthropicLLMProvider

        mock_client = AsyncMock()
        mock_client.messages.create = AsyncMock(return_value=_anthropic_response("part one", "part two"))

        with patch("clipvault.providers.llm.anthropic_provider.anthropic.AsyncAnthropic", return_value=mock_client):
            provider = AnthropicLLMProvider(_settings(anthropic_model="claude-test"))
            result = await provider.complete("sys", "user")

        assert result == "part one\npart two"
        kwargs = mock_client.messages.create.call_args.kwargs
        assert kwargs["system"] == "sys"
        assert kwargs["model"] == "claude-test"

    @pytest.mark.asyncio
    async def test_complete_without_text(self) -> None:
        from clipvault.providers.llm.anthropic_provider import AnthropicLLMProvider

        mock_client = AsyncMock()
        mock_client.messages.create = AsyncMock(return_value=_anthropic_response())

        with patch("clipvault.providers.llm.anthropic_provider.anthropic.AsyncAnthropic", return_value=mock_client):
            provider = AnthropicLLMProvider(_settings())
            with pytest.raises(LLMError):
                await provider.complete("sys", "user")

    @pytest.mark.asyncio
    async def test_api_error_wrapped(self) -> None:
        import anthropic

        from clipvault.providers.llm.anthropic_provider import AnthropicLLMProvider

        mock_client = AsyncMock()
        mock_client.messages.create = AsyncMock(
            side_effect=anthropic.APIError(message="overloaded", request=MagicMock(), body=None)
        )

        with patch("clipvault.providers.llm.anthropic_provider.anthropic.AsyncAnthropic", return_value=mock_client):
            provider = AnthropicLLMProvider(_settings())
            with pytest.raises(LLMError, match="overloaded"):
                await provider.vision_extract(b"\xff\xd8\xff", "describe")

    @pytest.mark.asyncio
    async def test_vision_extract_sends_base64_block(self) -> None:
        from clipvault.providers.llm.anthropic_provider import AnthropicLLMProvider

        mock_client = AsyncMock()
        mock_client.messages.create = AsyncMock(return_value=_anthropic_response("a dog"))

        with patch("clipvault.providers.llm.anthropic_provider.anthropic.AsyncAnthropic", return_value=mock_client):
            provider = AnthropicLLMProvider(_settings())
            result = await provider.vision_extract(b"GIF89a...", "describe")

        assert result == "a dog"
        block = mock_client.messages.create.call_args.kwargs["messages"][0]["content"][0]
        assert block["source"]["media_type"] == "image/gif"
