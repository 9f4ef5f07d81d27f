"""Unit tests for Anthropic provider.

Tests cover:
- Request building (temperature clamping, top-k, no top-p)
- Response parsing and stop reason mapping
- Error handling and mapping
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from research_assistant.llm.errors import (
    AuthenticationError,
    InvalidRequestError,
    ModelNotFoundError,
    ModelTimeoutError,
    ProviderError,
    QuotaExceededError,
    SafetyFilterError,
)
from research_assistant.llm.models import GenerationConfig, ModelRequest
from research_assistant.llm.providers.anthropic import AnthropicProvider


class FakeAPIStatusError(Exception):
    """Fake API error for testing exception chaining."""

    def __init__(self, status_code: int, message: str, response=None, request_id=None):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.response = response
        self.request_id = request_id


def text_block(text: str):
    block = MagicMock()
    block.type = "text"
    block.text = text
    return block


def make_response(blocks, stop_reason="end_turn"):
    response = MagicMock()
    response.id = "msg_123"
    response.model = "claude-sonnet-4-5-20250929"
    response.content = blocks
    response.stop_reason = stop_reason
    response.usage.input_tokens = 10
    response.usage.output_tokens = 4
    return response


class TestAnthropicRequestBuilding:
    """Tests for Anthropic request building."""

    def test_build_request(self):
        provider = AnthropicProvider(api_key="test-key")
        request = ModelRequest(
            prompt="Write the Methods section.",
            config=GenerationConfig(temperature=0.3, top_p=0.8, top_k=40, max_output_tokens=2048),
        )

        anthropic_request = provider._build_request(request)

        assert anthropic_request["model"] == "claude-sonnet-4-5-20250929"
        assert anthropic_request["messages"] == [
            {"role": "user", "content": "Write the Methods section."}
        ]
        assert anthropic_request["max_tokens"] == 2048
        assert anthropic_request["temperature"] == 0.3
        assert anthropic_request["top_k"] == 40
        assert "top_p" not in anthropic_request

    def test_temperature_clamped(self):
        provider = AnthropicProvider(api_key="test-key")
        request = ModelRequest(prompt="Hi", config=GenerationConfig(temperature=1.7))

        assert provider._build_request(request)["temperature"] == 1.0

    def test_top_k_omitted_when_unset(self):
        provider = AnthropicProvider(api_key="test-key")
        request = ModelRequest(prompt="Hi", config=GenerationConfig(top_k=None))

        assert "top_k" not in provider._build_request(request)

    def test_supported_parameters(self):
        provider = AnthropicProvider(api_key="test-key")
        assert provider.supports("top_k") is True
        assert provider.supports("top_p") is False


class TestAnthropicResponseParsing:
    """Tests for Anthropic response parsing."""

    def test_joins_text_blocks(self):
        provider = AnthropicProvider(api_key="test-key")
        tool_block = MagicMock()
        tool_block.type = "tool_use"
        response = make_response([text_block("First."), tool_block, text_block("Second.")])

        parsed = provider._parse_response(response, latency_ms=12)

        assert parsed.text == "First.\nSecond."
        assert parsed.finish_reason == "stop"
        assert parsed.usage.total_tokens == 14
        assert parsed.latency_ms == 12

    def test_no_text_blocks(self):
        provider = AnthropicProvider(api_key="test-key")

        parsed = provider._parse_response(make_response([]), latency_ms=1)

        assert parsed.text is None

    def test_max_tokens_maps_to_length(self):
        provider = AnthropicProvider(api_key="test-key")

        parsed = provider._parse_response(
            make_response([text_block("Cut")], stop_reason="max_tokens"), latency_ms=1
        )

        assert parsed.finish_reason == "length"

    def test_refusal(self):
        provider = AnthropicProvider(api_key="test-key")

        with pytest.raises(SafetyFilterError) as exc_info:
            provider._parse_response(make_response([], stop_reason="refusal"), latency_ms=1)

        assert exc_info.value.request_id == "msg_123"


class TestAnthropicErrorHandling:
    """Tests for Anthropic error handling."""

    @pytest.mark.parametrize(
        "status_code,message,expected",
        [
            (401, "invalid x-api-key", AuthenticationError),
            (403, "forbidden", AuthenticationError),
            (404, "model: unknown", ModelNotFoundError),
            (400, "prompt is too long", InvalidRequestError),
            (400, "Output blocked as potentially harmful", SafetyFilterError),
            (500, "internal error", ProviderError),
            (529, "overloaded", ProviderError),
        ],
    )
    def test_status_mapping(self, status_code, message, expected):
        provider = AnthropicProvider(api_key="test-key")
        error = FakeAPIStatusError(status_code=status_code, message=message)

        with pytest.raises(expected) as exc_info:
            provider._handle_api_error(error)

        assert exc_info.value.provider == "anthropic"
        assert exc_info.value.__cause__ is error

    def test_handle_429_error(self):
        provider = AnthropicProvider(api_key="test-key")
        mock_response = MagicMock()
        mock_response.headers = {"retry-after": "12"}
        error = FakeAPIStatusError(status_code=429, message="rate_limit_error", response=mock_response)

        with pytest.raises(QuotaExceededError) as exc_info:
            provider._handle_api_error(error)

        assert exc_info.value.retry_after == 12.0


class TestAnthropicProviderGenerate:
    """Tests for Anthropic provider generate method."""

    @pytest.mark.asyncio
    async def test_generate_success(self):
        provider = AnthropicProvider(api_key="test-key")
        mock_client = AsyncMock()
        mock_client.messages.create = AsyncMock(return_value=make_response([text_block("Done.")]))

        with patch.object(provider, "_client", mock_client):
            response = await provider.generate(ModelRequest(prompt="Hi"))

        assert response.text == "Done."
        assert response.provider == "anthropic"
        mock_client.messages.create.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_generate_timeout(self):
        from anthropic import APITimeoutError

        provider = AnthropicProvider(api_key="test-key")
        mock_client = AsyncMock()
        mock_client.messages.create = AsyncMock(side_effect=APITimeoutError(request=MagicMock()))

        with patch.object(provider, "_client", mock_client):
            with pytest.raises(ModelTimeoutError):
                await provider.generate(ModelRequest(prompt="Hi"))

    def test_missing_api_key_raises_error(self):
        provider = AnthropicProvider(api_key=None)
        provider._api_key = None  # Ensure no env var

        with pytest.raises(AuthenticationError):
            _ = provider.client
