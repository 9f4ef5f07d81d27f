"""Unit tests for OpenAI provider.

Tests cover:
- Request building and response parsing
- Error handling and mapping
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from research_assistant.llm.errors import (
    AuthenticationError,
    InvalidRequestError,
    ModelError,
    ModelNotFoundError,
    ModelTimeoutError,
    ProviderError,
    QuotaExceededError,
    SafetyFilterError,
)
from research_assistant.llm.models import GenerationConfig, ModelRequest
from research_assistant.llm.providers.openai import OpenAIProvider


class FakeAPIStatusError(Exception):
    """Fake API error for testing exception chaining."""

    def __init__(self, status_code: int, message: str, response=None, request_id=None):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.response = response
        self.request_id = request_id


def make_response(content="Hello!", finish_reason="stop"):
    response = MagicMock()
    response.id = "chatcmpl-123"
    response.model = "gpt-4o"
    response.choices = [MagicMock()]
    response.choices[0].message.content = content
    response.choices[0].finish_reason = finish_reason
    response.usage.prompt_tokens = 5
    response.usage.completion_tokens = 2
    response.usage.total_tokens = 7
    return response


class TestOpenAIProviderInit:
    """Tests for OpenAI provider initialization."""

    def test_provider_name(self):
        provider = OpenAIProvider(api_key="test-key")
        assert provider.name == "openai"

    def test_default_model(self):
        provider = OpenAIProvider(api_key="test-key")
        assert provider._default_model == "gpt-4o"

    def test_supported_parameters(self):
        """OpenAI has no top-k sampling."""
        provider = OpenAIProvider(api_key="test-key")
        assert provider.supports("temperature") is True
        assert provider.supports("top_p") is True
        assert provider.supports("top_k") is False


class TestOpenAIRequestBuilding:
    """Tests for OpenAI request building."""

    def test_build_request(self):
        provider = OpenAIProvider(api_key="test-key")
        request = ModelRequest(
            prompt="Write the Introduction section.",
            config=GenerationConfig(temperature=0.5, top_p=0.9, top_k=40, max_output_tokens=1000),
        )

        openai_request = provider._build_request(request)

        assert openai_request["model"] == "gpt-4o"
        assert openai_request["messages"] == [
            {"role": "user", "content": "Write the Introduction section."}
        ]
        assert openai_request["temperature"] == 0.5
        assert openai_request["top_p"] == 0.9
        assert openai_request["max_tokens"] == 1000
        assert "top_k" not in openai_request

    def test_config_model_overrides_default(self):
        provider = OpenAIProvider(api_key="test-key")
        request = ModelRequest(prompt="Hi", config=GenerationConfig(model="gpt-4o-mini"))

        assert provider._build_request(request)["model"] == "gpt-4o-mini"


class TestOpenAIErrorHandling:
    """Tests for OpenAI error handling."""

    def test_handle_401_error(self):
        provider = OpenAIProvider(api_key="test-key")
        error = FakeAPIStatusError(status_code=401, message="Invalid API key", request_id="req-1")

        with pytest.raises(AuthenticationError) as exc_info:
            provider._handle_api_error(error)

        assert exc_info.value.provider == "openai"
        assert exc_info.value.request_id == "req-1"
        assert exc_info.value.__cause__ is error

    def test_handle_404_error(self):
        provider = OpenAIProvider(api_key="test-key")
        error = FakeAPIStatusError(status_code=404, message="No such model")

        with pytest.raises(ModelNotFoundError):
            provider._handle_api_error(error)

    def test_handle_429_error(self):
        provider = OpenAIProvider(api_key="test-key")
        mock_response = MagicMock()
        mock_response.headers = {"retry-after": "30"}
        error = FakeAPIStatusError(status_code=429, message="Rate limit exceeded", response=mock_response)

        with pytest.raises(QuotaExceededError) as exc_info:
            provider._handle_api_error(error)

        assert exc_info.value.retry_after == 30.0
        assert exc_info.value.__cause__ is error

    def test_handle_429_error_without_retry_after(self):
        provider = OpenAIProvider(api_key="test-key")
        mock_response = MagicMock()
        mock_response.headers = {}
        error = FakeAPIStatusError(status_code=429, message="Rate limit exceeded", response=mock_response)

        with pytest.raises(QuotaExceededError) as exc_info:
            provider._handle_api_error(error)

        assert exc_info.value.retry_after is None

    def test_handle_400_error(self):
        provider = OpenAIProvider(api_key="test-key")
        error = FakeAPIStatusError(status_code=400, message="Prompt is too long")

        with pytest.raises(InvalidRequestError):
            provider._handle_api_error(error)

    def test_handle_400_content_filter_error(self):
        provider = OpenAIProvider(api_key="test-key")
        error = FakeAPIStatusError(status_code=400, message="Blocked by safety system")

        with pytest.raises(SafetyFilterError):
            provider._handle_api_error(error)

    @pytest.mark.parametrize("status_code", [500, 502, 503])
    def test_handle_5xx_error(self, status_code):
        provider = OpenAIProvider(api_key="test-key")
        error = FakeAPIStatusError(status_code=status_code, message="Server error")

        with pytest.raises(ProviderError) as exc_info:
            provider._handle_api_error(error)

        assert str(status_code) in str(exc_info.value)

    def test_handle_unmapped_status(self):
        provider = OpenAIProvider(api_key="test-key")
        error = FakeAPIStatusError(status_code=409, message="Conflict")

        with pytest.raises(ModelError) as exc_info:
            provider._handle_api_error(error)

        assert type(exc_info.value) is ModelError


class TestOpenAIProviderGenerate:
    """Tests for OpenAI provider generate method."""

    @pytest.mark.asyncio
    async def test_generate_success(self):
        provider = OpenAIProvider(api_key="test-key")
        mock_client = AsyncMock()
        mock_client.chat.completions.create = AsyncMock(return_value=make_response())

        with patch.object(provider, "_client", mock_client):
            response = await provider.generate(ModelRequest(prompt="Hi"))

        assert response.text == "Hello!"
        assert response.provider == "openai"
        assert response.finish_reason == "stop"
        assert response.usage.total_tokens == 7
        assert response.request_id == "chatcmpl-123"

    @pytest.mark.asyncio
    async def test_generate_content_filter(self):
        provider = OpenAIProvider(api_key="test-key")
        mock_client = AsyncMock()
        mock_client.chat.completions.create = AsyncMock(
            return_value=make_response(content=None, finish_reason="content_filter")
        )

        with patch.object(provider, "_client", mock_client):
            with pytest.raises(SafetyFilterError):
                await provider.generate(ModelRequest(prompt="Hi"))

    @pytest.mark.asyncio
    async def test_generate_timeout(self):
        from openai import APITimeoutError

        provider = OpenAIProvider(api_key="test-key")
        mock_client = AsyncMock()
        mock_client.chat.completions.create = AsyncMock(
            side_effect=APITimeoutError(request=MagicMock())
        )

        with patch.object(provider, "_client", mock_client):
            with pytest.raises(ModelTimeoutError) as exc_info:
                await provider.generate(ModelRequest(prompt="Hi"))

        assert "timed out" in str(exc_info.value).lower()

    @pytest.mark.asyncio
    async def test_generate_connection_error(self):
        from openai import APIConnectionError

        provider = OpenAIProvider(api_key="test-key")
        mock_client = AsyncMock()
        mock_client.chat.completions.create = AsyncMock(
            side_effect=APIConnectionError(request=MagicMock())
        )

        with patch.object(provider, "_client", mock_client):
            with pytest.raises(ProviderError) as exc_info:
                await provider.generate(ModelRequest(prompt="Hi"))

        assert "connect" in str(exc_info.value).lower()

    def test_missing_api_key_raises_error(self):
        provider = OpenAIProvider(api_key=None)
        provider._api_key = None  # Ensure no env var

        with pytest.raises(AuthenticationError) as exc_info:
            _ = provider.client

        assert "API key not configured" in str(exc_info.value)
