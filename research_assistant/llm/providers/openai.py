"""OpenAI provider implementation.

Sends single-prompt requests to the Chat Completions API. OpenAI has no
top-k sampling, so that parameter is dropped.
"""

import os
import time
from typing import Any

from openai import AsyncOpenAI, APIConnectionError, APIStatusError, APITimeoutError

from ..errors import (
    AuthenticationError,
    InvalidRequestError,
    ModelError,
    ModelNotFoundError,
    ModelTimeoutError,
    ProviderError,
    QuotaExceededError,
    SafetyFilterError,
)
from ..models import ModelRequest, ModelResponse, Usage
from .base import LLMProvider, parse_retry_after


class OpenAIProvider(LLMProvider):
    """OpenAI Chat Completions API provider."""

    SUPPORTED_PARAMETERS = frozenset({"temperature", "top_p", "max_output_tokens"})

    def __init__(
        self,
        api_key: str | None = None,
        timeout: float = 120.0,
        default_model: str = "gpt-4o",
    ):
        """Initialize OpenAI provider.

        Args:
            api_key: OpenAI API key. Defaults to OPENAI_API_KEY env var.
            timeout: Transport timeout in seconds.
            default_model: Model used when the config does not name one.
        """
        self._api_key = api_key or os.environ.get("OPENAI_API_KEY")
        self._timeout = timeout
        self._default_model = default_model
        self._client: AsyncOpenAI | None = None

    @property
    def name(self) -> str:
        """Provider identifier."""
        return "openai"

    @property
    def client(self) -> AsyncOpenAI:
        """Lazy-initialized OpenAI client."""
        if self._client is None:
            if not self._api_key:
                raise AuthenticationError(
                    "OpenAI API key not configured. Set OPENAI_API_KEY environment variable.",
                    provider=self.name,
                )
            self._client = AsyncOpenAI(api_key=self._api_key, timeout=self._timeout)
        return self._client

    async def generate(self, request: ModelRequest) -> ModelResponse:
        """Send a prompt to OpenAI and return the completion."""
        start_time = time.perf_counter()
        openai_request = self._build_request(request)

        try:
            response = await self.client.chat.completions.create(**openai_request)
        except APITimeoutError as e:
            raise ModelTimeoutError(
                f"OpenAI request timed out after {self._timeout}s",
                provider=self.name,
            ) from e
        except APIConnectionError as e:
            raise ProviderError(
                f"Failed to connect to OpenAI: {e}",
                provider=self.name,
            ) from e
        except APIStatusError as e:
            self._handle_api_error(e)

        latency_ms = int((time.perf_counter() - start_time) * 1000)
        return self._parse_response(response, latency_ms)

    def _build_request(self, request: ModelRequest) -> dict[str, Any]:
        """Convert a ModelRequest to OpenAI API format."""
        config = request.config
        return {
            "model": config.model or self._default_model,
            "messages": [{"role": "user", "content": request.prompt}],
            "temperature": config.temperature,
            "top_p": config.top_p,
            "max_tokens": config.max_output_tokens,
        }

    def _parse_response(self, response: Any, latency_ms: int) -> ModelResponse:
        """Convert an OpenAI response to ModelResponse."""
        choice = response.choices[0]

        if choice.finish_reason == "content_filter":
            raise SafetyFilterError(
                "Response blocked by OpenAI content filter",
                provider=self.name,
                request_id=response.id,
            )

        return ModelResponse(
            text=choice.message.content,
            finish_reason=choice.finish_reason or "stop",
            usage=Usage(
                prompt_tokens=response.usage.prompt_tokens,
                completion_tokens=response.usage.completion_tokens,
                total_tokens=response.usage.total_tokens,
            ),
            model=response.model,
            provider=self.name,
            latency_ms=latency_ms,
            request_id=response.id,
        )

    def _handle_api_error(self, error: APIStatusError) -> None:
        """Convert OpenAI API errors to ModelError types."""
        status_code = error.status_code
        message = str(error.message) if hasattr(error, "message") else str(error)
        request_id = getattr(error, "request_id", None)

        if status_code in (401, 403):
            raise AuthenticationError(
                f"OpenAI authentication failed: {message}",
                provider=self.name,
                request_id=request_id,
            ) from error

        if status_code == 404:
            raise ModelNotFoundError(
                f"Model not found: {message}",
                provider=self.name,
                request_id=request_id,
            ) from error

        if status_code == 429:
            raise QuotaExceededError(
                f"OpenAI rate limit exceeded: {message}",
                retry_after=parse_retry_after(error),
                provider=self.name,
                request_id=request_id,
            ) from error

        if status_code == 400:
            if "content_filter" in message.lower() or "safety" in message.lower():
                raise SafetyFilterError(
                    f"Content blocked by OpenAI safety filters: {message}",
                    provider=self.name,
                    request_id=request_id,
                ) from error

            raise InvalidRequestError(
                f"Invalid request to OpenAI: {message}",
                provider=self.name,
                request_id=request_id,
            ) from error

        if status_code >= 500:
            raise ProviderError(
                f"OpenAI server error ({status_code}): {message}",
                provider=self.name,
                request_id=request_id,
            ) from error

        raise ModelError(
            f"OpenAI error ({status_code}): {message}",
            provider=self.name,
            request_id=request_id,
        ) from error

