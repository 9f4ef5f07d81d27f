"""Anthropic provider implementation.

Sends single-prompt requests to the Messages API.
"""

import os
import time
from typing import Any

from anthropic import (
    AsyncAnthropic,
    APIConnectionError,
    APIStatusError,
    APITimeoutError,
)

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


class AnthropicProvider(LLMProvider):
    """Anthropic Messages API provider.

    Note: current Claude models reject requests that set both temperature
    and top_p, so only temperature and top_k are forwarded.
    """

    SUPPORTED_PARAMETERS = frozenset({"temperature", "top_k", "max_output_tokens"})

    def __init__(
        self,
        api_key: str | None = None,
        timeout: float = 120.0,
        default_model: str = "claude-sonnet-4-5-20250929",
    ):
        """Initialize Anthropic provider.

        Args:
            api_key: Anthropic API key. Defaults to ANTHROPIC_API_KEY env var.
            timeout: Transport timeout in seconds.
            default_model: Model used when the config does not name one.
        """
        self._api_key = api_key or os.environ.get("ANTHROPIC_API_KEY")
        self._timeout = timeout
        self._default_model = default_model
        self._client: AsyncAnthropic | None = None

    @property
    def name(self) -> str:
        """Provider identifier."""
        return "anthropic"

    @property
    def client(self) -> AsyncAnthropic:
        """Lazy-initialized Anthropic client."""
        if self._client is None:
            if not self._api_key:
                raise AuthenticationError(
                    "Anthropic API key not configured. Set ANTHROPIC_API_KEY environment variable.",
                    provider=self.name,
                )
            self._client = AsyncAnthropic(api_key=self._api_key, timeout=self._timeout)
        return self._client

    async def generate(self, request: ModelRequest) -> ModelResponse:
        """Send a prompt to Anthropic and return the completion."""
        start_time = time.perf_counter()
        anthropic_request = self._build_request(request)

        try:
            response = await self.client.messages.create(**anthropic_request)
        except APITimeoutError as e:
            raise ModelTimeoutError(
                f"Anthropic request timed out after {self._timeout}s",
                provider=self.name,
            ) from e
        except APIConnectionError as e:
            raise ProviderError(
                f"Failed to connect to Anthropic: {e}",
                provider=self.name,
            ) from e
        except APIStatusError as e:
            self._handle_api_error(e)

        latency_ms = int((time.perf_counter() - start_time) * 1000)
        return self._parse_response(response, latency_ms)

    def _build_request(self, request: ModelRequest) -> dict[str, Any]:
        """Convert a ModelRequest to Anthropic API format."""
        config = request.config

        anthropic_request: dict[str, Any] = {
            "model": config.model or self._default_model,
            "messages": [{"role": "user", "content": request.prompt}],
            "max_tokens": config.max_output_tokens,
            # Anthropic uses a 0-1 temperature range
            "temperature": min(config.temperature, 1.0),
        }

        if config.top_k is not None:
            anthropic_request["top_k"] = config.top_k

        return anthropic_request

    def _parse_response(self, response: Any, latency_ms: int) -> ModelResponse:
        """Convert an Anthropic response to ModelResponse."""
        if response.stop_reason == "refusal":
            raise SafetyFilterError(
                "Response declined by Anthropic safety system",
                provider=self.name,
                request_id=response.id,
            )

        text_parts = [block.text for block in response.content if block.type == "text"]
        text = "\n".join(text_parts) if text_parts else None

        finish_reason_map = {
            "end_turn": "stop",
            "max_tokens": "length",
            "stop_sequence": "stop",
        }
        finish_reason = finish_reason_map.get(response.stop_reason, response.stop_reason)

        return ModelResponse(
            text=text,
            finish_reason=finish_reason or "stop",
            usage=Usage(
                prompt_tokens=response.usage.input_tokens,
                completion_tokens=response.usage.output_tokens,
                total_tokens=response.usage.input_tokens + response.usage.output_tokens,
            ),
            model=response.model,
            provider=self.name,
            latency_ms=latency_ms,
            request_id=response.id,
        )

    def _handle_api_error(self, error: APIStatusError) -> None:
        """Convert Anthropic API errors to ModelError types."""
        status_code = error.status_code
        message = str(error.message) if hasattr(error, "message") else str(error)
        request_id = getattr(error, "request_id", None)

        if status_code in (401, 403):
            raise AuthenticationError(
                f"Anthropic authentication failed: {message}",
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
                f"Anthropic rate limit exceeded: {message}",
                retry_after=parse_retry_after(error),
                provider=self.name,
                request_id=request_id,
            ) from error

        if status_code == 400:
            if "safety" in message.lower() or "harmful" in message.lower():
                raise SafetyFilterError(
                    f"Content blocked by Anthropic safety filters: {message}",
                    provider=self.name,
                    request_id=request_id,
                ) from error

            raise InvalidRequestError(
                f"Invalid request to Anthropic: {message}",
                provider=self.name,
                request_id=request_id,
            ) from error

        if status_code >= 500:
            raise ProviderError(
                f"Anthropic server error ({status_code}): {message}",
                provider=self.name,
                request_id=request_id,
            ) from error

        raise ModelError(
            f"Anthropic error ({status_code}): {message}",
            provider=self.name,
            request_id=request_id,
        ) from error
