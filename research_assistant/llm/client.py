"""Model client used by section generation.

Wraps one provider behind `generate_content(prompt) -> str`. Sampling
parameters are fixed at construction. There is no retry and no provider
fallback: one call per invocation, and the caller owns timeout and failure
containment.
"""

import logging
import os
import uuid

from .errors import ModelError
from .models import GenerationConfig, ModelRequest, ModelResponse
from .providers.anthropic import AnthropicProvider
from .providers.base import LLMProvider
from .providers.openai import OpenAIProvider

logger = logging.getLogger(__name__)


class ModelClient:
    """Single-provider client for hosted generative models.

    Configuration (env vars):
    - LLM_DEFAULT_PROVIDER: Provider name (default: "openai")
    - LLM_TIMEOUT_SECONDS: Transport timeout (default: 120)
    - GENERATION_*: Sampling parameters, see GenerationConfig.from_env
    """

    DEFAULT_PROVIDER = "openai"
    DEFAULT_TIMEOUT = 120.0

    def __init__(
        self,
        provider: str | None = None,
        config: GenerationConfig | None = None,
        timeout: float | None = None,
        openai_api_key: str | None = None,
        anthropic_api_key: str | None = None,
    ):
        """Initialize model client.

        Args:
            provider: Provider name. Defaults to LLM_DEFAULT_PROVIDER env var.
            config: Sampling parameters. Defaults to GenerationConfig.from_env().
            timeout: Transport timeout in seconds. Defaults to LLM_TIMEOUT_SECONDS env var.
            openai_api_key: OpenAI API key. Defaults to OPENAI_API_KEY env var.
            anthropic_api_key: Anthropic API key. Defaults to ANTHROPIC_API_KEY env var.

        Raises:
            ValueError: If the provider name is not recognized.
        """
        self._provider_name = provider or os.environ.get(
            "LLM_DEFAULT_PROVIDER", self.DEFAULT_PROVIDER
        )
        self._timeout = (
            timeout
            if timeout is not None
            else float(os.environ.get("LLM_TIMEOUT_SECONDS", self.DEFAULT_TIMEOUT))
        )
        self._config = config or GenerationConfig.from_env()

        self._providers: dict[str, LLMProvider] = {
            "openai": OpenAIProvider(api_key=openai_api_key, timeout=self._timeout),
            "anthropic": AnthropicProvider(api_key=anthropic_api_key, timeout=self._timeout),
        }
        if self._provider_name not in self._providers:
            raise ValueError(
                f"Unknown provider: {self._provider_name}. "
                f"Available: {list(self._providers.keys())}"
            )

    @property
    def config(self) -> GenerationConfig:
        """Sampling parameters applied to every call."""
        return self._config

    @property
    def provider(self) -> LLMProvider:
        """The provider every call goes to."""
        return self._providers[self._provider_name]

    async def generate(
        self,
        prompt: str,
        correlation_id: str | None = None,
    ) -> ModelResponse:
        """Send one prompt to the configured provider.

        Args:
            prompt: Complete prompt text.
            correlation_id: Optional ID for log correlation.

        Returns:
            Vendor-neutral response.

        Raises:
            ModelError: On any provider failure.
        """
        correlation_id = correlation_id or str(uuid.uuid4())
        request = ModelRequest(prompt=prompt, config=self._config)

        try:
            response = await self.provider.generate(request)
        except ModelError as e:
            e.correlation_id = correlation_id
            logger.warning(
                "Model request failed: %s",
                str(e),
                extra={
                    "correlation_id": correlation_id,
                    "provider": self._provider_name,
                    "error_type": type(e).__name__,
                },
            )
            raise

        logger.info(
            "Model request succeeded",
            extra={
                "correlation_id": correlation_id,
                "provider": response.provider,
                "model": response.model,
                "latency_ms": response.latency_ms,
                "prompt_tokens": response.usage.prompt_tokens,
                "completion_tokens": response.usage.completion_tokens,
                "finish_reason": response.finish_reason,
            },
        )
        return response

    async def generate_content(self, prompt: str) -> str:
        """Generate text for a prompt.

        Returns an empty string when the model produced no text; the
        response parser decides what that means.
        """
        response = await self.generate(prompt)
        return response.text or ""
