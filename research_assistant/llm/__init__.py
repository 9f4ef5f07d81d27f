"""Generative model layer.

Vendor-neutral access to hosted models (OpenAI, Anthropic) through a
single-prompt client with fixed sampling parameters.
"""

from .client import ModelClient
from .errors import (
    AuthenticationError,
    InvalidRequestError,
    ModelError,
    ModelNotFoundError,
    ModelTimeoutError,
    ProviderError,
    QuotaExceededError,
    SafetyFilterError,
)
from .models import GenerationConfig, ModelRequest, ModelResponse, Usage

__all__ = [
    "ModelClient",
    "GenerationConfig",
    "ModelRequest",
    "ModelResponse",
    "Usage",
    "ModelError",
    "AuthenticationError",
    "QuotaExceededError",
    "ModelTimeoutError",
    "InvalidRequestError",
    "SafetyFilterError",
    "ProviderError",
    "ModelNotFoundError",
]
