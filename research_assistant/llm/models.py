"""Model request/response types.

Vendor-neutral request and response models. Sampling parameters live in
GenerationConfig, which is fixed when the client is constructed.
"""

import os

from pydantic import BaseModel, Field


class GenerationConfig(BaseModel):
    """Sampling parameters applied to every request of a client."""

    model: str | None = None
    temperature: float = Field(default=0.3, ge=0.0, le=2.0)
    top_p: float = Field(default=0.8, gt=0.0, le=1.0)
    top_k: int | None = Field(default=40, ge=1)
    max_output_tokens: int = Field(default=8192, ge=1)

    @classmethod
    def from_env(cls) -> "GenerationConfig":
        """Build a config from GENERATION_* environment variables.

        Unset variables keep the defaults above.
        """
        values: dict[str, object] = {}
        if os.environ.get("GENERATION_MODEL"):
            values["model"] = os.environ["GENERATION_MODEL"]
        if os.environ.get("GENERATION_TEMPERATURE"):
            values["temperature"] = float(os.environ["GENERATION_TEMPERATURE"])
        if os.environ.get("GENERATION_TOP_P"):
            values["top_p"] = float(os.environ["GENERATION_TOP_P"])
        if os.environ.get("GENERATION_TOP_K"):
            values["top_k"] = int(os.environ["GENERATION_TOP_K"])
        if os.environ.get("GENERATION_MAX_OUTPUT_TOKENS"):
            values["max_output_tokens"] = int(os.environ["GENERATION_MAX_OUTPUT_TOKENS"])
        return cls(**values)


class ModelRequest(BaseModel):
    """A single-prompt generation request."""

    prompt: str
    config: GenerationConfig = Field(default_factory=GenerationConfig)


class Usage(BaseModel):
    """Token usage statistics."""

    prompt_tokens: int
    completion_tokens: int
    total_tokens: int


class ModelResponse(BaseModel):
    """Vendor-neutral generation response."""

    text: str | None
    finish_reason: str
    usage: Usage
    model: str
    provider: str
    latency_ms: int
    request_id: str | None = None
