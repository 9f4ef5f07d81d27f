"""Abstract base class for model providers."""

from abc import ABC, abstractmethod

from ..models import ModelRequest, ModelResponse


class LLMProvider(ABC):
    """Base interface for hosted model providers.

    Providers translate a ModelRequest into a vendor call and map vendor
    failures onto the ModelError hierarchy.
    """

    # Sampling parameters the vendor API accepts
    SUPPORTED_PARAMETERS: frozenset[str] = frozenset()

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider identifier: 'openai', 'anthropic', etc."""
        ...

    @abstractmethod
    async def generate(self, request: ModelRequest) -> ModelResponse:
        """Send a single prompt and return the generated text.

        Raises:
            AuthenticationError: Invalid or missing API key.
            QuotaExceededError: Rate limit or quota exhausted.
            ModelTimeoutError: Transport timeout.
            InvalidRequestError: Malformed request.
            SafetyFilterError: Blocked by safety filters.
            ProviderError: Provider-side failure.
        """
        ...

    def supports(self, parameter: str) -> bool:
        """Check whether a sampling parameter is forwarded to the vendor."""
        return parameter in self.SUPPORTED_PARAMETERS


def parse_retry_after(error: object) -> float | None:
    """Read the retry-after header of a 429 error response, if any."""
    response = getattr(error, "response", None)
    if not response:
        return None
    value = response.headers.get("retry-after")
    if not value:
        return None
    try:
        return float(value)
    except ValueError:
        return None
