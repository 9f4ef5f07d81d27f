"""Model error hierarchy.

Every failure of a model call surfaces as a ModelError (or a subclass),
carrying the provider context. The generation orchestrator treats them all
alike; the subclasses exist for logging and API error mapping.
"""


class ModelError(Exception):
    """Base exception for generative model calls."""

    def __init__(
        self,
        message: str,
        provider: str | None = None,
        request_id: str | None = None,
        correlation_id: str | None = None,
    ):
        super().__init__(message)
        self.provider = provider
        self.request_id = request_id
        self.correlation_id = correlation_id

    def __str__(self) -> str:
        parts = [super().__str__()]
        if self.provider:
            parts.append(f"provider={self.provider}")
        if self.request_id:
            parts.append(f"request_id={self.request_id}")
        return " ".join(parts)


class AuthenticationError(ModelError):
    """401/403 - Invalid or missing API key."""

    pass


class QuotaExceededError(ModelError):
    """429 - Rate limit or quota exhausted.

    Carries the provider's retry-after hint when one was sent. The client
    does not retry on its own.
    """

    def __init__(
        self,
        message: str,
        retry_after: float | None = None,
        provider: str | None = None,
        request_id: str | None = None,
        correlation_id: str | None = None,
    ):
        super().__init__(message, provider, request_id, correlation_id)
        self.retry_after = retry_after


class ModelTimeoutError(ModelError):
    """The provider's HTTP request exceeded its transport timeout."""

    pass


class InvalidRequestError(ModelError):
    """400 - Malformed request (prompt too long, bad parameters)."""

    pass


class SafetyFilterError(ModelError):
    """Prompt or response rejected by the provider's safety system."""

    pass


class ProviderError(ModelError):
    """5xx or connection failure on the provider side."""

    pass


class ModelNotFoundError(ModelError):
    """Model identifier not recognized by the provider."""

    pass
