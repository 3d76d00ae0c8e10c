"""Provider error taxonomy used by the LLM routing layer"""

from typing import Optional


class LLMError(Exception):
    """Base class for all provider and routing errors."""

    def __init__(self, message: str, provider: Optional[str] = None):
        super().__init__(message)
        self.provider = provider


class ProviderUnavailableError(LLMError):
    """Raised when a provider probe or call fails for a non rate-limit reason."""
    pass


class RateLimitedError(LLMError):
    """Raised when a provider reports (or is known to be in) a rate limit.

    Attributes:
        retry_after: Seconds until the provider is expected to accept calls again
    """

    def __init__(
        self,
        message: str,
        retry_after: float,
        provider: Optional[str] = None,
    ):
        super().__init__(message, provider=provider)
        self.retry_after = retry_after


class AllProvidersUnavailableError(LLMError):
    """Terminal routing error: every provider tier was tried and failed.

    Attributes:
        causes: Provider name -> failure description
        cooldown_remaining: Seconds left on the cloud cooldown (0 if none)
    """

    def __init__(self, causes: dict, cooldown_remaining: float = 0.0):
        details = "; ".join(f"{name}: {cause}" for name, cause in causes.items())
        message = f"All LLM providers unavailable ({details})"
        if cooldown_remaining > 0:
            message += f". Cloud cooldown remaining: {cooldown_remaining:.0f}s"
        super().__init__(message)
        self.causes = causes
        self.cooldown_remaining = cooldown_remaining
