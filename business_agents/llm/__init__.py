"""LLM provider clients and the smart router that chooses between them."""

from .base_client import (
    BaseProviderClient,
    ChatMessage,
    ChatResponse,
    MessageRole,
    QueryComplexity,
    RoutingDecision,
)
from .errors import (
    LLMError,
    ProviderUnavailableError,
    RateLimitedError,
    AllProvidersUnavailableError,
)
from .groq_client import GroqClient, parse_retry_after
from .ollama_client import OllamaClient
from .router import SmartRouter, ProviderState, ProviderStatus

__all__ = [
    "BaseProviderClient",
    "ChatMessage",
    "ChatResponse",
    "MessageRole",
    "QueryComplexity",
    "RoutingDecision",
    "LLMError",
    "ProviderUnavailableError",
    "RateLimitedError",
    "AllProvidersUnavailableError",
    "GroqClient",
    "OllamaClient",
    "parse_retry_after",
    "SmartRouter",
    "ProviderState",
    "ProviderStatus",
]
