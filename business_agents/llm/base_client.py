"""Base LLM Provider Client Interface"""

import os
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, List, Dict, Any


class MessageRole(str, Enum):
    """Chat message roles accepted by every provider."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class QueryComplexity(str, Enum):
    """Advisory tier attached to each routed call."""

    SIMPLE = "simple"
    MEDIUM = "medium"
    COMPLEX = "complex"


# Completion token budget per complexity tier
MAX_TOKENS_BY_COMPLEXITY = {
    QueryComplexity.SIMPLE: 512,
    QueryComplexity.MEDIUM: 1024,
    QueryComplexity.COMPLEX: 2048,
}


@dataclass(frozen=True)
class ChatMessage:
    """Single chat message, forwarded unchanged to providers"""
    role: MessageRole
    content: str

    def __post_init__(self):
        # Accept plain strings for the role and normalize them
        object.__setattr__(self, "role", MessageRole(self.role))

    def to_dict(self) -> Dict[str, str]:
        return {"role": self.role.value, "content": self.content}


@dataclass
class RoutingDecision:
    """Which provider answered a routed call and why"""
    provider: str
    reason: str
    complexity: QueryComplexity = QueryComplexity.MEDIUM


@dataclass
class ChatResponse:
    """Provider response model"""
    content: str
    provider: str
    model: str
    decision: Optional[RoutingDecision] = None
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)


def default_timeout() -> float:
    """Per-call timeout in seconds, shared by all providers."""
    return float(os.getenv("LLM_TIMEOUT_SECONDS", "60"))


class BaseProviderClient(ABC):
    """Abstract base class for inference providers"""

    name: str = "base"

    def __init__(self, model: str, temperature: float = 0.7, timeout: Optional[float] = None):
        self.model = model
        self.temperature = temperature
        self.timeout = timeout if timeout is not None else default_timeout()

    @abstractmethod
    async def complete(
        self,
        messages: List[ChatMessage],
        max_tokens: Optional[int] = None,
    ) -> ChatResponse:
        """Run a chat completion"""
        pass

    @abstractmethod
    async def probe(self) -> bool:
        """Cheap liveness check that does not spend a completion"""
        pass

    @staticmethod
    def serialize_messages(messages: List[ChatMessage]) -> List[Dict[str, str]]:
        return [message.to_dict() for message in messages]
