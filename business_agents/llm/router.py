"""Smart LLM Router - picks the provider that answers each request.

Routing policy:
1. A forced provider is called directly (no fallback).
2. The local provider is tried first when local routing is enabled.
3. The cloud provider is tried next, unless its rate-limit cooldown is still
   running, in which case no request is sent.
4. A cloud rate limit earns exactly one emergency attempt on the local
   provider, whatever the enable flag says.

Cooldown bookkeeping lives here, one ProviderState per provider, so every
caller sharing the router sees the same deadlines.
"""

import os
import time
import logging
import threading
from dataclasses import dataclass, asdict
from typing import Callable, Dict, List, Optional, Union, Any

from .base_client import (
    BaseProviderClient,
    ChatMessage,
    ChatResponse,
    QueryComplexity,
    RoutingDecision,
    MAX_TOKENS_BY_COMPLEXITY,
)
from .errors import (
    LLMError,
    ProviderUnavailableError,
    RateLimitedError,
    AllProvidersUnavailableError,
)
from .groq_client import GroqClient
from .ollama_client import OllamaClient

logger = logging.getLogger(__name__)

MessageLike = Union[ChatMessage, Dict[str, str]]


@dataclass
class ProviderStatus:
    """Point-in-time view of one provider for observability"""
    name: str
    configured: bool
    available: bool
    cooldown_until: Optional[float] = None
    cooldown_remaining: float = 0.0
    last_error: Optional[str] = None


class ProviderState:
    """Mutable availability and cooldown state for a single provider.

    All reads and writes go through one lock. Recording a cooldown keeps the
    later of the current and the new deadline, so concurrent rate-limited
    calls never shorten it.
    """

    def __init__(self, name: str, clock: Callable[[], float]):
        self.name = name
        self._clock = clock
        self._lock = threading.Lock()
        self._available = True
        self._cooldown_until: Optional[float] = None
        self._last_error: Optional[str] = None

    def enter_cooldown(self, seconds: float) -> float:
        with self._lock:
            deadline = self._clock() + max(seconds, 0.0)
            if self._cooldown_until is None or deadline > self._cooldown_until:
                self._cooldown_until = deadline
            self._available = False
            return self._cooldown_until

    def cooldown_remaining(self) -> float:
        with self._lock:
            if self._cooldown_until is None:
                return 0.0
            remaining = self._cooldown_until - self._clock()
            if remaining <= 0:
                self._cooldown_until = None
                return 0.0
            return remaining

    def record_success(self) -> None:
        with self._lock:
            self._available = True
            self._last_error = None

    def record_failure(self, error: str) -> None:
        with self._lock:
            self._available = False
            self._last_error = error

    def record_probe(self, available: bool) -> None:
        with self._lock:
            self._available = available

    def snapshot(self, configured: bool = True) -> ProviderStatus:
        remaining = self.cooldown_remaining()
        with self._lock:
            return ProviderStatus(
                name=self.name,
                configured=configured,
                available=configured and self._available and remaining == 0.0,
                cooldown_until=self._cooldown_until,
                cooldown_remaining=round(remaining, 1),
                last_error=self._last_error,
            )


class SmartRouter:
    """Routes chat requests across a local and a cloud provider"""

    LOCAL = "local"
    CLOUD = "cloud"

    def __init__(
        self,
        local: Optional[BaseProviderClient] = None,
        cloud: Optional[BaseProviderClient] = None,
        local_enabled: Optional[bool] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.local = local
        self.cloud = cloud
        if local_enabled is None:
            local_enabled = os.getenv("LOCAL_LLM_ENABLED", "false").lower() == "true"
        self.local_enabled = local_enabled
        self._clock = clock
        self._states = {
            self.LOCAL: ProviderState(local.name if local else "local", clock),
            self.CLOUD: ProviderState(cloud.name if cloud else "cloud", clock),
        }

    @classmethod
    def from_env(cls) -> "SmartRouter":
        """Build a router with whatever providers the environment configures"""
        local = OllamaClient()

        cloud = None
        if os.getenv("GROQ_API_KEY"):
            try:
                cloud = GroqClient()
                logger.info("Groq client initialized")
            except ValueError as e:
                logger.warning(f"Failed to initialize Groq client: {e}")
        else:
            logger.warning("GROQ_API_KEY not set, cloud provider disabled")

        return cls(local=local, cloud=cloud)

    @property
    def local_state(self) -> ProviderState:
        return self._states[self.LOCAL]

    @property
    def cloud_state(self) -> ProviderState:
        return self._states[self.CLOUD]

    async def route(
        self,
        messages: List[MessageLike],
        complexity: Union[QueryComplexity, str] = QueryComplexity.MEDIUM,
        force_provider: Optional[str] = None,
    ) -> ChatResponse:
        """Answer a chat request with the best available provider.

        Args:
            messages: Chat messages (ChatMessage or {"role", "content"} dicts)
            complexity: Advisory tier; selects the completion token budget
            force_provider: "local"/"cloud" or a provider name; skips fallback

        Raises:
            RateLimitedError: Forced cloud call is rate limited
            ProviderUnavailableError: Forced provider failed or is not configured
            AllProvidersUnavailableError: Every tier failed
        """
        complexity = QueryComplexity(complexity)
        chat = [m if isinstance(m, ChatMessage) else ChatMessage(**m) for m in messages]
        max_tokens = MAX_TOKENS_BY_COMPLEXITY[complexity]

        if force_provider:
            return await self._route_forced(force_provider, chat, max_tokens, complexity)

        causes: Dict[str, str] = {}

        if self.local_enabled and self.local is not None:
            logger.info(f"🤖 Trying local {self.local.name} for {complexity.value} query...")
            if await self._probe(self.LOCAL):
                try:
                    response = await self._call(self.LOCAL, chat, max_tokens)
                    logger.info(f"✅ {self.local.name} succeeded")
                    return self._decide(response, "local provider available", complexity)
                except LLMError as e:
                    causes[self.local.name] = str(e)
                    logger.warning(f"❌ {self.local.name} failed, falling back to cloud: {e}")
            else:
                causes[self.local.name] = "probe failed"
                logger.warning(f"⚠️  {self.local.name} not available, falling back to cloud")

        if self.cloud is None:
            causes["cloud"] = "not configured"
            raise AllProvidersUnavailableError(causes)

        rate_limit: Optional[RateLimitedError] = None
        remaining = self.cloud_state.cooldown_remaining()
        if remaining > 0:
            rate_limit = RateLimitedError(
                f"{self.cloud.name} in cooldown for another {remaining:.0f}s",
                retry_after=remaining,
                provider=self.cloud.name,
            )
            logger.warning(f"⏳ Skipping {self.cloud.name}: cooldown active ({remaining:.0f}s left)")
        else:
            logger.info(f"💰 Using {self.cloud.name} for {complexity.value} query")
            try:
                response = await self._call(self.CLOUD, chat, max_tokens)
                return self._decide(response, "cloud provider", complexity)
            except RateLimitedError as e:
                rate_limit = e
            except LLMError as e:
                causes[self.cloud.name] = str(e)

        if rate_limit is not None:
            causes[self.cloud.name] = str(rate_limit)
            if self.local is None:
                causes["local"] = "not configured"
            else:
                logger.warning(f"🚨 {self.cloud.name} rate limited, emergency attempt on {self.local.name}")
                try:
                    response = await self._call(self.LOCAL, chat, max_tokens)
                    return self._decide(
                        response, f"emergency fallback: {self.cloud.name} rate limited", complexity
                    )
                except LLMError as e:
                    causes[f"{self.local.name} (emergency)"] = str(e)

        error = AllProvidersUnavailableError(causes, self.cloud_state.cooldown_remaining())
        logger.error(f"❌ {error}")
        raise error

    async def simple_query(self, prompt: str) -> ChatResponse:
        return await self.route([ChatMessage(role="user", content=prompt)], QueryComplexity.SIMPLE)

    async def complex_query(self, prompt: str) -> ChatResponse:
        return await self.route([ChatMessage(role="user", content=prompt)], QueryComplexity.COMPLEX)

    async def get_provider_status(self) -> Dict[str, Any]:
        """Report availability and cooldown for each provider.

        Never sends a completion: the local provider is probed, the cloud
        provider only when it is not cooling down.
        """
        status: Dict[str, Any] = {"local_enabled": self.local_enabled}

        if self.local is not None:
            await self._probe(self.LOCAL)
        status[self.LOCAL] = asdict(self.local_state.snapshot(configured=self.local is not None))

        if self.cloud is not None and self.cloud_state.cooldown_remaining() == 0:
            await self._probe(self.CLOUD)
        status[self.CLOUD] = asdict(self.cloud_state.snapshot(configured=self.cloud is not None))

        return status

    async def _route_forced(
        self,
        force_provider: str,
        messages: List[ChatMessage],
        max_tokens: int,
        complexity: QueryComplexity,
    ) -> ChatResponse:
        tier = self._resolve_tier(force_provider)
        provider = self._provider(tier)
        if provider is None:
            raise ProviderUnavailableError(f"Forced provider '{force_provider}' is not configured")

        if tier == self.CLOUD:
            remaining = self.cloud_state.cooldown_remaining()
            if remaining > 0:
                raise RateLimitedError(
                    f"{provider.name} rate limited for another {remaining:.0f}s, consider forcing local",
                    retry_after=remaining,
                    provider=provider.name,
                )
            try:
                response = await self._call(tier, messages, max_tokens)
            except RateLimitedError as e:
                raise RateLimitedError(
                    f"{provider.name} rate limited, consider forcing local ({e})",
                    retry_after=e.retry_after,
                    provider=provider.name,
                ) from e
        else:
            response = await self._call(tier, messages, max_tokens)

        return self._decide(response, f"forced provider '{force_provider}'", complexity)

    def _resolve_tier(self, force_provider: str) -> str:
        wanted = force_provider.lower()
        if wanted in (self.LOCAL, self.CLOUD):
            return wanted
        for tier in (self.LOCAL, self.CLOUD):
            provider = self._provider(tier)
            if provider is not None and provider.name == wanted:
                return tier
        raise ValueError(f"Unknown provider '{force_provider}'")

    def _provider(self, tier: str) -> Optional[BaseProviderClient]:
        return self.local if tier == self.LOCAL else self.cloud

    async def _probe(self, tier: str) -> bool:
        provider = self._provider(tier)
        try:
            available = bool(await provider.probe())
        except Exception as e:
            logger.warning(f"{provider.name} probe raised: {e}")
            available = False
        self._states[tier].record_probe(available)
        return available

    async def _call(
        self,
        tier: str,
        messages: List[ChatMessage],
        max_tokens: int,
    ) -> ChatResponse:
        provider = self._provider(tier)
        state = self._states[tier]
        try:
            response = await provider.complete(messages, max_tokens=max_tokens)
        except RateLimitedError as e:
            state.enter_cooldown(e.retry_after)
            state.record_failure(str(e))
            raise
        except LLMError as e:
            state.record_failure(str(e))
            raise
        except Exception as e:
            state.record_failure(str(e))
            raise ProviderUnavailableError(
                f"{provider.name} call failed: {e}", provider=provider.name
            ) from e

        state.record_success()
        return response

    @staticmethod
    def _decide(response: ChatResponse, reason: str, complexity: QueryComplexity) -> ChatResponse:
        response.decision = RoutingDecision(
            provider=response.provider,
            reason=reason,
            complexity=complexity,
        )
        return response
