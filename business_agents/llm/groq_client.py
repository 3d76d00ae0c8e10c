"""Groq (cloud, rate-limited) LLM Client Implementation"""

import os
import re
import asyncio
import logging
import aiohttp
from typing import Optional, List, Mapping

from .base_client import BaseProviderClient, ChatMessage, ChatResponse
from .errors import ProviderUnavailableError, RateLimitedError

logger = logging.getLogger(__name__)

# Cooldown applied when a 429 carries no usable retry hint
DEFAULT_COOLDOWN_SECONDS = 180.0

_RETRY_HINT = re.compile(r"try again in\s+([0-9hms.]+)", re.IGNORECASE)
_DURATION_PART = re.compile(r"([0-9.]+)(ms|h|m|s)")
_UNIT_SECONDS = {"h": 3600.0, "m": 60.0, "s": 1.0, "ms": 0.001}


def parse_retry_after(
    headers: Optional[Mapping[str, str]] = None,
    error_message: Optional[str] = None,
    default: float = DEFAULT_COOLDOWN_SECONDS,
) -> float:
    """Work out how long to back off after a rate-limit response.

    Checks the ``retry-after`` header first, then a "try again in 1m2.5s"
    hint inside the error message, and falls back to ``default``.
    """
    if headers:
        for key, value in headers.items():
            if key.lower() != "retry-after":
                continue
            try:
                seconds = float(value)
            except (TypeError, ValueError):
                break
            if seconds > 0:
                return seconds
            break

    if error_message:
        match = _RETRY_HINT.search(error_message)
        if match:
            seconds = 0.0
            for amount, unit in _DURATION_PART.findall(match.group(1)):
                try:
                    seconds += float(amount) * _UNIT_SECONDS[unit]
                except ValueError:
                    continue
            if seconds > 0:
                return seconds

    return default


class GroqClient(BaseProviderClient):
    """Groq chat client (OpenAI-compatible API)"""

    name = "groq"

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        temperature: float = 0.7,
        timeout: Optional[float] = None,
        base_url: str = "https://api.groq.com/openai/v1",
        default_cooldown: float = DEFAULT_COOLDOWN_SECONDS,
    ):
        api_key = api_key or os.getenv("GROQ_API_KEY")
        if not api_key:
            raise ValueError("GROQ_API_KEY not provided")

        super().__init__(
            model=model or os.getenv("GROQ_MODEL", "llama-3.1-8b-instant"),
            temperature=temperature,
            timeout=timeout,
        )
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.default_cooldown = default_cooldown
        self.headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json"
        }

    async def complete(
        self,
        messages: List[ChatMessage],
        max_tokens: Optional[int] = None,
    ) -> ChatResponse:
        """Generate a chat completion using the Groq API"""

        payload = {
            "model": self.model,
            "messages": self.serialize_messages(messages),
            "temperature": self.temperature,
            "max_tokens": max_tokens or 1000,
        }

        logger.debug(f"POST {self.base_url}/chat/completions ({len(messages)} messages, model={self.model})")

        try:
            async with aiohttp.ClientSession() as session:
                async with session.post(
                    f"{self.base_url}/chat/completions",
                    json=payload,
                    headers=self.headers,
                    timeout=aiohttp.ClientTimeout(total=self.timeout)
                ) as response:
                    if response.status == 429:
                        message = await self._error_message(response)
                        retry_after = parse_retry_after(
                            response.headers, message, default=self.default_cooldown
                        )
                        logger.warning(f"⏳ Groq rate limited, retry after {retry_after:.1f}s")
                        raise RateLimitedError(
                            f"Groq rate limited: {message}",
                            retry_after=retry_after,
                            provider=self.name,
                        )

                    if response.status != 200:
                        message = await self._error_message(response)
                        logger.error(f"❌ GROQ ERROR (HTTP {response.status}): {message}")
                        raise ProviderUnavailableError(
                            f"Groq API error (HTTP {response.status}): {message}",
                            provider=self.name,
                        )

                    data = await response.json()
        except (RateLimitedError, ProviderUnavailableError):
            raise
        except asyncio.TimeoutError:
            raise ProviderUnavailableError(
                f"Groq call timed out after {self.timeout:.0f}s", provider=self.name
            )
        except (aiohttp.ClientError, ValueError) as e:
            raise ProviderUnavailableError(f"Groq call failed: {e}", provider=self.name)

        try:
            content = data["choices"][0]["message"].get("content") or ""
        except (KeyError, IndexError, TypeError, AttributeError):
            raise ProviderUnavailableError("Groq returned an unexpected payload", provider=self.name)

        return ChatResponse(content=content, provider=self.name, model=self.model, raw=data)

    async def probe(self) -> bool:
        """List models instead of spending a completion"""
        try:
            async with aiohttp.ClientSession() as session:
                async with session.get(
                    f"{self.base_url}/models",
                    headers=self.headers,
                    timeout=aiohttp.ClientTimeout(total=10)
                ) as response:
                    return response.status == 200
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"Failed to validate Groq connection: {e}")
            return False

    @staticmethod
    async def _error_message(response) -> str:
        try:
            data = await response.json()
        except (aiohttp.ContentTypeError, ValueError):
            return (await response.text())[:200]
        if isinstance(data, dict):
            error = data.get("error")
            if isinstance(error, dict):
                return str(error.get("message", error))
            if error:
                return str(error)
        return str(data)[:200]
