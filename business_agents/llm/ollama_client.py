"""Ollama (local / self-hosted) LLM Client Implementation"""

import os
import asyncio
import logging
import aiohttp
from typing import Optional, List

from .base_client import BaseProviderClient, ChatMessage, ChatResponse
from .errors import ProviderUnavailableError

logger = logging.getLogger(__name__)


class OllamaClient(BaseProviderClient):
    """Ollama chat client.

    Unmetered, so the router tries it first when local routing is enabled.
    Every failure surfaces as ProviderUnavailableError.
    """

    name = "ollama"

    def __init__(
        self,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        temperature: float = 0.7,
        timeout: Optional[float] = None,
        probe_timeout: float = 5.0,
    ):
        super().__init__(
            model=model or os.getenv("OLLAMA_MODEL", "llama3.1:8b"),
            temperature=temperature,
            timeout=timeout,
        )
        self.base_url = (base_url or os.getenv("OLLAMA_BASE_URL", "http://localhost:11434")).rstrip("/")
        self.probe_timeout = probe_timeout

    async def complete(
        self,
        messages: List[ChatMessage],
        max_tokens: Optional[int] = None,
    ) -> ChatResponse:
        """Generate a chat completion using the Ollama /api/chat endpoint"""

        options = {"temperature": self.temperature}
        if max_tokens:
            options["num_predict"] = max_tokens

        payload = {
            "model": self.model,
            "messages": self.serialize_messages(messages),
            "stream": False,
            "options": options,
        }

        logger.debug(f"POST {self.base_url}/api/chat ({len(messages)} messages, model={self.model})")

        try:
            async with aiohttp.ClientSession() as session:
                async with session.post(
                    f"{self.base_url}/api/chat",
                    json=payload,
                    timeout=aiohttp.ClientTimeout(total=self.timeout)
                ) as response:
                    if response.status != 200:
                        error_text = await response.text()
                        raise ProviderUnavailableError(
                            f"Ollama API error (HTTP {response.status}): {error_text[:200]}",
                            provider=self.name,
                        )

                    data = await response.json()
        except ProviderUnavailableError:
            raise
        except asyncio.TimeoutError:
            raise ProviderUnavailableError(
                f"Ollama call timed out after {self.timeout:.0f}s", provider=self.name
            )
        except (aiohttp.ClientError, ValueError) as e:
            raise ProviderUnavailableError(f"Ollama call failed: {e}", provider=self.name)

        content = (data.get("message") or {}).get("content") or ""
        return ChatResponse(content=content, provider=self.name, model=self.model, raw=data)

    async def probe(self) -> bool:
        """Check the /api/version endpoint"""
        try:
            async with aiohttp.ClientSession() as session:
                async with session.get(
                    f"{self.base_url}/api/version",
                    timeout=aiohttp.ClientTimeout(total=self.probe_timeout)
                ) as response:
                    return response.status == 200
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.debug(f"Ollama probe failed: {e}")
            return False
