"""Tests for the Ollama client"""

import aiohttp
import pytest
from unittest.mock import patch

from business_agents.llm import ChatMessage, OllamaClient, ProviderUnavailableError
from helpers import FakeResponse, FakeSession

MESSAGES = [
    ChatMessage(role="system", content="Be brief."),
    ChatMessage(role="user", content="Hello"),
]


@pytest.mark.asyncio
async def test_complete_posts_chat_request():
    session = FakeSession(FakeResponse(200, {"message": {"role": "assistant", "content": "Hi"}}))
    client = OllamaClient(base_url="http://ollama:11434/", model="llama3.1:8b", timeout=5)

    with patch("aiohttp.ClientSession", session):
        response = await client.complete(MESSAGES, max_tokens=1024)

    assert response.content == "Hi"
    assert response.provider == "ollama"
    method, url, kwargs = session.requests[0]
    assert (method, url) == ("POST", "http://ollama:11434/api/chat")
    assert kwargs["json"]["stream"] is False
    assert kwargs["json"]["options"]["num_predict"] == 1024
    assert kwargs["json"]["messages"][0] == {"role": "system", "content": "Be brief."}


@pytest.mark.asyncio
async def test_http_error_is_unavailable():
    session = FakeSession(FakeResponse(404, None, text="model not found"))
    client = OllamaClient(timeout=5)

    with patch("aiohttp.ClientSession", session):
        with pytest.raises(ProviderUnavailableError) as exc_info:
            await client.complete(MESSAGES)

    assert "model not found" in str(exc_info.value)


@pytest.mark.asyncio
async def test_connection_error_is_unavailable():
    session = FakeSession(error=aiohttp.ClientConnectionError("refused"))
    client = OllamaClient(timeout=5)

    with patch("aiohttp.ClientSession", session):
        with pytest.raises(ProviderUnavailableError):
            await client.complete(MESSAGES)


@pytest.mark.asyncio
async def test_probe_reports_reachability():
    client = OllamaClient(timeout=5)

    with patch("aiohttp.ClientSession", FakeSession(FakeResponse(200, {"version": "0.3.0"}))):
        assert await client.probe() is True

    with patch("aiohttp.ClientSession", FakeSession(error=aiohttp.ClientConnectionError("refused"))):
        assert await client.probe() is False
    print("✓ Ollama probe reflects reachability")


def test_env_configuration(monkeypatch):
    monkeypatch.setenv("OLLAMA_BASE_URL", "http://gpu-box:11434")
    monkeypatch.setenv("OLLAMA_MODEL", "mistral")
    monkeypatch.setenv("LLM_TIMEOUT_SECONDS", "30")

    client = OllamaClient()

    assert client.base_url == "http://gpu-box:11434"
    assert client.model == "mistral"
    assert client.timeout == 30.0
