"""Test doubles shared by the test modules"""

from typing import Any, Callable, Dict, List, Optional

from business_agents.llm import (
    BaseProviderClient,
    ChatResponse,
    QueryComplexity,
)


class FakeClock:
    """Manually advanced monotonic clock"""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeProvider(BaseProviderClient):
    """Provider that answers (or fails) without any network traffic"""

    def __init__(self, name: str, error: Optional[Exception] = None, available: bool = True):
        super().__init__(model=f"{name}-model", timeout=1)
        self.name = name
        self.error = error
        self.available = available
        self.complete_calls = 0
        self.probe_calls = 0
        self.max_tokens: List[Optional[int]] = []

    async def complete(self, messages, max_tokens=None):
        self.complete_calls += 1
        self.max_tokens.append(max_tokens)
        if self.error is not None:
            raise self.error
        return ChatResponse(content=f"{self.name} answer", provider=self.name, model=self.model)

    async def probe(self):
        self.probe_calls += 1
        return self.available


class StubRouter:
    """Router double; ``responder`` maps the routed messages to reply text"""

    def __init__(
        self,
        responder: Optional[Callable[[list], str]] = None,
        error: Optional[Exception] = None,
    ):
        self.responder = responder or (lambda messages: "ok")
        self.error = error
        self.calls: List[Dict[str, Any]] = []

    async def route(self, messages, complexity=QueryComplexity.MEDIUM, force_provider=None):
        self.calls.append({"messages": messages, "complexity": QueryComplexity(complexity)})
        if self.error is not None:
            raise self.error
        return ChatResponse(content=self.responder(messages), provider="stub", model="stub-model")

    async def get_provider_status(self):
        return {"local_enabled": False, "local": {}, "cloud": {}}


class FakeAgent:
    """Domain agent double recording every task it receives"""

    def __init__(self, agent_type: str, error: Optional[Exception] = None, result: Any = None):
        self.agent_type = agent_type
        self.error = error
        self.result = result
        self.tasks: List[Dict[str, Any]] = []

    async def process_task(self, task):
        self.tasks.append(task)
        if self.error is not None:
            raise self.error
        if self.result is not None:
            return self.result
        return {"type": task.get("type"), "agent": self.agent_type, "content": "done"}


class FakeResponse:
    """Async context manager standing in for an aiohttp response"""

    def __init__(self, status: int = 200, payload: Any = None, headers=None, text: str = ""):
        self.status = status
        self._payload = payload
        self.headers = headers or {}
        self._text = text

    async def json(self):
        if self._payload is None:
            raise ValueError("response body is not JSON")
        return self._payload

    async def text(self):
        return self._text

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        return False


class FakeSession:
    """Stands in for aiohttp.ClientSession and records each request"""

    def __init__(self, response: Optional[FakeResponse] = None, error: Optional[Exception] = None):
        self.response = response
        self.error = error
        self.requests: List[tuple] = []

    def __call__(self, *args, **kwargs):
        return self

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        return False

    def _request(self, method, url, **kwargs):
        self.requests.append((method, url, kwargs))
        if self.error is not None:
            raise self.error
        return self.response

    def post(self, url, **kwargs):
        return self._request("POST", url, **kwargs)

    def get(self, url, **kwargs):
        return self._request("GET", url, **kwargs)
