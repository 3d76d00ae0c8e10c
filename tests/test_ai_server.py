"""HTTP API tests with the orchestrator replaced by stubs"""

from unittest.mock import patch

from fastapi.testclient import TestClient

from business_agents import ai_server
from business_agents.llm import AllProvidersUnavailableError, RateLimitedError, SmartRouter
from business_agents.orchestrator import AgentType, Orchestrator
from helpers import FakeAgent, FakeClock, FakeProvider, StubRouter

client = TestClient(ai_server.app)


def stub_orchestrator(router=None, agents=None):
    if agents is None:
        agents = {agent_type: FakeAgent(agent_type.value) for agent_type in AgentType}
    return Orchestrator(router=router or StubRouter(error=AllProvidersUnavailableError({})), agents=agents)


def test_health():
    with patch.object(ai_server, "get_orchestrator", return_value=stub_orchestrator()):
        response = client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["state_store"] == "unavailable"
    assert data["providers"]["local_enabled"] is False


def test_process_task():
    with patch.object(ai_server, "get_orchestrator", return_value=stub_orchestrator()):
        response = client.post("/tasks", json={
            "description": "Create a social media post about our sale",
            "priority": "low",
        })

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "completed"
    assert data["execution_plan"][0]["agentType"] == "social"
    assert data["final_result"]["overall_status"] == "success"
    print("✓ /tasks returns the serialized outcome")


def test_process_task_missing_agent():
    orchestrator = stub_orchestrator(agents={AgentType.EMAIL: FakeAgent("email")})

    with patch.object(ai_server, "get_orchestrator", return_value=orchestrator):
        response = client.post("/tasks", json={"description": "Post on social media"})

    assert response.status_code == 400
    assert "social" in response.json()["detail"]


def test_process_task_rejects_blank_description():
    with patch.object(ai_server, "get_orchestrator", return_value=stub_orchestrator()):
        response = client.post("/tasks", json={"description": "   "})

    assert response.status_code == 400


def test_route_rate_limited_returns_429():
    cloud = FakeProvider("groq", error=RateLimitedError("slow down", retry_after=42, provider="groq"))
    router = SmartRouter(local=FakeProvider("ollama"), cloud=cloud, local_enabled=False, clock=FakeClock())

    with patch.object(ai_server, "get_orchestrator", return_value=stub_orchestrator(router=router)):
        response = client.post("/llm/route", json={
            "messages": [{"role": "user", "content": "hi"}],
            "force_provider": "cloud",
        })

    assert response.status_code == 429
    assert response.headers["Retry-After"] == "42"


def test_route_success():
    router = SmartRouter(local=FakeProvider("ollama"), cloud=FakeProvider("groq"), local_enabled=True, clock=FakeClock())

    with patch.object(ai_server, "get_orchestrator", return_value=stub_orchestrator(router=router)):
        response = client.post("/llm/route", json={
            "messages": [{"role": "user", "content": "hi"}],
            "complexity": "simple",
        })

    assert response.status_code == 200
    assert response.json()["provider"] == "ollama"
    assert response.json()["reason"] == "local provider available"


def test_route_all_unavailable_returns_503():
    router = SmartRouter(local=FakeProvider("ollama", available=False), cloud=None, local_enabled=True, clock=FakeClock())

    with patch.object(ai_server, "get_orchestrator", return_value=stub_orchestrator(router=router)):
        response = client.post("/llm/route", json={"messages": [{"role": "user", "content": "hi"}]})

    assert response.status_code == 503


def test_route_retry_after_rounds_up():
    cloud = FakeProvider("groq", error=RateLimitedError("slow down", retry_after=0.4, provider="groq"))
    router = SmartRouter(local=None, cloud=cloud, local_enabled=False, clock=FakeClock())

    with patch.object(ai_server, "get_orchestrator", return_value=stub_orchestrator(router=router)):
        response = client.post("/llm/route", json={
            "messages": [{"role": "user", "content": "hi"}],
            "force_provider": "cloud",
        })

    assert response.status_code == 429
    assert response.headers["Retry-After"] == "1"
