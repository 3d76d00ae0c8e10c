"""Tests for sequential plan execution"""

import pytest

from business_agents.orchestrator import (
    AgentNotRegisteredError,
    AgentType,
    PlanExecutor,
    Priority,
    TaskStep,
)
from helpers import FakeAgent


def step(agent_type, task_type, priority=Priority.MEDIUM, dependencies=None, **task_data):
    return TaskStep(
        agent_type=agent_type,
        task_type=task_type,
        task_data=task_data,
        dependencies=dependencies or [],
        priority=priority,
    )


def all_agents(**overrides):
    agents = {agent_type: FakeAgent(agent_type.value) for agent_type in AgentType}
    for name, agent in overrides.items():
        agents[AgentType(name)] = agent
    return agents


@pytest.mark.asyncio
async def test_steps_run_in_order():
    agents = all_agents()
    plan = [
        step(AgentType.SOCIAL, "create_post", topic="sale"),
        step(AgentType.EMAIL, "compose", dependencies=["step_0"]),
    ]

    results = await PlanExecutor(agents).execute(plan)

    assert [r.step_index for r in results] == [0, 1]
    assert all(r.success for r in results)
    assert agents[AgentType.SOCIAL].tasks == [{"topic": "sale", "type": "create_post"}]
    assert results[1].result["agent"] == "email"


@pytest.mark.asyncio
async def test_critical_failure_aborts_remaining_steps():
    agents = all_agents(finance=FakeAgent("finance", error=RuntimeError("ledger offline")))
    plan = [
        step(AgentType.EMAIL, "compose", Priority.MEDIUM),
        step(AgentType.FINANCE, "generate_report", Priority.URGENT),
        step(AgentType.SOCIAL, "create_post", Priority.LOW),
    ]

    results = await PlanExecutor(agents).execute(plan)

    assert len(results) == 2
    assert results[0].success is True
    assert results[1].success is False
    assert results[1].error == "ledger offline"
    assert agents[AgentType.SOCIAL].tasks == []
    print("✓ Urgent step failure stops execution")


@pytest.mark.asyncio
async def test_high_priority_failure_also_aborts():
    agents = all_agents(email=FakeAgent("email", error=ValueError("no recipient")))
    plan = [
        step(AgentType.EMAIL, "compose", Priority.HIGH),
        step(AgentType.SOCIAL, "create_post"),
    ]

    results = await PlanExecutor(agents).execute(plan)

    assert len(results) == 1


@pytest.mark.asyncio
async def test_non_critical_failure_continues():
    agents = all_agents(email=FakeAgent("email", error=ValueError("no recipient")))
    plan = [
        step(AgentType.EMAIL, "compose", Priority.LOW),
        step(AgentType.SOCIAL, "create_post", Priority.MEDIUM),
    ]

    results = await PlanExecutor(agents).execute(plan)

    assert [r.success for r in results] == [False, True]


@pytest.mark.asyncio
async def test_in_band_failure_counts_as_failed_step():
    agents = all_agents(customer=FakeAgent(
        "customer", result={"success": False, "error": "CRM timeout"}
    ))
    plan = [step(AgentType.CUSTOMER, "follow_up")]

    results = await PlanExecutor(agents).execute(plan)

    assert results[0].success is False
    assert results[0].error == "CRM timeout"


@pytest.mark.asyncio
async def test_unmet_dependency_still_runs():
    agents = all_agents(email=FakeAgent("email", error=RuntimeError("smtp down")))
    plan = [
        step(AgentType.EMAIL, "compose", Priority.LOW),
        step(AgentType.SOCIAL, "create_post", dependencies=["step_0"]),
    ]

    results = await PlanExecutor(agents).execute(plan)

    assert len(results) == 2
    assert results[1].success is True
    assert len(agents[AgentType.SOCIAL].tasks) == 1


@pytest.mark.asyncio
async def test_missing_agent_raises_before_any_step():
    email = FakeAgent("email")
    plan = [
        step(AgentType.EMAIL, "compose"),
        step(AgentType.FINANCE, "generate_report"),
    ]

    with pytest.raises(AgentNotRegisteredError) as exc_info:
        await PlanExecutor({AgentType.EMAIL: email}).execute(plan)

    assert "finance" in str(exc_info.value)
    assert email.tasks == []


@pytest.mark.asyncio
async def test_empty_plan_returns_no_results():
    assert await PlanExecutor(all_agents()).execute([]) == []


@pytest.mark.asyncio
async def test_result_serialization():
    plan = [step(AgentType.SOCIAL, "create_post")]

    results = await PlanExecutor(all_agents()).execute(plan)
    data = results[0].to_dict()

    assert data["agentType"] == "social"
    assert data["success"] is True
    assert "error" not in data
