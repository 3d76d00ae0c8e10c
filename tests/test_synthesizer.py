"""Tests for metrics and narrative synthesis"""

import pytest

from business_agents.llm import AllProvidersUnavailableError, QueryComplexity
from business_agents.orchestrator import (
    AgentType,
    BusinessTask,
    OverallStatus,
    ResultSynthesizer,
    StepResult,
    compute_metrics,
)
from business_agents.orchestrator.synthesizer import SYNTHESIS_PLACEHOLDER, percent
from helpers import StubRouter

TASK = BusinessTask(description="Launch the spring campaign")


def result(index, agent_type, success):
    return StepResult(
        step_index=index,
        agent_type=agent_type,
        task_type="work",
        success=success,
        result={"content": "ok"} if success else None,
        error=None if success else "failed",
    )


def test_all_successful():
    report = compute_metrics([result(0, AgentType.SOCIAL, True), result(1, AgentType.EMAIL, True)])

    assert report.success_rate == 100
    assert report.overall_status == OverallStatus.SUCCESS
    assert report.agent_success_rate(AgentType.SOCIAL) == 100
    assert report.agent_success_rate(AgentType.FINANCE) == 0


def test_partial_success():
    report = compute_metrics([
        result(0, AgentType.EMAIL, True),
        result(1, AgentType.EMAIL, True),
        result(2, AgentType.FINANCE, False),
    ])

    assert report.success_rate == 67
    assert report.failed_steps == 1
    assert report.overall_status == OverallStatus.PARTIAL_SUCCESS
    assert report.agent_success_rate(AgentType.EMAIL) == 100


def test_even_split_is_failure():
    report = compute_metrics([result(0, AgentType.EMAIL, True), result(1, AgentType.SOCIAL, False)])

    assert report.success_rate == 50
    assert report.overall_status == OverallStatus.FAILURE


def test_no_steps():
    report = compute_metrics([])

    assert report.total_steps == 0
    assert report.success_rate == 0
    assert report.overall_status == OverallStatus.SUCCESS
    assert len(report.agent_performance) == len(AgentType)


def test_metrics_are_deterministic():
    results = [result(0, AgentType.CUSTOMER, True), result(1, AgentType.CUSTOMER, False)]

    first, second = compute_metrics(results), compute_metrics(results)

    assert first.success_rate == second.success_rate
    assert first.overall_status == second.overall_status
    assert first.agent_performance == second.agent_performance


def test_percent_rounds_half_up():
    assert percent(1, 8) == 13
    assert percent(2, 3) == 67
    assert percent(1, 3) == 33
    assert percent(5, 0) == 0


@pytest.mark.asyncio
async def test_narrative_and_recommendations():
    narrative = (
        "Executive summary: the campaign post and the team email went out.\n"
        "We recommend scheduling a follow-up post next week.\n"
        "Next step: review engagement numbers."
    )
    router = StubRouter(lambda messages: narrative)

    report = await ResultSynthesizer(router).synthesize([result(0, AgentType.SOCIAL, True)], TASK)

    assert report.summary == narrative
    assert report.recommendations == [
        "We recommend scheduling a follow-up post next week.",
        "Next step: review engagement numbers.",
    ]
    assert router.calls[0]["complexity"] == QueryComplexity.COMPLEX


@pytest.mark.asyncio
async def test_router_failure_keeps_metrics():
    router = StubRouter(error=AllProvidersUnavailableError({"groq": "rate limited"}))
    results = [result(0, AgentType.SOCIAL, True), result(1, AgentType.EMAIL, False)]

    report = await ResultSynthesizer(router).synthesize(results, TASK)

    assert report.summary == SYNTHESIS_PLACEHOLDER
    assert report.recommendations == []
    assert report.success_rate == compute_metrics(results).success_rate
    print("✓ Synthesis failure falls back to metrics only")


@pytest.mark.asyncio
async def test_empty_narrative_uses_placeholder():
    report = await ResultSynthesizer(StubRouter(lambda messages: "")).synthesize([], TASK)

    assert report.summary == SYNTHESIS_PLACEHOLDER
