"""
Tests for the LLM judge.
"""

import pytest

from job_agent.providers import FallbackDispatcher
from job_agent.tools.judge import (
    FALLBACK_VERDICT,
    JUDGE_MODEL,
    check_goal_done,
    normalize_verdict,
)


class TestNormalizeVerdict:
    """Test verdict coercion."""

    def test_string_feedback_becomes_list(self):
        assert normalize_verdict({"done": False, "feedback": "add more"}) == {
            "done": False,
            "feedback": ["add more"],
        }

    def test_done_must_be_true(self):
        assert normalize_verdict({"done": "yes"})["done"] is False
        assert normalize_verdict({"done": True})["done"] is True


class TestCheckGoalDone:
    """Test the judge against fake providers."""

    @pytest.mark.asyncio
    async def test_parses_fenced_verdict(self, make_registry, fake_client):
        judge = fake_client("judge", content='```json\n{"done": true, "feedback": []}\n```')
        dispatcher = FallbackDispatcher(make_registry(judge))

        verdict = await check_goal_done("Find 3 jobs", "Here are 3 jobs", dispatcher=dispatcher)

        assert verdict == {"done": True, "feedback": []}
        request = judge.calls[0]
        assert request.model == JUDGE_MODEL
        assert request.response_format == {"type": "json_object"}
        assert request.messages[0]["role"] == "developer"
        assert "## Request: Find 3 jobs" in request.messages[1]["content"]
        assert "## Answer: Here are 3 jobs" in request.messages[1]["content"]

    @pytest.mark.asyncio
    async def test_unparseable_output(self, make_registry, fake_client):
        dispatcher = FallbackDispatcher(make_registry(fake_client("judge", content="I think so")))
        verdict = await check_goal_done("goal", "answer", dispatcher=dispatcher)
        assert verdict == FALLBACK_VERDICT

    @pytest.mark.asyncio
    async def test_providers_exhausted(self, make_registry, fake_client, failing):
        dispatcher = FallbackDispatcher(make_registry(fake_client("judge", error=failing())))
        verdict = await check_goal_done("goal", "answer", dispatcher=dispatcher)
        assert verdict["done"] is False
        assert verdict["feedback"] == FALLBACK_VERDICT["feedback"]
