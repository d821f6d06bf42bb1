"""Tests for response parsing and the generate-validate-retry orchestrator."""

from unittest.mock import AsyncMock

import pytest

from strength_coach.exceptions import LLMTimeoutError
from strength_coach.llm.orchestrator import generate_with_fallback
from strength_coach.llm.parsing import ParseResult, parse_json_payload, parse_model
from strength_coach.models.suggestions import CycleRecommendation


class TestParseJsonPayload:
    """Tests for tolerant JSON extraction."""

    def test_strict_json(self):
        result = parse_json_payload('{"a": 1}', None)

        assert result.ok
        assert result.value == {"a": 1}

    def test_markdown_fence(self):
        raw = 'Here you go:\n```json\n{"recommendedCycleId": "beginner-4"}\n```\nGood luck!'

        result = parse_json_payload(raw, None)

        assert result.ok
        assert result.value == {"recommendedCycleId": "beginner-4"}

    def test_array_is_not_an_object(self):
        result = parse_json_payload("[1, 2, 3]", {"fallback": True})

        assert not result.ok
        assert result.value == {"fallback": True}

    def test_empty_response(self):
        result = parse_json_payload("", [])

        assert not result.ok
        assert result.error == "empty response"

    def test_garbage(self):
        result = parse_json_payload("I cannot help with that {broken", None)

        assert not result.ok
        assert result.value is None
        assert "no JSON object" in result.error


class TestParseModel:

    def test_valid_model(self):
        result = parse_model(
            '{"recommendedCycleId": "advanced-8", "confidence": "low"}',
            CycleRecommendation,
            None,
        )

        assert result.ok
        assert result.value.recommended_cycle_id == "advanced-8"

    def test_shape_mismatch_carries_fallback(self):
        result = parse_model('{"reasoning": "no id"}', CycleRecommendation, "default")

        assert not result.ok
        assert result.value == "default"
        assert "CycleRecommendation" in result.error


def parse_int(raw: str) -> ParseResult:
    try:
        return ParseResult.success(int(raw))
    except ValueError:
        return ParseResult.fallback(None, f"not a number: {raw}")


def is_positive(value) -> bool:
    return value is not None and value > 0


class TestGenerateWithFallback:
    """Tests for the orchestrator."""

    @pytest.mark.asyncio
    async def test_first_attempt_succeeds(self):
        generate = AsyncMock(return_value="5")

        outcome = await generate_with_fallback("req", generate, parse_int, is_positive, -1)

        assert outcome.value == 5
        assert outcome.attempts == 1
        assert outcome.failures == []
        assert not outcome.used_fallback
        generate.assert_awaited_once_with("req")

    @pytest.mark.asyncio
    async def test_always_failing_uses_fallback_after_three_calls(self):
        generate = AsyncMock(side_effect=RuntimeError("boom"))

        outcome = await generate_with_fallback("req", generate, parse_int, is_positive, -1)

        assert outcome.value == -1
        assert outcome.used_fallback
        assert outcome.attempts == 3
        assert generate.await_count == 3
        assert [f.kind for f in outcome.failures] == ["error"] * 3
        assert "RuntimeError: boom" in outcome.describe_failures()

    @pytest.mark.asyncio
    async def test_invalid_then_valid(self):
        generate = AsyncMock(side_effect=["nonsense", "7"])

        outcome = await generate_with_fallback("req", generate, parse_int, is_positive, -1)

        assert outcome.value == 7
        assert outcome.attempts == 2
        assert generate.await_count == 2
        assert outcome.failures[0].kind == "invalid"
        assert outcome.failures[0].reason == "not a number: nonsense"

    @pytest.mark.asyncio
    async def test_rejected_candidate(self):
        generate = AsyncMock(side_effect=["-3", "-2", "4"])

        outcome = await generate_with_fallback("req", generate, parse_int, is_positive, -1)

        assert outcome.value == 4
        assert [f.reason for f in outcome.failures] == ["candidate rejected by validator"] * 2

    @pytest.mark.asyncio
    async def test_timeout_counts_as_one_attempt(self):
        generate = AsyncMock(side_effect=[LLMTimeoutError(timeout_seconds=30), "1"])

        outcome = await generate_with_fallback("req", generate, parse_int, is_positive, -1)

        assert outcome.value == 1
        assert outcome.attempts == 2
        assert outcome.failures[0].kind == "error"
        assert "LLMTimeoutError" in outcome.failures[0].reason

    @pytest.mark.asyncio
    async def test_parser_exception_is_invalid_attempt(self):
        def exploding_parse(raw):
            raise KeyError("missing")

        generate = AsyncMock(return_value="5")

        outcome = await generate_with_fallback(
            "req", generate, exploding_parse, is_positive, -1, max_attempts=2
        )

        assert outcome.used_fallback
        assert [f.kind for f in outcome.failures] == ["invalid", "invalid"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("max_attempts", [0, -4])
    async def test_attempt_budget_floor_is_one(self, max_attempts):
        generate = AsyncMock(side_effect=RuntimeError("down"))

        outcome = await generate_with_fallback(
            "req", generate, parse_int, is_positive, -1, max_attempts=max_attempts
        )

        assert generate.await_count == 1
        assert outcome.attempts == 1
        assert outcome.used_fallback

    @pytest.mark.asyncio
    async def test_custom_budget(self):
        generate = AsyncMock(side_effect=RuntimeError("down"))

        outcome = await generate_with_fallback(
            "req", generate, parse_int, is_positive, -1, max_attempts=5
        )

        assert generate.await_count == 5
        assert len(outcome.failures) == 5
