"""Tests for the optional AI insight enhancer and its fallback path."""

from __future__ import annotations

import json
import time

import httpx
import pytest

from repograde.conftest import healthy_snapshot
from repograde.engine import analyze
from repograde.engine.aggregator import with_overall
from repograde.engine.analyzers import score_dimensions
from repograde.engine.enhancer import Enhanced, FallbackUsed, InsightEnhancer, parse_report
from repograde.engine.insights import synthesize_insights


def _insight(severity: str = "warning", title: str = "Sparse tests") -> dict:
    return {
        "category": "testing",
        "severity": severity,
        "title": title,
        "description": "Only one test module.",
        "suggestion": "Cover the request handlers.",
    }


def _reply(insights=None, summary: str = "A tidy TypeScript service.") -> str:
    body = {
        "summary": summary,
        "suggestions": ["Add integration tests."],
        "insights": insights if insights is not None else [_insight()],
    }
    return json.dumps(body)


@pytest.fixture
def snapshot():
    return healthy_snapshot()


@pytest.fixture
def scores(snapshot):
    return with_overall(score_dimensions(snapshot))


def _enhance(provider, snapshot, scores, timeout: float = 5.0):
    return InsightEnhancer(provider, timeout=timeout).enhance(snapshot, scores)


def test_without_provider_uses_fallback(snapshot, scores) -> None:
    outcome = _enhance(None, snapshot, scores)

    assert isinstance(outcome, FallbackUsed)
    assert outcome.reason == "no provider configured"
    assert outcome.ai_powered is False
    assert outcome.report == synthesize_insights(snapshot, scores)


def test_fenced_json_reply_is_accepted(snapshot, scores) -> None:
    outcome = _enhance(lambda prompt: f"```json\n{_reply()}\n```", snapshot, scores)

    assert isinstance(outcome, Enhanced)
    assert outcome.ai_powered is True
    assert outcome.report.summary == "A tidy TypeScript service."
    assert outcome.report.insights[0].title == "Sparse tests"


def test_analyze_marks_ai_powered_and_keeps_scores(snapshot) -> None:
    plain = analyze(snapshot)
    enhanced = analyze(snapshot, enhancer=InsightEnhancer(lambda prompt: _reply()))

    assert enhanced.ai_powered is True
    assert enhanced.summary == "A tidy TypeScript service."
    assert enhanced.scores == plain.scores
    assert enhanced.tech_stack == plain.tech_stack
    assert enhanced.missing_files == plain.missing_files


def test_analyze_falls_back_without_raising(snapshot) -> None:
    def broken(prompt: str) -> str:
        raise RuntimeError("quota exhausted")

    result = analyze(snapshot, enhancer=InsightEnhancer(broken))

    assert result.ai_powered is False
    assert result.summary == synthesize_insights(snapshot, result.scores).summary


def test_provider_exception(snapshot, scores) -> None:
    def broken(prompt: str) -> str:
        raise RuntimeError("quota exhausted")

    outcome = _enhance(broken, snapshot, scores)

    assert isinstance(outcome, FallbackUsed)
    assert outcome.reason == "provider error: quota exhausted"


def test_slow_provider_times_out(snapshot, scores) -> None:
    def slow(prompt: str) -> str:
        time.sleep(0.5)
        return _reply()

    started = time.monotonic()
    outcome = _enhance(slow, snapshot, scores, timeout=0.05)

    assert isinstance(outcome, FallbackUsed)
    assert outcome.reason.startswith("provider timed out")
    assert time.monotonic() - started < 0.4


def test_transport_timeout(snapshot, scores) -> None:
    def timing_out(prompt: str) -> str:
        raise httpx.ReadTimeout("read timed out")

    outcome = _enhance(timing_out, snapshot, scores)

    assert outcome.reason == "provider timed out after 5.0s"


@pytest.mark.parametrize(
    ("reply", "reason"),
    [
        ("", "empty or non-text provider response"),
        ("   \n", "empty or non-text provider response"),
        ("I cannot help with that.", "no JSON object in provider response"),
    ],
)
def test_unusable_text(snapshot, scores, reply: str, reason: str) -> None:
    outcome = _enhance(lambda prompt: reply, snapshot, scores)

    assert isinstance(outcome, FallbackUsed)
    assert outcome.reason == reason


def test_non_text_reply(snapshot) -> None:
    result = analyze(snapshot, enhancer=InsightEnhancer(lambda prompt: {"summary": "x"}))
    outcome = _enhance(lambda prompt: {"summary": "x"}, snapshot, result.scores)

    assert result.ai_powered is False
    assert isinstance(outcome, FallbackUsed)
    assert outcome.reason == "empty or non-text provider response"


def test_deeply_nested_reply_falls_back(snapshot) -> None:
    nested = '{"summary": ' + "[" * 100000 + "]" * 100000 + "}"

    result = analyze(snapshot, enhancer=InsightEnhancer(lambda prompt: nested))
    outcome = _enhance(lambda prompt: nested, snapshot, result.scores)

    assert result.ai_powered is False
    assert result.summary == synthesize_insights(snapshot, result.scores).summary
    assert isinstance(outcome, FallbackUsed)
    assert outcome.reason.startswith("unparseable provider response")


def test_malformed_json(snapshot, scores) -> None:
    outcome = _enhance(lambda prompt: '{"summary": "x", "insights": [}', snapshot, scores)

    assert outcome.reason.startswith("malformed JSON")


def test_unknown_severity_is_a_schema_mismatch(snapshot, scores) -> None:
    outcome = _enhance(lambda prompt: _reply([_insight(severity="catastrophic")]), snapshot, scores)

    assert isinstance(outcome, FallbackUsed)
    assert outcome.reason == "schema mismatch: 1 error(s)"


def test_too_many_insights_is_a_schema_mismatch(snapshot, scores) -> None:
    insights = [_insight(title=f"Insight {i}") for i in range(9)]

    outcome = _enhance(lambda prompt: _reply(insights), snapshot, scores)

    assert outcome.reason.startswith("schema mismatch")


def test_empty_summary_is_a_schema_mismatch(snapshot, scores) -> None:
    outcome = _enhance(lambda prompt: _reply(summary=""), snapshot, scores)

    assert outcome.reason.startswith("schema mismatch")


def test_prompt_describes_the_repository(snapshot, scores) -> None:
    prompts = []

    def capture(prompt: str) -> str:
        prompts.append(prompt)
        return _reply()

    _enhance(capture, snapshot, scores)

    assert len(prompts) == 1
    assert "REPOSITORY: octo/demo" in prompts[0]
    assert f"- Overall: {scores.overall}/100" in prompts[0]
    assert "[file] src/index.ts" in prompts[0]


def test_parse_report_ignores_surrounding_prose() -> None:
    report = parse_report(f"Here you go:\n{_reply()}\nHope that helps!")

    assert report.suggestions == ["Add integration tests."]


def test_from_api_key_without_key_has_no_provider() -> None:
    enhancer = InsightEnhancer.from_api_key(None)

    assert enhancer.provider is None
    assert InsightEnhancer.from_api_key("").provider is None
