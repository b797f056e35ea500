"""Unit tests for the standard and outline review loops."""
import json

import pytest

from legal_review.exceptions import ChunkingError, ConfigurationError, GatewayError
from legal_review.models import ChecklistRow, ProviderConfig, RiskType, Stance
from legal_review.services.review_aggregator import ReviewAggregator

CONFIG = ProviderConfig(provider="deepseek", api_key="sk-test")


class _ScriptedGateway:
    """Returns (or raises) the scripted replies in call order."""

    def __init__(self, replies):
        self.replies = list(replies)
        self.calls = []

    def complete(self, config, prompt, system_prompt=None):
        self.calls.append(prompt)
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


def _reply(*snippets):
    return json.dumps({"reviews": [
        {
            "original_text_snippet": s,
            "risk_type": "financial",
            "risk_level": "medium",
            "reason": f"reason for {s}",
            "suggestion": "revise",
        }
        for s in snippets
    ]})


def _aggregator(gateway, **kwargs):
    kwargs.setdefault("chunk_size", 10)
    kwargs.setdefault("chunk_overlap", 0)
    kwargs.setdefault("row_delay_seconds", 0)
    return ReviewAggregator(gateway, **kwargs)


def _rows(*names):
    return [ChecklistRow(row=i + 1, item_name=name, description=f"check {name}") for i, name in enumerate(names)]


def test_findings_keep_chunk_then_emission_order():
    gateway = _ScriptedGateway([_reply("a1", "a2"), _reply(), _reply("c1")])

    outcome = _aggregator(gateway).review_document(CONFIG, "x" * 30, [RiskType.FINANCIAL])

    assert [f.original_text_snippet for f in outcome.reviews] == ["a1", "a2", "c1"]
    assert outcome.chunk_count == 3
    assert outcome.failed_units == 0
    assert len(gateway.calls) == 3


def test_one_network_failure_keeps_other_chunks():
    gateway = _ScriptedGateway([
        _reply("first"),
        GatewayError("Could not reach the AI service", kind=GatewayError.CONNECTIVITY),
        _reply("third"),
    ])

    outcome = _aggregator(gateway).review_document(CONFIG, "y" * 30, [RiskType.POLICY])

    assert [f.original_text_snippet for f in outcome.reviews] == ["first", "third"]
    assert outcome.failed_units == 1
    error_lines = [line for line in outcome.logs if line.startswith("Error:")]
    assert len(error_lines) == 1
    assert "2/3" in error_lines[0]


def test_unparseable_reply_contributes_nothing_and_loop_continues():
    gateway = _ScriptedGateway(["I am unable to comply.", _reply("kept")])

    outcome = _aggregator(gateway).review_document(CONFIG, "z" * 20, [RiskType.EXECUTION])

    assert [f.original_text_snippet for f in outcome.reviews] == ["kept"]
    assert outcome.failed_units == 1
    assert any("could not be parsed" in line for line in outcome.logs)


def test_deeply_nested_reply_fails_only_its_part():
    nested = '{"reviews": ' + "[" * 100000 + "]" * 100000 + "}"
    gateway = _ScriptedGateway([nested, _reply("kept")])

    outcome = _aggregator(gateway).review_document(CONFIG, "n" * 20, [RiskType.POLICY])

    assert [f.original_text_snippet for f in outcome.reviews] == ["kept"]
    assert outcome.failed_units == 1
    assert sum(line.startswith("Error:") for line in outcome.logs) == 1


def test_reply_without_reviews_is_not_a_failure():
    gateway = _ScriptedGateway(['{"summary": "nothing"}'])

    outcome = _aggregator(gateway).review_document(CONFIG, "short", [RiskType.POLICY])

    assert outcome.reviews == []
    assert outcome.failed_units == 0
    assert "Part 1/1 done, 0 finding(s)." in outcome.logs


def test_progress_lines_are_streamed_in_order():
    gateway = _ScriptedGateway([_reply("a"), _reply("b")])
    seen = []

    outcome = _aggregator(gateway).review_document(
        CONFIG, "q" * 20, [RiskType.POLICY], on_progress=seen.append
    )

    assert seen == outcome.logs
    assert seen[0] == "Document split into 2 part(s) for analysis..."
    assert seen[1] == "Analyzing part 1/2..."
    assert seen[2] == "Part 1/2 done, 1 finding(s)."
    assert seen[-1] == "Analysis complete, 2 finding(s) in total."


def test_prompts_carry_window_text_and_stance():
    gateway = _ScriptedGateway([_reply(), _reply()])

    _aggregator(gateway, chunk_size=6, chunk_overlap=2).review_document(
        CONFIG, "abcdefghij", [RiskType.POLICY], stance=Stance.PARTY_B
    )

    assert "abcdef" in gateway.calls[0]
    assert "efghij" in gateway.calls[1]
    assert "Party B" in gateway.calls[0]


def test_bad_configuration_aborts_before_any_call():
    gateway = _ScriptedGateway([])

    with pytest.raises(ConfigurationError):
        _aggregator(gateway).review_document(
            ProviderConfig(provider="unknown", api_key="k"), "text", [RiskType.POLICY]
        )
    with pytest.raises(ConfigurationError):
        _aggregator(gateway).review_outline(ProviderConfig(provider="deepseek"), "text", _rows("a"))
    assert gateway.calls == []


def test_bad_chunk_sizes_abort_before_any_call():
    gateway = _ScriptedGateway([])

    with pytest.raises(ChunkingError):
        _aggregator(gateway, chunk_size=10, chunk_overlap=10).review_document(CONFIG, "text", [RiskType.POLICY])
    assert gateway.calls == []


def test_outline_answers_every_row_with_full_text():
    gateway = _ScriptedGateway(["  Covered in clause 4.  ", "Missing."])
    document = "FULL DOCUMENT " * 50

    outcome = _aggregator(gateway, chunk_size=10).review_outline(CONFIG, document, _rows("Payment", "Termination"))

    assert [a.result for a in outcome.answers] == ["Covered in clause 4.", "Missing."]
    assert [a.row for a in outcome.answers] == [1, 2]
    assert all(document in prompt for prompt in gateway.calls)


def test_outline_row_count_holds_when_every_call_fails():
    rows = _rows("a", "b", "c")
    gateway = _ScriptedGateway([GatewayError("boom") for _ in rows])

    outcome = _aggregator(gateway).review_outline(CONFIG, "doc", rows)

    assert len(outcome.answers) == len(rows)
    assert all(a.result.startswith("Review failed:") for a in outcome.answers)
    assert outcome.failed_units == 3


def test_outline_progress_and_delay_between_rows_only():
    sleeps = []
    progress = []
    gateway = _ScriptedGateway(["one", "two", "three"])
    aggregator = _aggregator(gateway, row_delay_seconds=1.5, sleep=sleeps.append)

    aggregator.review_outline(
        CONFIG, "doc", _rows("a", "b", "c"),
        on_progress=lambda current, total, name: progress.append((current, total, name)),
    )

    assert progress == [(1, 3, "a"), (2, 3, "b"), (3, 3, "c")]
    assert sleeps == [1.5, 1.5]


def test_lookup_errors_propagate():
    gateway = _ScriptedGateway([GatewayError("down", kind=GatewayError.CONNECTIVITY)])

    with pytest.raises(GatewayError):
        _aggregator(gateway).lookup_company(CONFIG, "Acme Ltd")


def test_lookup_returns_trimmed_reply():
    gateway = _ScriptedGateway(["  Acme Ltd is registered in Shanghai.\n"])

    answer = _aggregator(gateway).lookup_similar_cases(CONFIG, "late delivery penalty")

    assert answer == "Acme Ltd is registered in Shanghai."
    assert "late delivery penalty" in gateway.calls[0]
