"""Unit tests for prompt construction."""
from legal_review.models import ChecklistRow, RiskType, Stance
from legal_review.prompts.review_prompts import (
    build_company_prompt,
    build_outline_prompt,
    build_review_prompt,
    build_similar_cases_prompt,
    format_risk_labels,
)


def test_review_prompt_embeds_window_stance_and_categories():
    prompt = build_review_prompt(
        "Party B bears all losses.", [RiskType.FINANCIAL, RiskType.EXECUTION], Stance.PARTY_B
    )

    assert "Party B bears all losses." in prompt
    assert "standpoint of Party B" in prompt
    assert "Financial risk (financial), Execution risk (execution)" in prompt
    assert "Policy risk" not in prompt


def test_review_prompt_pins_output_shape():
    prompt = build_review_prompt("text", [RiskType.POLICY], Stance.PARTY_A)

    for field in ("original_text_snippet", "risk_type", "risk_level", "reason", "suggestion"):
        assert f'"{field}"' in prompt
    assert '"policy", "financial", "execution"' in prompt
    assert '"high", "medium", "low"' in prompt
    assert '{"reviews": []}' in prompt
    assert "```json" in prompt
    assert "comments" in prompt


def test_review_prompt_is_deterministic():
    args = ("same window", [RiskType.POLICY, RiskType.FINANCIAL], Stance.PARTY_A)

    assert build_review_prompt(*args) == build_review_prompt(*args)


def test_risk_labels_accept_plain_values():
    assert format_risk_labels(["policy"]) == "Policy risk (policy)"


def test_outline_prompt_carries_item_and_full_document():
    document = "Clause 1. Payment.\nClause 2. Termination."
    row = ChecklistRow(row=3, item_name="Termination rights", description="Who may terminate and when")

    prompt = build_outline_prompt(document, row, Stance.PARTY_A)

    assert "Checklist item: Termination rights" in prompt
    assert "Item description: Who may terminate and when" in prompt
    assert document in prompt
    assert "standpoint of Party A" in prompt


def test_outline_prompt_omits_empty_description():
    prompt = build_outline_prompt("doc", ChecklistRow(row=1, item_name="Parties"), Stance.PARTY_B)

    assert "Item description" not in prompt


def test_lookup_prompts_quote_the_query():
    assert '"Acme Ltd"' in build_company_prompt("Acme Ltd")
    assert '"late delivery"' in build_similar_cases_prompt("late delivery")
