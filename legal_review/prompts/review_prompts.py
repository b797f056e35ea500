"""Prompt construction for document risk review, checklist review and lookups."""
from typing import Iterable

from legal_review.models import ChecklistRow, RiskType, Stance, RISK_TYPE_LABELS


STANCE_LABELS = {
    Stance.PARTY_A: "Party A (the rights holder / commissioning party)",
    Stance.PARTY_B: "Party B (the obligated party / contractor)",
}

REVIEW_SYSTEM_PROMPT = (
    "You are a helpful, professional legal assistant. "
    "Reply with valid, plain JSON data only."
)

OUTLINE_SYSTEM_PROMPT = (
    "You are a professional legal review assistant. "
    "Answer the checklist item concisely and cite the relevant clauses of the document."
)

RISK_LEVEL_RUBRIC = (
    "Risk level rubric:\n"
    "- high: large room for improvement, a problem is likely to occur\n"
    "- medium: some room for improvement, a problem may occur in similar situations\n"
    "- low: a problem is unlikely, only minor room for improvement"
)

OUTPUT_SCHEMA = """Return the result as JSON with exactly this structure:
{
  "reviews": [
    {
      "original_text_snippet": "the exact passage of the document that causes the issue",
      "risk_type": "policy|financial|execution",
      "risk_level": "high|medium|low",
      "reason": "why this is a risk",
      "suggestion": "how to revise it"
    }
  ]
}
risk_type must be exactly one of "policy", "financial", "execution".
risk_level must be exactly one of "high", "medium", "low".
Copy original_text_snippet verbatim from the document so it can be located.
Write reason and suggestion in the language of the document.
If no risk is found, return {"reviews": []}.

Important: the output must be a valid plain JSON string.
1. Do not wrap it in markdown code fences (such as ```json).
2. Strings must not contain unescaped control characters (such as line breaks).
3. If a value contains quotation marks, use single quotes or escape the double quotes.
4. Do not add any comments."""


def stance_label(stance: Stance) -> str:
    return STANCE_LABELS[Stance(stance)]


def format_risk_labels(risks: Iterable[RiskType]) -> str:
    labels = [f"{RISK_TYPE_LABELS[RiskType(r)]} ({RiskType(r).value})" for r in risks]
    return ", ".join(labels)


def build_review_prompt(window_text: str, risks: Iterable[RiskType], stance: Stance) -> str:
    """
    Build the instruction for reviewing one text window.

    Args:
        window_text: Raw text of the window, embedded verbatim
        risks: Risk categories the caller asked for
        stance: Party perspective of the review

    Returns:
        Prompt string; identical inputs always give an identical prompt
    """
    return (
        "You are a professional legal review assistant.\n"
        f"Review the following excerpt of a legal document from the standpoint of {stance_label(stance)}.\n\n"
        f"Focus on these risks: {format_risk_labels(risks)}.\n\n"
        f"{RISK_LEVEL_RUBRIC}\n\n"
        "Document excerpt:\n"
        f"{window_text}\n\n"
        f"{OUTPUT_SCHEMA}"
    )


def build_outline_prompt(document_text: str, row: ChecklistRow, stance: Stance) -> str:
    """Build the instruction for answering one checklist item against the whole document."""
    description = f"Item description: {row.description}\n" if row.description else ""
    return (
        "You are a professional legal review assistant.\n"
        f"Review the legal document below from the standpoint of {stance_label(stance)} "
        "and answer the following checklist item.\n\n"
        f"Checklist item: {row.item_name}\n"
        f"{description}\n"
        "Full document:\n"
        f"{document_text}\n\n"
        "Give a concise review conclusion for this item: state whether the document covers it, "
        "quote the relevant clause where there is one, and point out any risk or missing content. "
        "Reply in plain text without markdown."
    )


def build_company_prompt(company_name: str) -> str:
    return (
        f'Research the company "{company_name}". Provide information about its registration details, '
        "litigation history and industry qualifications. Keep it concise."
    )


def build_similar_cases_prompt(query: str) -> str:
    return (
        f'Find similar legal cases about "{query}". Provide the judicial outcomes, key points of the '
        "rulings and the legal basis. Keep it concise."
    )
