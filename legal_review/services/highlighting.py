"""Locate finding snippets in the original document for display and export."""
import html
import logging
from typing import Iterable, List, NamedTuple, Optional

from legal_review.models import ReviewFinding

logger = logging.getLogger(__name__)


class TextSegment(NamedTuple):
    text: str
    highlighted: bool = False
    reason: Optional[str] = None


def _outside_tag(markup: str, index: int) -> bool:
    return markup.rfind("<", 0, index) <= markup.rfind(">", 0, index)


def _find_in_text(markup: str, needle: str) -> int:
    """First occurrence of needle that is not inside an HTML tag, or -1."""
    index = markup.find(needle)
    while index != -1 and not _outside_tag(markup, index):
        index = markup.find(needle, index + 1)
    return index


def highlight_html(markup: str, findings: Iterable[ReviewFinding]) -> str:
    """
    Wrap the first occurrence of each finding's snippet in a <mark>.

    Snippets that do not occur verbatim in the document are left out; the
    reason is carried in the title attribute for hover display.
    """
    located = 0
    for finding in findings:
        snippet = finding.original_text_snippet.strip()
        if not snippet:
            continue
        escaped = html.escape(snippet, quote=False)
        index = _find_in_text(markup, escaped)
        if index == -1:
            continue
        mark = (
            f"<mark class=\"risk risk-{finding.risk_level.value}\" "
            f"title=\"{html.escape(finding.reason, quote=True)}\">{escaped}</mark>"
        )
        markup = markup[:index] + mark + markup[index + len(escaped):]
        located += 1
    logger.debug(f"Highlighted {located} snippet(s) in document HTML")
    return markup


def segment_text(text: str, findings: Iterable[ReviewFinding]) -> List[TextSegment]:
    """
    Split text into plain and highlighted segments.

    From the current position the earliest matching snippet is taken next
    (the first listed finding wins a tie), so overlapping snippets never
    produce overlapping segments.
    """
    snippets = [
        (f.original_text_snippet, f.reason)
        for f in findings
        if f.original_text_snippet and f.original_text_snippet in text
    ]

    segments: List[TextSegment] = []
    cursor = 0
    while cursor < len(text):
        next_index = -1
        next_snippet = None
        for snippet, reason in snippets:
            idx = text.find(snippet, cursor)
            if idx != -1 and (next_index == -1 or idx < next_index):
                next_index = idx
                next_snippet = (snippet, reason)

        if next_snippet is None:
            segments.append(TextSegment(text[cursor:]))
            break
        if next_index > cursor:
            segments.append(TextSegment(text[cursor:next_index]))
        snippet, reason = next_snippet
        segments.append(TextSegment(snippet, highlighted=True, reason=reason))
        cursor = next_index + len(snippet)
    return segments
