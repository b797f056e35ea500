"""Unit tests for highlighting and the DOCX review report."""
import io
from datetime import datetime

from docx import Document
from docx.enum.text import WD_COLOR_INDEX

from legal_review.models import ReviewFinding
from legal_review.services.highlighting import TextSegment, highlight_html, segment_text
from legal_review.services.report_builder import REPORT_TITLE, build_review_report, report_filename


def _finding(snippet, level="high", reason="reason", risk_type="financial"):
    return ReviewFinding(
        original_text_snippet=snippet,
        risk_type=risk_type,
        risk_level=level,
        reason=reason,
        suggestion="suggestion",
    )


def test_segments_take_earliest_match_first():
    text = "Party A pays late. Party B may terminate."
    findings = [_finding("may terminate"), _finding("pays late"), _finding("not in text")]

    segments = segment_text(text, findings)

    assert [s.text for s in segments] == ["Party A ", "pays late", ". Party B ", "may terminate", "."]
    assert [s.highlighted for s in segments] == [False, True, False, True, False]
    assert "".join(s.text for s in segments) == text


def test_segments_without_findings_is_whole_text():
    assert segment_text("plain", []) == [TextSegment("plain")]


def test_highlight_html_marks_first_occurrence_with_reason():
    markup = "<p>Payment within 30 days. Payment within 30 days.</p>"

    result = highlight_html(markup, [_finding("within 30 days", level="medium", reason='too "short"')])

    assert result.count("<mark") == 1
    assert '<mark class="risk risk-medium" title="too &quot;short&quot;">within 30 days</mark>' in result


def test_highlight_html_matches_escaped_text_and_skips_tags():
    markup = '<div class="pdf-page" data-page="1"><p>R&amp;D costs borne by page owner</p></div>'

    result = highlight_html(markup, [_finding("R&D costs"), _finding("page"), _finding("absent")])

    assert "<mark class=\"risk risk-high\" title=\"reason\">R&amp;D costs</mark>" in result
    assert 'class="pdf-page" data-page="1"' in result
    assert "by <mark class=\"risk risk-high\" title=\"reason\">page</mark> owner" in result


def test_report_contains_summary_and_highlighted_original():
    text = "Article 1. Party A pays within 90 days.\nArticle 2. Penalty is unlimited."
    findings = [
        _finding("within 90 days", level="high", risk_type="financial"),
        _finding("Penalty is unlimited", level="low", risk_type="execution"),
    ]

    data = build_review_report(text, findings, generated_at=datetime(2026, 1, 2, 3, 4, 5))

    doc = Document(io.BytesIO(data))
    paragraphs = [p.text for p in doc.paragraphs]
    assert paragraphs[0] == REPORT_TITLE
    assert "Generated: 2026-01-02 03:04:05" in paragraphs
    assert "1. [Financial risk] [High risk]" in paragraphs
    assert "2. [Execution risk] [Low risk]" in paragraphs
    assert "Article 1. Party A pays within 90 days." in paragraphs
    assert "Article 2. Penalty is unlimited." in paragraphs

    highlighted = [
        run.text for p in doc.paragraphs for run in p.runs
        if run.font.highlight_color == WD_COLOR_INDEX.YELLOW
    ]
    assert highlighted == ["within 90 days", "Penalty is unlimited"]


def test_report_without_findings_says_so():
    doc = Document(io.BytesIO(build_review_report("Nothing risky here.", [])))

    paragraphs = [p.text for p in doc.paragraphs]
    assert "No significant risks found." in paragraphs
    assert "Nothing risky here." in paragraphs


def test_report_filename_uses_document_stem():
    name = report_filename("supply_contract.docx", now=datetime(2026, 3, 4, 5, 6, 7))

    assert name == "supply_contract_review_report_2026-03-04T05-06-07.docx"
