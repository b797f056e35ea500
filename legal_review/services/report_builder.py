"""DOCX review report generation."""
import io
import logging
from datetime import datetime
from typing import List, Optional, Sequence

from docx import Document
from docx.enum.text import WD_ALIGN_PARAGRAPH, WD_COLOR_INDEX
from docx.shared import Pt, RGBColor

from legal_review.models import ReviewFinding, RiskLevel, RISK_LEVEL_LABELS, RISK_TYPE_LABELS
from legal_review.services.highlighting import TextSegment, segment_text

logger = logging.getLogger(__name__)

REPORT_TITLE = "Legal Document Review Report"
DOCX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

_HIGH_RISK_COLOR = RGBColor(0xFF, 0x00, 0x00)


def finding_title(index: int, finding: ReviewFinding) -> str:
    return (f"{index}. [{RISK_TYPE_LABELS[finding.risk_type]}] "
            f"[{RISK_LEVEL_LABELS[finding.risk_level]}]")


def _add_labelled(doc, label: str, value: str, italic: bool = False):
    paragraph = doc.add_paragraph()
    label_run = paragraph.add_run(label)
    label_run.bold = not italic
    label_run.italic = italic
    value_run = paragraph.add_run(value)
    value_run.italic = italic
    return paragraph


def _add_findings(doc, findings: Sequence[ReviewFinding]) -> None:
    if not findings:
        doc.add_paragraph("No significant risks found.")
        return

    for index, finding in enumerate(findings, start=1):
        title = doc.add_paragraph()
        title.paragraph_format.space_before = Pt(10)
        run = title.add_run(finding_title(index, finding))
        run.bold = True
        if finding.risk_level == RiskLevel.HIGH:
            run.font.color.rgb = _HIGH_RISK_COLOR

        _add_labelled(doc, "Reason: ", finding.reason)
        _add_labelled(doc, "Suggestion: ", finding.suggestion)
        snippet = _add_labelled(doc, "Original text: ", f"\"{finding.original_text_snippet}\"", italic=True)
        snippet.paragraph_format.space_after = Pt(10)


def _add_annotated_text(doc, segments: List[TextSegment]) -> None:
    paragraph = doc.add_paragraph()
    for segment in segments:
        parts = segment.text.split("\n")
        for i, part in enumerate(parts):
            if part:
                run = paragraph.add_run(part)
                if segment.highlighted:
                    run.bold = True
                    run.font.highlight_color = WD_COLOR_INDEX.YELLOW
            if i < len(parts) - 1:
                paragraph = doc.add_paragraph()


def build_review_report(
    original_text: str,
    findings: Sequence[ReviewFinding],
    generated_at: Optional[datetime] = None,
) -> bytes:
    """
    Build the review report as DOCX bytes.

    The report opens with the risk summary (one numbered entry per finding)
    and continues on a new page with the original text, risk snippets
    highlighted.
    """
    generated_at = generated_at or datetime.now()
    doc = Document()

    title = doc.add_heading(REPORT_TITLE, level=0)
    title.alignment = WD_ALIGN_PARAGRAPH.CENTER
    stamp = doc.add_paragraph(f"Generated: {generated_at.strftime('%Y-%m-%d %H:%M:%S')}")
    stamp.alignment = WD_ALIGN_PARAGRAPH.CENTER

    doc.add_heading("Risk Summary", level=1)
    _add_findings(doc, findings)

    original_heading = doc.add_heading("Original Document (annotated)", level=1)
    original_heading.paragraph_format.page_break_before = True
    _add_annotated_text(doc, segment_text(original_text, findings))

    buffer = io.BytesIO()
    doc.save(buffer)
    logger.info(f"Built review report, findings: {len(findings)}, text_length: {len(original_text)}")
    return buffer.getvalue()


def report_filename(base_name: str, now: Optional[datetime] = None) -> str:
    now = now or datetime.now()
    stem = base_name.rsplit(".", 1)[0] if "." in base_name else base_name
    return f"{stem or 'document'}_review_report_{now.strftime('%Y-%m-%dT%H-%M-%S')}.docx"
