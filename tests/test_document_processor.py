"""Unit tests for upload parsing."""
import io

import pytest
from docx import Document

from legal_review.exceptions import DocumentProcessingError
from legal_review.services.document_processor import DocumentProcessor


def _docx_bytes():
    doc = Document()
    doc.add_paragraph("Supply Agreement")
    doc.add_paragraph("   ")
    doc.add_paragraph("Party A shall pay within 30 days & no later.")
    table = doc.add_table(rows=1, cols=2)
    table.rows[0].cells[0].text = "Price"
    table.rows[0].cells[1].text = "100,000"
    buffer = io.BytesIO()
    doc.save(buffer)
    return buffer.getvalue()


@pytest.fixture
def processor():
    return DocumentProcessor()


def test_docx_paragraphs_and_table_rows(processor):
    parsed = processor.parse(_docx_bytes(), "contract.DOCX")

    assert parsed.text == "Supply Agreement\nParty A shall pay within 30 days & no later.\nPrice | 100,000"
    assert parsed.html.startswith('<div class="word-content">')
    assert "<p>Party A shall pay within 30 days &amp; no later.</p>" in parsed.html
    assert '<p class="table-row">Price | 100,000</p>' in parsed.html


def test_text_file_falls_back_to_latin1(processor):
    parsed = processor.parse("Clause 1: café terms\n\nClause 2".encode("latin-1"), "notes.txt")

    assert parsed.text == "Clause 1: café terms\n\nClause 2"
    assert parsed.html == '<div class="text-content"><p>Clause 1: café terms</p><p>Clause 2</p></div>'


def test_unsupported_extension_is_rejected(processor):
    with pytest.raises(DocumentProcessingError):
        processor.parse(b"binary", "scan.png")


def test_broken_pdf_raises_processing_error(processor):
    with pytest.raises(DocumentProcessingError):
        processor.parse(b"not a pdf at all", "contract.pdf")


def test_broken_docx_raises_processing_error(processor):
    with pytest.raises(DocumentProcessingError):
        processor.parse(b"not a zip", "contract.docx")
