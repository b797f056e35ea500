"""Document processing service for extracting reviewable text from uploads."""
import io
import html
from typing import List, NamedTuple, Tuple
from pathlib import Path
import logging
from docx import Document
import PyPDF2

from legal_review.exceptions import DocumentProcessingError


logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = (".pdf", ".docx", ".doc", ".txt")


class ParsedDocument(NamedTuple):
    """Plain text for the model and HTML for display."""
    text: str
    html: str


class DocumentProcessor:
    """Service for turning uploaded legal documents into text and display HTML."""

    def extract_text_from_docx(self, file_content: bytes) -> Tuple[str, str]:
        """
        Extract text from a Word document.

        Args:
            file_content: Binary content of the Word document

        Returns:
            Tuple of (plain text, HTML with one <p> per paragraph)
        """
        try:
            doc = Document(io.BytesIO(file_content))
        except Exception as e:
            logger.error(f"Failed to open Word document, error: {str(e)}")
            raise DocumentProcessingError(f"Could not read Word document: {e}") from e

        text_parts: List[str] = []
        html_parts: List[str] = []

        for paragraph in doc.paragraphs:
            if paragraph.text.strip():
                text_parts.append(paragraph.text.strip())
                html_parts.append(f"<p>{html.escape(paragraph.text.strip(), quote=False)}</p>")

        # Tables follow the body paragraphs, one line per row
        for table in doc.tables:
            for row in table.rows:
                row_text = []
                for cell in row.cells:
                    if cell.text.strip():
                        row_text.append(cell.text.strip())
                if row_text:
                    line = " | ".join(row_text)
                    text_parts.append(line)
                    html_parts.append(f"<p class=\"table-row\">{html.escape(line, quote=False)}</p>")

        full_text = "\n".join(text_parts)
        logger.info(f"Extracted text from Word document, length: {len(full_text)}")
        return full_text, f"<div class=\"word-content\">{''.join(html_parts)}</div>"

    def extract_text_from_pdf(self, file_content: bytes) -> Tuple[str, str]:
        """
        Extract text from a PDF document.

        Args:
            file_content: Binary content of the PDF document

        Returns:
            Tuple of (plain text, HTML with one block per page)
        """
        try:
            pdf_reader = PyPDF2.PdfReader(io.BytesIO(file_content))
            text_parts: List[str] = []
            html_parts: List[str] = []

            for number, page in enumerate(pdf_reader.pages, start=1):
                page_text = (page.extract_text() or "").strip()
                if page_text:
                    text_parts.append(page_text)
                html_parts.append(
                    f"<div class=\"pdf-page\" data-page=\"{number}\"><p>{html.escape(page_text, quote=False)}</p></div>"
                )

            full_text = "\n".join(text_parts)
            logger.info(f"Extracted text from PDF document, pages: {len(pdf_reader.pages)}, length: {len(full_text)}")
            return full_text, f"<div class=\"pdf-content\">{''.join(html_parts)}</div>"

        except Exception as e:
            logger.error(f"Failed to extract text from PDF document, error: {str(e)}")
            raise DocumentProcessingError(f"Could not read PDF document: {e}") from e

    def extract_text_from_text(self, file_content: bytes) -> Tuple[str, str]:
        # Try UTF-8 first, then fall back to latin-1 which accepts any byte
        try:
            text = file_content.decode('utf-8')
        except UnicodeDecodeError:
            text = file_content.decode('latin-1')

        logger.info(f"Extracted text from text file, length: {len(text)}")
        paragraphs = "".join(
            f"<p>{html.escape(line, quote=False)}</p>" for line in text.splitlines() if line.strip()
        )
        return text, f"<div class=\"text-content\">{paragraphs}</div>"

    def parse(self, file_content: bytes, file_name: str) -> ParsedDocument:
        """
        Extract text and display HTML based on the file extension.

        Args:
            file_content: Binary content of the file
            file_name: Name of the file (used to determine type)

        Returns:
            ParsedDocument with plain text and HTML

        Raises:
            DocumentProcessingError: unsupported or unreadable file
        """
        file_extension = Path(file_name or "").suffix.lower()

        if file_extension in ['.docx', '.doc']:
            text, markup = self.extract_text_from_docx(file_content)
        elif file_extension == '.pdf':
            text, markup = self.extract_text_from_pdf(file_content)
        elif file_extension == '.txt':
            text, markup = self.extract_text_from_text(file_content)
        else:
            logger.warning(f"Unsupported file type, file_name: {file_name}, extension: {file_extension}")
            raise DocumentProcessingError(
                f"Unsupported file type '{file_extension or file_name}'. Upload a PDF or Word document."
            )
        return ParsedDocument(text=text, html=markup)
