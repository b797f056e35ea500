"""Review checklist (outline) workbooks: parsing uploads and exporting answers."""
import io
import logging
from typing import Any, Iterable, List, Sequence

from openpyxl import Workbook, load_workbook
from openpyxl.styles import Alignment, Font

from legal_review.exceptions import ChecklistError
from legal_review.models import ChecklistRow, OutlineAnswer

logger = logging.getLogger(__name__)

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
EXPORT_SHEET_TITLE = "Review Results"
EXPORT_HEADERS = ("Review Item", "Description", "Result")
EXPORT_COLUMN_WIDTHS = {"A": 30, "B": 50, "C": 80}

_HEADER_NAMES = {"review item", "review items", "item", "items", "checklist item", "description"}


def _cell_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def is_header_row(item_name: str) -> bool:
    """Title rows of the sheet, in Chinese or English."""
    if "审查项目" in item_name or "说明" in item_name:
        return True
    if "项目" in item_name and len(item_name) < 3:
        return True
    return item_name.lower() in _HEADER_NAMES


def parse_checklist(file_content: bytes) -> List[ChecklistRow]:
    """
    Read review items from the first sheet of a checklist workbook.

    Column A holds the item name and column B its description. Blank rows are
    dropped before numbering, so ``row`` is the index among non-blank rows.

    Raises:
        ChecklistError: the file is not a readable workbook
    """
    try:
        workbook = load_workbook(io.BytesIO(file_content), read_only=True, data_only=True)
    except Exception as e:
        logger.error(f"Failed to open checklist workbook, error: {str(e)}")
        raise ChecklistError(f"Could not read checklist workbook: {e}") from e

    try:
        sheet = workbook.worksheets[0]
        non_blank = [
            values for values in sheet.iter_rows(values_only=True)
            if values and any(_cell_text(v) for v in values)
        ]
    finally:
        workbook.close()

    rows: List[ChecklistRow] = []
    for index, values in enumerate(non_blank):
        item_name = _cell_text(values[0]) if len(values) > 0 else ""
        description = _cell_text(values[1]) if len(values) > 1 else ""
        if not item_name or is_header_row(item_name):
            continue
        rows.append(ChecklistRow(row=index, item_name=item_name, description=description))

    logger.info(f"Parsed checklist, sheet: {sheet.title}, items: {len(rows)}")
    return rows


def build_checklist_workbook(answers: Iterable[OutlineAnswer]) -> bytes:
    """Write the answered checklist to a new XLSX workbook."""
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = EXPORT_SHEET_TITLE
    sheet.append(list(EXPORT_HEADERS))
    for cell in sheet[1]:
        cell.font = Font(bold=True)

    count = 0
    for answer in answers:
        sheet.append([answer.item_name, answer.description, answer.result or ""])
        count += 1

    for column, width in EXPORT_COLUMN_WIDTHS.items():
        sheet.column_dimensions[column].width = width
    for row in sheet.iter_rows(min_row=2):
        for cell in row:
            cell.alignment = Alignment(wrap_text=True, vertical="top")

    buffer = io.BytesIO()
    workbook.save(buffer)
    logger.info(f"Built checklist workbook, items: {count}")
    return buffer.getvalue()


def format_review_questions(rows: Sequence[ChecklistRow]) -> str:
    """Numbered question list, one item per block."""
    blocks = []
    for number, row in enumerate(rows, start=1):
        block = f"{number}. {row.item_name}"
        if row.description:
            block += f"\n   Description: {row.description}"
        blocks.append(block)
    return "\n\n".join(blocks)
