"""Unit tests for checklist workbook parsing and export."""
import io

import pytest
from openpyxl import Workbook, load_workbook

from legal_review.exceptions import ChecklistError
from legal_review.models import ChecklistRow, OutlineAnswer
from legal_review.services.checklist import (
    EXPORT_HEADERS,
    EXPORT_SHEET_TITLE,
    build_checklist_workbook,
    format_review_questions,
    is_header_row,
    parse_checklist,
)


def _workbook_bytes(rows):
    workbook = Workbook()
    sheet = workbook.active
    for row_number, values in rows:
        for column, value in enumerate(values, start=1):
            sheet.cell(row=row_number, column=column, value=value)
    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


def test_parse_skips_headers_and_blank_rows():
    content = _workbook_bytes([
        (1, ["审查项目", "说明", "审查结果"]),
        (3, ["Payment terms", "Check the payment schedule"]),
        (4, ["Termination", None]),
        (5, [None, "orphan description"]),
    ])

    rows = parse_checklist(content)

    assert rows == [
        ChecklistRow(row=1, item_name="Payment terms", description="Check the payment schedule"),
        ChecklistRow(row=2, item_name="Termination", description=""),
    ]


def test_parse_skips_english_header():
    content = _workbook_bytes([
        (1, ["Review Item", "Description"]),
        (2, ["  Governing law  ", 42]),
    ])

    rows = parse_checklist(content)

    assert rows == [ChecklistRow(row=1, item_name="Governing law", description="42")]


@pytest.mark.parametrize("name,expected", [
    ("审查项目", True),
    ("合同审查项目", True),
    ("项目", True),
    ("补充说明", True),
    ("项目名称及金额", False),
    ("Liability cap", False),
])
def test_header_detection(name, expected):
    assert is_header_row(name) is expected


def test_unreadable_workbook_raises():
    with pytest.raises(ChecklistError):
        parse_checklist(b"this is not a spreadsheet")


def test_export_writes_header_and_answers():
    answers = [
        OutlineAnswer(row=1, item_name="Payment terms", description="schedule", result="Clause 4 covers it."),
        OutlineAnswer(row=2, item_name="Termination", result="Review failed: timeout"),
    ]

    data = build_checklist_workbook(answers)

    sheet = load_workbook(io.BytesIO(data)).active
    assert sheet.title == EXPORT_SHEET_TITLE
    values = [list(row) for row in sheet.iter_rows(values_only=True)]
    assert values[0] == list(EXPORT_HEADERS)
    assert values[1] == ["Payment terms", "schedule", "Clause 4 covers it."]
    assert values[2][0] == "Termination"
    assert values[2][2] == "Review failed: timeout"
    assert sheet.column_dimensions["C"].width == 80


def test_review_questions_are_numbered():
    rows = [
        ChecklistRow(row=1, item_name="Parties", description="Names and addresses"),
        ChecklistRow(row=2, item_name="Term"),
    ]

    assert format_review_questions(rows) == "1. Parties\n   Description: Names and addresses\n\n2. Term"
