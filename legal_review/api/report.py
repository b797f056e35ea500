"""Review report export endpoint."""
from fastapi import APIRouter, HTTPException
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, Field
from typing import List, Optional
from urllib.parse import quote
import io
import logging

from legal_review.models import ReviewFinding
from legal_review.services.report_builder import DOCX_MEDIA_TYPE, build_review_report, report_filename

router = APIRouter()
logger = logging.getLogger(__name__)


class ReportExportRequest(BaseModel):
    """Request body for DOCX report export."""
    original_text: str = Field(..., description="Plain text of the reviewed document")
    reviews: List[ReviewFinding] = Field(default_factory=list)
    filename: Optional[str] = Field(default=None, description="Name of the reviewed document")


@router.post("/export")
async def export_report(request: ReportExportRequest) -> StreamingResponse:
    """Return the review report as a Word document."""
    try:
        data = build_review_report(request.original_text, request.reviews)
    except Exception as e:  # noqa: BLE001
        logger.error(f"Report export failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))

    filename = report_filename(request.filename or "document")
    return StreamingResponse(
        io.BytesIO(data),
        media_type=DOCX_MEDIA_TYPE,
        headers={"Content-Disposition": f"attachment; filename*=UTF-8''{quote(filename)}"},
    )
