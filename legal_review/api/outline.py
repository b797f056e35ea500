"""Checklist (outline) review API endpoints."""
from fastapi import APIRouter, HTTPException, UploadFile, File, Form, Depends
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, Field
from typing import List, Dict, Any, Optional
from urllib.parse import quote
import io
import logging

from legal_review.api.review import read_upload
from legal_review.dependencies import build_provider_config, get_document_processor, get_review_aggregator
from legal_review.exceptions import ChecklistError, ConfigurationError, DocumentProcessingError
from legal_review.models import OutlineAnswer, Stance
from legal_review.services.checklist import (
    XLSX_MEDIA_TYPE,
    build_checklist_workbook,
    format_review_questions,
    parse_checklist,
)
from legal_review.services.document_processor import DocumentProcessor
from legal_review.services.review_aggregator import ReviewAggregator

router = APIRouter()
logger = logging.getLogger(__name__)


class OutlineExportRequest(BaseModel):
    """Request body for XLSX export of checklist answers."""
    answers: List[OutlineAnswer]
    filename: Optional[str] = Field(default=None, description="Base name for the download")


@router.post("/parse")
async def parse_outline(checklist: UploadFile = File(...)) -> Dict[str, Any]:
    """Parse a checklist workbook and return its review items."""
    try:
        content = await read_upload(checklist)
        rows = parse_checklist(content)
        return {
            "status": "success",
            "filename": checklist.filename,
            "items": [row.model_dump() for row in rows],
            "total_count": len(rows),
            "questions": format_review_questions(rows),
        }
    except HTTPException:
        raise
    except ChecklistError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:  # noqa: BLE001
        logger.error(f"Checklist parse failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/")
async def review_outline(
    document: UploadFile = File(...),
    checklist: UploadFile = File(...),
    stance: Stance = Form(Stance.PARTY_A),
    provider: Optional[str] = Form(None),
    api_key: Optional[str] = Form(None),
    model: Optional[str] = Form(None),
    processor: DocumentProcessor = Depends(get_document_processor),
    aggregator: ReviewAggregator = Depends(get_review_aggregator),
) -> Dict[str, Any]:
    """Answer every checklist item against the uploaded document."""
    try:
        parsed = processor.parse(await read_upload(document), document.filename)
        rows = parse_checklist(await read_upload(checklist))
        if not rows:
            raise HTTPException(status_code=400, detail="No review items found in the checklist")

        config = build_provider_config(provider, api_key, model)
        logger.info(f"Outline review of {document.filename}, items: {len(rows)}, provider: {config.provider}")
        outcome = await run_in_threadpool(aggregator.review_outline, config, parsed.text, rows, stance)

        return {
            "status": "success",
            "filename": document.filename,
            "answers": [answer.model_dump() for answer in outcome.answers],
            "logs": outcome.logs,
            "failed_units": outcome.failed_units,
        }

    except HTTPException:
        raise
    except (ConfigurationError, DocumentProcessingError, ChecklistError) as e:
        logger.warning(f"Outline review rejected for {document.filename}: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:  # noqa: BLE001
        logger.error(f"Outline review failed for {document.filename}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Outline review failed: {str(e)}")


@router.post("/export")
async def export_outline(request: OutlineExportRequest) -> StreamingResponse:
    """Return the answered checklist as an XLSX file."""
    if not request.answers:
        raise HTTPException(status_code=400, detail="No answers to export")
    try:
        data = build_checklist_workbook(request.answers)
    except Exception as e:  # noqa: BLE001
        logger.error(f"Checklist export failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))

    filename = f"{request.filename or 'checklist'}_review_results.xlsx"
    return StreamingResponse(
        io.BytesIO(data),
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f"attachment; filename*=UTF-8''{quote(filename)}"},
    )
