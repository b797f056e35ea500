"""Document review API endpoints (standard mode)."""
from fastapi import APIRouter, HTTPException, UploadFile, File, Form, Depends
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel, Field
from typing import List, Dict, Any, Optional
import logging

from legal_review.config import settings
from legal_review.dependencies import (
    ProviderSelection,
    build_provider_config,
    get_document_processor,
    get_review_aggregator,
)
from legal_review.exceptions import ChunkingError, ConfigurationError, DocumentProcessingError
from legal_review.models import ReviewOutcome, RiskType, Stance
from legal_review.services.document_processor import DocumentProcessor
from legal_review.services.highlighting import highlight_html
from legal_review.services.review_aggregator import ReviewAggregator

router = APIRouter()
logger = logging.getLogger(__name__)


class TextReviewRequest(BaseModel):
    """Review request for text the client has already extracted."""
    text: str = Field(..., description="Plain text of the document")
    config: ProviderSelection = Field(default_factory=ProviderSelection)
    risks: List[RiskType] = Field(..., min_length=1, description="Risk categories to review")
    stance: Stance = Field(default=Stance.PARTY_A, description="Party perspective")


async def read_upload(upload: UploadFile) -> bytes:
    """Read an uploaded file, enforcing the configured size limit."""
    content = await upload.read()
    limit = settings.max_upload_mb * 1024 * 1024
    if len(content) > limit:
        raise HTTPException(
            status_code=413,
            detail=f"File '{upload.filename}' exceeds the {settings.max_upload_mb} MB upload limit"
        )
    if not content:
        raise HTTPException(status_code=400, detail=f"File '{upload.filename}' is empty")
    return content


def outcome_payload(outcome: ReviewOutcome) -> Dict[str, Any]:
    return {
        "reviews": [finding.model_dump(mode="json") for finding in outcome.reviews],
        "logs": outcome.logs,
        "chunks_count": outcome.chunk_count,
        "failed_units": outcome.failed_units,
    }


@router.post("/")
async def review_document(
    file: UploadFile = File(...),
    risks: List[RiskType] = Form(...),
    stance: Stance = Form(Stance.PARTY_A),
    provider: Optional[str] = Form(None),
    api_key: Optional[str] = Form(None),
    model: Optional[str] = Form(None),
    processor: DocumentProcessor = Depends(get_document_processor),
    aggregator: ReviewAggregator = Depends(get_review_aggregator),
) -> Dict[str, Any]:
    """Upload a PDF or Word document and review it for the selected risks."""
    try:
        content = await read_upload(file)
        parsed = processor.parse(content, file.filename)
        if not parsed.text.strip():
            raise HTTPException(status_code=400, detail=f"No text could be extracted from '{file.filename}'")

        config = build_provider_config(provider, api_key, model)
        logger.info(f"Reviewing {file.filename}, text length: {len(parsed.text)}, "
                    f"provider: {config.provider}, risks: {[r.value for r in risks]}, stance: {stance.value}")
        outcome = await run_in_threadpool(aggregator.review_document, config, parsed.text, risks, stance)

        response = {
            "status": "success",
            "filename": file.filename,
            "text_length": len(parsed.text),
            "text": parsed.text,
            "html": highlight_html(parsed.html, outcome.reviews),
        }
        response.update(outcome_payload(outcome))
        return response

    except HTTPException:
        raise
    except (ConfigurationError, ChunkingError, DocumentProcessingError) as e:
        logger.warning(f"Review rejected for {file.filename}: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:  # noqa: BLE001
        logger.error(f"Review failed for {file.filename}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Review failed: {str(e)}")


@router.post("/text")
async def review_text(
    request: TextReviewRequest,
    aggregator: ReviewAggregator = Depends(get_review_aggregator),
) -> Dict[str, Any]:
    """Review plain text supplied in the request body."""
    if not request.text.strip():
        raise HTTPException(status_code=400, detail="Text is empty")
    try:
        config = build_provider_config(request.config.provider, request.config.api_key, request.config.model)
        outcome = await run_in_threadpool(
            aggregator.review_document, config, request.text, request.risks, request.stance
        )
        response = {"status": "success", "text_length": len(request.text)}
        response.update(outcome_payload(outcome))
        return response

    except (ConfigurationError, ChunkingError) as e:
        logger.warning(f"Text review rejected: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:  # noqa: BLE001
        logger.error(f"Text review failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Review failed: {str(e)}")
