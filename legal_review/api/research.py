"""Counterparty and case-law lookup endpoints."""
from fastapi import APIRouter, HTTPException, Depends
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel, Field
from typing import Dict, Any
import logging

from legal_review.dependencies import ProviderSelection, build_provider_config, get_review_aggregator
from legal_review.exceptions import ConfigurationError, GatewayError
from legal_review.services.review_aggregator import ReviewAggregator

router = APIRouter()
logger = logging.getLogger(__name__)


class LookupRequest(BaseModel):
    """Free-text lookup request."""
    query: str = Field(..., min_length=1, description="Company name or case description")
    config: ProviderSelection = Field(default_factory=ProviderSelection)


async def _run_lookup(method, request: LookupRequest) -> Dict[str, Any]:
    try:
        config = build_provider_config(request.config.provider, request.config.api_key, request.config.model)
        answer = await run_in_threadpool(method, config, request.query.strip())
        return {"status": "success", "query": request.query, "answer": answer}
    except ConfigurationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except GatewayError as e:
        logger.warning(f"Lookup failed ({e.kind}): {e}")
        raise HTTPException(status_code=502, detail=str(e))


@router.post("/company")
async def lookup_company(
    request: LookupRequest,
    aggregator: ReviewAggregator = Depends(get_review_aggregator),
) -> Dict[str, Any]:
    """Registration, litigation and qualification summary for a company."""
    return await _run_lookup(aggregator.lookup_company, request)


@router.post("/cases")
async def lookup_similar_cases(
    request: LookupRequest,
    aggregator: ReviewAggregator = Depends(get_review_aggregator),
) -> Dict[str, Any]:
    """Similar cases with outcomes and legal basis."""
    return await _run_lookup(aggregator.lookup_similar_cases, request)
