"""Health check and provider listing endpoints."""
from fastapi import APIRouter, Depends
from typing import Dict, Any, List
import logging

from legal_review.config import settings
from legal_review.dependencies import get_review_aggregator
from legal_review.services.provider_gateway import PROVIDER_ROUTES, default_hosts
from legal_review.services.review_aggregator import ReviewAggregator

router = APIRouter()
providers_router = APIRouter()
logger = logging.getLogger(__name__)

SERVICE_NAME = "Legal Document Review Service"
SERVICE_VERSION = "1.0.0"


def provider_table() -> List[Dict[str, Any]]:
    hosts = default_hosts()
    return [
        {
            "provider": provider.value,
            "endpoint": hosts[provider].rstrip("/") + route.endpoint_path,
            "default_model": route.default_model,
        }
        for provider, route in PROVIDER_ROUTES.items()
    ]


@router.get("/")
async def health_check() -> Dict[str, Any]:
    """Basic health check endpoint."""
    return {
        "status": "healthy",
        "service": SERVICE_NAME,
        "version": SERVICE_VERSION
    }


@router.get("/detailed")
async def detailed_health_check(
    aggregator: ReviewAggregator = Depends(get_review_aggregator)
) -> Dict[str, Any]:
    """Detailed health check including review configuration."""
    return {
        "status": "healthy",
        "service": SERVICE_NAME,
        "version": SERVICE_VERSION,
        "checks": {
            "review": {
                "chunk_size": aggregator.chunk_size,
                "chunk_overlap": aggregator.chunk_overlap,
                "outline_row_delay_seconds": aggregator.row_delay_seconds,
                "timeout_seconds": settings.llm_timeout_seconds,
                "max_tokens": settings.llm_max_tokens,
            },
            "providers": provider_table(),
        }
    }


@providers_router.get("/")
async def list_providers() -> Dict[str, Any]:
    """Provider table for the configuration panel."""
    return {
        "status": "success",
        "default_provider": settings.default_provider,
        "providers": provider_table(),
    }
