"""FastAPI dependency injection functions."""
from typing import Optional

from fastapi import Request, HTTPException
from pydantic import BaseModel, Field

from legal_review.config import settings
from legal_review.models import ProviderConfig
from legal_review.services.document_processor import DocumentProcessor
from legal_review.services.review_aggregator import ReviewAggregator


class ProviderSelection(BaseModel):
    """Provider settings as sent by the client; blanks fall back to the configured defaults."""
    provider: Optional[str] = Field(default=None, description="deepseek, doubao or tongyi")
    api_key: Optional[str] = Field(default=None, description="Provider API key")
    model: Optional[str] = Field(default=None, description="Model or endpoint ID override")


def build_provider_config(
    provider: Optional[str] = None,
    api_key: Optional[str] = None,
    model: Optional[str] = None,
) -> ProviderConfig:
    """
    Merge request values over the remembered configuration from settings.

    The default key and model belong to the default provider and are only
    used when the request resolves to that provider.
    """
    resolved = (provider or settings.default_provider).strip().lower()
    if resolved == settings.default_provider.strip().lower():
        api_key = api_key or settings.default_api_key
        model = model or settings.default_model
    return ProviderConfig(
        provider=resolved,
        api_key=(api_key or "").strip(),
        model=(model or None),
    )


def get_document_processor(request: Request) -> DocumentProcessor:
    """
    Dependency function to inject the DocumentProcessor from app state.

    Raises HTTPException if it is not available, which means startup did not run.
    """
    if getattr(request.app.state, 'document_processor', None) is None:
        raise HTTPException(
            status_code=500,
            detail="DocumentProcessor not initialized. Application may not be fully started."
        )
    return request.app.state.document_processor


def get_review_aggregator(request: Request) -> ReviewAggregator:
    """Dependency function to inject the shared ReviewAggregator from app state."""
    if getattr(request.app.state, 'review_aggregator', None) is None:
        raise HTTPException(
            status_code=500,
            detail="ReviewAggregator not initialized. Application may not be fully started."
        )
    return request.app.state.review_aggregator
