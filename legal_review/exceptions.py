"""Exceptions raised by the review pipeline."""
from typing import Optional


class ReviewError(Exception):
    """Base exception for all review errors"""
    pass


class ChunkingError(ReviewError):
    """Raised when window/overlap sizes cannot produce a chunking"""
    pass


class ConfigurationError(ReviewError):
    """Raised when the provider configuration is unusable (unknown provider, missing key)"""
    pass


class GatewayError(ReviewError):
    """Raised when a provider call does not yield reply text.

    ``kind`` is ``"connectivity"`` when no response was received at all
    (network failure, timeout, CORS proxy down) and ``"provider"`` when the
    provider answered with an error status or an unusable body.
    """

    CONNECTIVITY = "connectivity"
    PROVIDER = "provider"

    def __init__(self, message: str, kind: str = PROVIDER, status_code: Optional[int] = None):
        super().__init__(message)
        self.kind = kind
        self.status_code = status_code


class RecoveryError(ReviewError):
    """Raised when a model reply cannot be coerced into JSON"""
    pass


class DocumentProcessingError(ReviewError):
    """Raised when an uploaded document cannot be read"""
    pass


class ChecklistError(ReviewError):
    """Raised when a review checklist workbook cannot be read"""
    pass
