"""API routes initialization."""
from fastapi import APIRouter

from legal_review.api import health, outline, report, research, review

router = APIRouter()

# Include all API route modules
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(health.providers_router, prefix="/providers", tags=["providers"])
router.include_router(review.router, prefix="/review", tags=["review"])
router.include_router(outline.router, prefix="/outline", tags=["outline"])
router.include_router(report.router, prefix="/report", tags=["report"])

# Lookups used from the results panel
router.include_router(research.router, prefix="/research", tags=["research"])
