"""
Legal Review - AI risk review for legal documents

Main FastAPI application entry point with startup/shutdown lifecycle management.
Provides REST API for document review, checklist review, report export and lookups.
"""
import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging

from legal_review.config import settings
from legal_review.api import router
from legal_review.services.document_processor import DocumentProcessor
from legal_review.services.provider_gateway import ProviderGateway
from legal_review.services.review_aggregator import ReviewAggregator

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="Legal Review - AI Legal Document Review",
    description="Upload legal documents and review them for policy, financial and execution risks "
                "using DeepSeek, Doubao or Tongyi Qianwen",
    version="1.0.0",
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None
)

# CORS middleware for web frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routes
app.include_router(router, prefix="/api")


@app.on_event("startup")
async def startup_event():
    """
    Initialize services on application startup.

    - Sets up the document processor for uploads
    - Creates the provider gateway and the review aggregator around it
    """
    logger.info("🚀 Starting Legal Review service")

    app.state.document_processor = DocumentProcessor()
    logger.info("✅ Document processor ready")

    gateway = ProviderGateway()
    app.state.review_aggregator = ReviewAggregator(gateway)
    logger.info(f"✅ Review aggregator ready (chunk_size={settings.chunk_size}, "
                f"overlap={settings.chunk_overlap}, timeout={settings.llm_timeout_seconds}s)")

    logger.info(f"🎉 Legal Review ready at http://{settings.host}:{settings.port}")


@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup resources on application shutdown."""
    logger.info("👋 Shutting down Legal Review service")

    aggregator = getattr(app.state, "review_aggregator", None)
    if aggregator is not None:
        aggregator.gateway.close()


@app.get("/")
async def root():
    """Service information endpoint."""
    return {"message": "Legal Document Review Service", "version": "1.0.0", "docs": "/docs"}


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "version": "1.0.0"}


if __name__ == "__main__":
    uvicorn.run(
        "legal_review.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower()
    )
