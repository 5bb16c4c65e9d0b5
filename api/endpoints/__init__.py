"""API endpoints for the conversation sentiment service."""

from fastapi import APIRouter

from .health import router as health_router
from .sentiment import router as sentiment_router

# Create main API router
api_router = APIRouter()

# Include all routers
api_router.include_router(health_router, prefix="/health", tags=["Health"])
api_router.include_router(sentiment_router, prefix="/sentiment", tags=["Sentiment"])

__all__ = ["api_router"]
