"""Sentiment analysis endpoints."""

from functools import lru_cache
from typing import Callable, Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy import func
from sqlalchemy.orm import Session

from api.config.database import get_db, get_session_factory
from api.middleware.error_handler import NotFoundError
from api.models import BatchSentimentAnalysis, BatchSentimentAnalysisDetail
from api.schemas.base import ErrorResponse
from api.schemas.sentiment import (
    BatchAnalysisRequest,
    BatchAnalysisResponse,
    ConversationAnalysisRequest,
    ConversationAnalysisResponse,
    BatchAnalysisSummary,
    BatchAnalysisDetailItem,
    BatchAnalysisDetailResponse,
    BatchAnalysisListResponse,
)
from processor.integrations.claude import SentimentClassifier, create_sentiment_classifier
from processor.processors import BatchSentimentProcessor, ConversationSentimentProcessor
from processor.services.analysis_store import AnalysisStore
from processor.services.conversations import ConversationService

router = APIRouter()

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Invalid request"},
    500: {"model": ErrorResponse, "description": "Database failure"},
    503: {"model": ErrorResponse, "description": "Classifier not configured"},
}

# Preflight responses for browser clients
CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
}


@lru_cache
def get_classifier() -> Optional[SentimentClassifier]:
    """Dependency that provides the shared sentiment classifier (None if unconfigured)."""
    return create_sentiment_classifier()


def get_batch_processor(
    session_factory: Callable[[], Session] = Depends(get_session_factory),
    classifier: Optional[SentimentClassifier] = Depends(get_classifier),
) -> BatchSentimentProcessor:
    """Dependency that builds a batch processor for one request."""
    return BatchSentimentProcessor(
        conversations=ConversationService(session_factory),
        store=AnalysisStore(session_factory),
        classifier=classifier,
    )


def get_conversation_processor(
    session_factory: Callable[[], Session] = Depends(get_session_factory),
    classifier: Optional[SentimentClassifier] = Depends(get_classifier),
) -> ConversationSentimentProcessor:
    """Dependency that builds a single-conversation processor for one request."""
    return ConversationSentimentProcessor(
        conversations=ConversationService(session_factory),
        classifier=classifier,
    )


@router.options("/batch", include_in_schema=False)
@router.options("/conversation", include_in_schema=False)
async def sentiment_preflight() -> Response:
    """Answer CORS preflight without touching the body."""
    return Response(status_code=200, headers=CORS_HEADERS)


@router.post(
    "/batch",
    response_model=BatchAnalysisResponse,
    response_model_exclude_none=True,
    responses=ERROR_RESPONSES,
)
async def run_batch_analysis(
    data: BatchAnalysisRequest,
    processor: BatchSentimentProcessor = Depends(get_batch_processor),
):
    """Classify every conversation created in the date range and store the batch."""
    result = await processor.process(data.start_date, data.end_date)
    return BatchAnalysisResponse(**result.to_payload())


@router.post(
    "/conversation",
    response_model=ConversationAnalysisResponse,
    responses={**ERROR_RESPONSES, 404: {"model": ErrorResponse}, 502: {"model": ErrorResponse}},
)
async def analyze_conversation(
    data: ConversationAnalysisRequest,
    processor: ConversationSentimentProcessor = Depends(get_conversation_processor),
):
    """Classify a single conversation without storing the result."""
    detail = await processor.process(data.conversation_id)
    return ConversationAnalysisResponse(
        conversation_id=detail.conversation_id,
        sentiment=detail.sentiment.value,
        description=detail.description,
    )


@router.get("/batches", response_model=BatchAnalysisListResponse)
async def list_batch_analyses(
    db: Session = Depends(get_db),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
):
    """List batch analyses, newest first."""
    total = db.query(func.count(BatchSentimentAnalysis.id)).scalar()
    batches = (
        db.query(BatchSentimentAnalysis)
        .order_by(BatchSentimentAnalysis.created_at.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )

    return BatchAnalysisListResponse(
        data=[BatchAnalysisSummary.model_validate(b) for b in batches],
        total=total,
    )


@router.get("/batches/{batch_analysis_id}", response_model=BatchAnalysisDetailResponse)
async def get_batch_analysis(
    batch_analysis_id: str,
    db: Session = Depends(get_db),
):
    """Get one batch analysis with its per-conversation details."""
    batch = db.query(BatchSentimentAnalysis).filter(BatchSentimentAnalysis.id == batch_analysis_id).first()
    if not batch:
        raise NotFoundError("Batch analysis", batch_analysis_id)

    details = (
        db.query(BatchSentimentAnalysisDetail)
        .filter(BatchSentimentAnalysisDetail.batch_analysis_id == batch_analysis_id)
        .order_by(BatchSentimentAnalysisDetail.id)
        .all()
    )

    return BatchAnalysisDetailResponse(
        **BatchAnalysisSummary.model_validate(batch).model_dump(),
        conversation_ids=batch.conversation_id_list,
        details=[BatchAnalysisDetailItem.model_validate(d) for d in details],
    )
