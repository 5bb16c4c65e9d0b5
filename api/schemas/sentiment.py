"""Pydantic schemas for sentiment endpoints."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from .base import CamelModel, RecordModel


class BatchAnalysisRequest(CamelModel):
    """Request to run a batch analysis. Dates are validated by the processor."""

    start_date: str
    end_date: str


class BatchAnalysisResponse(BaseModel):
    """Result of a batch run.

    Only ``message`` is present when no conversations matched.
    """

    message: str
    batch_analysis_id: Optional[str] = None
    overall_sentiment: Optional[str] = None
    conversations_processed: Optional[int] = None


class ConversationAnalysisRequest(CamelModel):
    """Request to analyze one conversation."""

    conversation_id: str


class ConversationAnalysisResponse(BaseModel):
    """Sentiment of one conversation."""

    conversation_id: str
    sentiment: str
    description: Optional[str] = None


class BatchAnalysisSummary(RecordModel):
    """Batch analysis row as listed in the history view."""

    id: str
    start_date: str
    end_date: str
    overall_sentiment: Optional[str] = None
    positive_count: int = 0
    negative_count: int = 0
    neutral_count: int = 0
    unknown_count: int = 0
    created_at: Optional[datetime] = None


class BatchAnalysisDetailItem(RecordModel):
    """Per-conversation detail row."""

    id: int
    conversation_id: str
    sentiment: str
    description: Optional[str] = None
    created_at: Optional[datetime] = None


class BatchAnalysisDetailResponse(BatchAnalysisSummary):
    """Batch analysis with its conversation ids and detail rows."""

    conversation_ids: list[str] = []
    details: list[BatchAnalysisDetailItem] = []


class BatchAnalysisListResponse(BaseModel):
    """Batch analysis history, newest first."""

    data: list[BatchAnalysisSummary]
    total: int
