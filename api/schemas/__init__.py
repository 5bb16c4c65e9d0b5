"""Pydantic schemas for API request/response validation."""

from .base import CamelModel, RecordModel, ErrorResponse
from .sentiment import (
    BatchAnalysisRequest,
    BatchAnalysisResponse,
    ConversationAnalysisRequest,
    ConversationAnalysisResponse,
    BatchAnalysisSummary,
    BatchAnalysisDetailItem,
    BatchAnalysisDetailResponse,
    BatchAnalysisListResponse,
)

__all__ = [
    "CamelModel",
    "RecordModel",
    "ErrorResponse",
    "BatchAnalysisRequest",
    "BatchAnalysisResponse",
    "ConversationAnalysisRequest",
    "ConversationAnalysisResponse",
    "BatchAnalysisSummary",
    "BatchAnalysisDetailItem",
    "BatchAnalysisDetailResponse",
    "BatchAnalysisListResponse",
]
