"""SQLAlchemy ORM models for the sentiment service.

All models are imported here to ensure they're registered with Base.metadata
before any database operations.
"""

# Import base first
from api.config.database import Base

# CRM models (read-only for this service)
from .conversations import Conversation, Message

# Sentiment models
from .sentiment import BatchSentimentAnalysis, BatchSentimentAnalysisDetail, SENTIMENT_VALUES

__all__ = [
    "Base",
    # CRM
    "Conversation",
    "Message",
    # Sentiment
    "BatchSentimentAnalysis",
    "BatchSentimentAnalysisDetail",
    "SENTIMENT_VALUES",
]
