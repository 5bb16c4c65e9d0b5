"""Batch sentiment analysis models."""

import json
import uuid

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Index, Integer, String, Text, func
from sqlalchemy.orm import relationship

from .base import BaseModel

# Values of the sentiment column: good, moderate, bad, unknown
SENTIMENT_VALUES = ("good", "moderate", "bad", "unknown")


class BatchSentimentAnalysis(BaseModel):
    """
    Summary of one batch sentiment run over a date range.

    Written once after all conversations are classified; never updated.
    """

    __tablename__ = "batch_sentiment_analysis"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    # Requested window (ISO 8601 strings as submitted)
    start_date = Column(String(40), nullable=False)
    end_date = Column(String(40), nullable=False)

    # Counts; always sum to the number of conversations processed
    overall_sentiment = Column(Text, nullable=True)  # "Positive: n, Negative: n, ..."
    positive_count = Column(Integer, default=0)
    negative_count = Column(Integer, default=0)
    neutral_count = Column(Integer, default=0)
    unknown_count = Column(Integer, default=0)

    conversation_ids = Column(Text, default="[]")  # JSON array

    created_at = Column(DateTime, default=func.current_timestamp(), nullable=False)

    __table_args__ = (
        Index("idx_batch_sentiment_analysis_created", "created_at"),
    )

    # Relationships
    details = relationship(
        "BatchSentimentAnalysisDetail",
        back_populates="batch_analysis",
        cascade="all, delete-orphan",
    )

    @property
    def conversation_id_list(self) -> list[str]:
        return json.loads(self.conversation_ids) if self.conversation_ids else []


class BatchSentimentAnalysisDetail(BaseModel):
    """Per-conversation sentiment within a batch run."""

    __tablename__ = "batch_sentiment_analysis_details"

    id = Column(Integer, primary_key=True, autoincrement=True)
    batch_analysis_id = Column(
        String(36),
        ForeignKey("batch_sentiment_analysis.id", ondelete="CASCADE"),
        nullable=False,
    )
    conversation_id = Column(
        String(36),
        ForeignKey("conversations.conversation_id"),
        nullable=False,
    )

    sentiment = Column(String(20), nullable=False)  # one of SENTIMENT_VALUES
    description = Column(Text, nullable=True)  # Classifier explanation or error note

    created_at = Column(DateTime, default=func.current_timestamp(), nullable=False)

    __table_args__ = (
        Index("idx_batch_sentiment_details_batch", "batch_analysis_id"),
        CheckConstraint(
            "sentiment IN (" + ", ".join(f"'{value}'" for value in SENTIMENT_VALUES) + ")",
            name="ck_batch_sentiment_details_sentiment",
        ),
    )

    # Relationships
    batch_analysis = relationship("BatchSentimentAnalysis", back_populates="details")
