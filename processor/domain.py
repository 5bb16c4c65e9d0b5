"""Domain types shared by the sentiment processors and services."""

from dataclasses import dataclass, field
from datetime import date, datetime, time, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from processor.errors import ValidationError

# Sentiment values the classifier is instructed to emit
MODEL_SENTIMENTS = ("Positive", "Negative", "Neutral")

BATCH_COMPLETED_MESSAGE = "Batch sentiment analysis completed."
NO_CONVERSATIONS_MESSAGE = "No conversations found in the specified date range."


class SentimentLabel(str, Enum):
    """Stored sentiment of a conversation (matches the sentiment_enum column values)."""

    GOOD = "good"
    MODERATE = "moderate"
    BAD = "bad"
    UNKNOWN = "unknown"

    @classmethod
    def from_model_sentiment(cls, sentiment: str) -> "SentimentLabel":
        """Map a model sentiment to a label.

        Positive -> good, Negative -> bad, anything else -> moderate.
        ``unknown`` is never produced here; it is reserved for failures.
        """
        if sentiment == "Positive":
            return cls.GOOD
        if sentiment == "Negative":
            return cls.BAD
        return cls.MODERATE


@dataclass(frozen=True)
class DateWindow:
    """Inclusive conversation creation window for a batch run.

    ``start_date``/``end_date`` keep the caller's strings for storage;
    ``start``/``end`` are the naive UTC bounds used in queries.
    """

    start_date: str
    end_date: str
    start: datetime
    end: datetime


def _parse_iso(value: str) -> Tuple[datetime, bool]:
    """Parse an ISO 8601 date or datetime.

    Returns:
        (naive UTC datetime, True if the value was a bare date)
    """
    try:
        return datetime.combine(date.fromisoformat(value), time.min), True
    except ValueError:
        pass

    # fromisoformat only accepts a "Z" suffix from Python 3.11
    if value.endswith(("Z", "z")):
        value = value[:-1] + "+00:00"

    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed, False


def parse_date_window(start_date: Any, end_date: Any) -> DateWindow:
    """Validate a requested date range.

    A bare end date covers that whole day.

    Raises:
        ValidationError: If a value is missing, unparseable, or start > end
    """
    if not start_date or not end_date:
        raise ValidationError("Missing required fields: startDate and endDate")
    if not isinstance(start_date, str) or not isinstance(end_date, str):
        raise ValidationError("startDate and endDate must be ISO 8601 strings")

    start_date = start_date.strip()
    end_date = end_date.strip()

    try:
        start, _ = _parse_iso(start_date)
        end, end_is_date = _parse_iso(end_date)
    except ValueError:
        raise ValidationError(
            "Invalid date format for startDate or endDate. Use ISO 8601 format (YYYY-MM-DD)."
        )

    if end_is_date:
        end = datetime.combine(end.date(), time.max)

    if start > end:
        raise ValidationError("startDate cannot be after endDate.")

    return DateWindow(start_date=start_date, end_date=end_date, start=start, end=end)


@dataclass
class ConversationRef:
    """A conversation selected for analysis."""

    conversation_id: str
    created_at: Optional[datetime] = None


@dataclass
class MessageRecord:
    """The parts of a message needed to build a transcript."""

    sender_participant_id: Optional[str]
    content: Optional[str]
    created_at: Optional[datetime] = None


@dataclass
class AnalysisDetail:
    """Per-conversation outcome of a batch run."""

    conversation_id: str
    sentiment: SentimentLabel
    description: Optional[str] = None

    def to_row(self, batch_analysis_id: str) -> Dict[str, Any]:
        """Build the insert parameters for a detail row."""
        return {
            "batch_analysis_id": batch_analysis_id,
            "conversation_id": self.conversation_id,
            "sentiment": self.sentiment.value,
            "description": self.description,
        }


@dataclass
class SentimentCounts:
    """Label counters for one batch run."""

    good: int = 0
    bad: int = 0
    moderate: int = 0
    unknown: int = 0

    def record(self, label: SentimentLabel) -> None:
        setattr(self, label.value, getattr(self, label.value) + 1)

    @property
    def total(self) -> int:
        return self.good + self.bad + self.moderate + self.unknown

    def summary(self) -> str:
        """Human-readable summary stored as overall_sentiment."""
        return (
            f"Positive: {self.good}, Negative: {self.bad}, "
            f"Neutral: {self.moderate}, Unknown: {self.unknown}"
        )


@dataclass
class DetailWriteReport:
    """Outcome of writing a batch's detail rows."""

    attempted: int = 0
    inserted: int = 0
    dropped: int = 0
    failed_chunks: int = 0


@dataclass
class BatchRunResult:
    """Result of one batch run.

    ``batch_analysis_id`` is None when the window held no conversations
    and nothing was written.
    """

    window: DateWindow
    batch_analysis_id: Optional[str] = None
    counts: SentimentCounts = field(default_factory=SentimentCounts)
    conversation_ids: List[str] = field(default_factory=list)
    details: List[AnalysisDetail] = field(default_factory=list)
    detail_report: Optional[DetailWriteReport] = None

    @property
    def conversations_processed(self) -> int:
        return len(self.conversation_ids)

    @property
    def overall_sentiment(self) -> str:
        return self.counts.summary()

    def to_payload(self) -> Dict[str, Any]:
        """Build the public response body for this run."""
        if self.batch_analysis_id is None:
            return {"message": NO_CONVERSATIONS_MESSAGE}
        return {
            "message": BATCH_COMPLETED_MESSAGE,
            "batch_analysis_id": self.batch_analysis_id,
            "overall_sentiment": self.overall_sentiment,
            "conversations_processed": self.conversations_processed,
        }
