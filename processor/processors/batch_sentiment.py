"""Batch sentiment processor for conversations in a date range."""

import asyncio
import time
from typing import List, Optional

from processor.config import settings
from processor.domain import (
    AnalysisDetail,
    BatchRunResult,
    SentimentLabel,
    parse_date_window,
)
from processor.errors import PersistenceError
from processor.integrations.claude import SentimentClassifier
from processor.processors.base import BaseProcessor
from processor.services.analysis_store import AnalysisStore
from processor.services.conversations import ConversationService
from processor.services.transcripts import build_transcript

DEADLINE_EXCEEDED_DESCRIPTION = "Not analyzed: batch deadline exceeded."


class BatchSentimentProcessor(BaseProcessor):
    """Classifies every conversation in a date range and stores the batch.

    A failure on one conversation is recorded as an ``unknown`` detail and
    never aborts the run. Only validation, configuration, the conversation
    query, and the summary insert can fail a run.
    """

    job_type = "batch_sentiment"

    def __init__(
        self,
        conversations: ConversationService,
        store: AnalysisStore,
        classifier: Optional[SentimentClassifier],
        max_concurrency: Optional[int] = None,
        deadline_seconds: Optional[float] = None,
    ):
        """Initialize batch processor.

        Args:
            conversations: Conversation/message reader
            store: Batch analysis writer
            classifier: Sentiment classifier, or None if not configured
            max_concurrency: Conversations classified at once (1 = sequential)
            deadline_seconds: Time budget after which remaining conversations are skipped
        """
        super().__init__(conversations, classifier)
        self.store = store
        self.max_concurrency = max(1, max_concurrency or settings.SENTIMENT_MAX_CONCURRENCY)
        self.deadline_seconds = (
            settings.SENTIMENT_BATCH_DEADLINE_SECONDS if deadline_seconds is None else deadline_seconds
        )

    async def process(self, start_date: str, end_date: str) -> BatchRunResult:
        """Run a batch analysis.

        Args:
            start_date: ISO 8601 start of the window
            end_date: ISO 8601 end of the window (a bare date covers the whole day)

        Returns:
            BatchRunResult; ``batch_analysis_id`` is None if no conversations matched

        Raises:
            ValidationError: If the date range is invalid
            ConfigurationError: If no classifier is configured
            PersistenceError: If conversations cannot be read or the summary cannot be stored
        """
        window = parse_date_window(start_date, end_date)
        classifier = self.require_classifier()

        self.logger.info(
            "Starting batch sentiment analysis",
            start_date=window.start_date,
            end_date=window.end_date,
        )

        conversations = await self.conversations.fetch_in_window(window)
        result = BatchRunResult(
            window=window,
            conversation_ids=[conv.conversation_id for conv in conversations],
        )

        if not conversations:
            self.logger.info(
                "No conversations found in date range",
                start_date=window.start_date,
                end_date=window.end_date,
            )
            return result

        self.logger.info(
            "Analyzing conversations",
            count=len(conversations),
            max_concurrency=self.max_concurrency,
        )

        result.details = await self._analyze_all(classifier, result.conversation_ids)
        for detail in result.details:
            result.counts.record(detail.sentiment)

        self.logger.info(
            "Sentiment analysis loop completed",
            positive=result.counts.good,
            negative=result.counts.bad,
            neutral=result.counts.moderate,
            unknown=result.counts.unknown,
        )

        result.batch_analysis_id = await self.store.create_batch_analysis(
            window, result.counts, result.conversation_ids
        )
        result.detail_report = await self.store.save_details(result.batch_analysis_id, result.details)

        self.logger.info(
            "Batch sentiment analysis complete",
            batch_analysis_id=result.batch_analysis_id,
            conversations_processed=result.conversations_processed,
            details_stored=result.detail_report.inserted,
            details_dropped=result.detail_report.dropped,
        )
        return result

    async def _analyze_all(
        self,
        classifier: SentimentClassifier,
        conversation_ids: List[str],
    ) -> List[AnalysisDetail]:
        """Analyze conversations with bounded concurrency.

        Results come back in input order whatever the completion order.
        """
        semaphore = asyncio.Semaphore(self.max_concurrency)
        deadline = None
        if self.deadline_seconds is not None:
            deadline = time.monotonic() + self.deadline_seconds

        async def _bounded(conversation_id: str) -> AnalysisDetail:
            async with semaphore:
                if deadline is not None and time.monotonic() >= deadline:
                    self.logger.warning("Batch deadline exceeded, skipping", conversation_id=conversation_id)
                    return AnalysisDetail(
                        conversation_id=conversation_id,
                        sentiment=SentimentLabel.UNKNOWN,
                        description=DEADLINE_EXCEEDED_DESCRIPTION,
                    )
                try:
                    return await self.analyze_conversation(classifier, conversation_id)
                except Exception as e:
                    self.logger.error(
                        "Unexpected error analyzing conversation",
                        conversation_id=conversation_id,
                        error=str(e),
                        exc_info=True,
                    )
                    return AnalysisDetail(
                        conversation_id=conversation_id,
                        sentiment=SentimentLabel.UNKNOWN,
                        description=f"Unexpected error: {e}",
                    )

        return list(await asyncio.gather(*(_bounded(cid) for cid in conversation_ids)))

    async def analyze_conversation(
        self,
        classifier: SentimentClassifier,
        conversation_id: str,
    ) -> AnalysisDetail:
        """Build, classify and label one conversation, absorbing item-level errors."""
        try:
            transcript = await build_transcript(self.conversations, conversation_id)
        except PersistenceError as e:
            self.logger.warning("Transcript unavailable", conversation_id=conversation_id, error=str(e))
            return AnalysisDetail(
                conversation_id=conversation_id,
                sentiment=SentimentLabel.UNKNOWN,
                description=str(e),
            )

        outcome = await classifier.try_classify_sentiment(transcript)
        if not outcome.ok:
            self.logger.warning(
                "Classification failed",
                conversation_id=conversation_id,
                error_type=type(outcome.error).__name__,
                error=str(outcome.error),
            )
            return AnalysisDetail(
                conversation_id=conversation_id,
                sentiment=SentimentLabel.UNKNOWN,
                description=str(outcome.error),
            )

        label = SentimentLabel.from_model_sentiment(outcome.classification.sentiment)
        self.logger.debug("Conversation classified", conversation_id=conversation_id, sentiment=label.value)
        return AnalysisDetail(
            conversation_id=conversation_id,
            sentiment=label,
            description=outcome.classification.description,
        )
