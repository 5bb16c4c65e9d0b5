"""Persistence of batch sentiment analyses and their detail rows."""

import asyncio
import json
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Sequence

import structlog
from sqlalchemy import DateTime, bindparam, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from processor.config import settings
from processor.domain import AnalysisDetail, DateWindow, DetailWriteReport, SentimentCounts
from processor.errors import PersistenceError

logger = structlog.get_logger()

INSERT_DETAIL = text("""
    INSERT INTO batch_sentiment_analysis_details
        (batch_analysis_id, conversation_id, sentiment, description, created_at)
    VALUES (:batch_analysis_id, :conversation_id, :sentiment, :description, :created_at)
""").bindparams(bindparam("created_at", type_=DateTime()))


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class AnalysisStore:
    """Writes one summary row per batch run plus its detail rows.

    The summary write is all-or-nothing. Detail rows are written in chunks;
    a chunk that fails is retried row by row and rows that still fail are
    dropped with a warning.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        chunk_size: Optional[int] = None,
    ):
        """Initialize analysis store.

        Args:
            session_factory: Factory function that creates new DB sessions
            chunk_size: Detail rows per bulk insert
        """
        self.session_factory = session_factory
        self.chunk_size = chunk_size or settings.SENTIMENT_DETAIL_CHUNK_SIZE

    async def create_batch_analysis(
        self,
        window: DateWindow,
        counts: SentimentCounts,
        conversation_ids: Sequence[str],
    ) -> str:
        """Insert the summary row for a batch run.

        Returns:
            The new batch analysis id

        Raises:
            PersistenceError: If the insert fails or the row cannot be read back
        """
        batch_analysis_id = str(uuid.uuid4())

        def _insert():
            insert = text("""
                INSERT INTO batch_sentiment_analysis
                    (id, start_date, end_date, overall_sentiment, positive_count,
                     negative_count, neutral_count, unknown_count, conversation_ids, created_at)
                VALUES (:id, :start_date, :end_date, :overall_sentiment, :positive_count,
                        :negative_count, :neutral_count, :unknown_count, :conversation_ids, :created_at)
            """).bindparams(bindparam("created_at", type_=DateTime()))
            select = text("SELECT id FROM batch_sentiment_analysis WHERE id = :id")

            db = self.session_factory()
            try:
                db.execute(
                    insert,
                    {
                        "id": batch_analysis_id,
                        "start_date": window.start_date,
                        "end_date": window.end_date,
                        "overall_sentiment": counts.summary(),
                        "positive_count": counts.good,
                        "negative_count": counts.bad,
                        "neutral_count": counts.moderate,
                        "unknown_count": counts.unknown,
                        "conversation_ids": json.dumps(list(conversation_ids)),
                        "created_at": _utcnow(),
                    },
                )
                # Read back inside the same transaction; nothing is kept unless it succeeds
                stored = db.execute(select, {"id": batch_analysis_id}).scalar()
                if not stored:
                    db.rollback()
                    return None
                db.commit()
                return stored
            except SQLAlchemyError:
                db.rollback()
                raise
            finally:
                db.close()

        try:
            stored_id = await asyncio.to_thread(_insert)
        except SQLAlchemyError as e:
            logger.error("Database error storing batch analysis", error=str(e))
            raise PersistenceError(f"Database error storing batch analysis: {e}") from e

        if not stored_id:
            raise PersistenceError(
                "Failed to retrieve batch analysis record after insert, or ID is missing."
            )

        logger.info("Batch analysis stored", batch_analysis_id=stored_id)
        return str(stored_id)

    async def save_details(
        self,
        batch_analysis_id: str,
        details: Sequence[AnalysisDetail],
    ) -> DetailWriteReport:
        """Insert detail rows for a stored batch analysis.

        Never raises for row failures; losses are reported and logged.
        """
        rows = [detail.to_row(batch_analysis_id) for detail in details]
        report = DetailWriteReport(attempted=len(rows))

        for offset in range(0, len(rows), self.chunk_size):
            chunk = rows[offset:offset + self.chunk_size]
            chunk_number = offset // self.chunk_size + 1

            try:
                await asyncio.to_thread(self._insert_rows, chunk)
                report.inserted += len(chunk)
                continue
            except SQLAlchemyError as e:
                report.failed_chunks += 1
                logger.warning(
                    "Detail chunk insert failed, retrying rows individually",
                    batch_analysis_id=batch_analysis_id,
                    chunk=chunk_number,
                    rows=len(chunk),
                    error=str(e),
                )

            recovered = 0
            for row in chunk:
                try:
                    await asyncio.to_thread(self._insert_rows, [row])
                    recovered += 1
                except SQLAlchemyError as e:
                    report.dropped += 1
                    logger.warning(
                        "Dropping detail row after individual insert failed",
                        batch_analysis_id=batch_analysis_id,
                        conversation_id=row["conversation_id"],
                        error=str(e),
                    )
            report.inserted += recovered

            logger.info(
                "Detail chunk fallback finished",
                batch_analysis_id=batch_analysis_id,
                chunk=chunk_number,
                recovered=recovered,
                dropped=len(chunk) - recovered,
            )

        if report.dropped:
            logger.warning(
                "Some detail rows were not stored",
                batch_analysis_id=batch_analysis_id,
                dropped=report.dropped,
                attempted=report.attempted,
            )
        else:
            logger.info(
                "Detail rows stored",
                batch_analysis_id=batch_analysis_id,
                inserted=report.inserted,
            )

        return report

    def _insert_rows(self, rows: List[Dict[str, Any]]) -> None:
        """Insert detail rows in a single transaction."""
        created_at = _utcnow()
        params = [{**row, "created_at": created_at} for row in rows]

        db = self.session_factory()
        try:
            db.execute(INSERT_DETAIL, params)
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            raise
        finally:
            db.close()
