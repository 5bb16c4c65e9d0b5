"""Read access to CRM conversations and messages."""

import asyncio
from typing import Callable, List

import structlog
from sqlalchemy import DateTime, bindparam, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from processor.domain import ConversationRef, DateWindow, MessageRecord
from processor.errors import PersistenceError

logger = structlog.get_logger()


class ConversationService:
    """Queries conversations and their messages.

    Each call opens its own session from the factory so calls can run
    concurrently from worker threads.
    """

    def __init__(self, session_factory: Callable[[], Session]):
        """Initialize conversation service.

        Args:
            session_factory: Factory function that creates new DB sessions
        """
        self.session_factory = session_factory

    async def fetch_in_window(self, window: DateWindow) -> List[ConversationRef]:
        """Get conversations created within the window, oldest first.

        Raises:
            PersistenceError: If the query fails
        """
        def _query():
            query = text("""
                SELECT conversation_id, created_at
                FROM conversations
                WHERE created_at >= :start AND created_at <= :end
                ORDER BY created_at ASC
            """).bindparams(
                bindparam("start", type_=DateTime()),
                bindparam("end", type_=DateTime()),
            ).columns(created_at=DateTime())

            db = self.session_factory()
            try:
                result = db.execute(query, {"start": window.start, "end": window.end})
                return result.fetchall()
            finally:
                db.close()

        try:
            rows = await asyncio.to_thread(_query)
        except SQLAlchemyError as e:
            logger.error("Database error fetching conversations", error=str(e))
            raise PersistenceError(f"Database error fetching conversations: {e}") from e

        return [
            ConversationRef(conversation_id=str(row.conversation_id), created_at=row.created_at)
            for row in rows
        ]

    async def fetch_messages(self, conversation_id: str) -> List[MessageRecord]:
        """Get a conversation's messages ordered by creation time.

        Raises:
            PersistenceError: If the query fails
        """
        def _query():
            query = text("""
                SELECT sender_participant_id, content, created_at
                FROM messages
                WHERE conversation_id = :conversation_id
                ORDER BY created_at ASC
            """).columns(created_at=DateTime())

            db = self.session_factory()
            try:
                result = db.execute(query, {"conversation_id": conversation_id})
                return result.fetchall()
            finally:
                db.close()

        try:
            rows = await asyncio.to_thread(_query)
        except SQLAlchemyError as e:
            logger.error(
                "Database error fetching messages",
                conversation_id=conversation_id,
                error=str(e),
            )
            raise PersistenceError(f"Database error fetching messages: {e}") from e

        return [
            MessageRecord(
                sender_participant_id=row.sender_participant_id,
                content=row.content,
                created_at=row.created_at,
            )
            for row in rows
        ]

    async def exists(self, conversation_id: str) -> bool:
        """Check whether a conversation exists.

        Raises:
            PersistenceError: If the query fails
        """
        def _query():
            query = text("SELECT 1 FROM conversations WHERE conversation_id = :conversation_id")
            db = self.session_factory()
            try:
                return db.execute(query, {"conversation_id": conversation_id}).first()
            finally:
                db.close()

        try:
            row = await asyncio.to_thread(_query)
        except SQLAlchemyError as e:
            raise PersistenceError(f"Database error fetching conversation: {e}") from e

        return row is not None
