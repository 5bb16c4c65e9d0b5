"""Shared fixtures: in-memory database, seeding helpers and fake collaborators."""

import json
from datetime import datetime, timedelta
from types import SimpleNamespace
from typing import Callable, Dict, Iterable, List, Optional, Tuple, Union

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from api.models import Base, Conversation, Message
from processor.domain import ConversationRef, DateWindow, DetailWriteReport, MessageRecord
from processor.errors import PersistenceError
from processor.integrations.claude import SentimentClassifier


def sentiment_reply(sentiment: str, description: str = "Test description.") -> str:
    """JSON reply in the shape the classifier prompt asks for."""
    return json.dumps({"sentiment": sentiment, "description": description})


def keyword_reply(transcript: str) -> str:
    """Reply Positive/Negative/Neutral depending on words in the transcript."""
    lowered = transcript.lower()
    if "thanks" in lowered or "great" in lowered:
        return sentiment_reply("Positive", "Customer is happy.")
    if "terrible" in lowered or "refund" in lowered:
        return sentiment_reply("Negative", "Customer is upset.")
    return sentiment_reply("Neutral", "Nothing notable.")


Reply = Union[str, Exception, Callable[[str], Union[str, Exception]]]


class FakeMessages:
    """Stands in for ``AsyncAnthropic.messages``."""

    def __init__(self, reply: Reply):
        self.reply = reply
        self.calls: List[dict] = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        transcript = kwargs["messages"][0]["content"]
        reply = self.reply(transcript) if callable(self.reply) else self.reply
        if isinstance(reply, Exception):
            raise reply
        return SimpleNamespace(content=[SimpleNamespace(type="text", text=reply)])


class FakeAnthropic:
    """Minimal async Anthropic client returning canned replies."""

    def __init__(self, reply: Reply = keyword_reply):
        self.messages = FakeMessages(reply)


def make_classifier(reply: Reply = keyword_reply) -> SentimentClassifier:
    return SentimentClassifier(client=FakeAnthropic(reply), model="test-model")


class InMemoryConversations:
    """Conversation reader backed by dicts.

    ``failing`` ids raise PersistenceError when their messages are read.
    """

    def __init__(
        self,
        conversations: Dict[str, List[Tuple[Optional[str], Optional[str]]]],
        failing: Iterable[str] = (),
    ):
        self.conversations = conversations
        self.failing = set(failing)
        self.window_calls: List[DateWindow] = []

    async def fetch_in_window(self, window: DateWindow) -> List[ConversationRef]:
        self.window_calls.append(window)
        return [ConversationRef(conversation_id=cid) for cid in self.conversations]

    async def fetch_messages(self, conversation_id: str) -> List[MessageRecord]:
        if conversation_id in self.failing:
            raise PersistenceError("Database error fetching messages: connection reset")
        return [
            MessageRecord(sender_participant_id=sender, content=content)
            for sender, content in self.conversations.get(conversation_id, [])
        ]

    async def exists(self, conversation_id: str) -> bool:
        return conversation_id in self.conversations


class RecordingStore:
    """Analysis store that keeps writes in memory."""

    def __init__(self, fail_summary: bool = False):
        self.fail_summary = fail_summary
        self.summaries: List[dict] = []
        self.details: List = []

    async def create_batch_analysis(self, window, counts, conversation_ids) -> str:
        if self.fail_summary:
            raise PersistenceError("Database error storing batch analysis: disk full")
        self.summaries.append(
            {"window": window, "counts": counts, "conversation_ids": list(conversation_ids)}
        )
        return f"batch-{len(self.summaries)}"

    async def save_details(self, batch_analysis_id, details) -> DetailWriteReport:
        self.details.extend(details)
        return DetailWriteReport(attempted=len(details), inserted=len(details))


@pytest.fixture
def engine():
    """Fresh in-memory SQLite database with all tables."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def seed_conversation(
    session_factory,
    conversation_id: str,
    created_at: datetime,
    messages: Iterable[Tuple[Optional[str], Optional[str]]] = (),
) -> None:
    """Insert a conversation and its messages, one second apart."""
    db = session_factory()
    try:
        db.add(Conversation(conversation_id=conversation_id, created_at=created_at))
        for index, (sender, content) in enumerate(messages):
            db.add(
                Message(
                    conversation_id=conversation_id,
                    sender_participant_id=sender,
                    content=content,
                    created_at=created_at + timedelta(seconds=index + 1),
                )
            )
        db.commit()
    finally:
        db.close()


@pytest.fixture
def january_conversations(session_factory):
    """Three January conversations (two positive, one negative) and one in February."""
    seed_conversation(
        session_factory, "conv-jan-1", datetime(2024, 1, 5, 9, 0),
        [("lead-1", "Hi, is the apartment available?"), ("agent-1", "Yes!"), ("lead-1", "Great, thanks")],
    )
    seed_conversation(
        session_factory, "conv-jan-2", datetime(2024, 1, 12, 14, 30),
        [("lead-2", "This service is terrible"), ("agent-1", "Sorry to hear that")],
    )
    seed_conversation(
        session_factory, "conv-jan-3", datetime(2024, 1, 31, 18, 45),
        [("lead-3", "Thanks for the quick reply")],
    )
    seed_conversation(
        session_factory, "conv-feb-1", datetime(2024, 2, 1, 0, 0, 1),
        [("lead-4", "Terrible, I want a refund")],
    )
