"""Tests for single-conversation analysis."""

import pytest

from conftest import InMemoryConversations, make_classifier, sentiment_reply
from processor.domain import SentimentLabel
from processor.errors import (
    ClassificationParseError,
    ConfigurationError,
    ConversationNotFoundError,
)
from processor.processors.conversation_sentiment import (
    NO_MESSAGES_DESCRIPTION,
    ConversationSentimentProcessor,
)


class TestConversationSentimentProcessor:

    async def test_classifies_conversation(self):
        conversations = InMemoryConversations({"c1": [("lead", "This is terrible")]})
        processor = ConversationSentimentProcessor(conversations, make_classifier())

        detail = await processor.process("c1")

        assert detail.conversation_id == "c1"
        assert detail.sentiment is SentimentLabel.BAD
        assert detail.description == "Customer is upset."

    async def test_missing_conversation(self):
        processor = ConversationSentimentProcessor(InMemoryConversations({}), make_classifier())

        with pytest.raises(ConversationNotFoundError, match="Conversation nope not found"):
            await processor.process("nope")

    async def test_no_messages(self):
        classifier = make_classifier()
        processor = ConversationSentimentProcessor(InMemoryConversations({"c1": []}), classifier)

        detail = await processor.process("c1")

        assert detail.sentiment is SentimentLabel.UNKNOWN
        assert detail.description == NO_MESSAGES_DESCRIPTION
        assert classifier.client.messages.calls == []

    async def test_classification_errors_propagate(self):
        conversations = InMemoryConversations({"c1": [("lead", "hi")]})
        processor = ConversationSentimentProcessor(conversations, make_classifier("not json"))

        with pytest.raises(ClassificationParseError):
            await processor.process("c1")

    async def test_missing_classifier(self):
        processor = ConversationSentimentProcessor(InMemoryConversations({"c1": []}), None)

        with pytest.raises(ConfigurationError):
            await processor.process("c1")

    async def test_neutral_reply(self):
        conversations = InMemoryConversations({"c1": [("lead", "ok")]})
        processor = ConversationSentimentProcessor(
            conversations, make_classifier(sentiment_reply("Neutral", "Plain."))
        )

        detail = await processor.process("c1")

        assert detail.sentiment is SentimentLabel.MODERATE
