"""Sentiment processors.

1. BatchSentimentProcessor - Classifies all conversations in a date range and stores the batch
2. ConversationSentimentProcessor - Classifies a single conversation on demand
"""

from .base import BaseProcessor
from .batch_sentiment import BatchSentimentProcessor
from .conversation_sentiment import ConversationSentimentProcessor

__all__ = [
    "BaseProcessor",
    "BatchSentimentProcessor",
    "ConversationSentimentProcessor",
]
