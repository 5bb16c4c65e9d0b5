"""External service integrations."""

from .claude import ClassificationResult, SentimentClassification, SentimentClassifier, create_sentiment_classifier

__all__ = [
    "ClassificationResult",
    "SentimentClassification",
    "SentimentClassifier",
    "create_sentiment_classifier",
]
