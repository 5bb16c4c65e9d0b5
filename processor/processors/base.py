"""Base processor class for sentiment processors."""

from abc import ABC, abstractmethod
from typing import Any, Optional

import structlog

from processor.integrations.claude import SentimentClassifier
from processor.errors import ConfigurationError
from processor.services.conversations import ConversationService


class BaseProcessor(ABC):
    """Abstract base class for sentiment processors."""

    # Override in subclasses
    job_type: str = "base"

    def __init__(
        self,
        conversations: ConversationService,
        classifier: Optional[SentimentClassifier],
    ):
        """Initialize processor with its collaborators.

        Args:
            conversations: Conversation/message reader
            classifier: Sentiment classifier, or None if not configured
        """
        self.conversations = conversations
        self.classifier = classifier
        self.logger = structlog.get_logger().bind(processor=self.job_type)

    @abstractmethod
    async def process(self, *args: Any, **kwargs: Any) -> Any:
        """Run the processor.

        Raises:
            SentimentPipelineError: On run-level failures
        """
        pass

    def require_classifier(self) -> SentimentClassifier:
        """Return the classifier or fail the run.

        Raises:
            ConfigurationError: If no classifier is configured
        """
        if self.classifier is None:
            self.logger.error("Sentiment classifier is not configured")
            raise ConfigurationError(
                "Sentiment classifier is not initialized (API key likely missing)."
            )
        return self.classifier
