"""Single-conversation sentiment processor."""

from processor.domain import AnalysisDetail, SentimentLabel
from processor.errors import ConversationNotFoundError
from processor.processors.base import BaseProcessor
from processor.services.transcripts import build_transcript

NO_MESSAGES_DESCRIPTION = "No messages found for analysis."


class ConversationSentimentProcessor(BaseProcessor):
    """Classifies one conversation on demand. Nothing is persisted."""

    job_type = "conversation_sentiment"

    async def process(self, conversation_id: str) -> AnalysisDetail:
        """Analyze a single conversation.

        Raises:
            ConfigurationError: If no classifier is configured
            ConversationNotFoundError: If the conversation does not exist
            ClassificationError: If the model call or its reply fails
            PersistenceError: If messages cannot be read
        """
        classifier = self.require_classifier()

        if not await self.conversations.exists(conversation_id):
            raise ConversationNotFoundError(conversation_id)

        transcript = await build_transcript(self.conversations, conversation_id)
        if not transcript.strip():
            self.logger.info("Conversation has no messages", conversation_id=conversation_id)
            return AnalysisDetail(
                conversation_id=conversation_id,
                sentiment=SentimentLabel.UNKNOWN,
                description=NO_MESSAGES_DESCRIPTION,
            )

        classification = await classifier.classify_sentiment(transcript)
        label = SentimentLabel.from_model_sentiment(classification.sentiment)

        self.logger.info(
            "Conversation sentiment analyzed",
            conversation_id=conversation_id,
            sentiment=label.value,
        )
        return AnalysisDetail(
            conversation_id=conversation_id,
            sentiment=label,
            description=classification.description,
        )
