"""Error taxonomy for the sentiment pipeline.

Batch-level errors (validation, configuration, persistence of the summary
record) abort a run. Classification errors are item-level: the batch
processor absorbs them into an ``unknown`` detail row.
"""


class SentimentPipelineError(Exception):
    """Base class for all sentiment pipeline errors."""

    pass


class ValidationError(SentimentPipelineError):
    """Request input is missing, malformed, or describes an invalid date range."""

    pass


class ConfigurationError(SentimentPipelineError):
    """The classification backend is not configured (e.g. missing API key)."""

    pass


class PersistenceError(SentimentPipelineError):
    """A database read or write failed."""

    pass


class ConversationNotFoundError(SentimentPipelineError):
    """Raised when a conversation id does not exist."""

    def __init__(self, conversation_id: str):
        self.conversation_id = conversation_id
        super().__init__(f"Conversation {conversation_id} not found")


class ClassificationError(SentimentPipelineError):
    """Base class for failures classifying a single transcript."""

    pass


class ClassificationApiError(ClassificationError):
    """The model endpoint failed (network, auth, rate limit, server error)."""

    pass


class ClassificationParseError(ClassificationError):
    """The model output was not valid JSON."""

    pass


class ClassificationFormatError(ClassificationError):
    """The model output was JSON but lacked the required keys."""

    pass
