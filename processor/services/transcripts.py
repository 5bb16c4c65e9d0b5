"""Conversation transcript formatting."""

from typing import Iterable

from processor.domain import MessageRecord
from processor.services.conversations import ConversationService

UNKNOWN_PARTICIPANT = "UnknownParticipant"


def format_transcript(messages: Iterable[MessageRecord]) -> str:
    """Flatten ordered messages into ``"<sender>: <content>"`` lines.

    Returns an empty string when there are no messages.
    """
    return "\n".join(
        f"{msg.sender_participant_id or UNKNOWN_PARTICIPANT}: {msg.content or ''}"
        for msg in messages
    )


async def build_transcript(conversations: ConversationService, conversation_id: str) -> str:
    """Fetch a conversation's messages and format them as a transcript.

    An empty string means there is nothing to analyze; database faults
    propagate as PersistenceError.
    """
    messages = await conversations.fetch_messages(conversation_id)
    return format_transcript(messages)
