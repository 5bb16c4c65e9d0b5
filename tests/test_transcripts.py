"""Tests for transcript formatting."""

from datetime import datetime

from conftest import seed_conversation
from processor.domain import MessageRecord
from processor.services.conversations import ConversationService
from processor.services.transcripts import UNKNOWN_PARTICIPANT, build_transcript, format_transcript


class TestFormatTranscript:
    """Pure formatting of message lists."""

    def test_one_line_per_message(self):
        messages = [
            MessageRecord("lead-1", "Hello"),
            MessageRecord("agent-1", "Hi, how can I help?"),
        ]
        assert format_transcript(messages) == "lead-1: Hello\nagent-1: Hi, how can I help?"

    def test_placeholders_for_missing_fields(self):
        messages = [
            MessageRecord(None, "Who am I?"),
            MessageRecord("agent-1", None),
        ]
        assert format_transcript(messages) == f"{UNKNOWN_PARTICIPANT}: Who am I?\nagent-1: "

    def test_empty_list(self):
        assert format_transcript([]) == ""

    def test_same_input_same_output(self):
        messages = [MessageRecord("a", "x"), MessageRecord("b", "y")]
        assert format_transcript(messages) == format_transcript(list(messages))


class TestBuildTranscript:
    """Transcripts built from the database."""

    async def test_messages_in_creation_order(self, session_factory):
        seed_conversation(
            session_factory,
            "conv-1",
            datetime(2024, 1, 5, 9, 0),
            [("lead-1", "first"), ("agent-1", "second"), ("lead-1", "third")],
        )

        transcript = await build_transcript(ConversationService(session_factory), "conv-1")

        assert transcript == "lead-1: first\nagent-1: second\nlead-1: third"

    async def test_conversation_without_messages(self, session_factory):
        seed_conversation(session_factory, "conv-empty", datetime(2024, 1, 5, 9, 0))

        transcript = await build_transcript(ConversationService(session_factory), "conv-empty")

        assert transcript == ""
