"""Unit tests for the local fallback summarizer."""

from datetime import datetime, timedelta, timezone

from timeline_scheduler.core.domain.conversation import ChatMessage, MessageSender
from timeline_scheduler.core.domain.timeline import SummaryFormat
from timeline_scheduler.summarization import LocalSummarizer

BASE_TIME = datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)


def _create_messages(texts: list[str]) -> list[ChatMessage]:
    """Helper to build alternating user/AI messages with fixed timestamps."""
    return [
        ChatMessage(
            id=f"msg_{i}",
            sender=MessageSender.USER if i % 2 == 0 else MessageSender.AI,
            text=text,
            timestamp=BASE_TIME + timedelta(minutes=i),
        )
        for i, text in enumerate(texts)
    ]


class TestTopicExtraction:
    """Test cases for keyword topic extraction."""

    def setup_method(self):
        """Set up test fixtures."""
        self.summarizer = LocalSummarizer()

    def test_topics_in_first_seen_order(self) -> None:
        """Test dedup preserving first-seen order."""
        messages = _create_messages([
            "Can you help me study for the exam?",
            "Sure, let's study together.",
            "Then I need to finish my project.",
        ])

        topics = self.summarizer.extract_topics(messages)

        assert topics == ["learning", "problem-solving", "project"]

    def test_matching_is_case_insensitive(self) -> None:
        """Test that keywords match regardless of case."""
        messages = _create_messages(["DESIGN review of the new Layout"])

        assert self.summarizer.extract_topics(messages) == ["design"]

    def test_no_topics(self) -> None:
        """Test messages with no known keywords."""
        messages = _create_messages(["Good morning!", "Hello there."])

        assert self.summarizer.extract_topics(messages) == []


class TestSummarize:
    """Test cases for rendering summaries."""

    def setup_method(self):
        """Set up test fixtures."""
        self.summarizer = LocalSummarizer()
        self.messages = _create_messages([
            "I started a new coding project.",
            "Great, what is the project about?",
            "A small web app.",
            "Sounds fun.",
        ])

    def test_bullet_format(self) -> None:
        """Test bullet lines: counts, topics and timestamp."""
        text = self.summarizer.summarize(self.messages, 0, 3, SummaryFormat.BULLET)

        lines = text.split("\n")
        assert lines[0] == "• 4 turns of conversation (2 from the user, 2 from the AI)"
        assert lines[1] == "• Main topics: project, development"
        assert lines[2] == "• Summary generated: 2026-03-01T09:03:00+00:00"

    def test_bullet_format_without_topics(self) -> None:
        """Test that the topics line is omitted when nothing matched."""
        text = self.summarizer.summarize(self.messages, 2, 3, SummaryFormat.BULLET)

        assert "Main topics" not in text
        assert text.startswith("• 2 turns of conversation")

    def test_sentence_format(self) -> None:
        """Test the sentence format with and without topics."""
        with_topics = self.summarizer.summarize(self.messages, 0, 1, SummaryFormat.SENTENCES)
        without_topics = self.summarizer.summarize(self.messages, 2, 3, SummaryFormat.SENTENCES)

        assert with_topics == "The conversation covered project, development."
        assert without_topics == "A general conversation took place between the user and the AI."

    def test_paragraph_format(self) -> None:
        """Test the paragraph format."""
        text = self.summarizer.summarize(self.messages, 0, 3, SummaryFormat.PARAGRAPH)

        assert text == (
            "This segment contains 4 turns of conversation. "
            "The main topics were project, development, and "
            "the user sent 2 messages while the AI replied 2 times."
        )

    def test_deterministic(self) -> None:
        """Test identical input yields identical output for every format."""
        for summary_format in SummaryFormat:
            first = self.summarizer.summarize(self.messages, 0, 3, summary_format)
            second = LocalSummarizer().summarize(self.messages, 0, 3, summary_format)
            assert first == second

    def test_explicit_timestamp(self) -> None:
        """Test that an explicit generated_at overrides the message timestamp."""
        generated_at = datetime(2026, 1, 2, 3, 4, 5, tzinfo=timezone.utc)

        text = self.summarizer.summarize(
            self.messages, 0, 3, SummaryFormat.BULLET, generated_at=generated_at
        )

        assert text.endswith("2026-01-02T03:04:05+00:00")

    def test_never_fails_on_empty_or_out_of_range(self) -> None:
        """Test that empty and out-of-range slices still summarize."""
        assert self.summarizer.summarize([], 0, 5, SummaryFormat.BULLET) == (
            "• 0 turns of conversation (0 from the user, 0 from the AI)"
        )
        assert self.summarizer.summarize(self.messages, 10, 20, SummaryFormat.PARAGRAPH).startswith(
            "This segment contains 0 turns"
        )

    def test_system_messages_not_counted(self) -> None:
        """Test that system messages count toward neither side."""
        messages = self.messages + [
            ChatMessage(id="sys", sender=MessageSender.SYSTEM, text="Role switched", timestamp=BASE_TIME)
        ]

        text = self.summarizer.summarize(messages, 0, 4, SummaryFormat.PARAGRAPH)

        assert "4 turns" in text
