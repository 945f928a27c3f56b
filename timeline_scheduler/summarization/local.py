"""Deterministic local summarizer used when the remote service is unavailable.

Topics are found by substring matching against a closed keyword table and
rendered with turn counts. The output depends only on the input messages,
so repeated calls over the same range produce identical text.
"""

from datetime import datetime

from ..core.domain.conversation import ChatMessage, MessageSender
from ..core.domain.timeline import SummaryFormat


# Ordered: topics are reported in table order within each message
TOPIC_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("project", ("project", "task", "milestone")),
    ("development", ("coding", "develop", "programming", "code")),
    ("design", ("design", "user interface", "ux", "layout")),
    ("learning", ("learn", "study", "education", "tutorial")),
    ("problem-solving", ("problem", "solve", "solution", "help")),
)


class LocalSummarizer:
    """Keyword-based summarizer with no I/O."""

    def summarize(
        self,
        messages: list[ChatMessage],
        start_index: int,
        end_index: int,
        summary_format: SummaryFormat = SummaryFormat.BULLET,
        generated_at: datetime | None = None,
    ) -> str:
        """Summarize the inclusive message range ``[start_index, end_index]``.

        Args:
            messages: Full conversation message list
            start_index: First message index to cover
            end_index: Last message index to cover (inclusive)
            summary_format: Rendering format
            generated_at: Timestamp for the bullet format; defaults to the
                timestamp of the last message in the range

        Returns:
            Summary text
        """
        window = messages[max(start_index, 0):end_index + 1]

        user_count = sum(1 for m in window if m.sender == MessageSender.USER)
        ai_count = sum(1 for m in window if m.sender == MessageSender.AI)
        topics = self.extract_topics(window)

        if summary_format == SummaryFormat.SENTENCES:
            return self._sentence_summary(topics)
        if summary_format == SummaryFormat.PARAGRAPH:
            return self._paragraph_summary(topics, user_count, ai_count)

        if generated_at is None and window:
            generated_at = window[-1].timestamp
        return self._bullet_summary(topics, user_count, ai_count, generated_at)

    def extract_topics(self, messages: list[ChatMessage]) -> list[str]:
        """Return matched topic labels, deduplicated in first-seen order."""
        topics: list[str] = []

        for message in messages:
            text = message.text.lower()
            for topic, keywords in TOPIC_KEYWORDS:
                if topic not in topics and any(keyword in text for keyword in keywords):
                    topics.append(topic)

        return topics

    def _bullet_summary(
        self,
        topics: list[str],
        user_count: int,
        ai_count: int,
        generated_at: datetime | None,
    ) -> str:
        lines = [
            f"• {user_count + ai_count} turns of conversation "
            f"({user_count} from the user, {ai_count} from the AI)"
        ]
        if topics:
            lines.append(f"• Main topics: {', '.join(topics)}")
        if generated_at is not None:
            lines.append(f"• Summary generated: {generated_at.isoformat(timespec='seconds')}")
        return "\n".join(lines)

    def _sentence_summary(self, topics: list[str]) -> str:
        if not topics:
            return "A general conversation took place between the user and the AI."
        return f"The conversation covered {', '.join(topics)}."

    def _paragraph_summary(self, topics: list[str], user_count: int, ai_count: int) -> str:
        summary = f"This segment contains {user_count + ai_count} turns of conversation. "
        if topics:
            summary += f"The main topics were {', '.join(topics)}, and "
        else:
            summary += "In it, "
        summary += (
            f"the user sent {user_count} messages while the AI replied {ai_count} times."
        )
        return summary
