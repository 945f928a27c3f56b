"""Consolidation of raw summaries into one higher-level summary."""

import logging

from ..core.domain.timeline import Summary, SummaryFormat, SummarySource
from ..core.exceptions import InvariantViolationError

logger = logging.getLogger(__name__)


def consolidate(summaries: list[Summary]) -> Summary:
    """Fold an ordered run of raw summaries into a consolidated summary.

    A single input is returned unchanged.

    Args:
        summaries: Raw summaries in chronological order

    Returns:
        Consolidated summary spanning the first start to the last end

    Raises:
        InvariantViolationError: If the input is empty or already consolidated
    """
    if not summaries:
        raise InvariantViolationError("Cannot consolidate an empty summary list")

    already = [s.id for s in summaries if s.is_consolidated]
    if already:
        raise InvariantViolationError(
            f"Summaries already consolidated: {', '.join(already)}"
        )

    if len(summaries) == 1:
        return summaries[0]

    start_index = summaries[0].start_index
    end_index = summaries[-1].end_index
    total_turns = sum(s.turn_count for s in summaries)

    header = (
        f"Consolidated summary (messages {start_index + 1}-{end_index + 1}, "
        f"{total_turns} turns):"
    )
    body = "\n\n".join(f"{i}. {s.text}" for i, s in enumerate(summaries, 1))

    consolidated = Summary(
        start_index=start_index,
        end_index=end_index,
        text=f"{header}\n\n{body}",
        format=SummaryFormat.PARAGRAPH,
        is_consolidated=True,
        consolidated_from_ids=[s.id for s in summaries],
        source=SummarySource.CONSOLIDATION,
    )

    logger.debug(
        f"Consolidated {len(summaries)} summaries covering {start_index}-{end_index}"
    )
    return consolidated


def mark_absorbed(summaries: list[Summary]) -> None:
    """Flag summaries as folded into a consolidated summary."""
    for summary in summaries:
        summary.is_consolidated = True
