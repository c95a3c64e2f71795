"""Reconcile forecast segments into a contiguous timeline and pick the active block."""
import logging
from datetime import datetime, timedelta
from typing import List, Optional, Sequence

from taf_timeline.categories import derive_flight_category
from taf_timeline.config import Config
from taf_timeline.models.forecast import (
    ForecastSegmentDraft,
    TimelineBlock,
    ValidityWindow,
    Wind,
)
from taf_timeline.timeutils import ensure_utc

logger = logging.getLogger(__name__)


def _minimum_span() -> timedelta:
    return timedelta(hours=Config.MIN_BLOCK_HOURS)


def create_timeline_block(draft: ForecastSegmentDraft, start: datetime, end: datetime) -> TimelineBlock:
    """Turn a draft into an immutable timeline block over [start, end)."""
    wind = draft.conditions.wind or Wind()
    return TimelineBlock(
        start=start,
        end=end,
        category=derive_flight_category(draft.visibility_sm, draft.ceiling_ft),
        visibility_sm=draft.visibility_sm,
        ceiling_ft=draft.ceiling_ft,
        wind=Wind(direction=wind.direction, speed=wind.speed, gust=wind.gust),
        raw_text=draft.raw_text or None,
        source_type=draft.change_type,
        probability=draft.probability,
        phenomena=draft.conditions.phenomena,
        clouds=draft.conditions.clouds,
    )


def build_timeline_blocks(
    drafts: Sequence[ForecastSegmentDraft],
    validity: Optional[ValidityWindow],
) -> List[TimelineBlock]:
    """
    Reconcile overlapping drafts into ordered, contiguous timeline blocks.

    Drafts without a start are dropped and the rest sorted by start (ties
    keep document order). The first block starts at the validity start when
    there is a window. A later block may not start before the previous one's
    provisional end, which is the next draft's start, or one hour after its
    own start when that would not move forward. Every block then ends where
    the next one begins; the last ends at the validity end, its own end, or
    one hour after it starts.

    Args:
        drafts: Drafts with filled timings
        validity: Header validity window, if recognized

    Returns:
        List of TimelineBlock sorted by start with no gaps or overlaps
    """
    candidates = sorted(
        (draft for draft in drafts if draft.start_time is not None),
        key=lambda draft: draft.start_time,
    )
    if not candidates:
        return []

    valid_start = ensure_utc(validity.start) if validity else None
    valid_end = ensure_utc(validity.end) if validity else None

    # First pass: clamp starts against the previous block's provisional end
    starts: List[datetime] = []
    provisional_end: Optional[datetime] = None

    for index, draft in enumerate(candidates):
        start = ensure_utc(draft.start_time)
        if index == 0:
            if valid_start is not None:
                start = valid_start
        elif provisional_end is not None and start < provisional_end:
            start = provisional_end
        starts.append(start)

        if index + 1 < len(candidates):
            provisional_end = ensure_utc(candidates[index + 1].start_time)
        else:
            provisional_end = valid_end or ensure_utc(draft.end_time)

        if provisional_end is None or provisional_end <= start:
            provisional_end = start + _minimum_span()

    # Second pass: each block ends where the next begins
    timeline: List[TimelineBlock] = []
    for index, draft in enumerate(candidates):
        start = starts[index]
        if index + 1 < len(candidates):
            end = starts[index + 1]
        else:
            end = provisional_end
        timeline.append(create_timeline_block(draft, start, end))

    logger.debug(f"Built {len(timeline)} timeline block(s) from {len(drafts)} draft(s)")
    return timeline


def active_block_index(blocks: Sequence[TimelineBlock], at: datetime) -> int:
    """
    Index of the block considered current at an instant.

    The latest-starting block with start <= at < end wins. Failing that, the
    latest block that has started; failing that, the first block.

    Returns:
        Block index, or -1 only for an empty sequence
    """
    if not blocks:
        return -1

    at = ensure_utc(at)
    active_index = -1
    fallback_index = 0

    for index, block in enumerate(blocks):
        if block.start <= at:
            fallback_index = index
            if block.end > at:
                active_index = index

    if active_index != -1:
        return active_index
    return fallback_index


def current_block(blocks: Sequence[TimelineBlock], at: datetime) -> Optional[TimelineBlock]:
    """The block active_block_index picks, or None for an empty sequence."""
    index = active_block_index(blocks, at)
    return blocks[index] if index >= 0 else None
