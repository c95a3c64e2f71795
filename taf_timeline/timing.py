"""Backfill missing segment start/end times from neighbours and the validity window."""
import logging
from dataclasses import replace
from datetime import datetime
from typing import List, Optional, Sequence

from taf_timeline.models.forecast import ForecastSegmentDraft, ValidityWindow
from taf_timeline.timeutils import ensure_utc

logger = logging.getLogger(__name__)


def _next_primary_start(drafts: Sequence[ForecastSegmentDraft], index: int) -> Optional[datetime]:
    """Declared start of the next primary draft after index, if any."""
    for draft in drafts[index + 1:]:
        if draft.change_type.is_primary and draft.start_time is not None:
            return draft.start_time
    return None


def fill_segment_timings(
    drafts: Sequence[ForecastSegmentDraft],
    validity: Optional[ValidityWindow],
    issue_time: Optional[datetime],
    now: datetime,
) -> List[ForecastSegmentDraft]:
    """
    Fill in missing start/end times, returning new drafts.

    Primary groups (INITIAL, FM, BECMG) chain: a missing start takes the
    previous primary's end, then the validity start (or issue time), then
    now; a missing end takes the next primary's start, then the validity
    end. Transient groups (TEMPO, PROB, PROB TEMPO) keep their own range and
    otherwise borrow the preceding draft's times, then the validity window.

    Args:
        drafts: Drafts in document order
        validity: Header validity window, if recognized
        issue_time: Header issue time, if recognized
        now: Injected current instant, the last-resort start

    Returns:
        New list of drafts with normalized UTC times
    """
    valid_start = validity.start if validity else issue_time
    valid_end = validity.end if validity else None

    filled: List[ForecastSegmentDraft] = []
    previous_primary: Optional[ForecastSegmentDraft] = None

    for index, draft in enumerate(drafts):
        start = draft.start_time
        end = draft.end_time
        previous = filled[-1] if filled else None

        if draft.change_type.is_primary:
            if start is None:
                if previous_primary is not None and previous_primary.end_time is not None:
                    start = previous_primary.end_time
                else:
                    start = valid_start or now
            if end is None:
                end = _next_primary_start(drafts, index) or valid_end
        else:
            if start is None:
                start = end or (previous.start_time if previous else None) or valid_start
            if end is None:
                end = (previous.end_time if previous else None) or valid_end

        if start is None or end is None:
            logger.debug(f"Segment {draft.raw_text[:30]!r} still missing times after backfill")

        updated = replace(draft, start_time=ensure_utc(start), end_time=ensure_utc(end))
        filled.append(updated)
        if updated.change_type.is_primary:
            previous_primary = updated

    return filled
