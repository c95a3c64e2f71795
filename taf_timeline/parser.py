"""Parser module for TAF bulletins."""
from datetime import datetime
from typing import Any, Optional
from taf_timeline.extractor import SegmentExtractionError, build_segment_draft
from taf_timeline.header import clean_bulletin, parse_header
from taf_timeline.models.forecast import ParsedTimeline, ParseFailure
from taf_timeline.segmenter import split_into_segments
from taf_timeline.timeline import active_block_index, build_timeline_blocks
from taf_timeline.timeutils import ensure_utc, utc_now
from taf_timeline.timing import fill_segment_timings
import logging

logger = logging.getLogger(__name__)


class TafParser:
    """Parses raw TAF bulletins into a normalized forecast timeline."""

    def __init__(self, clock=utc_now):
        """
        Args:
            clock: Callable returning the current instant, used when parse()
                is not given one explicitly
        """
        self.clock = clock

    def parse(self, raw_bulletin: Any, now: Optional[datetime] = None) -> ParsedTimeline:
        """
        Parse a raw TAF into a timeline.

        Never raises: unusable input or a segment that cannot be extracted
        gives the empty timeline with `failure` set.

        Args:
            raw_bulletin: Raw TAF text
            now: Reference instant for month/year, fallbacks and the current
                block. Defaults to the parser's clock.

        Returns:
            ParsedTimeline
        """
        if not isinstance(raw_bulletin, str):
            logger.debug(f"Ignoring non-string TAF input of type {type(raw_bulletin).__name__}")
            return ParsedTimeline.empty(raw_bulletin, ParseFailure.EMPTY_OR_INVALID_INPUT)

        now = ensure_utc(now if now is not None else self.clock())

        cleaned = clean_bulletin(raw_bulletin)
        if not cleaned:
            logger.debug("Empty TAF after cleaning")
            return ParsedTimeline.empty(raw_bulletin, ParseFailure.EMPTY_OR_INVALID_INPUT)

        header = parse_header(cleaned, now)
        if not header.body:
            logger.debug(f"TAF {header.station or ''} has no forecast body")
            return ParsedTimeline.empty(raw_bulletin, ParseFailure.EMPTY_OR_INVALID_INPUT)

        reference = header.issue_time or now
        segments = split_into_segments(header.body)

        try:
            drafts = [
                build_segment_draft(text, reference, header.validity, index == 0)
                for index, text in enumerate(segments)
            ]
        except SegmentExtractionError as e:
            logger.warning(f"TAF {header.station or 'Unknown'} discarded: {e}")
            return ParsedTimeline.empty(raw_bulletin, ParseFailure.SEGMENT_EXTRACTION_FAILURE)

        filled = fill_segment_timings(drafts, header.validity, header.issue_time, now)
        blocks = tuple(build_timeline_blocks(filled, header.validity))

        logger.debug(
            f"Parsed TAF {header.station or 'Unknown'}: "
            f"{len(segments)} segment(s), {len(blocks)} block(s)"
        )

        return ParsedTimeline(
            raw=raw_bulletin,
            blocks=blocks,
            current_block_index=active_block_index(blocks, now),
            station=header.station,
            amendment=header.amendment,
            issue_time=header.issue_time,
            validity=header.validity,
        )


def parse(raw_bulletin: Any, now: Optional[datetime] = None) -> ParsedTimeline:
    """Parse a raw TAF with a default parser. See TafParser.parse."""
    return TafParser().parse(raw_bulletin, now)
