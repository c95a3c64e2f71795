"""TAF preamble parsing: cleaning, station, issue time and validity window."""
import re
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from taf_timeline.models.forecast import ValidityWindow
from taf_timeline.timeutils import parse_ddhhmm, parse_ddhh

logger = logging.getLogger(__name__)

HEADER_PATTERN = re.compile(
    r'^(?:TAF\s+)?(?:(AMD|COR)\s+)?([A-Z][A-Z0-9]{3})\s+(\d{6})Z\s+(\d{4})/(\d{4})(?:\s+|$)'
)
CONTROL_CHARS = re.compile(r'[\x00-\x1f\x7f]')


@dataclass(frozen=True)
class BulletinHeader:
    """What the preamble told us, plus the remaining forecast body."""
    body: str
    station: Optional[str] = None
    amendment: Optional[str] = None
    issue_time: Optional[datetime] = None
    validity: Optional[ValidityWindow] = None

    @property
    def recognized(self) -> bool:
        return self.issue_time is not None


def clean_bulletin(raw: str) -> str:
    """
    Normalize raw bulletin text.

    Control characters (CR/LF included) become spaces, whitespace runs are
    collapsed, trailing '=' terminators go, and the remark section is cut.
    """
    cleaned = CONTROL_CHARS.sub(' ', raw)
    cleaned = re.sub(r'\s+', ' ', cleaned).strip()
    cleaned = re.sub(r'\s*=+$', '', cleaned)

    remark_index = cleaned.find(' RMK')
    if remark_index != -1:
        cleaned = cleaned[:remark_index].strip()

    return cleaned


def parse_validity(start_token: str, end_token: str, reference: datetime) -> ValidityWindow:
    """Resolve a DDHH/DDHH validity range against the issue time."""
    return ValidityWindow(
        start=parse_ddhh(start_token, reference),
        end=parse_ddhh(end_token, reference),
    )


def parse_header(cleaned: str, now: datetime) -> BulletinHeader:
    """
    Split the preamble off a cleaned bulletin.

    Args:
        cleaned: Output of clean_bulletin
        now: Reference instant supplying month and year for the issue time

    Returns:
        BulletinHeader. When the preamble is not recognized, only `body` is
        set and holds the full text.
    """
    match = HEADER_PATTERN.match(cleaned)
    if not match:
        logger.debug(f"Unrecognized TAF header, using full text as body: {cleaned[:40]!r}")
        return BulletinHeader(body=cleaned)

    amendment, station, issue_token, valid_start, valid_end = match.groups()

    try:
        issue_time = parse_ddhhmm(issue_token, now)
        validity = parse_validity(valid_start, valid_end, issue_time)
    except OverflowError as e:
        logger.debug(f"Header times out of range for {station}: {e}")
        return BulletinHeader(body=cleaned)

    body = cleaned[match.end():].strip()
    logger.debug(
        f"Header {station}: issued {issue_time.isoformat()}, "
        f"valid {validity.start.isoformat()} to {validity.end.isoformat()}"
    )

    return BulletinHeader(
        body=body,
        station=station,
        amendment=amendment,
        issue_time=issue_time,
        validity=validity,
    )
