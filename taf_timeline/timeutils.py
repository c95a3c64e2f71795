"""UTC time helpers for resolving TAF day/hour/minute groups."""
from datetime import datetime, timedelta, timezone
from typing import Optional

from taf_timeline.config import Config


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """
    Normalize a datetime to the canonical stored form.

    Naive values are taken to be UTC already; aware values are converted.
    Microseconds are dropped since bulletin times are minute resolution.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    else:
        value = value.astimezone(timezone.utc)
    return value.replace(microsecond=0)


def utc_now() -> datetime:
    """Wall clock, only consulted at the public entry points."""
    return ensure_utc(datetime.now(timezone.utc))


def _month_start(year: int, month: int) -> datetime:
    # month may fall outside 1..12
    year += (month - 1) // 12
    month = (month - 1) % 12 + 1
    return datetime(year, month, 1, tzinfo=timezone.utc)


def _compose(year: int, month: int, day: int, hour: int, minute: int) -> datetime:
    """Calendar arithmetic where out-of-range days/hours carry forward."""
    return _month_start(year, month) + timedelta(days=day - 1, hours=hour, minutes=minute)


def build_utc_datetime(day: int, hour: int, minute: int, reference: datetime) -> datetime:
    """
    Build an absolute UTC instant from a bulletin day/hour/minute.

    The year and month come from the reference instant. A bulletin issued
    late in a month may refer to early days of the next one (and the other
    way round), so:

    - reference day >= 25 and target day <= 5: next month
    - reference day <= 5 and target day >= 25: previous month

    Hour 24 resolves to midnight of the following day.

    Args:
        day: Day of month from the bulletin
        hour: Hour (0-24)
        minute: Minute
        reference: Instant supplying year and month

    Returns:
        Aware UTC datetime
    """
    reference = ensure_utc(reference)
    result = _compose(reference.year, reference.month, day, hour, minute)

    if reference.day >= Config.ROLLOVER_LATE_DAY and day <= Config.ROLLOVER_EARLY_DAY:
        result = shift_month(result, 1)
    elif reference.day <= Config.ROLLOVER_EARLY_DAY and day >= Config.ROLLOVER_LATE_DAY:
        result = shift_month(result, -1)

    return result


def shift_month(value: datetime, months: int) -> datetime:
    """Move a datetime by whole months, keeping its day and time of day."""
    return _compose(
        value.year,
        value.month + months,
        value.day,
        value.hour,
        value.minute,
    )


def parse_ddhhmm(token: str, reference: datetime) -> datetime:
    """Resolve a DDHHMM group (issue time, FM marker)."""
    return build_utc_datetime(int(token[0:2]), int(token[2:4]), int(token[4:6]), reference)


def parse_ddhh(token: str, reference: datetime) -> datetime:
    """Resolve a DDHH group (validity and change ranges)."""
    return build_utc_datetime(int(token[0:2]), int(token[2:4]), 0, reference)


def hours_after(value: datetime, hours: int) -> datetime:
    return value + timedelta(hours=hours)
