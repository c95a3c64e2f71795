"""Segment classification and weather field extraction for TAF segments."""
import re
import logging
from datetime import datetime
from typing import List, Optional, Tuple

from taf_timeline.config import Config
from taf_timeline.models.forecast import (
    ChangeType,
    CloudLayer,
    ForecastSegmentDraft,
    SegmentConditions,
    TemperatureExtreme,
    ValidityWindow,
    Visibility,
    VARIABLE_WIND,
    Wind,
    WindShear,
)
from taf_timeline.timeutils import build_utc_datetime, hours_after

logger = logging.getLogger(__name__)


class SegmentExtractionError(ValueError):
    """A segment held a token that could not be turned into a value."""

    def __init__(self, segment: str, reason: str):
        super().__init__(f"Could not extract segment {segment!r}: {reason}")
        self.segment = segment
        self.reason = reason


# ---------------------------------------------------------------------------
# Weather code vocabulary (two-letter codes, WMO 306 / FAA JO 7900.5)
#
# Descriptors qualify a phenomenon (SHRA = rain showers) but TS also stands
# on its own. Both tables feed the same closed vocabulary.
# ---------------------------------------------------------------------------

WEATHER_DESCRIPTORS = {
    "MI": "Shallow",
    "PR": "Partial",
    "BC": "Patches",
    "DR": "Drifting",
    "BL": "Blowing",
    "SH": "Showers",
    "TS": "Thunderstorm",
    "FZ": "Freezing",
}

WEATHER_PHENOMENA = {
    # Precipitation
    "DZ": "Drizzle",
    "RA": "Rain",
    "SN": "Snow",
    "SG": "Snow Grains",
    "IC": "Ice Crystals",
    "PL": "Ice Pellets",
    "GR": "Hail",
    "GS": "Small Hail",
    "UP": "Unknown Precip",
    # Obscuration
    "BR": "Mist",
    "FG": "Fog",
    "FU": "Smoke",
    "VA": "Volcanic Ash",
    "DU": "Dust",
    "SA": "Sand",
    "HZ": "Haze",
    "PY": "Spray",
    # Other
    "PO": "Dust Whirls",
    "SQ": "Squall",
    "FC": "Funnel Cloud",
    "SS": "Sandstorm",
    "DS": "Duststorm",
}

WEATHER_CODES = {**WEATHER_DESCRIPTORS, **WEATHER_PHENOMENA}

CEILING_COVERAGES = ('BKN', 'OVC')

FM_PATTERN = re.compile(r'^FM\d{6}')
PROB_PATTERN = re.compile(r'PROB(\d{2})')
CAVOK_PATTERN = re.compile(r'\bCAVOK\b')
SM_VISIBILITY_PATTERN = re.compile(
    r'(?<!\S)([PM])?((?:\d{1,2}\s+(?=\d+/\d+SM(?!\S)))?\d+(?:/\d+)?)SM(?!\S)'
)
METER_VISIBILITY_PATTERN = re.compile(r'^(\d{4})(NDV)?$')
CLOUD_PATTERN = re.compile(r'\b(FEW|SCT|BKN|OVC)(\d{3})(CB|TCU)?\b')
WIND_PATTERN = re.compile(r'(?<!\S)(\d{3}|VRB)(\d{2,3})(?:G(\d{2,3}))?KT(?!\S)')
WIND_SHEAR_PATTERN = re.compile(r'\bWS(\d{3})/(\d{3})(\d{2,3})KT\b')
TEMPERATURE_PATTERN = re.compile(r'\bT([XN])(M?)(\d{2})/(\d{2})(\d{2})Z\b')

FM_TIME_PATTERN = re.compile(r'FM(\d{2})(\d{2})(\d{2})')
BECMG_TIME_PATTERN = re.compile(r'BECMG\s+(\d{2})(\d{2})/(\d{2})(\d{2})')
TRANSIENT_TIME_PATTERN = re.compile(
    r'(?:TEMPO|PROB\d{2})(?:\s+TEMPO)?\s+(\d{2})(\d{2})/(\d{2})(\d{2})'
)


def classify_segment(text: str) -> ChangeType:
    """
    Determine the change type from a segment's leading tokens.

    A PROBnn segment is PROB_TEMPO when TEMPO appears anywhere in its text.
    That also catches a TEMPO substring in unrelated trailing content; the
    rule is kept as-is.
    """
    if FM_PATTERN.match(text):
        return ChangeType.FM
    if text.startswith('BECMG'):
        return ChangeType.BECMG
    if text.startswith('TEMPO'):
        return ChangeType.TEMPO
    if re.match(r'^PROB\d{2}', text):
        return ChangeType.PROB_TEMPO if 'TEMPO' in text else ChangeType.PROB
    return ChangeType.INITIAL


def extract_probability(text: str) -> Optional[int]:
    """Extract the PROBnn percentage, if any."""
    match = PROB_PATTERN.search(text)
    return int(match.group(1)) if match else None


def extract_visibility(text: str) -> Optional[Visibility]:
    """
    Extract prevailing visibility from segment text.

    Tried in order: CAVOK, statute miles (P6SM, 3SM, 1 1/2SM, M1/4SM),
    then a bare four-digit meter group. Time ranges such as 2618/2620 and
    FMddhhmm markers are never read as meters.
    """
    if not text:
        return None

    normalized = text.upper()

    if CAVOK_PATTERN.search(normalized):
        return Visibility(unit='M', value=Config.CAVOK_METERS, cavok=True)

    sm_match = SM_VISIBILITY_PATTERN.search(normalized)
    if sm_match:
        prefix, value = sm_match.groups()
        return Visibility(
            unit='SM',
            value=re.sub(r'\s+', ' ', value),
            greater_than=prefix == 'P',
            less_than=prefix == 'M',
        )

    for token in normalized.split():
        if '/' in token or token.startswith('FM'):
            continue
        meter_match = METER_VISIBILITY_PATTERN.match(token)
        if meter_match:
            return Visibility(unit='M', value=int(meter_match.group(1)))

    return None


def _parse_fractional(value: str) -> float:
    """Sum whitespace-separated whole and fractional parts: '1 1/2' -> 1.5."""
    total = 0.0
    for part in value.split():
        if '/' in part:
            numerator, denominator = part.split('/')
            total += int(numerator) / int(denominator)
        else:
            total += int(part)
    return total


def normalize_visibility_to_sm(visibility: Optional[Visibility]) -> Optional[float]:
    """
    Convert an extracted visibility to statute miles.

    Raises:
        ValueError, ZeroDivisionError: on a malformed statute-mile value
    """
    if visibility is None:
        return None

    if visibility.unit == 'SM':
        if visibility.greater_than:
            return float(Config.GREATER_THAN_SM)
        return _parse_fractional(str(visibility.value))

    meters = int(visibility.value)
    return round(meters * Config.METERS_TO_SM, 2)


def extract_cloud_layers(text: str) -> Tuple[CloudLayer, ...]:
    """Extract all cloud layers in the order written."""
    return tuple(
        CloudLayer(
            coverage=coverage,
            altitude_ft=int(height) * 100,
            modifier=modifier or None,
        )
        for coverage, height, modifier in CLOUD_PATTERN.findall(text)
    )


def extract_ceiling(text: str) -> Optional[CloudLayer]:
    """
    Find the ceiling layer: the lowest broken or overcast layer.

    FEW and SCT never form a ceiling, and CAVOK means there is none.
    """
    if not text or CAVOK_PATTERN.search(text.upper()):
        return None

    layers = [layer for layer in extract_cloud_layers(text) if layer.coverage in CEILING_COVERAGES]
    if not layers:
        return None
    return min(layers, key=lambda layer: layer.altitude_ft)


def extract_wind(text: str) -> Optional[Wind]:
    """Extract surface wind, e.g. 28012G20KT or VRB03KT."""
    match = WIND_PATTERN.search(text)
    if not match:
        return None

    direction, speed, gust = match.groups()
    return Wind(
        direction=VARIABLE_WIND if direction == VARIABLE_WIND else int(direction),
        speed=int(speed),
        gust=int(gust) if gust else None,
    )


def extract_wind_shear(text: str) -> Optional[WindShear]:
    """Extract low-level wind shear, e.g. WS020/27045KT."""
    match = WIND_SHEAR_PATTERN.search(text)
    if not match:
        return None

    height, direction, speed = match.groups()
    return WindShear(
        height_ft=int(height) * 100,
        direction=int(direction),
        speed=int(speed),
    )


def extract_temperature_extremes(text: str) -> Tuple[TemperatureExtreme, ...]:
    """Extract TX/TN groups, e.g. TX25/2621Z TNM02/2712Z."""
    extremes = []
    for kind, minus, temperature, day, hour in TEMPERATURE_PATTERN.findall(text):
        value = int(temperature)
        extremes.append(
            TemperatureExtreme(
                kind='MAX' if kind == 'X' else 'MIN',
                temperature_c=-value if minus else value,
                day=int(day),
                hour=int(hour),
            )
        )
    return tuple(extremes)


def _weather_token_codes(token: str) -> List[str]:
    """Split a present-weather token into vocabulary codes, or [] if it is not one."""
    body = token.lstrip('+-')
    if body.startswith('VC'):
        body = body[2:]

    if not body or len(body) % 2:
        return []

    codes = [body[i:i + 2] for i in range(0, len(body), 2)]
    if all(code in WEATHER_CODES for code in codes):
        return codes
    return []


def extract_weather_phenomena(text: str) -> Tuple[str, ...]:
    """
    Extract two-letter weather codes (TS, RA, BR, ...) in order of appearance.

    Only whole tokens made entirely of known codes count, so station
    identifiers and keywords never produce false matches.
    """
    found: List[str] = []
    for token in text.upper().split():
        for code in _weather_token_codes(token):
            if code not in found:
                found.append(code)
    return tuple(found)


def extract_conditions(text: str) -> SegmentConditions:
    """Run every field extractor over one segment."""
    return SegmentConditions(
        visibility=extract_visibility(text),
        ceiling=extract_ceiling(text),
        clouds=extract_cloud_layers(text),
        phenomena=extract_weather_phenomena(text),
        wind=extract_wind(text),
        wind_shear=extract_wind_shear(text),
        temperatures=extract_temperature_extremes(text),
    )


def _range_from_match(match: re.Match, reference: datetime) -> Tuple[datetime, datetime]:
    start_day, start_hour, end_day, end_hour = (int(group) for group in match.groups())
    return (
        build_utc_datetime(start_day, start_hour, 0, reference),
        build_utc_datetime(end_day, end_hour, 0, reference),
    )


def resolve_segment_times(
    text: str,
    change_type: ChangeType,
    reference: datetime,
    validity: Optional[ValidityWindow],
    is_first: bool,
) -> Tuple[Optional[datetime], Optional[datetime]]:
    """
    Resolve a segment's own time range.

    FM gives a start only. BECMG, TEMPO and PROB variants give a
    DDHH/DDHH range. The leading INITIAL segment spans the validity window.
    Anything else starts at the reference instant and lasts
    Config.DEFAULT_SEGMENT_HOURS.

    Args:
        text: Segment text
        change_type: Result of classify_segment
        reference: Issue time, or the injected current instant without a header
        validity: Header validity window, if recognized
        is_first: Whether this is the first segment in document order

    Returns:
        (start, end) tuple; end is None for FM segments
    """
    if change_type == ChangeType.FM:
        match = FM_TIME_PATTERN.search(text)
        if match:
            day, hour, minute = (int(group) for group in match.groups())
            return build_utc_datetime(day, hour, minute, reference), None

    if change_type == ChangeType.BECMG:
        match = BECMG_TIME_PATTERN.search(text)
        if match:
            return _range_from_match(match, reference)

    if change_type in (ChangeType.TEMPO, ChangeType.PROB, ChangeType.PROB_TEMPO):
        match = TRANSIENT_TIME_PATTERN.search(text)
        if match:
            return _range_from_match(match, reference)

    if change_type == ChangeType.INITIAL and is_first and validity is not None:
        return validity.start, validity.end

    return reference, hours_after(reference, Config.DEFAULT_SEGMENT_HOURS)


def build_segment_draft(
    text: str,
    reference: datetime,
    validity: Optional[ValidityWindow],
    is_first: bool,
) -> ForecastSegmentDraft:
    """
    Classify a segment, extract its fields and resolve its own times.

    Raises:
        SegmentExtractionError: if a numeric token cannot be converted
    """
    text = text.strip()
    change_type = classify_segment(text)

    try:
        conditions = extract_conditions(text)
        visibility_sm = normalize_visibility_to_sm(conditions.visibility)
        start_time, end_time = resolve_segment_times(text, change_type, reference, validity, is_first)
    except (ValueError, ZeroDivisionError, OverflowError) as e:
        raise SegmentExtractionError(text, str(e)) from e

    probability = None
    if change_type in (ChangeType.PROB, ChangeType.PROB_TEMPO):
        probability = extract_probability(text)

    return ForecastSegmentDraft(
        change_type=change_type,
        raw_text=text,
        conditions=conditions,
        probability=probability,
        start_time=start_time,
        end_time=end_time,
        visibility_sm=visibility_sm,
        ceiling_ft=conditions.ceiling.altitude_ft if conditions.ceiling else None,
    )
