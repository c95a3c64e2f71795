"""TAF forecast domain model."""
from datetime import datetime
from typing import Optional, Dict, Any, List, Tuple, Union
from dataclasses import dataclass, field, asdict
from enum import Enum


class ChangeType(Enum):
    """Forecast change group that opened a segment."""
    INITIAL = "INITIAL"        # Base forecast after the header
    FM = "FM"                  # FMddhhmm, from an instant
    BECMG = "BECMG"            # Becoming over a range
    TEMPO = "TEMPO"            # Temporarily during a range
    PROB = "PROB"              # PROBnn, probability during a range
    PROB_TEMPO = "PROB_TEMPO"  # PROBnn TEMPO

    @property
    def is_primary(self) -> bool:
        """Primary groups chain one after another; the rest are transient."""
        return self in PRIMARY_CHANGE_TYPES


PRIMARY_CHANGE_TYPES = frozenset({ChangeType.INITIAL, ChangeType.FM, ChangeType.BECMG})


class FlightCategory(Enum):
    """Flight category derived from visibility and ceiling."""
    VFR = "VFR"
    MVFR = "MVFR"
    IFR = "IFR"
    LIFR = "LIFR"
    UNKNOWN = "UNKNOWN"


class ParseFailure(Enum):
    """Why a parse produced an empty timeline."""
    EMPTY_OR_INVALID_INPUT = "EMPTY_OR_INVALID_INPUT"
    SEGMENT_EXTRACTION_FAILURE = "SEGMENT_EXTRACTION_FAILURE"


# Wind direction token for variable winds
VARIABLE_WIND = "VRB"


def format_zulu(value: Optional[datetime]) -> Optional[str]:
    """Format an aware UTC datetime as ISO-8601 with a trailing Z."""
    if value is None:
        return None
    return value.strftime('%Y-%m-%dT%H:%M:%SZ')


@dataclass(frozen=True)
class ValidityWindow:
    """Overall validity period from the TAF header."""
    start: datetime
    end: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {'start': format_zulu(self.start), 'end': format_zulu(self.end)}


@dataclass(frozen=True)
class Visibility:
    """
    Prevailing visibility as written in the bulletin.

    `value` is the statute-mile text (e.g. "1 1/2") for unit SM and an
    integer number of meters for unit M.
    """
    unit: str
    value: Union[str, int]
    greater_than: bool = False
    less_than: bool = False
    cavok: bool = False


@dataclass(frozen=True)
class CloudLayer:
    coverage: str
    altitude_ft: int
    modifier: Optional[str] = None


@dataclass(frozen=True)
class Wind:
    """Surface wind. Direction is degrees, VARIABLE_WIND, or None."""
    direction: Union[int, str, None] = None
    speed: Optional[int] = None
    gust: Optional[int] = None
    unit: str = 'KT'


@dataclass(frozen=True)
class WindShear:
    height_ft: int
    direction: int
    speed: int
    unit: str = 'KT'


@dataclass(frozen=True)
class TemperatureExtreme:
    kind: str  # MAX or MIN
    temperature_c: int
    day: int
    hour: int


@dataclass(frozen=True)
class SegmentConditions:
    """Weather fields extracted from one forecast segment."""
    visibility: Optional[Visibility] = None
    ceiling: Optional[CloudLayer] = None
    clouds: Tuple[CloudLayer, ...] = ()
    phenomena: Tuple[str, ...] = ()
    wind: Optional[Wind] = None
    wind_shear: Optional[WindShear] = None
    temperatures: Tuple[TemperatureExtreme, ...] = ()


@dataclass(frozen=True)
class ForecastSegmentDraft:
    """
    One raw forecast segment on its way to becoming a timeline block.

    Drafts are replaced, never mutated, as timings are filled in.
    """
    change_type: ChangeType
    raw_text: str
    conditions: SegmentConditions = field(default_factory=SegmentConditions)
    probability: Optional[int] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    visibility_sm: Optional[float] = None
    ceiling_ft: Optional[int] = None


@dataclass(frozen=True)
class TimelineBlock:
    """A single contiguous period of the normalized forecast timeline."""

    start: datetime
    end: datetime
    category: FlightCategory
    visibility_sm: Optional[float] = None
    ceiling_ft: Optional[int] = None
    wind: Wind = field(default_factory=Wind)
    raw_text: Optional[str] = None
    source_type: Optional[ChangeType] = None
    probability: Optional[int] = None
    phenomena: Tuple[str, ...] = ()
    clouds: Tuple[CloudLayer, ...] = ()

    def __post_init__(self):
        if self.end <= self.start:
            raise ValueError(
                f"Timeline block must end after it starts ({self.start} >= {self.end})"
            )

    @property
    def duration_hours(self) -> float:
        return (self.end - self.start).total_seconds() / 3600

    def contains(self, instant: datetime) -> bool:
        """True when instant falls in [start, end)."""
        return self.start <= instant < self.end

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to a JSON-ready dictionary for the presentation layer."""
        return {
            'start': format_zulu(self.start),
            'end': format_zulu(self.end),
            'category': self.category.value,
            'visibility_sm': self.visibility_sm,
            'ceiling_ft': self.ceiling_ft,
            'wind': {
                'direction': self.wind.direction,
                'speed': self.wind.speed,
                'gust': self.wind.gust,
            },
            'raw_text': self.raw_text,
            'source_type': self.source_type.value if self.source_type else None,
            'probability': self.probability,
            'phenomena': list(self.phenomena),
            'clouds': [asdict(layer) for layer in self.clouds],
        }

    def __repr__(self) -> str:
        """Compact single-line representation."""
        source = self.source_type.value if self.source_type else 'N/A'
        return (
            f"<TimelineBlock {source} "
            f"{self.start.strftime('%d%H%MZ')}-{self.end.strftime('%d%H%MZ')} "
            f"{self.category.value}>"
        )


@dataclass(frozen=True)
class ParsedTimeline:
    """Result of parsing one bulletin. Always structurally valid."""

    raw: str
    blocks: Tuple[TimelineBlock, ...] = ()
    current_block_index: int = -1

    # Header details
    station: Optional[str] = None
    amendment: Optional[str] = None
    issue_time: Optional[datetime] = None
    validity: Optional[ValidityWindow] = None

    failure: Optional[ParseFailure] = None

    @classmethod
    def empty(cls, raw: Any, failure: Optional[ParseFailure] = None) -> 'ParsedTimeline':
        """The canonical no-data result."""
        return cls(
            raw=raw if isinstance(raw, str) else '',
            failure=failure,
        )

    @property
    def ok(self) -> bool:
        return self.failure is None

    @property
    def current_block(self) -> Optional[TimelineBlock]:
        if 0 <= self.current_block_index < len(self.blocks):
            return self.blocks[self.current_block_index]
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dictionary for JSON export."""
        return {
            'raw': self.raw,
            'station': self.station,
            'amendment': self.amendment,
            'issue_time': format_zulu(self.issue_time),
            'validity': self.validity.to_dict() if self.validity else None,
            'blocks': [block.to_dict() for block in self.blocks],
            'current_block_index': self.current_block_index,
            'failure': self.failure.value if self.failure else None,
        }

    def summary(self) -> str:
        """Generate a human-readable summary of the timeline."""
        lines: List[str] = []

        header = f"TAF {self.station or 'Unknown'}"
        if self.amendment:
            header += f" ({self.amendment})"
        lines.append(header)
        lines.append("=" * len(header))

        if self.issue_time:
            lines.append(f"Issued: {self.issue_time.strftime('%Y-%m-%d %H:%M UTC')}")
        if self.validity:
            lines.append(
                f"Valid: {self.validity.start.strftime('%Y-%m-%d %H:%M UTC')}"
                f" → {self.validity.end.strftime('%Y-%m-%d %H:%M UTC')}"
            )

        if not self.blocks:
            reason = self.failure.value if self.failure else 'no forecast periods'
            lines.append(f"\nNo timeline available ({reason})")
            return "\n".join(lines)

        lines.append("")
        for index, block in enumerate(self.blocks):
            marker = "▶" if index == self.current_block_index else " "
            period = (
                f"{block.start.strftime('%d/%H%MZ')}-{block.end.strftime('%d/%H%MZ')}"
            )
            source = block.source_type.value if block.source_type else '-'
            if block.probability is not None:
                source += f" {block.probability}%"
            lines.append(f"{marker} {period} {block.category.value:<7} {source}")

        return "\n".join(lines)
