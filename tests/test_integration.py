"""Integration tests for complete TAF parsing workflows."""
import pytest
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from taf_timeline.models.forecast import ChangeType, FlightCategory, VARIABLE_WIND
from taf_timeline.parser import TafParser, parse
from taf_timeline.reports import TimelineReport


UTC = timezone.utc
NOW = datetime(2025, 10, 26, 15, 0, tzinfo=UTC)

KJFK_TAF = (
    "TAF KJFK 261120Z 2612/2718 20012KT P6SM SCT040 "
    "FM261900 22015G25KT P6SM BKN035 "
    "FM270300 24010KT 5SM -SHRA BR OVC015 "
    "TEMPO 2704/2708 2SM SHRA OVC008 "
    "FM271300 30012KT P6SM SCT050"
)
LFPG_TAF = (
    "TAF LFPG 261100Z 2612/2718 24008KT CAVOK TX18/2614Z TN09/2706Z "
    "BECMG 2700/2702 VRB03KT 3000 BR BKN007"
)
KSFO_TAF = (
    "TAF KSFO 261130Z 2612/2718 29012KT P6SM FEW015\n"
    "      FM262000 30015G22KT P6SM SCT020\n"
    "      FM270400 28008KT P6SM BKN012 RMK NXT FCST BY 18Z="
)
KDEN_AMD_TAF = (
    "TAF AMD KDEN 311520Z 3115/0118 18010KT P6SM SCT080 WS020/27045KT "
    "FM312100 27015G25KT P6SM BKN060 "
    "FM010600 32012KT 3SM -SN OVC010"
)
NO_HEADER_TAF = "FM261800 28012KT 6SM BKN030 TEMPO 2618/2620 3SM TSRA"


def utc(month, day, hour):
    return datetime(2025, month, day, hour, tzinfo=UTC)


def assert_timeline_shape(timeline):
    """Structural checks every non-empty parse must satisfy."""
    blocks = timeline.blocks
    assert blocks
    for previous, following in zip(blocks, blocks[1:]):
        assert previous.end == following.start
    for block in blocks:
        assert block.end > block.start
        assert block.start.tzinfo is not None
    if timeline.validity:
        assert blocks[0].start == timeline.validity.start
        if blocks[-1].start < timeline.validity.end:
            assert blocks[-1].end == timeline.validity.end
    assert 0 <= timeline.current_block_index < len(blocks)


class TestIntegration:
    """Integration tests for real-world bulletins."""

    @pytest.fixture
    def parser(self):
        return TafParser(clock=lambda: NOW)

    def test_kjfk_multiple_fm_groups(self, parser):
        timeline = parser.parse(KJFK_TAF)

        assert_timeline_shape(timeline)
        assert [(b.start, b.end) for b in timeline.blocks] == [
            (utc(10, 26, 12), utc(10, 26, 19)),
            (utc(10, 26, 19), utc(10, 27, 3)),
            (utc(10, 27, 3), utc(10, 27, 4)),
            (utc(10, 27, 4), utc(10, 27, 13)),
            (utc(10, 27, 13), utc(10, 27, 18)),
        ]
        assert [b.category for b in timeline.blocks] == [
            FlightCategory.VFR,
            FlightCategory.VFR,
            FlightCategory.MVFR,
            FlightCategory.IFR,
            FlightCategory.VFR,
        ]
        assert timeline.blocks[2].phenomena == ('SH', 'RA', 'BR')
        assert timeline.current_block_index == 0

    def test_lfpg_cavok_and_becmg(self, parser):
        timeline = parser.parse(LFPG_TAF)

        assert_timeline_shape(timeline)
        initial, becmg = timeline.blocks
        assert initial.visibility_sm == 6.21
        assert initial.ceiling_ft is None
        assert initial.category == FlightCategory.VFR
        assert becmg.source_type == ChangeType.BECMG
        assert becmg.start == utc(10, 27, 0)
        assert becmg.visibility_sm == 1.86
        assert becmg.ceiling_ft == 700
        assert becmg.category == FlightCategory.IFR
        assert becmg.wind.direction == VARIABLE_WIND

    def test_ksfo_multiline_with_remarks(self, parser):
        raw = KSFO_TAF
        timeline = parser.parse(raw)

        assert_timeline_shape(timeline)
        assert timeline.raw == raw
        assert len(timeline.blocks) == 3
        last = timeline.blocks[-1]
        assert last.raw_text == "FM270400 28008KT P6SM BKN012"
        assert last.ceiling_ft == 1200
        assert last.category == FlightCategory.MVFR

    def test_kden_amendment_across_month_end(self):
        timeline = parse(KDEN_AMD_TAF, now=utc(10, 31, 16))

        assert_timeline_shape(timeline)
        assert timeline.amendment == 'AMD'
        assert timeline.validity.end == utc(11, 1, 18)
        assert [b.start for b in timeline.blocks] == [
            utc(10, 31, 15),
            utc(10, 31, 21),
            utc(11, 1, 6),
        ]
        assert timeline.blocks[0].wind.direction == 180
        assert timeline.blocks[2].category == FlightCategory.IFR
        assert timeline.blocks[2].phenomena == ('SN',)
        assert timeline.current_block_index == 0

    def test_no_header(self, parser):
        timeline = parser.parse(NO_HEADER_TAF)

        assert_timeline_shape(timeline)
        assert timeline.station is None
        assert [(b.start, b.end) for b in timeline.blocks] == [
            (utc(10, 26, 18), utc(10, 26, 19)),
            (utc(10, 26, 19), utc(10, 26, 20)),
        ]
        assert timeline.current_block_index == 0

    @pytest.mark.parametrize('raw', [KJFK_TAF, LFPG_TAF, KSFO_TAF, NO_HEADER_TAF])
    def test_reports_render(self, parser, raw):
        report = TimelineReport(parser.parse(raw))

        assert "period(s), worst category" in report.render('table')
        assert report.render('json').startswith('{')

    def test_unknown_report_format(self, parser):
        with pytest.raises(ValueError):
            TimelineReport(parser.parse(KJFK_TAF)).render('xml')

    def test_concurrent_parsing_matches_sequential(self, parser):
        """Parsing holds no shared state between calls."""
        bulletins = [KJFK_TAF, LFPG_TAF, KSFO_TAF, NO_HEADER_TAF] * 10

        sequential = [parser.parse(raw) for raw in bulletins]
        with ThreadPoolExecutor(max_workers=8) as executor:
            concurrent = list(executor.map(parser.parse, bulletins))

        assert concurrent == sequential
