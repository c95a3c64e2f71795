"""Unit tests for flight category derivation."""
import pytest
from taf_timeline.categories import derive_flight_category, worst_category
from taf_timeline.models.forecast import FlightCategory


class TestDeriveFlightCategory:
    """Test cases for derive_flight_category."""

    @pytest.mark.parametrize('visibility_sm,ceiling_ft,expected', [
        (10.0, None, FlightCategory.VFR),
        (6.0, 5000, FlightCategory.VFR),
        (6.0, 3000, FlightCategory.MVFR),
        (5.0, None, FlightCategory.MVFR),
        (2.0, 1500, FlightCategory.IFR),
        (3.0, None, FlightCategory.IFR),
        (2.49, None, FlightCategory.IFR),
        (1.0, 1000, FlightCategory.LIFR),
        (0.25, None, FlightCategory.LIFR),
        (None, 400, FlightCategory.LIFR),
        (None, 800, FlightCategory.IFR),
        (None, None, FlightCategory.UNKNOWN),
    ])
    def test_categories(self, visibility_sm, ceiling_ft, expected):
        assert derive_flight_category(visibility_sm, ceiling_ft) == expected

    def test_threshold_values_fall_to_worse_category(self):
        """Values exactly on a boundary do not meet the better category."""
        assert derive_flight_category(10.0, 3000) == FlightCategory.MVFR
        assert derive_flight_category(10.0, 1000) == FlightCategory.IFR
        assert derive_flight_category(10.0, 500) == FlightCategory.LIFR


class TestWorstCategory:
    """Test cases for worst_category."""

    def test_most_restrictive_wins(self):
        assert worst_category(
            FlightCategory.VFR, FlightCategory.IFR, FlightCategory.MVFR
        ) == FlightCategory.IFR

    def test_unknown_only_when_alone(self):
        assert worst_category(FlightCategory.UNKNOWN, FlightCategory.VFR) == FlightCategory.VFR
        assert worst_category(FlightCategory.UNKNOWN) == FlightCategory.UNKNOWN
