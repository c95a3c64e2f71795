"""Flight category from visibility and ceiling."""
import math
from typing import Optional

from taf_timeline.models.forecast import FlightCategory

# (category, visibility floor SM, ceiling floor ft), best first.
# A value sitting exactly on a floor falls to the next, worse category.
CATEGORY_THRESHOLDS = (
    (FlightCategory.VFR, 5, 3000),
    (FlightCategory.MVFR, 3, 1000),
    (FlightCategory.IFR, 1, 500),
)

# Lower = worse conditions
CATEGORY_PRIORITY = {
    FlightCategory.LIFR: 0,
    FlightCategory.IFR: 1,
    FlightCategory.MVFR: 2,
    FlightCategory.VFR: 3,
    FlightCategory.UNKNOWN: 4,
}


def derive_flight_category(visibility_sm: Optional[float], ceiling_ft: Optional[int]) -> FlightCategory:
    """
    Determine flight category.

    A missing value is treated as unlimited; with both missing the category
    is UNKNOWN. Checks run VFR -> MVFR -> IFR and the first match wins,
    otherwise LIFR.

    Args:
        visibility_sm: Visibility in statute miles
        ceiling_ft: Ceiling in feet AGL

    Returns:
        FlightCategory
    """
    if visibility_sm is None and ceiling_ft is None:
        return FlightCategory.UNKNOWN

    visibility = math.inf if visibility_sm is None else visibility_sm
    ceiling = math.inf if ceiling_ft is None else ceiling_ft

    for category, min_visibility, min_ceiling in CATEGORY_THRESHOLDS:
        if visibility > min_visibility and ceiling > min_ceiling:
            return category

    return FlightCategory.LIFR


def worst_category(*categories: FlightCategory) -> FlightCategory:
    """Most restrictive of the given categories (UNKNOWN only if nothing else)."""
    return min(categories, key=lambda category: CATEGORY_PRIORITY[category])
