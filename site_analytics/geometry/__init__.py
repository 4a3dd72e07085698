"""
Geometry leaf modules shared by every analysis.

Module Structure:
- coordinate_math.py: degree <-> meter/feet conversion, bearing, offset
- color_mapping.py: threshold-driven gradient and category colors
- convex_hull.py: monotone-chain hull, buffering, containment
"""

from site_analytics.geometry.coordinate_math import (
    DEFAULT_CONVERSION,
    bearing,
    feet_to_meters,
    local_meters_array,
    meters_between,
    meters_to_degrees,
    meters_to_feet,
    offset,
    to_local_feet,
    to_local_meters,
)
from site_analytics.geometry.color_mapping import (
    GREEN,
    ORANGE,
    RED,
    YELLOW,
    category_color,
    category_for,
    color_array,
    color_for,
    lerp_color,
    overshoot_value,
)
from site_analytics.geometry.convex_hull import (
    buffer_hull,
    contains_point,
    contains_points,
    convex_hull,
    hull_area_m2,
    hull_to_polygon,
)

__all__ = [
    # Coordinate math
    "DEFAULT_CONVERSION",
    "bearing",
    "feet_to_meters",
    "local_meters_array",
    "meters_between",
    "meters_to_degrees",
    "meters_to_feet",
    "offset",
    "to_local_feet",
    "to_local_meters",
    # Color mapping
    "GREEN",
    "ORANGE",
    "RED",
    "YELLOW",
    "category_color",
    "category_for",
    "color_array",
    "color_for",
    "lerp_color",
    "overshoot_value",
    # Convex hull
    "buffer_hull",
    "contains_point",
    "contains_points",
    "convex_hull",
    "hull_area_m2",
    "hull_to_polygon",
]
