"""
Exceedance buffer zones and two-point measurement.

═══════════════════════════════════════════════════════════════════════════════
ARCHITECTURAL OVERVIEW
═══════════════════════════════════════════════════════════════════════════════

Responsibility: Draw fixed-radius circles around every sample above the
analyte's action level (ROD) and measure straight-line distances.

Key Features:
- Radius in feet, clamped to the configured range and adjusted in steps
- Circle polygons built with Shapely in local meters, returned in (lon, lat)
- Union area of all circles (overlapping circles counted once)

For Navigation: Use VS Code outline (Ctrl+Shift+O)

═══════════════════════════════════════════════════════════════════════════════
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence

from shapely import affinity
from shapely.geometry import Point, Polygon
from shapely.ops import unary_union

from site_analytics.config import CONFIG
from site_analytics.config_types import BufferZoneConfig, CoordConversionConfig
from site_analytics.geometry.coordinate_math import (
    DEFAULT_CONVERSION,
    meters_between,
    to_local_meters,
)
from site_analytics.models.data_models import AnalyteThreshold, LatLon, SamplePoint

logger = logging.getLogger(__name__)

DEFAULT_BUFFER = BufferZoneConfig.from_dict(CONFIG["buffer_zones"])

# Segments per quarter circle for circle polygons
CIRCLE_RESOLUTION = 16


# ═══════════════════════════════════════════════════════════════════════════════
# 📦 RESULT TYPES
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class BufferZone:
    """Circle around one exceeding sample."""

    center: LatLon
    radius_m: float
    value: float
    sample_id: str = ""

    def as_dict(self) -> Dict[str, Any]:
        return {
            "center": self.center.as_dict(),
            "radius_m": self.radius_m,
            "value": self.value,
            "sample_id": self.sample_id,
        }


@dataclass(frozen=True)
class Measurement:
    """Straight-line distance between two points."""

    meters: float
    feet: float


# ═══════════════════════════════════════════════════════════════════════════════
# ⭕ BUFFER ZONES
# ═══════════════════════════════════════════════════════════════════════════════


def clamp_buffer_radius(
    radius_ft: Optional[float], config: BufferZoneConfig = DEFAULT_BUFFER
) -> float:
    """Clamp a buffer radius to [min, max] feet (None -> default)."""
    if radius_ft is None:
        return config.radius_ft
    return max(config.min_radius_ft, min(config.max_radius_ft, float(radius_ft)))


def adjust_buffer_radius(
    current_ft: float, delta_ft: float, config: BufferZoneConfig = DEFAULT_BUFFER
) -> float:
    return clamp_buffer_radius(current_ft + delta_ft, config)


def exceedance_buffers(
    samples: Iterable[SamplePoint],
    analyte: str,
    threshold: AnalyteThreshold,
    radius_ft: Optional[float] = None,
    config: BufferZoneConfig = DEFAULT_BUFFER,
    conv: CoordConversionConfig = DEFAULT_CONVERSION,
) -> List[BufferZone]:
    """
    One buffer circle per sample whose value exceeds the action level.

    Args:
        samples: Surface and historical samples
        analyte: Analyte to test
        threshold: The analyte's threshold; exceedance is value > high
        radius_ft: Circle radius in feet (clamped)
        config: Radius limits
        conv: Scale constants

    Returns:
        BufferZone list in input order
    """
    radius_m = clamp_buffer_radius(radius_ft, config) * conv.feet_to_meters

    zones = []
    for s in samples:
        value = s.value(analyte)
        if not threshold.exceeds_action_level(value):
            continue
        zones.append(
            BufferZone(center=s.location, radius_m=radius_m, value=value, sample_id=s.sample_id)
        )

    logger.info(f"⭕ {len(zones)} {analyte} exceedance buffers at {radius_m:.1f} m")
    return zones


def buffer_polygon(
    zone: BufferZone, conv: CoordConversionConfig = DEFAULT_CONVERSION
) -> Polygon:
    """
    Circle polygon for a buffer zone in (lon, lat) degrees.

    The circle is built in local meters and scaled per axis, so it is a true
    circle on the ground and an ellipse in degrees.
    """
    circle_m = Point(0.0, 0.0).buffer(zone.radius_m, CIRCLE_RESOLUTION)
    return affinity.affine_transform(
        circle_m,
        [
            1.0 / conv.meters_per_deg_lon,
            0.0,
            0.0,
            1.0 / conv.meters_per_deg_lat,
            zone.center.lon,
            zone.center.lat,
        ],
    )


def buffer_union_area_sq_ft(
    zones: Sequence[BufferZone], conv: CoordConversionConfig = DEFAULT_CONVERSION
) -> float:
    """Ground area covered by the union of all buffer circles, in square feet."""
    if not zones:
        return 0.0
    origin = zones[0].center
    circles = []
    for zone in zones:
        x, y = to_local_meters(origin, zone.center, conv)
        circles.append(Point(x, y).buffer(zone.radius_m, CIRCLE_RESOLUTION))
    area_m2 = unary_union(circles).area
    return area_m2 / (conv.feet_to_meters ** 2)


# ═══════════════════════════════════════════════════════════════════════════════
# 📏 MEASUREMENT
# ═══════════════════════════════════════════════════════════════════════════════


def measure(
    p1: LatLon, p2: LatLon, conv: CoordConversionConfig = DEFAULT_CONVERSION
) -> Measurement:
    """Planar distance between two points in meters and feet."""
    meters = meters_between(p1, p2, conv)
    return Measurement(meters=meters, feet=meters * conv.meters_to_feet)


# ═══════════════════════════════════════════════════════════════════════════════
# 📦 MODULE EXPORTS
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = [
    "BufferZone",
    "DEFAULT_BUFFER",
    "Measurement",
    "adjust_buffer_radius",
    "buffer_polygon",
    "buffer_union_area_sq_ft",
    "clamp_buffer_radius",
    "exceedance_buffers",
    "measure",
]
