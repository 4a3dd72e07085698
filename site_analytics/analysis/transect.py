#!/usr/bin/env python3
"""
Transect Corridor Analysis

═══════════════════════════════════════════════════════════════════════════════
ARCHITECTURAL OVERVIEW
═══════════════════════════════════════════════════════════════════════════════

Responsibility: Select every sampled depth interval that lies within a
corridor around a two-point transect and order them along the line, ready
for a depth-profile plot.

Workflow:
1. create_transect(): clamp the corridor half-width, reject short lines
2. project_onto_segment(): perpendicular distance + position t per location
3. collect_profile(): surface samples (nominal 0-6 in band) and multi-depth
   records (one interval per depth entry) inside the corridor, sorted by
   distance along the transect
4. corridor_polygon(): four corner coordinates for the map outline

Key Interactions:
- Input: LatLon endpoints, SamplePoint / DepthRecord snapshots, analyte
- Uses: coordinate_math (planar distance, bearing, offset)
- Output: TransectProfile consumed by profile_layout and exporters

For Navigation: Use VS Code outline (Ctrl+Shift+O)

═══════════════════════════════════════════════════════════════════════════════
"""

import logging
import math
from typing import Iterable, List, Optional, Tuple

from site_analytics.config import CONFIG
from site_analytics.config_types import CoordConversionConfig, TransectConfig
from site_analytics.geometry.coordinate_math import (
    DEFAULT_CONVERSION,
    bearing,
    meters_between,
    offset,
)
from site_analytics.models.data_models import (
    DepthRecord,
    LatLon,
    ProfileInterval,
    SamplePoint,
    SegmentProjection,
    SourceKind,
    Transect,
    TransectProfile,
)

logger = logging.getLogger(__name__)

DEFAULT_TRANSECT = TransectConfig.from_dict(CONFIG["transect"])

# Squared degree length below which a segment is treated as a point
DEGENERATE_SEGMENT_SQ = 1e-20


class TransectTooShortError(ValueError):
    """Raised when the two transect endpoints are closer than the minimum length."""

    def __init__(self, length_m: float, min_length_m: float):
        self.length_m = length_m
        self.min_length_m = min_length_m
        super().__init__(
            f"Transect too short: {length_m:.2f} m (minimum {min_length_m:g} m)"
        )


# ═══════════════════════════════════════════════════════════════════════════════
# 📏 TRANSECT CREATION
# ═══════════════════════════════════════════════════════════════════════════════


def clamp_corridor_width(
    width_ft: Optional[float], config: TransectConfig = DEFAULT_TRANSECT
) -> float:
    """Clamp a corridor half-width to the configured range (None -> default)."""
    if width_ft is None:
        return config.corridor_width_ft
    return max(config.min_corridor_ft, min(config.max_corridor_ft, float(width_ft)))


def validate_transect_length(
    a: LatLon,
    b: LatLon,
    config: TransectConfig = DEFAULT_TRANSECT,
    conv: CoordConversionConfig = DEFAULT_CONVERSION,
) -> bool:
    """True when the endpoints are at least min_length_m apart."""
    return meters_between(a, b, conv) >= config.min_length_m


def create_transect(
    a: LatLon,
    b: LatLon,
    corridor_width_ft: Optional[float] = None,
    config: TransectConfig = DEFAULT_TRANSECT,
    conv: CoordConversionConfig = DEFAULT_CONVERSION,
) -> Transect:
    """
    Build a validated transect.

    Args:
        a: First endpoint
        b: Second endpoint
        corridor_width_ft: Corridor half-width, clamped to the configured range
        config: Transect settings
        conv: Scale constants

    Returns:
        Transect with the clamped width and its planar length

    Raises:
        TransectTooShortError: If the endpoints are closer than min_length_m
    """
    length_m = meters_between(a, b, conv)
    if length_m < config.min_length_m:
        raise TransectTooShortError(length_m, config.min_length_m)

    width_ft = clamp_corridor_width(corridor_width_ft, config)
    logger.debug(f"Transect created: {length_m:.1f} m, corridor ±{width_ft:g} ft")
    return Transect(a=a, b=b, corridor_width_ft=width_ft, length_m=length_m)


# ═══════════════════════════════════════════════════════════════════════════════
# 📐 PROJECTION
# ═══════════════════════════════════════════════════════════════════════════════


def project_onto_segment(
    point: LatLon,
    a: LatLon,
    b: LatLon,
    conv: CoordConversionConfig = DEFAULT_CONVERSION,
) -> SegmentProjection:
    """
    Project a point onto segment a-b.

    Longitude is scaled by cos(lat of a) to approximate a Cartesian frame for
    finding t; the reported distance is the planar distance in meters from
    the point to the closest point on the segment.

    Returns:
        SegmentProjection(distance_m, t) with t clamped to [0, 1]; a
        degenerate segment yields the distance to a and t = 0
    """
    cos_lat = math.cos(math.radians(a.lat))
    ap_lat = point.lat - a.lat
    ap_lon = (point.lon - a.lon) * cos_lat
    ab_lat = b.lat - a.lat
    ab_lon = (b.lon - a.lon) * cos_lat

    ab_sq = ab_lat * ab_lat + ab_lon * ab_lon
    if ab_sq < DEGENERATE_SEGMENT_SQ:
        return SegmentProjection(distance_m=meters_between(a, point, conv), t=0.0)

    t = (ap_lat * ab_lat + ap_lon * ab_lon) / ab_sq
    t = max(0.0, min(1.0, t))

    closest = LatLon(a.lat + t * (b.lat - a.lat), a.lon + t * (b.lon - a.lon))
    return SegmentProjection(distance_m=meters_between(closest, point, conv), t=t)


# ═══════════════════════════════════════════════════════════════════════════════
# 🔍 PROFILE COLLECTION
# ═══════════════════════════════════════════════════════════════════════════════


def _candidate_intervals(
    samples: Iterable[SamplePoint],
    records: Iterable[DepthRecord],
    analyte: str,
    config: TransectConfig,
) -> List[Tuple[LatLon, str, SourceKind, float, float, Optional[float], str]]:
    """Flatten samples and records into (location, id, kind, start, end, value, label)."""
    candidates = []

    for s in samples:
        if s.source_tag is SourceKind.PLANNED:
            continue
        if s.depth_interval is not None:
            start, end, label = s.depth_interval.start, s.depth_interval.end, s.depth_interval.label
        else:
            start = config.surface_depth_start_ft
            end = config.surface_depth_end_ft
            label = config.surface_depth_label
        candidates.append(
            (s.location, s.sample_id, s.source_tag, start, end, s.value(analyte), label)
        )

    for record in records:
        location = LatLon(record.lat, record.lon)
        for point in record.to_sample_points():
            interval = point.depth_interval
            candidates.append(
                (
                    location,
                    record.sample_id,
                    record.source_kind,
                    interval.start,
                    interval.end,
                    point.value(analyte),
                    interval.label,
                )
            )

    return candidates


def collect_profile(
    transect: Transect,
    samples: Iterable[SamplePoint],
    records: Iterable[DepthRecord],
    analyte: str,
    include_unanalyzed: bool = True,
    config: TransectConfig = DEFAULT_TRANSECT,
    conv: CoordConversionConfig = DEFAULT_CONVERSION,
) -> TransectProfile:
    """
    Collect the depth intervals inside the transect corridor.

    Args:
        transect: Validated transect (see create_transect)
        samples: Surface samples (SS / EA); a sample carrying its own
            depth_interval keeps it
        records: Multi-depth test pits and soil borings
        analyte: Analyte whose values are attached to each interval
        include_unanalyzed: Keep intervals with no value for the analyte
            (rendered as "No Data")
        config: Surface band settings
        conv: Scale constants

    Returns:
        TransectProfile with intervals sorted by distance along the line
        (stable for ties)
    """
    corridor_m = transect.corridor_width_ft * conv.feet_to_meters
    length_ft = transect.length_m * conv.meters_to_feet

    intervals = []
    for location, source_id, kind, start, end, value, label in _candidate_intervals(
        samples, records, analyte, config
    ):
        if value is None and not include_unanalyzed:
            continue
        proj = project_onto_segment(location, transect.a, transect.b, conv)
        if proj.distance_m > corridor_m:
            continue
        intervals.append(
            ProfileInterval(
                source_id=source_id,
                source_kind=kind,
                depth_start=start,
                depth_end=end,
                value=value,
                dist_along_ft=proj.t * length_ft,
                offset_ft=proj.distance_m * conv.meters_to_feet,
                depth_label=label,
                lat=location.lat,
                lon=location.lon,
            )
        )

    intervals.sort(key=lambda iv: iv.dist_along_ft)

    profile = TransectProfile(
        transect=transect,
        analyte=analyte,
        length_ft=length_ft,
        corridor_width_ft=transect.corridor_width_ft,
        intervals=tuple(intervals),
    )
    if profile.is_empty:
        logger.info(f"📏 No samples within ±{transect.corridor_width_ft:g} ft corridor")
    else:
        logger.info(
            f"📏 Transect {length_ft:,.0f} ft: {len(intervals)} intervals at "
            f"{profile.location_count} locations"
        )
    return profile


# ═══════════════════════════════════════════════════════════════════════════════
# 🗺️ CORRIDOR OUTLINE
# ═══════════════════════════════════════════════════════════════════════════════


def corridor_polygon(
    transect: Transect, conv: CoordConversionConfig = DEFAULT_CONVERSION
) -> Tuple[LatLon, LatLon, LatLon, LatLon]:
    """
    Corner coordinates of the corridor rectangle.

    Order: a-left, a-right, b-right, b-left, where left/right are the
    bearings +90 / +270 degrees from the a -> b direction.
    """
    half_width_m = transect.corridor_width_ft * conv.feet_to_meters
    heading = bearing(transect.a, transect.b)
    perp_left = (heading + 90.0) % 360.0
    perp_right = (heading + 270.0) % 360.0

    return (
        offset(transect.a, perp_left, half_width_m, conv),
        offset(transect.a, perp_right, half_width_m, conv),
        offset(transect.b, perp_right, half_width_m, conv),
        offset(transect.b, perp_left, half_width_m, conv),
    )


# ═══════════════════════════════════════════════════════════════════════════════
# 📦 MODULE EXPORTS
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = [
    "DEFAULT_TRANSECT",
    "TransectTooShortError",
    "clamp_corridor_width",
    "collect_profile",
    "corridor_polygon",
    "create_transect",
    "project_onto_segment",
    "validate_transect_length",
]
