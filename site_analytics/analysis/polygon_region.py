#!/usr/bin/env python3
"""
Polygon Region Analysis

ARCHITECTURAL OVERVIEW:
=======================
Responsibility: Summarise the samples that fall inside a user-drawn polygon.

Operations:
1. point_in_polygon(): ray casting along +longitude, odd crossings = inside
2. polygon_area_sq_ft(): shoelace formula in local feet relative to the
   first vertex
3. analyze(): per-analyte count / min / max / mean / exceedance count
4. region_stats_to_frame(): tabular summary for reports

Vertices are LatLon in drawing order; the ring is closed implicitly.

Navigation Guide:
- Use VS Code outline (Ctrl+Shift+O) to jump between functions
"""

import logging
from typing import Iterable, List, Mapping, Optional, Sequence

import pandas as pd

from site_analytics.config_types import CoordConversionConfig
from site_analytics.geometry.coordinate_math import DEFAULT_CONVERSION, to_local_feet
from site_analytics.models.data_models import (
    AnalyteStats,
    AnalyteThreshold,
    LatLon,
    RegionStats,
    SamplePoint,
)

logger = logging.getLogger(__name__)


# ===========================================================================
# GEOMETRY
# ===========================================================================


def point_in_polygon(lat: float, lon: float, vertices: Sequence[LatLon]) -> bool:
    """
    Ray-casting containment test.

    A ray is cast from the point towards +longitude; the point is inside
    when it crosses an odd number of edges. Points exactly on an edge may
    land on either side.

    Args:
        lat: Point latitude
        lon: Point longitude
        vertices: Polygon ring (no closing duplicate required)

    Returns:
        True if the point is inside
    """
    inside = False
    n = len(vertices)
    j = n - 1
    for i in range(n):
        yi, xi = vertices[i].lat, vertices[i].lon
        yj, xj = vertices[j].lat, vertices[j].lon
        if (yi > lat) != (yj > lat):
            x_cross = (xj - xi) * (lat - yi) / (yj - yi) + xi
            if lon < x_cross:
                inside = not inside
        j = i
    return inside


def polygon_area_sq_ft(
    vertices: Sequence[LatLon], conv: CoordConversionConfig = DEFAULT_CONVERSION
) -> float:
    """
    Planar polygon area in square feet.

    Returns:
        Absolute shoelace area; 0.0 for fewer than 3 vertices
    """
    if len(vertices) < 3:
        return 0.0

    origin = vertices[0]
    points = [to_local_feet(origin, v, conv) for v in vertices]

    twice_area = 0.0
    n = len(points)
    for i in range(n):
        x1, y1 = points[i]
        x2, y2 = points[(i + 1) % n]
        twice_area += x1 * y2 - x2 * y1
    return abs(twice_area / 2.0)


# ===========================================================================
# STATISTICS
# ===========================================================================


def analyte_stats(
    values: Sequence[float], threshold: Optional[AnalyteThreshold]
) -> AnalyteStats:
    """Summary of defined values; exceedances count values above ROD."""
    if not values:
        return AnalyteStats()
    exceedances = 0
    if threshold is not None:
        exceedances = sum(1 for v in values if threshold.exceeds_action_level(v))
    return AnalyteStats(
        count=len(values),
        min=min(values),
        max=max(values),
        mean=sum(values) / len(values),
        exceedances=exceedances,
    )


def analyze(
    vertices: Sequence[LatLon],
    samples: Iterable[SamplePoint],
    thresholds: Mapping[str, AnalyteThreshold],
    analytes: Optional[Sequence[str]] = None,
    conv: CoordConversionConfig = DEFAULT_CONVERSION,
) -> RegionStats:
    """
    Statistics for the samples inside a polygon.

    Args:
        vertices: Polygon ring
        samples: Sample snapshot (surface + historical)
        thresholds: Analyte -> threshold, used for exceedance counts
        analytes: Analytes to summarise (defaults to every thresholded analyte)
        conv: Scale constants for the area

    Returns:
        RegionStats with one AnalyteStats per analyte
    """
    if analytes is None:
        analytes = list(thresholds.keys())

    inside: List[SamplePoint] = [
        s for s in samples if point_in_polygon(s.lat, s.lon, vertices)
    ]

    stats = {}
    for analyte in analytes:
        values = [s.value(analyte) for s in inside if s.has_value(analyte)]
        stats[analyte] = analyte_stats(values, thresholds.get(analyte))

    area = polygon_area_sq_ft(vertices, conv)
    logger.info(
        f"📐 Region analysis: {len(inside)} samples inside, area {area:,.0f} sq ft"
    )

    return RegionStats(total_samples=len(inside), area_sq_ft=area, stats=stats)


# ===========================================================================
# REPORTING
# ===========================================================================


def region_stats_to_frame(
    region: RegionStats, thresholds: Optional[Mapping[str, AnalyteThreshold]] = None
) -> pd.DataFrame:
    """
    One-row-per-analyte summary table.

    Columns: analyte, count, min, max, mean, exceedances and, when
    thresholds are given, unit and rod.
    """
    rows = []
    for analyte, s in region.stats.items():
        row = {"analyte": analyte, **s.as_dict()}
        if thresholds is not None and analyte in thresholds:
            row["unit"] = thresholds[analyte].unit
            row["rod"] = thresholds[analyte].high
        rows.append(row)

    columns = ["analyte", "count", "min", "max", "mean", "exceedances"]
    if thresholds is not None:
        columns += ["unit", "rod"]
    return pd.DataFrame(rows, columns=columns)


# ===========================================================================
# MODULE EXPORTS
# ===========================================================================

__all__ = [
    "analyte_stats",
    "analyze",
    "point_in_polygon",
    "polygon_area_sq_ft",
    "region_stats_to_frame",
]
