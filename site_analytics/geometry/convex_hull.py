#!/usr/bin/env python3
"""
Convex Hull Builder

ARCHITECTURAL OVERVIEW:
=======================
Responsibility: Convex hull of sample locations (Andrew's monotone chain),
an outward-buffered version of it for interpolation clipping, and the
convex point-in-hull test.

Key Functions:
1. convex_hull(): CCW hull, longitude as x and latitude as y
2. buffer_hull(): push every vertex away from the centroid by a fixed
   distance in meters
3. contains_point() / contains_points(): half-plane test against every edge
4. hull_area_m2() / hull_to_polygon(): area and Shapely export helpers

Navigation Guide:
- Use VS Code outline (Ctrl+Shift+O) to jump between functions
"""

import logging
import math
from typing import Iterable, Protocol

import numpy as np
from shapely.geometry import Polygon

from site_analytics.config_types import CoordConversionConfig
from site_analytics.geometry.coordinate_math import DEFAULT_CONVERSION
from site_analytics.models.data_models import Hull, LatLon

logger = logging.getLogger(__name__)

# Vertices closer than this (m) to the centroid are not pushed outward
DEGENERATE_DISTANCE_M = 0.001


class HasLatLon(Protocol):
    lat: float
    lon: float


# ═══════════════════════════════════════════════════════════════════════════
# 🔺 MONOTONE CHAIN
# ═══════════════════════════════════════════════════════════════════════════


def cross_2d(o: HasLatLon, a: HasLatLon, b: HasLatLon) -> float:
    """
    2D cross product of vectors OA and OB (lon as x, lat as y).

    Positive for a counter-clockwise (left) turn.
    """
    return (a.lon - o.lon) * (b.lat - o.lat) - (a.lat - o.lat) * (b.lon - o.lon)


def convex_hull(points: Iterable[HasLatLon]) -> Hull:
    """
    Compute the convex hull of a point set.

    Args:
        points: Anything exposing lat / lon (SamplePoint, LatLon)

    Returns:
        Hull vertices in counter-clockwise order. With fewer than 3 points
        the input coordinates are returned unchanged.
    """
    coords = [LatLon(float(p.lat), float(p.lon)) for p in points]
    if len(coords) < 3:
        return tuple(coords)

    ordered = sorted(coords, key=lambda p: (p.lon, p.lat))

    lower = []
    for p in ordered:
        while len(lower) >= 2 and cross_2d(lower[-2], lower[-1], p) <= 0:
            lower.pop()
        lower.append(p)

    upper = []
    for p in reversed(ordered):
        while len(upper) >= 2 and cross_2d(upper[-2], upper[-1], p) <= 0:
            upper.pop()
        upper.append(p)

    # Last vertex of each chain is the first vertex of the other
    return tuple(lower[:-1] + upper[:-1])


# ═══════════════════════════════════════════════════════════════════════════
# 🛡️ HULL BUFFERING
# ═══════════════════════════════════════════════════════════════════════════


def hull_centroid(hull: Hull) -> LatLon:
    """Vertex-average centroid of a hull."""
    n = len(hull)
    return LatLon(sum(v.lat for v in hull) / n, sum(v.lon for v in hull) / n)


def buffer_hull(
    hull: Hull,
    distance_m: float,
    conv: CoordConversionConfig = DEFAULT_CONVERSION,
) -> Hull:
    """
    Expand a hull outward by a buffer distance.

    Each vertex moves radially away from the hull centroid by distance_m,
    with the direction normalised in meter space and converted back to
    degrees per axis.

    Args:
        hull: CCW hull vertices
        distance_m: Buffer distance in meters
        conv: Scale constants

    Returns:
        Buffered hull (unchanged when fewer than 3 vertices)
    """
    if len(hull) < 3:
        return hull

    centroid = hull_centroid(hull)
    buf_lat = distance_m / conv.meters_per_deg_lat
    buf_lon = distance_m / conv.meters_per_deg_lon

    buffered = []
    for vertex in hull:
        d_lat_m = (vertex.lat - centroid.lat) * conv.meters_per_deg_lat
        d_lon_m = (vertex.lon - centroid.lon) * conv.meters_per_deg_lon
        dist = math.hypot(d_lat_m, d_lon_m)

        if dist < DEGENERATE_DISTANCE_M:
            logger.debug(f"Hull vertex {vertex} coincides with centroid, not buffered")
            buffered.append(vertex)
            continue

        buffered.append(
            LatLon(
                vertex.lat + (d_lat_m / dist) * buf_lat,
                vertex.lon + (d_lon_m / dist) * buf_lon,
            )
        )

    return tuple(buffered)


# ═══════════════════════════════════════════════════════════════════════════
# 📍 CONTAINMENT
# ═══════════════════════════════════════════════════════════════════════════


def contains_point(lat: float, lon: float, hull: Hull) -> bool:
    """
    Test whether a point lies inside (or on) a CCW convex hull.

    The point must be on the non-negative side of every directed edge.
    Hulls with fewer than 3 vertices contain nothing.
    """
    n = len(hull)
    if n < 3:
        return False

    for i in range(n):
        a = hull[i]
        b = hull[(i + 1) % n]
        cross = (b.lon - a.lon) * (lat - a.lat) - (b.lat - a.lat) * (lon - a.lon)
        if cross < 0:
            return False
    return True


def contains_points(lats: np.ndarray, lons: np.ndarray, hull: Hull) -> np.ndarray:
    """
    Vectorised contains_point over arrays of coordinates.

    Returns:
        Boolean array with the broadcast shape of lats and lons
    """
    lats = np.asarray(lats, dtype=float)
    lons = np.asarray(lons, dtype=float)
    inside = np.ones(np.broadcast(lats, lons).shape, dtype=bool)

    n = len(hull)
    if n < 3:
        return np.zeros_like(inside)

    for i in range(n):
        a = hull[i]
        b = hull[(i + 1) % n]
        cross = (b.lon - a.lon) * (lats - a.lat) - (b.lat - a.lat) * (lons - a.lon)
        inside &= cross >= 0
    return inside


# ═══════════════════════════════════════════════════════════════════════════
# 📐 AREA / EXPORT HELPERS
# ═══════════════════════════════════════════════════════════════════════════


def hull_area_m2(hull: Hull, conv: CoordConversionConfig = DEFAULT_CONVERSION) -> float:
    """Planar shoelace area of a hull in square meters."""
    if len(hull) < 3:
        return 0.0
    origin = hull[0]
    xs = np.array([(v.lon - origin.lon) * conv.meters_per_deg_lon for v in hull])
    ys = np.array([(v.lat - origin.lat) * conv.meters_per_deg_lat for v in hull])
    return float(abs(np.dot(xs, np.roll(ys, -1)) - np.dot(ys, np.roll(xs, -1))) / 2.0)


def hull_to_polygon(hull: Hull) -> Polygon:
    """Shapely polygon in (lon, lat) axis order for GeoJSON export."""
    return Polygon([(v.lon, v.lat) for v in hull])


# ═══════════════════════════════════════════════════════════════════════════
# 📦 MODULE EXPORTS
# ═══════════════════════════════════════════════════════════════════════════

__all__ = [
    "buffer_hull",
    "contains_point",
    "contains_points",
    "convex_hull",
    "cross_2d",
    "hull_area_m2",
    "hull_centroid",
    "hull_to_polygon",
]
