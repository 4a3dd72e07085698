#!/usr/bin/env python3
"""
Coordinate Math

ARCHITECTURAL OVERVIEW:
=======================
Responsibility: Convert between geographic degrees and local planar distance
(meters / feet) using fixed per-degree scale factors. Foundation for every
distance and area computation in the engine.

Key Functions:
1. Planar distance and local-feet conversion (flat-earth, site scale)
2. Degree <-> meter conversion per axis
3. Spherical bearing and forward offset (corridor outline corners)
4. Vectorised local-meter projection for numpy callers

All functions are pure and total: no error conditions.

Navigation Guide:
- Use VS Code outline (Ctrl+Shift+O) to jump between functions
"""

import math
from typing import Tuple

import numpy as np

from site_analytics.config import CONFIG
from site_analytics.config_types import CoordConversionConfig
from site_analytics.models.data_models import LatLon

DEFAULT_CONVERSION = CoordConversionConfig.from_dict(CONFIG["coord_conversion"])


# ===========================================================================
# UNIT CONVERSION
# ===========================================================================


def feet_to_meters(feet: float, conv: CoordConversionConfig = DEFAULT_CONVERSION) -> float:
    return feet * conv.feet_to_meters


def meters_to_feet(meters: float, conv: CoordConversionConfig = DEFAULT_CONVERSION) -> float:
    return meters / conv.feet_to_meters


def meters_to_degrees(
    meters: float, conv: CoordConversionConfig = DEFAULT_CONVERSION
) -> Tuple[float, float]:
    """
    Convert a distance in meters to per-axis degree spans.

    Args:
        meters: Distance in meters
        conv: Scale constants

    Returns:
        Tuple of (delta_lat_deg, delta_lon_deg)
    """
    return (meters / conv.meters_per_deg_lat, meters / conv.meters_per_deg_lon)


# ===========================================================================
# PLANAR DISTANCE
# ===========================================================================


def to_local_meters(
    origin: LatLon, point: LatLon, conv: CoordConversionConfig = DEFAULT_CONVERSION
) -> Tuple[float, float]:
    """
    Planar (x, y) offset of point from origin in meters.

    x grows eastward (longitude), y grows northward (latitude).
    """
    x = (point.lon - origin.lon) * conv.meters_per_deg_lon
    y = (point.lat - origin.lat) * conv.meters_per_deg_lat
    return (x, y)


def to_local_feet(
    origin: LatLon, point: LatLon, conv: CoordConversionConfig = DEFAULT_CONVERSION
) -> Tuple[float, float]:
    """
    Planar (x, y) offset of point from origin in feet.

    Args:
        origin: Reference coordinate (maps to 0, 0)
        point: Coordinate to convert
        conv: Scale constants

    Returns:
        Tuple of (x_ft, y_ft)
    """
    x_m, y_m = to_local_meters(origin, point, conv)
    return (x_m / conv.feet_to_meters, y_m / conv.feet_to_meters)


def meters_between(
    p1: LatLon, p2: LatLon, conv: CoordConversionConfig = DEFAULT_CONVERSION
) -> float:
    """Flat-earth distance between two coordinates in meters."""
    dx, dy = to_local_meters(p1, p2, conv)
    return math.hypot(dx, dy)


def local_meters_array(
    lats: np.ndarray,
    lons: np.ndarray,
    origin: LatLon,
    conv: CoordConversionConfig = DEFAULT_CONVERSION,
) -> np.ndarray:
    """
    Vectorised planar projection.

    Returns:
        Array of shape (n, 2) holding (x_m, y_m) per input coordinate
    """
    x = (np.asarray(lons, dtype=float) - origin.lon) * conv.meters_per_deg_lon
    y = (np.asarray(lats, dtype=float) - origin.lat) * conv.meters_per_deg_lat
    return np.column_stack((x, y))


# ===========================================================================
# SPHERICAL BEARING / OFFSET
# ===========================================================================


def bearing(p1: LatLon, p2: LatLon) -> float:
    """
    Forward bearing from p1 to p2 in degrees, normalised to [0, 360).
    """
    d_lon = math.radians(p2.lon - p1.lon)
    lat1 = math.radians(p1.lat)
    lat2 = math.radians(p2.lat)
    y = math.sin(d_lon) * math.cos(lat2)
    x = math.cos(lat1) * math.sin(lat2) - math.sin(lat1) * math.cos(lat2) * math.cos(
        d_lon
    )
    return (math.degrees(math.atan2(y, x)) + 360.0) % 360.0


def offset(
    point: LatLon,
    bearing_deg: float,
    distance_m: float,
    conv: CoordConversionConfig = DEFAULT_CONVERSION,
) -> LatLon:
    """
    Move a coordinate by a distance along a bearing on a spherical Earth.

    Args:
        point: Start coordinate
        bearing_deg: Direction in degrees clockwise from north
        distance_m: Distance in meters
        conv: Supplies the sphere radius

    Returns:
        Destination coordinate
    """
    brng = math.radians(bearing_deg)
    lat1 = math.radians(point.lat)
    lon1 = math.radians(point.lon)
    d_r = distance_m / conv.earth_radius_m

    lat2 = math.asin(
        math.sin(lat1) * math.cos(d_r) + math.cos(lat1) * math.sin(d_r) * math.cos(brng)
    )
    lon2 = lon1 + math.atan2(
        math.sin(brng) * math.sin(d_r) * math.cos(lat1),
        math.cos(d_r) - math.sin(lat1) * math.sin(lat2),
    )
    return LatLon(math.degrees(lat2), math.degrees(lon2))


# ===========================================================================
# MODULE EXPORTS
# ===========================================================================

__all__ = [
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
]
