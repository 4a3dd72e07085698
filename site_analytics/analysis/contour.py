#!/usr/bin/env python3
"""
IDW Contour Interpolation

═══════════════════════════════════════════════════════════════════════════════
ARCHITECTURAL OVERVIEW
═══════════════════════════════════════════════════════════════════════════════

Responsibility: Build a rasterized, color-coded estimate of a contamination
surface using Inverse Distance Weighting, clipped to the buffered convex hull
of the samples.

Algorithm: for each cell center inside the hull,
    value = Σ(vᵢ·wᵢ) / Σ(wᵢ),  wᵢ = 1 / dᵢ²
with dᵢ the planar distance in meters. A sample closer than 1 m supplies
its exact value. The raster row 0 is the northern edge.

Key Interactions:
- Input: SamplePoint snapshots + analyte + AnalyteThreshold
- Uses: convex_hull (clipping), color_mapping (cell colors)
- Output: RasterProduct (RGBA array + bounds) for an external renderer

For Navigation: Use VS Code outline (Ctrl+Shift+O)

═══════════════════════════════════════════════════════════════════════════════
"""

import logging
import math
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

import numpy as np

from site_analytics.config import CONFIG
from site_analytics.config_types import ContourConfig, CoordConversionConfig
from site_analytics.geometry.color_mapping import color_array
from site_analytics.geometry.convex_hull import buffer_hull, contains_points, convex_hull
from site_analytics.geometry.coordinate_math import DEFAULT_CONVERSION
from site_analytics.models.data_models import (
    AnalyteThreshold,
    RasterProduct,
    SamplePoint,
)

logger = logging.getLogger(__name__)

DEFAULT_CONTOUR = ContourConfig.from_dict(CONFIG["contour"])


# ═══════════════════════════════════════════════════════════════════════════════
# 📦 DATA COLLECTION
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class ValuedPoint:
    """Sample location carrying a defined value for one analyte."""

    lat: float
    lon: float
    value: float


def collect_valued_points(
    samples: Iterable[SamplePoint], analyte: str
) -> List[ValuedPoint]:
    """
    Keep samples that have a defined value for the analyte.

    Samples with an absent or NaN value are skipped.
    """
    points = []
    for sample in samples:
        value = sample.value(analyte)
        if value is not None:
            points.append(ValuedPoint(sample.lat, sample.lon, value))
    return points


# ═══════════════════════════════════════════════════════════════════════════════
# 🎯 SINGLE-POINT IDW
# ═══════════════════════════════════════════════════════════════════════════════


def idw_value(
    lat: float,
    lon: float,
    points: Sequence[ValuedPoint],
    conv: CoordConversionConfig = DEFAULT_CONVERSION,
    exact_distance_sq_m2: float = 1.0,
) -> float:
    """
    Inverse-distance-weighted estimate at one coordinate (power 2).

    Args:
        lat: Query latitude
        lon: Query longitude
        points: Valued sample points
        conv: Scale constants
        exact_distance_sq_m2: Squared distance below which a sample's
            exact value is returned

    Returns:
        Interpolated value; 0.0 when there are no points
    """
    numerator = 0.0
    denominator = 0.0

    for p in points:
        d_lat = (lat - p.lat) * conv.meters_per_deg_lat
        d_lon = (lon - p.lon) * conv.meters_per_deg_lon
        dist_sq = d_lat * d_lat + d_lon * d_lon

        if dist_sq < exact_distance_sq_m2:
            return p.value

        weight = 1.0 / dist_sq
        numerator += p.value * weight
        denominator += weight

    return numerator / denominator if denominator > 0 else 0.0


def _idw_batch(
    cell_lats: np.ndarray,
    cell_lons: np.ndarray,
    point_lats: np.ndarray,
    point_lons: np.ndarray,
    point_values: np.ndarray,
    conv: CoordConversionConfig,
    exact_distance_sq_m2: float,
) -> np.ndarray:
    """Vectorised idw_value over a batch of cell centers."""
    d_lat = (cell_lats[:, None] - point_lats[None, :]) * conv.meters_per_deg_lat
    d_lon = (cell_lons[:, None] - point_lons[None, :]) * conv.meters_per_deg_lon
    dist_sq = d_lat * d_lat + d_lon * d_lon

    coincident = dist_sq < exact_distance_sq_m2
    has_exact = coincident.any(axis=1)

    with np.errstate(divide="ignore"):
        weights = np.where(coincident, 0.0, 1.0 / dist_sq)
    numerator = weights @ point_values
    denominator = weights.sum(axis=1)

    result = np.zeros(cell_lats.shape[0], dtype=float)
    np.divide(numerator, denominator, out=result, where=denominator > 0)

    # First coincident sample in input order wins
    if has_exact.any():
        first = np.argmax(coincident[has_exact], axis=1)
        result[has_exact] = point_values[first]
    return result


# ═══════════════════════════════════════════════════════════════════════════════
# 🌈 RASTER GENERATION
# ═══════════════════════════════════════════════════════════════════════════════


def interpolate(
    samples: Iterable[SamplePoint],
    analyte: str,
    threshold: AnalyteThreshold,
    config: ContourConfig = DEFAULT_CONTOUR,
    conv: CoordConversionConfig = DEFAULT_CONVERSION,
) -> Optional[RasterProduct]:
    """
    Generate the IDW contour raster for one analyte.

    Steps:
        1. Collect sample points with values for the analyte
        2. Compute grid bounds from sample extents (with degree pad)
        3. Size the grid from the physical cell size, clamped per axis
        4. Build the convex hull of the points and buffer it
        5. Run IDW for every cell center inside the buffered hull
        6. Map values to opaque RGBA; cells outside stay transparent

    Args:
        samples: Sample snapshot (not mutated)
        analyte: Analyte name
        threshold: Threshold used for color mapping
        config: Raster settings
        conv: Scale constants

    Returns:
        RasterProduct, or None when fewer than config.min_points samples
        carry a value
    """
    points = collect_valued_points(samples, analyte)
    if len(points) < max(3, config.min_points):
        logger.debug(
            f"Contour skipped for {analyte}: {len(points)} valued samples"
        )
        return None

    point_lats = np.array([p.lat for p in points], dtype=float)
    point_lons = np.array([p.lon for p in points], dtype=float)
    point_values = np.array([p.value for p in points], dtype=float)

    # === GRID BOUNDS ===
    lat_min = float(point_lats.min()) - config.bounds_pad_deg
    lat_max = float(point_lats.max()) + config.bounds_pad_deg
    lon_min = float(point_lons.min()) - config.bounds_pad_deg
    lon_max = float(point_lons.max()) + config.bounds_pad_deg

    cell_lat = config.cell_size_m / conv.meters_per_deg_lat
    cell_lon = config.cell_size_m / conv.meters_per_deg_lon

    cols = max(1, math.ceil((lon_max - lon_min) / cell_lon))
    rows = max(1, math.ceil((lat_max - lat_min) / cell_lat))
    if cols > config.max_cells_per_axis or rows > config.max_cells_per_axis:
        logger.warning(
            f"⚠️ Contour grid {rows}x{cols} clamped to "
            f"{config.max_cells_per_axis} cells per axis"
        )
    cols = min(cols, config.max_cells_per_axis)
    rows = min(rows, config.max_cells_per_axis)

    # === CLIPPING HULL ===
    hull = buffer_hull(convex_hull(points), config.hull_buffer_m, conv)

    row_lats = lat_max - (np.arange(rows) + 0.5) * cell_lat
    col_lons = lon_min + (np.arange(cols) + 0.5) * cell_lon
    grid_lats, grid_lons = np.meshgrid(row_lats, col_lons, indexing="ij")
    inside = contains_points(grid_lats, grid_lons, hull)

    # === IDW PER CELL ===
    values = np.full((rows, cols), np.nan, dtype=float)
    cell_idx = np.flatnonzero(inside)
    flat_lats = grid_lats.ravel()[cell_idx]
    flat_lons = grid_lons.ravel()[cell_idx]
    computed = np.empty(cell_idx.size, dtype=float)

    batch = max(1, config.batch_elements // len(points))
    for start in range(0, cell_idx.size, batch):
        stop = start + batch
        computed[start:stop] = _idw_batch(
            flat_lats[start:stop],
            flat_lons[start:stop],
            point_lats,
            point_lons,
            point_values,
            conv,
            config.exact_distance_sq_m2,
        )
    values.ravel()[cell_idx] = computed

    # === COLOR MAPPING ===
    rgba = np.zeros((rows, cols, 4), dtype=np.uint8)
    flat_rgba = rgba.reshape(-1, 4)
    flat_rgba[cell_idx, :3] = color_array(computed, threshold)
    flat_rgba[cell_idx, 3] = 255

    # Raster extent: full cells anchored at the north-west corner
    bounds = (lat_max - rows * cell_lat, lon_min, lat_max, lon_min + cols * cell_lon)

    logger.info(
        f"🌈 Contour {analyte}: {len(points)} samples, {rows}x{cols} grid, "
        f"{cell_idx.size} cells inside hull"
    )

    return RasterProduct(
        rgba=rgba,
        values=values,
        bounds=bounds,
        cell_lat_deg=cell_lat,
        cell_lon_deg=cell_lon,
        analyte=analyte,
        sample_count=len(points),
    )


# ═══════════════════════════════════════════════════════════════════════════════
# 📦 MODULE EXPORTS
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = [
    "DEFAULT_CONTOUR",
    "ValuedPoint",
    "collect_valued_points",
    "idw_value",
    "interpolate",
]
