#!/usr/bin/env python3
"""
Grid Density Scanner

═══════════════════════════════════════════════════════════════════════════════
ARCHITECTURAL OVERVIEW
═══════════════════════════════════════════════════════════════════════════════

Responsibility: Partition the padded bounding box of a sample set into a
uniform grid and aggregate nearby samples per cell.

Two analyses share one scan:
- Gap mode: count samples (optionally with planned points) within the
  cell's physical size of the cell centroid -> red / yellow / green coverage
- Hot-zone mode: maximum analyte value within the same radius -> red /
  orange / green against the analyte's ROD / PMB levels

scan_grid() walks the grid once and is parameterised by an aggregation
strategy and a classifier, so the two modes only differ in those functions.

Key Interactions:
- Input: SamplePoint snapshots, grid size in feet, GridConfig
- Uses: scipy cKDTree in local meters for radius lookups
- Output: GridProduct with cells that exactly tile the padded box

For Navigation: Use VS Code outline (Ctrl+Shift+O)

═══════════════════════════════════════════════════════════════════════════════
"""

import logging
import math
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

import numpy as np
from scipy.spatial import cKDTree

from site_analytics.config import CONFIG
from site_analytics.config_types import CoordConversionConfig, GridConfig
from site_analytics.geometry.coordinate_math import DEFAULT_CONVERSION, local_meters_array
from site_analytics.models.data_models import (
    AnalyteThreshold,
    Bounds,
    GridCell,
    GridMode,
    GridProduct,
    LatLon,
    SamplePoint,
)

logger = logging.getLogger(__name__)

DEFAULT_GRID = GridConfig.from_dict(CONFIG["grid"])

# aggregate(indices of samples in range) -> value, or None to omit the cell
AggregateFn = Callable[[Sequence[int]], Optional[float]]
# classify(aggregate) -> (category, color, opacity)
ClassifyFn = Callable[[float], Tuple[str, str, float]]

# Tolerance when deciding whether the box holds a whole number of cells
_CELL_COUNT_EPS = 1e-9


# ═══════════════════════════════════════════════════════════════════════════════
# 🎨 CLASSIFICATION
# ═══════════════════════════════════════════════════════════════════════════════

GAP_NONE = ("no_coverage", "#ff0000", 0.35)
GAP_SPARSE = ("sparse", "#ffff00", 0.3)
GAP_ADEQUATE = ("adequate", "#00ff00", 0.2)

HOT_EXCEEDS_ROD = ("exceeds_rod", "#ff0000", 0.5)
HOT_ABOVE_PMB = ("above_pmb", "#ff9900", 0.4)
HOT_BELOW_PMB = ("below_pmb", "#00cc00", 0.25)


def classify_gap(count: float) -> Tuple[str, str, float]:
    """0 samples -> no coverage, 1-2 -> sparse, 3+ -> adequate."""
    if count == 0:
        return GAP_NONE
    if count <= 2:
        return GAP_SPARSE
    return GAP_ADEQUATE


def make_hot_zone_classifier(threshold: AnalyteThreshold) -> ClassifyFn:
    """Classifier for max values against an analyte's thresholds."""

    def classify(max_value: float) -> Tuple[str, str, float]:
        if max_value > threshold.high:
            return HOT_EXCEEDS_ROD
        if max_value > threshold.low:
            return HOT_ABOVE_PMB
        return HOT_BELOW_PMB

    return classify


# ═══════════════════════════════════════════════════════════════════════════════
# 📊 AGGREGATION STRATEGIES
# ═══════════════════════════════════════════════════════════════════════════════


def count_aggregate(indices: Sequence[int]) -> Optional[float]:
    """Number of samples in range (never omits a cell)."""
    return float(len(indices))


def make_max_value_aggregate(values: np.ndarray) -> AggregateFn:
    """Maximum value among samples in range; omits cells with none."""

    def aggregate(indices: Sequence[int]) -> Optional[float]:
        if len(indices) == 0:
            return None
        return float(max(0.0, values[list(indices)].max()))

    return aggregate


# ═══════════════════════════════════════════════════════════════════════════════
# 🔧 GRID SIZE CONTROL
# ═══════════════════════════════════════════════════════════════════════════════


def clamp_grid_size(size_ft: float, grid: GridConfig = DEFAULT_GRID) -> int:
    """
    Snap a grid size to the configured step and clamp it to [min, max].

    Half steps round up. Out-of-range sizes are clamped, never rejected.
    """
    snapped = int(math.floor(size_ft / grid.step_ft + 0.5)) * grid.step_ft
    clamped = max(grid.min_size_ft, min(grid.max_size_ft, snapped))
    if clamped != size_ft:
        logger.debug(f"Grid size {size_ft} ft adjusted to {clamped} ft")
    return clamped


def adjust_grid_size(
    current_ft: float, delta_ft: float, grid: GridConfig = DEFAULT_GRID
) -> int:
    """Step the grid size up or down (e.g. +/- one step) within limits."""
    return clamp_grid_size(current_ft + delta_ft, grid)


# ═══════════════════════════════════════════════════════════════════════════════
# 🔲 GRID GEOMETRY
# ═══════════════════════════════════════════════════════════════════════════════


def padded_bounds(points: Sequence[SamplePoint], pad_deg: float) -> Bounds:
    """Sample extents expanded by a degree pad: (lat_min, lon_min, lat_max, lon_max)."""
    lats = [p.lat for p in points]
    lons = [p.lon for p in points]
    return (min(lats) - pad_deg, min(lons) - pad_deg, max(lats) + pad_deg, max(lons) + pad_deg)


def _axis_edges(start: float, stop: float, step: float) -> np.ndarray:
    """Cell edges from start to stop; the last cell is clipped to stop."""
    count = max(1, math.ceil((stop - start) / step - _CELL_COUNT_EPS))
    edges = start + np.arange(count + 1) * step
    edges[-1] = stop
    return edges


def grid_edges(
    bounds: Bounds, cell_size_m: float, conv: CoordConversionConfig = DEFAULT_CONVERSION
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Latitude and longitude cell edges that exactly tile the bounds.

    Returns:
        (lat_edges, lon_edges), each ascending, first/last equal to bounds
    """
    lat_min, lon_min, lat_max, lon_max = bounds
    lat_edges = _axis_edges(lat_min, lat_max, cell_size_m / conv.meters_per_deg_lat)
    lon_edges = _axis_edges(lon_min, lon_max, cell_size_m / conv.meters_per_deg_lon)
    return lat_edges, lon_edges


# ═══════════════════════════════════════════════════════════════════════════════
# 🔍 HIGHER-ORDER SCAN
# ═══════════════════════════════════════════════════════════════════════════════


def scan_grid(
    base_points: Sequence[SamplePoint],
    density_points: Sequence[SamplePoint],
    cell_size_ft: float,
    aggregate: Callable[[Sequence[int]], Optional[float]],
    classify: ClassifyFn,
    mode: GridMode,
    grid: GridConfig = DEFAULT_GRID,
    conv: CoordConversionConfig = DEFAULT_CONVERSION,
    analyte: Optional[str] = None,
) -> GridProduct:
    """
    Walk a uniform grid over the padded box of base_points.

    For every cell, samples from density_points within the cell's physical
    size of the cell centroid are passed (as indices) to aggregate; cells
    whose aggregate is None are omitted, the rest are classified.

    Args:
        base_points: Samples that define the grid extent
        density_points: Samples counted / aggregated per cell
        cell_size_ft: Cell edge length in feet (already clamped)
        aggregate: Aggregation strategy over in-range sample indices
        classify: Maps an aggregate to (category, color, opacity)
        mode: Grid mode recorded on the product
        grid: Grid settings (degree pad)
        conv: Scale constants
        analyte: Analyte name recorded on the product (hot-zone mode)

    Returns:
        GridProduct (empty when base_points is empty)
    """
    if len(base_points) == 0:
        return GridProduct(mode=mode, cells=(), bounds=None, cell_size_ft=cell_size_ft, analyte=analyte)

    bounds = padded_bounds(base_points, grid.bounds_pad_deg)
    size_m = cell_size_ft * conv.feet_to_meters
    lat_edges, lon_edges = grid_edges(bounds, size_m, conv)
    rows, cols = len(lat_edges) - 1, len(lon_edges) - 1

    # === CELL CENTROIDS IN LOCAL METERS ===
    lat_centers = (lat_edges[:-1] + lat_edges[1:]) / 2.0
    lon_centers = (lon_edges[:-1] + lon_edges[1:]) / 2.0
    center_lats, center_lons = np.meshgrid(lat_centers, lon_centers, indexing="ij")
    origin = LatLon(bounds[0], bounds[1])
    centers_m = local_meters_array(center_lats.ravel(), center_lons.ravel(), origin, conv)

    # === RADIUS LOOKUP ===
    if len(density_points) > 0:
        samples_m = local_meters_array(
            np.array([p.lat for p in density_points]),
            np.array([p.lon for p in density_points]),
            origin,
            conv,
        )
        tree = cKDTree(samples_m)
        neighbours: List[List[int]] = tree.query_ball_point(centers_m, r=size_m)
    else:
        neighbours = [[] for _ in range(rows * cols)]

    # === AGGREGATE + CLASSIFY ===
    cells = []
    for flat_index, indices in enumerate(neighbours):
        value = aggregate(indices)
        if value is None:
            continue
        category, color, opacity = classify(value)
        r, c = divmod(flat_index, cols)
        cells.append(
            GridCell(
                lat_min=float(lat_edges[r]),
                lon_min=float(lon_edges[c]),
                lat_max=float(lat_edges[r + 1]),
                lon_max=float(lon_edges[c + 1]),
                aggregate=value,
                category=category,
                color=color,
                opacity=opacity,
            )
        )

    logger.info(
        f"🔲 {mode.value} grid: {rows}x{cols} cells at {cell_size_ft} ft, "
        f"{len(cells)} classified"
    )

    return GridProduct(
        mode=mode,
        cells=tuple(cells),
        bounds=bounds,
        cell_size_ft=cell_size_ft,
        rows=rows,
        cols=cols,
        analyte=analyte,
    )


# ═══════════════════════════════════════════════════════════════════════════════
# 🕳️ GAP ANALYSIS
# ═══════════════════════════════════════════════════════════════════════════════


def gap_grid(
    base_samples: Sequence[SamplePoint],
    planned_points: Optional[Iterable[SamplePoint]] = None,
    grid_size_ft: Optional[float] = None,
    include_planned: Optional[bool] = None,
    grid: GridConfig = DEFAULT_GRID,
    conv: CoordConversionConfig = DEFAULT_CONVERSION,
) -> GridProduct:
    """
    Sampling-coverage grid.

    The grid extent comes from the base samples only; planned points add to
    the per-cell counts when include_planned is on.

    Args:
        base_samples: Sampled locations (surface + historical)
        planned_points: Proposed sampling points
        grid_size_ft: Cell size in feet (defaults to grid.size_ft)
        include_planned: Count planned points (defaults to grid.include_planned)
        grid: Grid settings
        conv: Scale constants

    Returns:
        GridProduct in GAP mode; aggregate is the sample count
    """
    size_ft = clamp_grid_size(grid.size_ft if grid_size_ft is None else grid_size_ft, grid)
    if include_planned is None:
        include_planned = grid.include_planned

    base = list(base_samples)
    density = list(base)
    if include_planned and planned_points is not None:
        density.extend(planned_points)

    return scan_grid(
        base_points=base,
        density_points=density,
        cell_size_ft=size_ft,
        aggregate=count_aggregate,
        classify=classify_gap,
        mode=GridMode.GAP,
        grid=grid,
        conv=conv,
    )


# ═══════════════════════════════════════════════════════════════════════════════
# 🔥 HOT-ZONE ANALYSIS
# ═══════════════════════════════════════════════════════════════════════════════


def hot_zone_grid(
    samples: Iterable[SamplePoint],
    analyte: str,
    threshold: AnalyteThreshold,
    grid_size_ft: Optional[float] = None,
    grid: GridConfig = DEFAULT_GRID,
    conv: CoordConversionConfig = DEFAULT_CONVERSION,
) -> GridProduct:
    """
    Worst-value grid for one analyte.

    Only samples with a defined value take part, both for the extent and
    for the per-cell maximum. Cells with no sample in range are omitted.

    Returns:
        GridProduct in HOT_ZONE mode; aggregate is the max value
    """
    size_ft = clamp_grid_size(grid.size_ft if grid_size_ft is None else grid_size_ft, grid)
    valued = [s for s in samples if s.has_value(analyte)]
    values = np.array([s.value(analyte) for s in valued], dtype=float)

    return scan_grid(
        base_points=valued,
        density_points=valued,
        cell_size_ft=size_ft,
        aggregate=make_max_value_aggregate(values),
        classify=make_hot_zone_classifier(threshold),
        mode=GridMode.HOT_ZONE,
        grid=grid,
        conv=conv,
        analyte=analyte,
    )


# ═══════════════════════════════════════════════════════════════════════════════
# 📦 MODULE EXPORTS
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = [
    "DEFAULT_GRID",
    "adjust_grid_size",
    "clamp_grid_size",
    "classify_gap",
    "count_aggregate",
    "gap_grid",
    "grid_edges",
    "hot_zone_grid",
    "make_hot_zone_classifier",
    "make_max_value_aggregate",
    "padded_bounds",
    "scan_grid",
]
