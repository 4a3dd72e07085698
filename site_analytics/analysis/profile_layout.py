#!/usr/bin/env python3
"""
Depth Profile Layout

ARCHITECTURAL OVERVIEW:
=======================
Responsibility: Turn a TransectProfile into pixel geometry for a depth
profile plot (distance along transect on x, depth below surface on y).
Nothing is drawn here; a renderer consumes the returned ProfileLayout.

Steps:
1. group_columns(): one column per location, first-appearance order
2. x position from distance along the transect
3. resolve_overlaps(): push crowded columns apart, keep them inside the plot
4. nice_depth_max() / nice_step(): rounded axis extent and tick spacing
5. Interval rectangles with a minimum pixel height

Navigation Guide:
- Use VS Code outline (Ctrl+Shift+O) to jump between functions
"""

import logging
import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from site_analytics.config import CONFIG
from site_analytics.config_types import ProfileLayoutConfig
from site_analytics.geometry.color_mapping import CATEGORY_COLORS, color_for
from site_analytics.models.data_models import (
    AnalyteThreshold,
    ProfileInterval,
    SourceKind,
    TransectProfile,
)

logger = logging.getLogger(__name__)

DEFAULT_LAYOUT = ProfileLayoutConfig.from_dict(CONFIG["profile_layout"])

# Label color per location type
TYPE_COLORS: Dict[SourceKind, str] = {
    SourceKind.SURFACE: "#00ff88",
    SourceKind.HISTORICAL: "#cd853f",
    SourceKind.TEST_PIT: "#cc6600",
    SourceKind.SOIL_BORING: "#00aaff",
}
DEFAULT_TYPE_COLOR = "#aaaaaa"
NO_DATA_COLOR = CATEGORY_COLORS["not_sampled"]


# ===========================================================================
# LAYOUT DATACLASSES
# ===========================================================================


@dataclass(frozen=True)
class ColumnPosition:
    """Horizontal pixel position of one location column."""

    source_id: str
    x: float


@dataclass(frozen=True)
class ColumnGroup:
    """Intervals sharing a location id."""

    source_id: str
    source_kind: SourceKind
    dist_along_ft: float
    intervals: Tuple[ProfileInterval, ...]

    @property
    def deepest_ft(self) -> float:
        return max((iv.depth_end for iv in self.intervals), default=0.0)


@dataclass(frozen=True)
class IntervalRect:
    """Pixel rectangle for one depth interval."""

    x_left: float
    y_top: float
    width: float
    height: float
    color: str
    value: Optional[float]
    depth_label: str


@dataclass(frozen=True)
class ProfileColumn:
    """A located, labelled column of interval rectangles."""

    source_id: str
    source_kind: SourceKind
    x: float
    label_color: str
    guide_bottom_y: float
    rects: Tuple[IntervalRect, ...]


@dataclass(frozen=True)
class ProfileLayout:
    """Everything a renderer needs to draw the depth profile."""

    columns: Tuple[ProfileColumn, ...]
    max_depth_ft: float
    length_ft: float
    depth_ticks: Tuple[float, ...]
    distance_ticks: Tuple[float, ...]
    plot: ProfileLayoutConfig

    @property
    def location_count(self) -> int:
        return len(self.columns)


# ===========================================================================
# GROUPING / OVERLAP RESOLUTION
# ===========================================================================


def group_columns(intervals: Sequence[ProfileInterval]) -> List[ColumnGroup]:
    """
    Group intervals by location id, preserving first-appearance order.

    The column's kind and distance come from its first interval.
    """
    order: List[str] = []
    grouped: Dict[str, List[ProfileInterval]] = {}
    for iv in intervals:
        if iv.source_id not in grouped:
            grouped[iv.source_id] = []
            order.append(iv.source_id)
        grouped[iv.source_id].append(iv)

    return [
        ColumnGroup(
            source_id=source_id,
            source_kind=grouped[source_id][0].source_kind,
            dist_along_ft=grouped[source_id][0].dist_along_ft,
            intervals=tuple(grouped[source_id]),
        )
        for source_id in order
    ]


def resolve_overlaps(
    positions: Sequence[ColumnPosition],
    min_gap: float,
    plot_left: float,
    plot_right: float,
    column_width: float,
    max_passes: int = 5,
) -> List[ColumnPosition]:
    """
    Nudge crowded columns apart and keep them inside the plot.

    Positions are sorted by x, then up to max_passes relaxation passes push
    each too-close neighbour pair apart symmetrically by half the shortfall.
    Finally each column is clamped so its full width stays within
    [plot_left, plot_right].

    Args:
        positions: Column positions in any order (not mutated)
        min_gap: Minimum center-to-center spacing in pixels
        plot_left: Left plot edge (px)
        plot_right: Right plot edge (px)
        column_width: Column width (px)
        max_passes: Relaxation pass limit

    Returns:
        New positions sorted by their original x
    """
    if len(positions) <= 1:
        return list(positions)

    ordered = sorted(positions, key=lambda p: p.x)
    xs = [p.x for p in ordered]

    for _ in range(max_passes):
        changed = False
        for i in range(1, len(xs)):
            gap = xs[i] - xs[i - 1]
            if gap < min_gap:
                shift = (min_gap - gap) / 2.0
                xs[i - 1] -= shift
                xs[i] += shift
                changed = True
        if not changed:
            break

    half_col = column_width / 2.0
    resolved = []
    for p, x in zip(ordered, xs):
        if x - half_col < plot_left:
            x = plot_left + half_col
        if x + half_col > plot_right:
            x = plot_right - half_col
        resolved.append(ColumnPosition(p.source_id, x))
    return resolved


# ===========================================================================
# AXIS SCALING
# ===========================================================================


def nice_depth_max(max_depth_ft: float) -> float:
    """Round the deepest interval end up to 2, 5, 10, 15 or a multiple of 10."""
    depth = max(1.0, max_depth_ft)
    for limit in (2.0, 5.0, 10.0, 15.0):
        if depth <= limit:
            return limit
    return float(math.ceil(depth / 10.0) * 10)


def nice_step(value_range: float, max_ticks: int) -> float:
    """
    Tick spacing of 1, 2, 5 or 10 times a power of ten.

    Args:
        value_range: Axis extent (a non-positive range yields 1.0)
        max_ticks: Desired maximum tick count (at least 2 is used)
    """
    max_ticks = max(2, max_ticks)
    if value_range <= 0:
        return 1.0
    rough = value_range / max_ticks
    magnitude = 10.0 ** math.floor(math.log10(rough))
    norm = rough / magnitude
    if norm <= 1.5:
        nice = 1.0
    elif norm <= 3.5:
        nice = 2.0
    elif norm <= 7.5:
        nice = 5.0
    else:
        nice = 10.0
    return nice * magnitude


def axis_ticks(limit: float, step: float) -> Tuple[float, ...]:
    """Tick values 0, step, 2*step, ... up to and including limit."""
    count = int(math.floor(limit / step + 1e-9))
    return tuple(round(i * step, 10) for i in range(count + 1))


# ===========================================================================
# FULL LAYOUT
# ===========================================================================


def interval_color(value: Optional[float], threshold: Optional[AnalyteThreshold]) -> str:
    """Gradient color for a value; gray for missing values or no threshold."""
    if value is None or threshold is None:
        return NO_DATA_COLOR
    return color_for(value, threshold).to_hex()


def layout_profile(
    profile: TransectProfile,
    threshold: Optional[AnalyteThreshold] = None,
    plot: ProfileLayoutConfig = DEFAULT_LAYOUT,
) -> ProfileLayout:
    """
    Compute the pixel layout of a depth profile.

    Args:
        profile: Intervals collected along a transect
        threshold: Analyte threshold for rectangle colors
        plot: Canvas geometry

    Returns:
        ProfileLayout with resolved columns, depth extent and axis ticks
    """
    plot_w = plot.plot_right - plot.plot_left
    plot_h = plot.plot_bottom - plot.plot_top
    length_ft = profile.length_ft if profile.length_ft > 0 else 1.0

    max_depth = nice_depth_max(
        max((iv.depth_end for iv in profile.intervals), default=1.0)
    )

    def x_px(dist_ft: float) -> float:
        return plot.plot_left + (dist_ft / length_ft) * plot_w

    def y_px(depth_ft: float) -> float:
        return plot.plot_top + (depth_ft / max_depth) * plot_h

    groups = group_columns(profile.intervals)
    by_id = {g.source_id: g for g in groups}
    positions = resolve_overlaps(
        [ColumnPosition(g.source_id, x_px(g.dist_along_ft)) for g in groups],
        plot.min_column_gap,
        plot.plot_left,
        plot.plot_right,
        plot.column_width_px,
        plot.max_relax_passes,
    )

    half_col = plot.column_width_px / 2.0
    columns = []
    for pos in positions:
        group = by_id[pos.source_id]
        rects = []
        for iv in group.intervals:
            y_top = y_px(iv.depth_start)
            height = max(y_px(iv.depth_end) - y_top, float(plot.min_rect_height_px))
            rects.append(
                IntervalRect(
                    x_left=pos.x - half_col,
                    y_top=y_top,
                    width=float(plot.column_width_px),
                    height=height,
                    color=interval_color(iv.value, threshold),
                    value=iv.value,
                    depth_label=iv.depth_label,
                )
            )
        columns.append(
            ProfileColumn(
                source_id=group.source_id,
                source_kind=group.source_kind,
                x=pos.x,
                label_color=TYPE_COLORS.get(group.source_kind, DEFAULT_TYPE_COLOR),
                guide_bottom_y=y_px(group.deepest_ft),
                rects=tuple(rects),
            )
        )

    depth_step = nice_step(max_depth, max(2, int(plot_h // 40)))
    distance_step = nice_step(length_ft, max(2, int(plot_w // 80)))

    logger.debug(
        f"Profile layout: {len(columns)} columns, depth 0-{max_depth:g} ft, "
        f"steps {depth_step:g} ft / {distance_step:g} ft"
    )

    return ProfileLayout(
        columns=tuple(columns),
        max_depth_ft=max_depth,
        length_ft=length_ft,
        depth_ticks=axis_ticks(max_depth, depth_step),
        distance_ticks=axis_ticks(length_ft, distance_step),
        plot=plot,
    )


# ===========================================================================
# MODULE EXPORTS
# ===========================================================================

__all__ = [
    "ColumnGroup",
    "ColumnPosition",
    "DEFAULT_LAYOUT",
    "IntervalRect",
    "ProfileColumn",
    "ProfileLayout",
    "TYPE_COLORS",
    "axis_ticks",
    "group_columns",
    "interval_color",
    "layout_profile",
    "nice_depth_max",
    "nice_step",
    "resolve_overlaps",
]
