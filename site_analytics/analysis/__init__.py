"""
Spatial analyses built on the geometry leaves.

Module Structure:
- contour.py: IDW raster clipped to the buffered sample hull
- grid_scanner.py: gap (coverage) and hot-zone (max value) grids
- polygon_region.py: statistics for a user-drawn polygon
- transect.py: corridor selection of depth intervals along a line
- profile_layout.py: pixel layout of the depth profile
- buffer_zones.py: exceedance circles and distance measurement
- sample_query.py: two-sample comparison and sample search / filtering
"""

from site_analytics.analysis.contour import collect_valued_points, idw_value, interpolate
from site_analytics.analysis.grid_scanner import (
    adjust_grid_size,
    clamp_grid_size,
    gap_grid,
    hot_zone_grid,
    scan_grid,
)
from site_analytics.analysis.polygon_region import (
    analyze,
    point_in_polygon,
    polygon_area_sq_ft,
    region_stats_to_frame,
)
from site_analytics.analysis.transect import (
    TransectTooShortError,
    collect_profile,
    corridor_polygon,
    create_transect,
    project_onto_segment,
    validate_transect_length,
)
from site_analytics.analysis.profile_layout import (
    ProfileLayout,
    group_columns,
    layout_profile,
    nice_depth_max,
    nice_step,
    resolve_overlaps,
)
from site_analytics.analysis.buffer_zones import (
    BufferZone,
    Measurement,
    adjust_buffer_radius,
    clamp_buffer_radius,
    exceedance_buffers,
    measure,
)
from site_analytics.analysis.sample_query import (
    ExceedanceFilter,
    SampleComparison,
    SampleFilter,
    compare_samples,
    comparison_to_frame,
    filter_samples,
)

__all__ = [
    # Contour
    "collect_valued_points",
    "idw_value",
    "interpolate",
    # Grids
    "adjust_grid_size",
    "clamp_grid_size",
    "gap_grid",
    "hot_zone_grid",
    "scan_grid",
    # Polygon region
    "analyze",
    "point_in_polygon",
    "polygon_area_sq_ft",
    "region_stats_to_frame",
    # Transect
    "TransectTooShortError",
    "collect_profile",
    "corridor_polygon",
    "create_transect",
    "project_onto_segment",
    "validate_transect_length",
    # Profile layout
    "ProfileLayout",
    "group_columns",
    "layout_profile",
    "nice_depth_max",
    "nice_step",
    "resolve_overlaps",
    # Buffer zones
    "BufferZone",
    "Measurement",
    "adjust_buffer_radius",
    "clamp_buffer_radius",
    "exceedance_buffers",
    "measure",
    # Sample queries
    "ExceedanceFilter",
    "SampleComparison",
    "SampleFilter",
    "compare_samples",
    "comparison_to_frame",
    "filter_samples",
]
