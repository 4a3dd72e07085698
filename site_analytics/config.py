#!/usr/bin/env python3
"""
Site Sampling Analytics - Configuration

ARCHITECTURAL OVERVIEW:
=======================
Responsibility: Centralized configuration for the spatial analytics engine.
Single source of truth for coordinate constants, analyte thresholds, grid and
transect limits, and file paths.

Configuration Sections (ordered by importance for analysis tuning):
1. coord_conversion: Flat-earth scale factors for the site
2. thresholds: PMB / ROD levels per analyte
3. tracked_analytes: Analytes reported by polygon statistics
4. contour: IDW raster settings
5. grid: Gap / hot-zone grid size limits
6. transect: Corridor width limits
7. buffer_zones: Exceedance buffer radius limits
8. profile_layout: Depth-profile plot geometry
9. file_paths: Input/output file locations (bottom - rarely changed)
10. logging: Log level and run folder naming

Navigation Guide:
- Use VS Code outline (Ctrl+Shift+O) to jump between sections
"""

import os
from typing import Dict, Any, TypeVar, Callable, Optional

T = TypeVar("T")


def _env_or_default(
    key: str, default: T, type_fn: Optional[Callable[[str], T]] = None
) -> T:
    """
    Get value from environment variable or use default.

    Args:
        key: Environment variable name (e.g., "SITE_GRID_SIZE_FT")
        default: Default value if env var not set
        type_fn: Optional type conversion function (e.g., float, int)

    Returns:
        Value from environment (converted) or default

    Example:
        >>> _env_or_default("SITE_GRID_SIZE_FT", 100, int)
        100  # If env var not set
    """
    val = os.getenv(key)
    if val is not None:
        if type_fn is not None:
            return type_fn(val)
        return val  # type: ignore
    return default


def _env_bool(key: str, default: bool) -> bool:
    """
    Get boolean value from environment variable.

    Treats "true", "1", "yes" as True (case-insensitive).
    Any other value or unset returns default.
    """
    val = os.getenv(key)
    if val is None:
        return default
    return val.lower() in ("true", "1", "yes")


# ═══════════════════════════════════════════════════════════════════════════
# 🔧 ENVIRONMENT VARIABLE OVERRIDES
# ═══════════════════════════════════════════════════════════════════════════
# SITE_GRID_SIZE_FT         - int, default gap/hot-zone cell size (default: 100)
# SITE_CORRIDOR_WIDTH_FT    - float, default transect half-width (default: 50)
# SITE_BUFFER_RADIUS_FT     - float, default exceedance buffer (default: 50)
# SITE_HULL_BUFFER_M        - float, IDW clipping buffer (default: 30)
# SITE_CONTOUR_CELL_M       - float, IDW cell size in meters (default: 10)
# SITE_INCLUDE_PLANNED      - "true"/"false", planned points in gap grid
# SITE_LOG_LEVEL            - logging level name (default: "INFO")
#
# Example usage:
#   export SITE_GRID_SIZE_FT=75
#   export SITE_INCLUDE_PLANNED=false
#   python -m site_analytics.main
# ═══════════════════════════════════════════════════════════════════════════

# ═══════════════════════════════════════════════════════════════════════════
# ⚙️ MASTER CONFIGURATION
# ═══════════════════════════════════════════════════════════════════════════

CONFIG: Dict[str, Any] = {
    # ═══════════════════════════════════════════════════════════════════════
    # 📐 COORDINATE CONVERSION (site-scale flat-earth approximation)
    # ═══════════════════════════════════════════════════════════════════════
    # Longitude scale is fixed for the site latitude (~39°N).
    "coord_conversion": {
        "meters_per_deg_lat": 111320.0,
        "meters_per_deg_lon": 86510.0,
        "feet_to_meters": 0.3048,
        "earth_radius_m": 6378137.0,
    },
    # ═══════════════════════════════════════════════════════════════════════
    # ☣️ ANALYTE THRESHOLDS (mg/kg)
    # ═══════════════════════════════════════════════════════════════════════
    # low = PMB (background), high = ROD (cleanup action level)
    # low == high marks a single-threshold analyte
    "thresholds": {
        "Mercury": {"low": 1.0, "high": 204.0, "unit": "mg/kg", "abbrev": "Hg"},
        "Arsenic": {"low": 23.0, "high": 23.0, "unit": "mg/kg", "abbrev": "As"},
        "Antimony": {"low": 1.6, "high": 31.0, "unit": "mg/kg", "abbrev": "Sb"},
        "Thallium": {"low": 2.3, "high": 2.3, "unit": "mg/kg", "abbrev": "Tl"},
    },
    # Analytes summarised by polygon region statistics
    "tracked_analytes": ["Mercury", "Arsenic", "Antimony", "Thallium"],
    # ═══════════════════════════════════════════════════════════════════════
    # 🌈 CONTOUR (IDW) SETTINGS
    # ═══════════════════════════════════════════════════════════════════════
    "contour": {
        "cell_size_m": _env_or_default("SITE_CONTOUR_CELL_M", 10.0, float),
        "hull_buffer_m": _env_or_default("SITE_HULL_BUFFER_M", 30.0, float),
        "bounds_pad_deg": 0.0005,
        "max_cells_per_axis": 1000,
        "min_points": 3,
        # Squared distance (m²) below which a sample's exact value is used
        "exact_distance_sq_m2": 1.0,
        # Cell x sample distance evaluations per vectorised IDW batch
        "batch_elements": 4_000_000,
        # Overlay opacity hint for the renderer (raster itself is opaque)
        "overlay_opacity": 0.5,
    },
    # ═══════════════════════════════════════════════════════════════════════
    # 🔲 GAP / HOT-ZONE GRID
    # ═══════════════════════════════════════════════════════════════════════
    "grid": {
        "size_ft": _env_or_default("SITE_GRID_SIZE_FT", 100, int),
        "min_size_ft": 25,
        "max_size_ft": 500,
        "step_ft": 25,
        "bounds_pad_deg": 0.0005,
        "include_planned": _env_bool("SITE_INCLUDE_PLANNED", True),
    },
    # ═══════════════════════════════════════════════════════════════════════
    # 📏 TRANSECT / CROSS-SECTION
    # ═══════════════════════════════════════════════════════════════════════
    "transect": {
        "corridor_width_ft": _env_or_default("SITE_CORRIDOR_WIDTH_FT", 50.0, float),
        "min_corridor_ft": 10.0,
        "max_corridor_ft": 500.0,
        "min_length_m": 3.0,
        # Nominal depth band for surface samples (ft bgs)
        "surface_depth_start_ft": 0.0,
        "surface_depth_end_ft": 0.5,
        "surface_depth_label": "0-6 in",
    },
    # ═══════════════════════════════════════════════════════════════════════
    # ⭕ EXCEEDANCE BUFFER ZONES
    # ═══════════════════════════════════════════════════════════════════════
    "buffer_zones": {
        "radius_ft": _env_or_default("SITE_BUFFER_RADIUS_FT", 50.0, float),
        "min_radius_ft": 25.0,
        "max_radius_ft": 200.0,
    },
    # ═══════════════════════════════════════════════════════════════════════
    # 📊 DEPTH PROFILE LAYOUT (pixel geometry handed to the renderer)
    # ═══════════════════════════════════════════════════════════════════════
    "profile_layout": {
        "width_px": 960,
        "height_px": 520,
        "margin_top_px": 80,
        "margin_right_px": 50,
        "margin_bottom_px": 70,
        "margin_left_px": 75,
        "column_width_px": 24,
        "column_gap_px": 2,
        "min_rect_height_px": 8,
        "max_relax_passes": 5,
    },
    # ═══════════════════════════════════════════════════════════════════════
    # 📁 FILE PATHS (relative to the working directory)
    # ═══════════════════════════════════════════════════════════════════════
    "file_paths": {
        "samples_json": "data/samples.json",
        "output_dir": "Output",
        "log_dir": "logs",
    },
    # ═══════════════════════════════════════════════════════════════════════
    # 📋 LOGGING
    # ═══════════════════════════════════════════════════════════════════════
    "logging": {
        "level": _env_or_default("SITE_LOG_LEVEL", "INFO"),
        "logger_name": "site_analytics",
    },
}
