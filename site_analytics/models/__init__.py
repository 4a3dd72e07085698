"""Data models package for typed sample, threshold and product structures."""

from .data_models import (
    AnalyteStats,
    AnalyteThreshold,
    Bounds,
    ColorRGB,
    DepthInterval,
    DepthRecord,
    GridCell,
    GridMode,
    GridProduct,
    Hull,
    LatLon,
    ProfileInterval,
    RasterProduct,
    RegionStats,
    SamplePoint,
    SegmentProjection,
    SourceKind,
    Transect,
    TransectProfile,
)

__all__ = [
    # Sample models
    "DepthInterval",
    "DepthRecord",
    "LatLon",
    "SamplePoint",
    "SourceKind",
    # Thresholds / colors
    "AnalyteThreshold",
    "ColorRGB",
    # Products
    "AnalyteStats",
    "Bounds",
    "GridCell",
    "GridMode",
    "GridProduct",
    "Hull",
    "ProfileInterval",
    "RasterProduct",
    "RegionStats",
    "SegmentProjection",
    "Transect",
    "TransectProfile",
]
