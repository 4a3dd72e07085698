"""
Typed data models for the spatial analytics engine.

Architectural Overview:
=======================
This module contains the immutable dataclasses exchanged between the engine
and its callers. Every engine call receives a snapshot of these records and
returns freshly built products; nothing here is ever mutated in place.

Key Interactions:
-----------------
- Input: data_loader builds SamplePoint / DepthRecord from dataset dicts
- Output: analysis modules return GridProduct, RasterProduct, RegionStats,
  TransectProfile for external rendering
- Navigation: Use VS Code outline (Ctrl+Shift+O) for quick navigation

MODIFICATION POINT: Add new SourceKind values here for new dataset types
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple

import numpy as np


# ═══════════════════════════════════════════════════════════════════════════
# 🏷️ ENUMS SECTION
# ═══════════════════════════════════════════════════════════════════════════


class SourceKind(Enum):
    """Which dataset a sample location came from.

    Values double as the short codes shown on depth profiles.
    """

    SURFACE = "SS"  # Current-program surface samples
    HISTORICAL = "EA"  # Historical surface samples
    TEST_PIT = "TP"  # Multi-depth test pits
    SOIL_BORING = "SB"  # Multi-depth soil borings
    PLANNED = "PLANNED"  # Proposed sampling points (no results)

    @classmethod
    def from_string(cls, s: str) -> "SourceKind":
        """Convert a code or member name to SourceKind, with fallback to SURFACE.

        Args:
            s: String like "SS", "TP", "soil_boring"

        Returns:
            Matching SourceKind member, or SURFACE if not found
        """
        for member in cls:
            if member.value == s or member.name == str(s).upper():
                return member
        return cls.SURFACE

    @property
    def is_multi_depth(self) -> bool:
        return self in (SourceKind.TEST_PIT, SourceKind.SOIL_BORING)


class GridMode(Enum):
    """Aggregation mode of a density grid."""

    GAP = "gap"
    HOT_ZONE = "hot_zone"


# ═══════════════════════════════════════════════════════════════════════════
# 📍 LOCATION / SAMPLE DATACLASSES
# ═══════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class LatLon:
    """Geographic coordinate in decimal degrees."""

    lat: float
    lon: float

    def as_dict(self) -> Dict[str, float]:
        return {"lat": self.lat, "lon": self.lon}

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "LatLon":
        """Accepts {lat, lon} or Leaflet-style {lat, lng}."""
        lon = d["lon"] if "lon" in d else d["lng"]
        return cls(lat=float(d["lat"]), lon=float(lon))


# Counter-clockwise vertex sequence without a closing duplicate
Hull = Tuple[LatLon, ...]


@dataclass(frozen=True)
class DepthInterval:
    """Sampled depth band in feet below ground surface (bgs)."""

    start: float
    end: float
    label: str = ""

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "DepthInterval":
        start = float(d["start"])
        end = float(d["end"])
        label = d.get("label") or f"{start:g}-{end:g} ft"
        return cls(start=start, end=end, label=label)

    def as_dict(self) -> Dict[str, Any]:
        return {"start": self.start, "end": self.end, "label": self.label}


def _clean_value(value: Any) -> Optional[float]:
    """Normalise a raw analyte value: None / NaN / non-numeric -> None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number):
        return None
    return number


@dataclass(frozen=True)
class SamplePoint:
    """Immutable geo-located sample with per-analyte results.

    Usage Examples:
    ---------------
    ```python
    sp = SamplePoint(
        lat=39.0, lon=-122.6,
        analyte_values={"Mercury": 12.5, "Arsenic": None},
        source_tag=SourceKind.SURFACE, sample_id="SS-014",
    )
    sp.value("Mercury")   # 12.5
    sp.value("Arsenic")   # None
    ```
    """

    lat: float
    lon: float
    analyte_values: Mapping[str, Optional[float]] = field(default_factory=dict)
    source_tag: SourceKind = SourceKind.SURFACE
    sample_id: str = ""
    depth_interval: Optional[DepthInterval] = None

    def value(self, analyte: str) -> Optional[float]:
        """Defined value for an analyte, or None when absent/NaN."""
        return _clean_value(self.analyte_values.get(analyte))

    def has_value(self, analyte: str) -> bool:
        return self.value(analyte) is not None

    @property
    def location(self) -> LatLon:
        return LatLon(self.lat, self.lon)

    def as_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "lat": self.lat,
            "lon": self.lon,
            "sample_id": self.sample_id,
            "source_tag": self.source_tag.value,
            "analyte_values": dict(self.analyte_values),
        }
        if self.depth_interval is not None:
            result["depth_interval"] = self.depth_interval.as_dict()
        return result

    @classmethod
    def from_dict(
        cls, d: Mapping[str, Any], default_kind: SourceKind = SourceKind.SURFACE
    ) -> "SamplePoint":
        """Create SamplePoint from a dataset record.

        Accepts `analyte_values` or the dataset `metals` key for results.

        Raises:
            KeyError: If lat or lon are missing
            ValueError: If lat or lon are not numeric
        """
        raw_values = d.get("analyte_values", d.get("metals")) or {}
        depth = d.get("depth_interval")
        kind = d.get("source_tag")
        return cls(
            lat=float(d["lat"]),
            lon=float(d["lon"]),
            analyte_values={k: _clean_value(v) for k, v in raw_values.items()},
            source_tag=SourceKind.from_string(kind) if kind else default_kind,
            sample_id=str(d.get("sample_id", d.get("id", d.get("label", "")))),
            depth_interval=DepthInterval.from_dict(depth) if depth else None,
        )


@dataclass(frozen=True)
class DepthRecord:
    """Multi-depth location (test pit or soil boring).

    Each interval carries its own analyte results.
    """

    sample_id: str
    lat: float
    lon: float
    source_kind: SourceKind = SourceKind.TEST_PIT
    intervals: Tuple[Tuple[DepthInterval, Mapping[str, Optional[float]]], ...] = ()

    def to_sample_points(self) -> List[SamplePoint]:
        """Flatten into one SamplePoint per depth interval."""
        return [
            SamplePoint(
                lat=self.lat,
                lon=self.lon,
                analyte_values=values,
                source_tag=self.source_kind,
                sample_id=self.sample_id,
                depth_interval=interval,
            )
            for interval, values in self.intervals
        ]

    @classmethod
    def from_dict(
        cls, d: Mapping[str, Any], default_kind: SourceKind = SourceKind.TEST_PIT
    ) -> "DepthRecord":
        """Create DepthRecord from a record with a `depths` list."""
        intervals = []
        for depth in d.get("depths") or []:
            raw_values = depth.get("analyte_values", depth.get("metals")) or {}
            intervals.append(
                (
                    DepthInterval.from_dict(depth),
                    {k: _clean_value(v) for k, v in raw_values.items()},
                )
            )
        kind = d.get("source_kind")
        return cls(
            sample_id=str(d.get("sample_id", d.get("id", ""))),
            lat=float(d["lat"]),
            lon=float(d["lon"]),
            source_kind=SourceKind.from_string(kind) if kind else default_kind,
            intervals=tuple(intervals),
        )


# ═══════════════════════════════════════════════════════════════════════════
# ☣️ THRESHOLD / COLOR DATACLASSES
# ═══════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class AnalyteThreshold:
    """Two-tier regulatory threshold.

    low  = PMB background level
    high = ROD cleanup action level
    low == high for single-threshold analytes.
    """

    low: float
    high: float
    unit: str = "mg/kg"
    abbrev: str = ""

    @property
    def is_single_threshold(self) -> bool:
        return self.low == self.high

    def exceeds_action_level(self, value: Optional[float]) -> bool:
        """True when value is strictly above the ROD level."""
        return value is not None and value > self.high

    def exceeds_background(self, value: Optional[float]) -> bool:
        """True when value is strictly above the PMB level."""
        return value is not None and value > self.low

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "AnalyteThreshold":
        return cls(
            low=float(d["low"]),
            high=float(d["high"]),
            unit=d.get("unit", "mg/kg"),
            abbrev=d.get("abbrev", ""),
        )

    def as_dict(self) -> Dict[str, Any]:
        return {"low": self.low, "high": self.high, "unit": self.unit, "abbrev": self.abbrev}


@dataclass(frozen=True)
class ColorRGB:
    """RGB color with integer channels in [0, 255]."""

    r: int
    g: int
    b: int

    def to_hex(self) -> str:
        return f"#{self.r:02x}{self.g:02x}{self.b:02x}"

    @classmethod
    def from_hex(cls, hex_color: str) -> "ColorRGB":
        hex_color = hex_color.lstrip("#")
        r, g, b = (int(hex_color[i : i + 2], 16) for i in (0, 2, 4))
        return cls(r, g, b)

    def as_tuple(self) -> Tuple[int, int, int]:
        return (self.r, self.g, self.b)


# ═══════════════════════════════════════════════════════════════════════════
# 🔲 GRID / RASTER PRODUCTS
# ═══════════════════════════════════════════════════════════════════════════


Bounds = Tuple[float, float, float, float]  # (lat_min, lon_min, lat_max, lon_max)


@dataclass(frozen=True)
class GridCell:
    """One classified grid rectangle.

    aggregate is the sample count (gap mode) or max value (hot-zone mode).
    """

    lat_min: float
    lon_min: float
    lat_max: float
    lon_max: float
    aggregate: float
    category: str = ""
    color: str = ""
    opacity: float = 0.0

    @property
    def center(self) -> LatLon:
        return LatLon(
            (self.lat_min + self.lat_max) / 2.0, (self.lon_min + self.lon_max) / 2.0
        )

    def as_dict(self) -> Dict[str, Any]:
        return {
            "lat_min": self.lat_min,
            "lon_min": self.lon_min,
            "lat_max": self.lat_max,
            "lon_max": self.lon_max,
            "aggregate": self.aggregate,
            "category": self.category,
            "color": self.color,
            "opacity": self.opacity,
        }


@dataclass(frozen=True)
class GridProduct:
    """Classified cells of a gap or hot-zone scan."""

    mode: GridMode
    cells: Tuple[GridCell, ...]
    bounds: Optional[Bounds]
    cell_size_ft: float
    rows: int = 0
    cols: int = 0
    analyte: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return len(self.cells) == 0

    def category_counts(self) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for cell in self.cells:
            counts[cell.category] = counts.get(cell.category, 0) + 1
        return counts


@dataclass(frozen=True, eq=False)
class RasterProduct:
    """Color-coded IDW surface plus its geographic bounds.

    rgba has shape (rows, cols, 4); row 0 is the northern (max latitude) edge.
    values holds the interpolated numbers with NaN for cells outside the hull.
    """

    rgba: np.ndarray
    values: np.ndarray
    bounds: Bounds
    cell_lat_deg: float
    cell_lon_deg: float
    analyte: str
    sample_count: int

    @property
    def rows(self) -> int:
        return int(self.rgba.shape[0])

    @property
    def cols(self) -> int:
        return int(self.rgba.shape[1])

    @property
    def filled_cells(self) -> int:
        return int(np.count_nonzero(self.rgba[:, :, 3]))

    def cell_center(self, row: int, col: int) -> LatLon:
        lat_min, lon_min, lat_max, lon_max = self.bounds
        return LatLon(
            lat_max - (row + 0.5) * self.cell_lat_deg,
            lon_min + (col + 0.5) * self.cell_lon_deg,
        )


# ═══════════════════════════════════════════════════════════════════════════
# 📊 REGION STATISTICS
# ═══════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class AnalyteStats:
    """Summary statistics for one analyte inside a region."""

    count: int = 0
    min: Optional[float] = None
    max: Optional[float] = None
    mean: Optional[float] = None
    exceedances: int = 0

    def as_dict(self) -> Dict[str, Any]:
        return {
            "count": self.count,
            "min": self.min,
            "max": self.max,
            "mean": self.mean,
            "exceedances": self.exceedances,
        }


@dataclass(frozen=True)
class RegionStats:
    """Result of a polygon region analysis."""

    total_samples: int
    area_sq_ft: float
    stats: Mapping[str, AnalyteStats]

    def as_dict(self) -> Dict[str, Any]:
        return {
            "total_samples": self.total_samples,
            "area_sq_ft": self.area_sq_ft,
            "stats": {name: s.as_dict() for name, s in self.stats.items()},
        }


# ═══════════════════════════════════════════════════════════════════════════
# 📏 TRANSECT / PROFILE DATACLASSES
# ═══════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class Transect:
    """Validated transect line with corridor half-width.

    Build instances through Transect.create (or
    analysis.transect.create_transect) so the minimum-length rule and
    corridor clamp are applied.
    """

    a: LatLon
    b: LatLon
    corridor_width_ft: float
    length_m: float

    @classmethod
    def create(
        cls,
        a: LatLon,
        b: LatLon,
        corridor_width_ft: Optional[float] = None,
        config: Any = None,
    ) -> "Transect":
        """Clamp the corridor and validate the length.

        Raises:
            TransectTooShortError: If a and b are closer than the minimum length
        """
        # Deferred: the analysis package depends on this module
        from site_analytics.analysis.transect import DEFAULT_TRANSECT, create_transect

        return create_transect(a, b, corridor_width_ft, config or DEFAULT_TRANSECT)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "a": self.a.as_dict(),
            "b": self.b.as_dict(),
            "corridor_width_ft": self.corridor_width_ft,
            "length_m": self.length_m,
        }


@dataclass(frozen=True)
class SegmentProjection:
    """Perpendicular distance (m) and clamped position t ∈ [0, 1]."""

    distance_m: float
    t: float


@dataclass(frozen=True)
class ProfileInterval:
    """One depth interval selected inside a transect corridor."""

    source_id: str
    source_kind: SourceKind
    depth_start: float
    depth_end: float
    value: Optional[float]
    dist_along_ft: float
    offset_ft: float
    depth_label: str = ""
    lat: float = 0.0
    lon: float = 0.0

    def as_dict(self) -> Dict[str, Any]:
        return {
            "source_id": self.source_id,
            "source_kind": self.source_kind.value,
            "depth_start": self.depth_start,
            "depth_end": self.depth_end,
            "depth_label": self.depth_label,
            "value": self.value,
            "dist_along_ft": self.dist_along_ft,
            "offset_ft": self.offset_ft,
            "lat": self.lat,
            "lon": self.lon,
        }


@dataclass(frozen=True)
class TransectProfile:
    """Ordered corridor intervals plus transect metadata for plotting."""

    transect: Transect
    analyte: str
    length_ft: float
    corridor_width_ft: float
    intervals: Tuple[ProfileInterval, ...]

    @property
    def is_empty(self) -> bool:
        return len(self.intervals) == 0

    @property
    def location_count(self) -> int:
        return len({iv.source_id for iv in self.intervals})

    def as_dict(self) -> Dict[str, Any]:
        return {
            "analyte": self.analyte,
            "length_ft": self.length_ft,
            "corridor_width_ft": self.corridor_width_ft,
            "transect": self.transect.as_dict(),
            "intervals": [iv.as_dict() for iv in self.intervals],
        }
