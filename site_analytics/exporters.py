"""
Site Analytics Export Module - GeoJSON, raster JSON and CSV exports.

ARCHITECTURAL OVERVIEW:
=======================
Responsibility: Serialise engine products so an external renderer or GIS
package can consume them. No analysis happens here.

Export Formats:
- GeoJSON: grid cells, sample hull, exceedance buffers, transect corridor,
  profile locations, polygon regions (WGS84, (lon, lat) order)
- Raster JSON: IDW surface bounds plus nested RGBA lists
- CSV: profile intervals and region statistics tables

Key Entry Points:
- grid_to_geojson() / grid_to_geodataframe(): classified grid cells
- raster_to_dict(): IDW surface for image overlays
- write_geojson() / write_json(): file output (overwrites)

For Navigation: Use VS Code outline (Ctrl+Shift+O)
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import geopandas as gpd
import pandas as pd
from shapely.geometry import LineString, Point, Polygon, box, mapping
from shapely.geometry.base import BaseGeometry

from site_analytics.analysis.buffer_zones import BufferZone, buffer_polygon
from site_analytics.analysis.transect import corridor_polygon
from site_analytics.config_types import CoordConversionConfig
from site_analytics.geometry.convex_hull import hull_to_polygon
from site_analytics.geometry.coordinate_math import DEFAULT_CONVERSION
from site_analytics.models.data_models import (
    GridProduct,
    Hull,
    LatLon,
    RasterProduct,
    RegionStats,
    TransectProfile,
)

logger = logging.getLogger(__name__)

CRS_WGS84 = "EPSG:4326"


# ═══════════════════════════════════════════════════════════════════════════
# 🔧 HELPER FUNCTIONS
# ═══════════════════════════════════════════════════════════════════════════


def _feature(geometry: BaseGeometry, properties: Dict[str, Any]) -> Dict[str, Any]:
    return {"type": "Feature", "geometry": mapping(geometry), "properties": properties}


def _feature_collection(features: List[Dict[str, Any]]) -> Dict[str, Any]:
    return {"type": "FeatureCollection", "features": features}


def _ring(vertices: Sequence[LatLon]) -> Polygon:
    return Polygon([(v.lon, v.lat) for v in vertices])


# ═══════════════════════════════════════════════════════════════════════════
# 🔲 GRID EXPORT
# ═══════════════════════════════════════════════════════════════════════════


def grid_to_geojson(product: GridProduct) -> Dict[str, Any]:
    """
    One polygon feature per classified grid cell.

    Properties carry the aggregate (count or max value), category, fill
    color and opacity.
    """
    features = [
        _feature(
            box(cell.lon_min, cell.lat_min, cell.lon_max, cell.lat_max),
            {
                "mode": product.mode.value,
                "aggregate": cell.aggregate,
                "category": cell.category,
                "color": cell.color,
                "opacity": cell.opacity,
            },
        )
        for cell in product.cells
    ]
    return _feature_collection(features)


def grid_to_geodataframe(product: GridProduct) -> gpd.GeoDataFrame:
    """Grid cells as a WGS84 GeoDataFrame (empty frame for an empty grid)."""
    columns = ["aggregate", "category", "color", "opacity"]
    rows = [
        {
            "aggregate": cell.aggregate,
            "category": cell.category,
            "color": cell.color,
            "opacity": cell.opacity,
        }
        for cell in product.cells
    ]
    geometry = [
        box(cell.lon_min, cell.lat_min, cell.lon_max, cell.lat_max)
        for cell in product.cells
    ]
    return gpd.GeoDataFrame(
        pd.DataFrame(rows, columns=columns), geometry=geometry, crs=CRS_WGS84
    )


# ═══════════════════════════════════════════════════════════════════════════
# 🌈 RASTER EXPORT
# ═══════════════════════════════════════════════════════════════════════════


def raster_to_dict(
    raster: Optional[RasterProduct], opacity: float = 0.5
) -> Dict[str, Any]:
    """
    IDW surface as plain JSON data.

    Returns:
        {"analyte", "bounds": [[lat_min, lon_min], [lat_max, lon_max]],
         "rows", "cols", "opacity", "rgba": rows x cols x 4 nested lists};
        {"rgba": None} when no surface was produced
    """
    if raster is None:
        return {"rgba": None}
    lat_min, lon_min, lat_max, lon_max = raster.bounds
    return {
        "analyte": raster.analyte,
        "sample_count": raster.sample_count,
        "bounds": [[lat_min, lon_min], [lat_max, lon_max]],
        "rows": raster.rows,
        "cols": raster.cols,
        "opacity": opacity,
        "rgba": raster.rgba.tolist(),
    }


# ═══════════════════════════════════════════════════════════════════════════
# ⭕ HULL / BUFFER EXPORT
# ═══════════════════════════════════════════════════════════════════════════


def hull_to_geojson(hull: Hull, properties: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Sample hull as a single polygon feature (empty collection if degenerate)."""
    if len(hull) < 3:
        return _feature_collection([])
    return _feature_collection([_feature(hull_to_polygon(hull), properties or {})])


def buffers_to_geojson(
    zones: Sequence[BufferZone], conv: CoordConversionConfig = DEFAULT_CONVERSION
) -> Dict[str, Any]:
    """Exceedance circles as polygon features."""
    features = [
        _feature(
            buffer_polygon(zone, conv),
            {"sample_id": zone.sample_id, "value": zone.value, "radius_m": zone.radius_m},
        )
        for zone in zones
    ]
    return _feature_collection(features)


# ═══════════════════════════════════════════════════════════════════════════
# 📏 TRANSECT / REGION EXPORT
# ═══════════════════════════════════════════════════════════════════════════


def profile_to_geojson(
    profile: TransectProfile, conv: CoordConversionConfig = DEFAULT_CONVERSION
) -> Dict[str, Any]:
    """
    Transect line, corridor outline and one point per profile interval.

    Feature `layer` property is "transect", "corridor" or "interval".
    """
    transect = profile.transect
    features = [
        _feature(
            LineString([(transect.a.lon, transect.a.lat), (transect.b.lon, transect.b.lat)]),
            {"layer": "transect", "length_ft": profile.length_ft},
        ),
        _feature(
            _ring(corridor_polygon(transect, conv)),
            {"layer": "corridor", "corridor_width_ft": profile.corridor_width_ft},
        ),
    ]
    for iv in profile.intervals:
        properties = {"layer": "interval", "analyte": profile.analyte}
        properties.update(iv.as_dict())
        features.append(_feature(Point(iv.lon, iv.lat), properties))
    return _feature_collection(features)


def profile_to_frame(profile: TransectProfile) -> pd.DataFrame:
    """Profile intervals as a table, in distance-along order."""
    columns = [
        "source_id",
        "source_kind",
        "depth_start",
        "depth_end",
        "depth_label",
        "value",
        "dist_along_ft",
        "offset_ft",
        "lat",
        "lon",
    ]
    return pd.DataFrame([iv.as_dict() for iv in profile.intervals], columns=columns)


def region_to_geojson(vertices: Sequence[LatLon], region: RegionStats) -> Dict[str, Any]:
    """User polygon with its statistics attached as properties."""
    if len(vertices) < 3:
        return _feature_collection([])
    return _feature_collection([_feature(_ring(vertices), region.as_dict())])


# ═══════════════════════════════════════════════════════════════════════════
# 💾 FILE OUTPUT
# ═══════════════════════════════════════════════════════════════════════════


def write_json(data: Dict[str, Any], output_path: Path, indent: Optional[int] = 2) -> Path:
    """Write a JSON document, creating parent folders. Overwrites."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=indent)
    logger.info(f"📄 JSON exported: {output_path.name}")
    return output_path


def write_geojson(feature_collection: Dict[str, Any], output_path: Path) -> Path:
    """Write a GeoJSON FeatureCollection (empty collections are still written)."""
    count = len(feature_collection.get("features", []))
    path = write_json(feature_collection, output_path)
    logger.debug(f"   {path.name}: {count} features")
    return path


def write_csv(frame: pd.DataFrame, output_path: Path) -> Path:
    """Write a DataFrame as CSV without the index. Overwrites."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    frame.to_csv(output_path, index=False)
    logger.info(f"📄 CSV exported: {output_path.name} ({len(frame)} rows)")
    return output_path


# ═══════════════════════════════════════════════════════════════════════════
# 📦 MODULE EXPORTS
# ═══════════════════════════════════════════════════════════════════════════

__all__ = [
    "buffers_to_geojson",
    "grid_to_geodataframe",
    "grid_to_geojson",
    "hull_to_geojson",
    "profile_to_frame",
    "profile_to_geojson",
    "raster_to_dict",
    "region_to_geojson",
    "write_csv",
    "write_geojson",
    "write_json",
]
