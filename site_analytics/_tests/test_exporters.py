#!/usr/bin/env python3
"""
Export Tests

Tests:
1. GeoJSON structure for grids, hulls, buffers, profiles and regions
2. Raster JSON with and without a surface
3. File output (JSON / GeoJSON / CSV) creates folders and overwrites

Run with: python -m pytest site_analytics/_tests/test_exporters.py -v
"""

import json

import pandas as pd
import pytest

from site_analytics.analysis.buffer_zones import exceedance_buffers
from site_analytics.analysis.contour import interpolate
from site_analytics.analysis.grid_scanner import gap_grid
from site_analytics.analysis.polygon_region import analyze
from site_analytics.analysis.transect import collect_profile, create_transect
from site_analytics.exporters import (
    buffers_to_geojson,
    grid_to_geodataframe,
    grid_to_geojson,
    hull_to_geojson,
    profile_to_frame,
    profile_to_geojson,
    raster_to_dict,
    region_to_geojson,
    write_csv,
    write_geojson,
    write_json,
)
from site_analytics.geometry.convex_hull import convex_hull


class TestGeoJson:
    """Tests for FeatureCollection builders."""

    def test_grid_features(self, square_samples):
        """One polygon per cell with style properties; coordinates are (lon, lat)."""
        product = gap_grid(square_samples, grid_size_ft=100, include_planned=False)
        fc = grid_to_geojson(product)
        assert fc["type"] == "FeatureCollection"
        assert len(fc["features"]) == len(product.cells)

        feature = fc["features"][0]
        cell = product.cells[0]
        assert feature["geometry"]["type"] == "Polygon"
        assert feature["properties"]["mode"] == "gap"
        assert feature["properties"]["color"] == cell.color
        lons = [pt[0] for pt in feature["geometry"]["coordinates"][0]]
        assert min(lons) == pytest.approx(cell.lon_min)
        assert max(lons) == pytest.approx(cell.lon_max)

    def test_grid_geodataframe(self, square_samples):
        """The GeoDataFrame view has one row per cell in WGS84."""
        product = gap_grid(square_samples, grid_size_ft=100, include_planned=False)
        gdf = grid_to_geodataframe(product)
        assert len(gdf) == len(product.cells)
        assert gdf.crs.to_string() == "EPSG:4326"
        assert set(gdf["category"]) <= {"no_coverage", "sparse", "adequate"}

    def test_hull(self, square_samples):
        """A hull exports as one polygon; a degenerate hull as an empty collection."""
        fc = hull_to_geojson(convex_hull(square_samples), {"samples": 5})
        assert len(fc["features"]) == 1
        assert fc["features"][0]["properties"] == {"samples": 5}
        assert hull_to_geojson(convex_hull(square_samples[:2]))["features"] == []

    def test_buffers(self, square_samples, mercury):
        """Each buffer exports as a polygon with its sample id."""
        zones = exceedance_buffers(square_samples, "Mercury", mercury)
        fc = buffers_to_geojson(zones)
        assert [f["properties"]["sample_id"] for f in fc["features"]] == ["SS-3"]
        assert fc["features"][0]["geometry"]["type"] == "Polygon"

    def test_profile(self, at, square_samples, test_pit):
        """Profile export has the line, the corridor and one point per interval."""
        transect = create_transect(at(0, 0), at(100, 0))
        profile = collect_profile(transect, square_samples, [test_pit], "Mercury")
        fc = profile_to_geojson(profile)
        layers = [f["properties"]["layer"] for f in fc["features"]]
        assert layers[:2] == ["transect", "corridor"]
        assert layers.count("interval") == len(profile.intervals)
        assert fc["features"][1]["geometry"]["type"] == "Polygon"

        frame = profile_to_frame(profile)
        assert len(frame) == len(profile.intervals)
        assert list(frame["dist_along_ft"]) == sorted(frame["dist_along_ft"])

    def test_region(self, at, square_samples, mercury):
        """A region exports its statistics as properties."""
        vertices = [at(-10, -10), at(110, -10), at(110, 110), at(-10, 110)]
        region = analyze(vertices, square_samples, {"Mercury": mercury})
        fc = region_to_geojson(vertices, region)
        props = fc["features"][0]["properties"]
        assert props["total_samples"] == 5
        assert props["stats"]["Mercury"]["exceedances"] == 1


class TestRasterExport:
    """Tests for the raster JSON payload."""

    def test_no_surface(self):
        """A missing surface exports as a null raster."""
        assert raster_to_dict(None) == {"rgba": None}

    def test_surface(self, square_samples, mercury):
        """Bounds are [[south, west], [north, east]] and RGBA is nested lists."""
        raster = interpolate(square_samples, "Mercury", mercury)
        data = raster_to_dict(raster, 0.5)
        lat_min, lon_min, lat_max, lon_max = raster.bounds
        assert data["bounds"] == [[lat_min, lon_min], [lat_max, lon_max]]
        assert len(data["rgba"]) == data["rows"] == raster.rows
        assert len(data["rgba"][0]) == data["cols"]
        assert len(data["rgba"][0][0]) == 4
        assert data["opacity"] == 0.5
        json.dumps(data)


class TestFileOutput:
    """Tests for writing files."""

    def test_write_json_creates_folders(self, tmp_path):
        """Parent folders are created and content round-trips."""
        path = write_json({"a": 1}, tmp_path / "nested" / "out.json")
        assert json.loads(path.read_text(encoding="utf-8")) == {"a": 1}

    def test_write_geojson_overwrites(self, tmp_path):
        """Writing twice keeps only the latest collection."""
        path = tmp_path / "grid.geojson"
        write_geojson({"type": "FeatureCollection", "features": [{"x": 1}]}, path)
        write_geojson({"type": "FeatureCollection", "features": []}, path)
        assert json.loads(path.read_text(encoding="utf-8"))["features"] == []

    def test_write_csv(self, tmp_path):
        """CSV output has no index column."""
        path = write_csv(pd.DataFrame({"a": [1, 2]}), tmp_path / "t" / "table.csv")
        assert path.read_text(encoding="utf-8").splitlines() == ["a", "1", "2"]
