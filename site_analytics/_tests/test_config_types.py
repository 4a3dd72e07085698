#!/usr/bin/env python3
"""
Configuration and Model Type Tests

Tests that the typed config sections:
1. Build from the master CONFIG dict
2. Fall back to defaults for missing keys
3. Expose derived values (conversion inverse, plot edges, log level)

and that the data models parse dataset records.
"""

import logging
import math

import pytest

import site_analytics.models as models

from site_analytics.config import CONFIG
from site_analytics.config_types import (
    AppConfig,
    CoordConversionConfig,
    GridConfig,
    ProfileLayoutConfig,
    TransectConfig,
)
from site_analytics.models.data_models import (
    DepthRecord,
    LatLon,
    SamplePoint,
    SourceKind,
)


# ============================================================================
# CONFIG SECTIONS
# ============================================================================


class TestAppConfig:
    """Tests for the master facade."""

    def test_from_config(self, app_config):
        """Every tracked analyte has a threshold."""
        assert app_config.tracked_analytes == ("Mercury", "Arsenic", "Antimony", "Thallium")
        for analyte in app_config.tracked_analytes:
            assert app_config.get_threshold(analyte).high >= app_config.get_threshold(analyte).low
        assert app_config.get_threshold("Arsenic").is_single_threshold
        assert app_config.abbreviations()["Mercury"] == "Hg"

    def test_unknown_threshold(self, app_config):
        """Looking up an unconfigured analyte raises KeyError."""
        with pytest.raises(KeyError):
            app_config.get_threshold("Lead")

    def test_empty_dict_uses_defaults(self):
        """An empty dict yields the documented defaults."""
        config = AppConfig.from_dict({})
        assert config.grid == GridConfig()
        assert config.transect == TransectConfig()
        assert config.thresholds == {}
        assert config.logger_name == "site_analytics"

    def test_log_level(self):
        """Level names map to logging constants; unknown names fall back to INFO."""
        assert AppConfig.from_dict({"logging": {"level": "debug"}}).log_level_value == logging.DEBUG
        assert AppConfig.from_dict({"logging": {"level": "chatty"}}).log_level_value == logging.INFO

    def test_config_sections_present(self):
        """The master dict carries every section the facade reads."""
        for section in ("coord_conversion", "thresholds", "contour", "grid", "transect",
                        "buffer_zones", "profile_layout", "file_paths", "logging"):
            assert section in CONFIG


class TestDerivedValues:
    """Tests for computed config properties."""

    def test_meters_to_feet(self):
        """meters_to_feet is the inverse of feet_to_meters."""
        conv = CoordConversionConfig()
        assert conv.meters_to_feet * conv.feet_to_meters == pytest.approx(1.0)

    def test_plot_edges(self):
        """Plot edges come from the canvas size and margins."""
        plot = ProfileLayoutConfig()
        assert (plot.plot_left, plot.plot_right) == (75.0, 910.0)
        assert (plot.plot_top, plot.plot_bottom) == (80.0, 450.0)
        assert plot.min_column_gap == 26.0

    def test_partial_layout_dict(self):
        """Missing layout keys keep their defaults."""
        plot = ProfileLayoutConfig.from_dict({"width_px": 1200})
        assert plot.width_px == 1200
        assert plot.column_width_px == 24


# ============================================================================
# DATA MODELS
# ============================================================================


class TestDataModels:
    """Tests for record parsing on the models."""

    def test_source_kind_from_string(self):
        """Codes and member names resolve; unknown strings fall back to surface."""
        assert SourceKind.from_string("TP") is SourceKind.TEST_PIT
        assert SourceKind.from_string("soil_boring") is SourceKind.SOIL_BORING
        assert SourceKind.from_string("??") is SourceKind.SURFACE
        assert SourceKind.TEST_PIT.is_multi_depth
        assert not SourceKind.HISTORICAL.is_multi_depth

    def test_sample_values_cleaned(self):
        """NaN, booleans and text are treated as missing values."""
        sp = SamplePoint.from_dict(
            {"lat": 39.0, "lon": -122.6, "label": "SS-1",
             "metals": {"Mercury": "12.5", "Arsenic": math.nan, "Antimony": True, "Thallium": "n/a"}}
        )
        assert sp.sample_id == "SS-1"
        assert sp.value("Mercury") == 12.5
        assert sp.value("Arsenic") is None
        assert sp.value("Antimony") is None
        assert sp.value("Thallium") is None
        assert not sp.has_value("Lead")

    def test_sample_requires_coordinates(self):
        """Missing coordinates raise KeyError."""
        with pytest.raises(KeyError):
            SamplePoint.from_dict({"lon": -122.6})

    def test_depth_record_flattening(self, test_pit):
        """A depth record flattens into one sample per interval."""
        points = test_pit.to_sample_points()
        assert [p.depth_interval.label for p in points] == ["0-1 ft", "1-3 ft", "3-6 ft"]
        assert all(p.source_tag is SourceKind.TEST_PIT for p in points)
        assert points[1].value("Mercury") == 250.0

    def test_depth_record_from_dict(self):
        """Depth entries accept either analyte_values or metals."""
        record = DepthRecord.from_dict({
            "id": "SB-3", "lat": 39.0, "lon": -122.6, "source_kind": "SB",
            "depths": [{"start": 0, "end": 2, "analyte_values": {"Arsenic": 9}}],
        })
        assert record.source_kind is SourceKind.SOIL_BORING
        assert record.intervals[0][1] == {"Arsenic": 9.0}

    def test_latlon_leaflet_keys(self):
        """LatLon accepts both lon and lng."""
        assert LatLon.from_dict({"lat": 1, "lng": 2}) == LatLon(1.0, 2.0)
        assert LatLon.from_dict({"lat": 1, "lon": 2}).as_dict() == {"lat": 1.0, "lon": 2.0}

    def test_package_exports_resolve(self):
        """Every name the models package exports is defined and the list converters are gone."""
        for name in models.__all__:
            assert hasattr(models, name)
        assert not hasattr(models, "samples_from_dicts")
        assert not hasattr(models, "samples_to_dicts")
