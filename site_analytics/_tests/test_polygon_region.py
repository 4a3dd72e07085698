#!/usr/bin/env python3
"""
Polygon Region Tests

Tests:
1. Ray-casting containment (convex and concave rings)
2. Shoelace area in square feet
3. Per-analyte statistics and exceedance counts
4. DataFrame summary table

Run with: python -m pytest site_analytics/_tests/test_polygon_region.py -v
"""

import pytest

from site_analytics.analysis.polygon_region import (
    analyze,
    point_in_polygon,
    polygon_area_sq_ft,
    region_stats_to_frame,
)


@pytest.fixture
def thresholds(mercury, arsenic):
    return {"Mercury": mercury, "Arsenic": arsenic}


class TestPointInPolygon:
    """Tests for ray-casting containment."""

    def test_square(self, at):
        """Points inside a square are inside; points outside are not."""
        square = [at(0, 0), at(100, 0), at(100, 100), at(0, 100)]
        inside = at(50, 50)
        outside = at(150, 50)
        assert point_in_polygon(inside.lat, inside.lon, square)
        assert not point_in_polygon(outside.lat, outside.lon, square)

    def test_concave_notch(self, at):
        """A point in the notch of a U shape is outside."""
        u_shape = [at(0, 0), at(90, 0), at(90, 90), at(60, 90), at(60, 30),
                   at(30, 30), at(30, 90), at(0, 90)]
        notch = at(45, 60)
        arm = at(15, 60)
        assert not point_in_polygon(notch.lat, notch.lon, u_shape)
        assert point_in_polygon(arm.lat, arm.lon, u_shape)

    def test_vertex_order_irrelevant(self, at):
        """Clockwise and counter-clockwise rings agree."""
        ring = [at(0, 0), at(100, 0), at(50, 80)]
        p = at(50, 20)
        assert point_in_polygon(p.lat, p.lon, ring)
        assert point_in_polygon(p.lat, p.lon, list(reversed(ring)))


class TestPolygonArea:
    """Tests for the shoelace area."""

    def test_square_round_trip(self, at):
        """A 100 ft x 100 ft square built in meters measures 10,000 sq ft."""
        side_m = 30.48
        square = [at(0, 0), at(side_m, 0), at(side_m, side_m), at(0, side_m)]
        assert polygon_area_sq_ft(square) == pytest.approx(10000.0, rel=1e-6)

    def test_orientation_independent(self, at):
        """The area is absolute."""
        triangle = [at(0, 0), at(30.48, 0), at(0, 30.48)]
        assert polygon_area_sq_ft(triangle) == pytest.approx(5000.0, rel=1e-6)
        assert polygon_area_sq_ft(triangle[::-1]) == pytest.approx(5000.0, rel=1e-6)

    def test_degenerate(self, at):
        """Fewer than three vertices have zero area."""
        assert polygon_area_sq_ft([]) == 0.0
        assert polygon_area_sq_ft([at(0, 0), at(10, 10)]) == 0.0


class TestAnalyze:
    """Tests for region statistics."""

    def test_partial_region(self, square_samples, thresholds, at):
        """Only samples inside count; missing values are excluded from stats."""
        region = [at(-10, -10), at(60, -10), at(60, 60), at(-10, 60)]
        result = analyze(region, square_samples, thresholds)

        assert result.total_samples == 2
        hg = result.stats["Mercury"]
        assert hg.count == 1
        assert hg.min == hg.max == hg.mean == 10.0
        assert hg.exceedances == 0

    def test_whole_site(self, square_samples, thresholds, at):
        """Statistics over every valued sample; values above ROD are exceedances."""
        region = [at(-10, -10), at(110, -10), at(110, 110), at(-10, 110)]
        result = analyze(region, square_samples, thresholds)

        hg = result.stats["Mercury"]
        assert result.total_samples == 5
        assert hg.count == 4
        assert hg.min == 0.5
        assert hg.max == 300.0
        assert hg.mean == pytest.approx((10.0 + 20.0 + 300.0 + 0.5) / 4)
        assert hg.exceedances == 1

    def test_analyte_without_values(self, square_samples, thresholds, at):
        """An analyte with no values has count 0 and None statistics."""
        region = [at(-10, -10), at(110, -10), at(110, 110), at(-10, 110)]
        stats = analyze(region, square_samples, thresholds).stats["Arsenic"]
        assert stats.count == 0
        assert stats.min is None and stats.max is None and stats.mean is None

    def test_empty_region(self, square_samples, thresholds, at):
        """A region far from every sample reports zero samples."""
        region = [at(1000, 1000), at(1100, 1000), at(1100, 1100)]
        result = analyze(region, square_samples, thresholds)
        assert result.total_samples == 0
        assert all(s.count == 0 for s in result.stats.values())

    def test_area_included(self, square_samples, thresholds, at):
        """The region result carries the polygon area."""
        side_m = 30.48
        region = [at(0, 0), at(side_m, 0), at(side_m, side_m), at(0, side_m)]
        result = analyze(region, square_samples, thresholds, analytes=["Mercury"])
        assert result.area_sq_ft == pytest.approx(10000.0, rel=1e-6)
        assert list(result.stats) == ["Mercury"]

    def test_summary_frame(self, square_samples, thresholds, at):
        """One row per analyte with the ROD level attached."""
        region = [at(-10, -10), at(110, -10), at(110, 110), at(-10, 110)]
        frame = region_stats_to_frame(analyze(region, square_samples, thresholds), thresholds)
        assert list(frame["analyte"]) == ["Mercury", "Arsenic"]
        row = frame.set_index("analyte").loc["Mercury"]
        assert row["count"] == 4
        assert row["exceedances"] == 1
        assert row["rod"] == 204.0
