#!/usr/bin/env python3
"""
Depth Profile Layout Tests

Tests:
1. Column overlap resolution and plot clamping
2. Nice axis scaling (depth maximum, tick step)
3. Column grouping by location
4. Full layout: positions, rectangle geometry, colors, ticks

Run with: python -m pytest site_analytics/_tests/test_profile_layout.py -v
"""

import pytest

from site_analytics.analysis.profile_layout import (
    ColumnPosition,
    axis_ticks,
    group_columns,
    layout_profile,
    nice_depth_max,
    nice_step,
    resolve_overlaps,
)
from site_analytics.analysis.transect import create_transect
from site_analytics.geometry.color_mapping import color_for
from site_analytics.models.data_models import ProfileInterval, SourceKind, TransectProfile


def interval(source_id, kind, start, end, value, dist_ft, label=""):
    return ProfileInterval(
        source_id=source_id,
        source_kind=kind,
        depth_start=start,
        depth_end=end,
        value=value,
        dist_along_ft=dist_ft,
        offset_ft=0.0,
        depth_label=label,
    )


# ============================================================================
# FIXTURES
# ============================================================================


@pytest.fixture
def profile(at):
    """400 ft profile: a surface sample at 0 ft, a pit at 80 ft, a boring at 81 ft."""
    transect = create_transect(at(0, 0), at(100, 0))
    intervals = (
        interval("SS-1", SourceKind.SURFACE, 0.0, 0.5, 12.0, 0.0, "0-6 in"),
        interval("TP-01", SourceKind.TEST_PIT, 0.0, 1.0, 50.0, 80.0, "0-1 ft"),
        interval("TP-01", SourceKind.TEST_PIT, 1.0, 3.0, 250.0, 80.0, "1-3 ft"),
        interval("TP-01", SourceKind.TEST_PIT, 3.0, 6.0, None, 80.0, "3-6 ft"),
        interval("SB-2", SourceKind.SOIL_BORING, 0.0, 0.1, 2.0, 81.0, "0-0.1 ft"),
    )
    return TransectProfile(
        transect=transect,
        analyte="Mercury",
        length_ft=400.0,
        corridor_width_ft=50.0,
        intervals=intervals,
    )


# ============================================================================
# OVERLAP RESOLUTION
# ============================================================================


class TestResolveOverlaps:
    """Tests for pushing crowded columns apart."""

    def test_pair_pushed_to_min_gap(self):
        """Two columns 10 px apart end up exactly 26 px apart around their midpoint."""
        result = resolve_overlaps(
            [ColumnPosition("a", 400.0), ColumnPosition("b", 410.0)], 26.0, 75.0, 910.0, 24.0
        )
        assert [p.x for p in result] == [pytest.approx(392.0), pytest.approx(418.0)]

    def test_cluster_spreads_symmetrically(self):
        """A tight cluster spreads out and keeps its mean position."""
        positions = [ColumnPosition(s, x) for s, x in (("a", 400.0), ("b", 401.0), ("c", 402.0))]
        result = resolve_overlaps(positions, 26.0, 75.0, 910.0, 24.0)
        xs = [p.x for p in result]
        assert sum(xs) == pytest.approx(1203.0)
        assert all(b - a > 25.0 for a, b in zip(xs, xs[1:]))

    def test_clamped_inside_plot(self):
        """Columns are kept fully inside the plot edges."""
        result = resolve_overlaps(
            [ColumnPosition("a", 76.0), ColumnPosition("b", 900.0)], 26.0, 75.0, 910.0, 24.0
        )
        assert [p.x for p in result] == [87.0, 898.0]

    def test_sorted_and_input_untouched(self):
        """The result is sorted by x and the input sequence is not reordered."""
        positions = [ColumnPosition("b", 600.0), ColumnPosition("a", 300.0)]
        result = resolve_overlaps(positions, 26.0, 75.0, 910.0, 24.0)
        assert [p.source_id for p in result] == ["a", "b"]
        assert [p.source_id for p in positions] == ["b", "a"]

    def test_single_column_unchanged(self):
        """A lone column is returned as is."""
        only = [ColumnPosition("a", 300.0)]
        assert resolve_overlaps(only, 26.0, 75.0, 910.0, 24.0) == only


# ============================================================================
# AXIS SCALING
# ============================================================================


class TestAxisScaling:
    """Tests for nice depth limits and tick steps."""

    @pytest.mark.parametrize(
        "depth, expected",
        [(0.5, 2.0), (2.0, 2.0), (2.1, 5.0), (7.0, 10.0), (12.0, 15.0), (16.0, 20.0), (31.0, 40.0)],
    )
    def test_nice_depth_max(self, depth, expected):
        """Depths round up to 2, 5, 10, 15 or the next multiple of 10."""
        assert nice_depth_max(depth) == expected

    def test_nice_step(self):
        """Steps are 1, 2, 5 or 10 times a power of ten."""
        assert nice_step(10.0, 5) == pytest.approx(2.0)
        assert nice_step(100.0, 3) == pytest.approx(20.0)
        assert nice_step(400.0, 10) == pytest.approx(50.0)
        assert nice_step(0.9, 1) == pytest.approx(0.5)

    def test_nice_step_degenerate_range(self):
        """A non-positive range gives a step of 1."""
        assert nice_step(0.0, 5) == 1.0
        assert nice_step(-3.0, 5) == 1.0

    def test_axis_ticks_include_limit(self):
        """Ticks start at zero and include the limit when it is a multiple of the step."""
        assert axis_ticks(10.0, 2.0) == (0.0, 2.0, 4.0, 6.0, 8.0, 10.0)
        assert axis_ticks(7.0, 2.0) == (0.0, 2.0, 4.0, 6.0)


# ============================================================================
# FULL LAYOUT
# ============================================================================


class TestLayoutProfile:
    """Tests for the complete pixel layout."""

    def test_group_columns(self, profile):
        """One group per location in first-appearance order."""
        groups = group_columns(profile.intervals)
        assert [g.source_id for g in groups] == ["SS-1", "TP-01", "SB-2"]
        assert len(groups[1].intervals) == 3
        assert groups[1].deepest_ft == 6.0

    def test_columns_positioned(self, profile):
        """Columns follow distance, clamp to the plot and keep the minimum gap."""
        layout = layout_profile(profile)
        assert [c.source_id for c in layout.columns] == ["SS-1", "TP-01", "SB-2"]
        assert layout.location_count == 3
        assert layout.columns[0].x == 87.0
        assert layout.columns[2].x - layout.columns[1].x >= 26.0 - 1e-6

    def test_depth_scaling(self, profile):
        """Deepest interval 6 ft scales the axis to 10 ft."""
        layout = layout_profile(profile)
        assert layout.max_depth_ft == 10.0
        pit = layout.columns[1]
        assert [r.y_top for r in pit.rects] == [pytest.approx(80.0), pytest.approx(117.0),
                                                pytest.approx(191.0)]
        assert [r.height for r in pit.rects] == [pytest.approx(37.0), pytest.approx(74.0),
                                                 pytest.approx(111.0)]
        assert pit.guide_bottom_y == pytest.approx(302.0)

    def test_minimum_rect_height(self, profile):
        """Thin intervals are drawn at least 8 px tall."""
        boring = layout_profile(profile).columns[2]
        assert boring.rects[0].height == 8.0

    def test_colors(self, profile, mercury):
        """Rects use the gradient; missing values are gray; labels use the type color."""
        layout = layout_profile(profile, mercury)
        pit = layout.columns[1]
        assert pit.rects[0].color == color_for(50.0, mercury).to_hex()
        assert pit.rects[2].color == "#808080"
        assert pit.label_color == "#cc6600"
        assert layout.columns[0].label_color == "#00ff88"
        assert layout.columns[2].label_color == "#00aaff"

    def test_no_threshold_is_gray(self, profile):
        """Without a threshold every rectangle is gray."""
        layout = layout_profile(profile)
        assert {r.color for c in layout.columns for r in c.rects} == {"#808080"}

    def test_ticks(self, profile):
        """Depth ticks every foot to 10 ft, distance ticks every 50 ft to 400 ft."""
        layout = layout_profile(profile)
        assert layout.depth_ticks == tuple(float(i) for i in range(11))
        assert layout.distance_ticks[-1] == 400.0
        assert len(layout.distance_ticks) == 9

    def test_empty_profile(self, profile):
        """An empty profile lays out no columns and a minimal depth axis."""
        empty = TransectProfile(profile.transect, "Mercury", 400.0, 50.0, ())
        layout = layout_profile(empty)
        assert layout.columns == ()
        assert layout.max_depth_ft == 2.0
