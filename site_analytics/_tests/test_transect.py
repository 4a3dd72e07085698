#!/usr/bin/env python3
"""
Transect Corridor Tests

Tests:
1. Transect creation: minimum length, corridor clamping
2. Segment projection: perpendicular distance, clamped t, degenerate segment
3. Profile collection: corridor membership, ordering, unanalyzed intervals
4. Corridor outline corners

Run with: python -m pytest site_analytics/_tests/test_transect.py -v
"""

import pytest

from site_analytics.analysis.transect import (
    TransectTooShortError,
    clamp_corridor_width,
    collect_profile,
    corridor_polygon,
    create_transect,
    project_onto_segment,
    validate_transect_length,
)
from site_analytics.geometry.coordinate_math import meters_between
from site_analytics.models.data_models import SourceKind, Transect

FT_PER_M = 1.0 / 0.3048


# ============================================================================
# FIXTURES
# ============================================================================


@pytest.fixture
def east_line(at):
    """100 m west-to-east transect with the default 50 ft corridor."""
    return create_transect(at(0, 0), at(100, 0))


@pytest.fixture
def corridor_samples(sample):
    return [
        sample(30, 5, {"Mercury": 12.0}, "SS-A"),
        sample(60, 20, {"Mercury": 900.0}, "SS-B"),
        sample(-10, 0, {"Mercury": 0.4}, "SS-C"),
        sample(45, -3, {}, "EA-7", SourceKind.HISTORICAL),
        sample(10, 0, kind=SourceKind.PLANNED, sample_id="P-1"),
    ]


# ============================================================================
# TRANSECT CREATION
# ============================================================================


class TestCreateTransect:
    """Tests for validation and clamping."""

    def test_too_short_rejected(self, at):
        """Endpoints 2 m apart are rejected."""
        with pytest.raises(TransectTooShortError) as exc_info:
            create_transect(at(0, 0), at(2, 0))
        assert exc_info.value.length_m == pytest.approx(2.0)
        assert isinstance(exc_info.value, ValueError)
        assert not validate_transect_length(at(0, 0), at(2, 0))

    def test_five_meters_accepted(self, at):
        """Endpoints 5 m apart produce a transect of length 5 m."""
        transect = create_transect(at(0, 0), at(3, 4))
        assert transect.length_m == pytest.approx(5.0)
        assert validate_transect_length(at(0, 0), at(3, 4))

    def test_corridor_clamped(self, at):
        """Corridor half-widths are clamped to [10, 500] ft; None gives the default."""
        assert clamp_corridor_width(5) == 10.0
        assert clamp_corridor_width(900) == 500.0
        assert clamp_corridor_width(75) == 75.0
        assert clamp_corridor_width(None) == 50.0
        assert create_transect(at(0, 0), at(50, 0), 1000).corridor_width_ft == 500.0

    def test_classmethod_matches_function(self, at):
        """Transect.create applies the same validation."""
        transect = Transect.create(at(0, 0), at(50, 0), 20)
        assert transect == create_transect(at(0, 0), at(50, 0), 20)
        with pytest.raises(TransectTooShortError):
            Transect.create(at(0, 0), at(1, 1))


# ============================================================================
# PROJECTION
# ============================================================================


class TestProjectOntoSegment:
    """Tests for point-to-segment projection."""

    def test_perpendicular_offset(self, at):
        """A point 10 m north of the midpoint projects to t = 0.5 at 10 m."""
        proj = project_onto_segment(at(50, 10), at(0, 0), at(100, 0))
        assert proj.t == pytest.approx(0.5)
        assert proj.distance_m == pytest.approx(10.0)

    def test_beyond_end_clamped(self, at):
        """Points past an endpoint clamp t and measure to the endpoint."""
        after = project_onto_segment(at(150, 0), at(0, 0), at(100, 0))
        assert after.t == 1.0
        assert after.distance_m == pytest.approx(50.0)

        before = project_onto_segment(at(-30, 40), at(0, 0), at(100, 0))
        assert before.t == 0.0
        assert before.distance_m == pytest.approx(50.0)

    def test_degenerate_segment(self, at):
        """Coincident endpoints give t = 0 and the distance to the endpoint."""
        proj = project_onto_segment(at(3, 4), at(0, 0), at(0, 0))
        assert proj.t == 0.0
        assert proj.distance_m == pytest.approx(5.0)


# ============================================================================
# PROFILE COLLECTION
# ============================================================================


class TestCollectProfile:
    """Tests for corridor membership and ordering."""

    def test_corridor_membership(self, east_line, corridor_samples, test_pit):
        """Locations within 50 ft (15.24 m) are kept, farther ones and planned points dropped."""
        profile = collect_profile(east_line, corridor_samples, [test_pit], "Mercury")
        ids = {iv.source_id for iv in profile.intervals}
        assert ids == {"SS-A", "SS-C", "EA-7", "TP-01"}
        assert profile.location_count == 4

    def test_sorted_by_distance(self, east_line, corridor_samples, test_pit):
        """Intervals are ordered by distance along; pit intervals keep their order."""
        profile = collect_profile(east_line, corridor_samples, [test_pit], "Mercury")
        distances = [iv.dist_along_ft for iv in profile.intervals]
        assert distances == sorted(distances)

        ordered_ids = [iv.source_id for iv in profile.intervals]
        assert ordered_ids == ["SS-C", "TP-01", "TP-01", "TP-01", "SS-A", "EA-7"]
        pit_labels = [iv.depth_label for iv in profile.intervals if iv.source_id == "TP-01"]
        assert pit_labels == ["0-1 ft", "1-3 ft", "3-6 ft"]

    def test_distances_and_offsets(self, east_line, corridor_samples, test_pit):
        """Distance along and offset are reported in feet."""
        profile = collect_profile(east_line, corridor_samples, [test_pit], "Mercury")
        ss_a = next(iv for iv in profile.intervals if iv.source_id == "SS-A")
        assert ss_a.dist_along_ft == pytest.approx(30.0 * FT_PER_M)
        assert ss_a.offset_ft == pytest.approx(5.0 * FT_PER_M)
        assert profile.length_ft == pytest.approx(100.0 * FT_PER_M)

        ss_c = next(iv for iv in profile.intervals if iv.source_id == "SS-C")
        assert ss_c.dist_along_ft == 0.0

    def test_surface_band(self, east_line, corridor_samples):
        """Surface samples occupy the nominal 0-0.5 ft band."""
        profile = collect_profile(east_line, corridor_samples, [], "Mercury")
        ss_a = next(iv for iv in profile.intervals if iv.source_id == "SS-A")
        assert (ss_a.depth_start, ss_a.depth_end) == (0.0, 0.5)
        assert ss_a.depth_label == "0-6 in"
        assert ss_a.value == 12.0
        assert ss_a.source_kind is SourceKind.SURFACE

    def test_exclude_unanalyzed(self, east_line, corridor_samples, test_pit):
        """Dropping unanalyzed intervals removes missing values only."""
        everything = collect_profile(east_line, corridor_samples, [test_pit], "Mercury")
        analyzed = collect_profile(
            east_line, corridor_samples, [test_pit], "Mercury", include_unanalyzed=False
        )
        assert any(iv.value is None for iv in everything.intervals)
        assert all(iv.value is not None for iv in analyzed.intervals)
        assert len(everything.intervals) - len(analyzed.intervals) == 2

    def test_wider_corridor_adds_locations(self, at, corridor_samples):
        """A 70 ft corridor reaches the sample 20 m off the line."""
        wide = create_transect(at(0, 0), at(100, 0), 70)
        profile = collect_profile(wide, corridor_samples, [], "Mercury")
        assert "SS-B" in {iv.source_id for iv in profile.intervals}

    def test_empty_corridor(self, at, corridor_samples):
        """A transect far from every sample yields an empty profile."""
        far = create_transect(at(1000, 1000), at(1100, 1000))
        profile = collect_profile(far, corridor_samples, [], "Mercury")
        assert profile.is_empty
        assert profile.corridor_width_ft == 50.0

    @pytest.mark.parametrize("width_ft", [10.0, 50.0, 500.0])
    def test_corridor_edge_inclusive(self, at, sample, width_ft):
        """Samples just inside the corridor width are kept, just outside are dropped."""
        transect = create_transect(at(0, 0), at(100, 0), width_ft)
        width_m = width_ft * 0.3048
        edge_samples = [
            sample(50, 0, {"Mercury": 1.0}, "ON-LINE"),
            sample(50, width_m - 1e-4, {"Mercury": 2.0}, "INSIDE"),
            sample(50, -(width_m - 1e-4), {"Mercury": 3.0}, "INSIDE-SOUTH"),
            sample(50, width_m + 1e-4, {"Mercury": 4.0}, "OUTSIDE"),
        ]
        profile = collect_profile(transect, edge_samples, [], "Mercury")
        ids = {iv.source_id for iv in profile.intervals}
        assert ids == {"ON-LINE", "INSIDE", "INSIDE-SOUTH"}


# ============================================================================
# CORRIDOR OUTLINE
# ============================================================================


class TestCorridorPolygon:
    """Tests for the corridor rectangle."""

    def test_corners_offset_by_half_width(self, east_line):
        """Each corner lies one half-width from its endpoint."""
        half_width_m = 50.0 * 0.3048
        a_left, a_right, b_right, b_left = corridor_polygon(east_line)
        for corner, end in ((a_left, east_line.a), (a_right, east_line.a),
                            (b_right, east_line.b), (b_left, east_line.b)):
            assert meters_between(corner, end) == pytest.approx(half_width_m, rel=1e-2)

    def test_corners_on_opposite_sides(self, east_line):
        """Left and right corners straddle the line; the ring does not self-cross."""
        a_left, a_right, b_right, b_left = corridor_polygon(east_line)
        a = east_line.a
        assert (a_left.lat - a.lat) * (a_right.lat - a.lat) < 0
        assert (a_right.lat - a.lat) * (b_right.lat - a.lat) > 0
        assert (a_left.lat - a.lat) * (b_left.lat - a.lat) > 0
