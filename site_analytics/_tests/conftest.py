"""
Shared fixtures for the site analytics tests.

Positions are built from local east/north offsets in meters around a fixed
site origin, using the same scale constants as the engine, so distances in
the tests are exact.
"""

from typing import Callable, Dict, Optional

import pytest

from site_analytics.config import CONFIG
from site_analytics.config_types import AppConfig
from site_analytics.geometry.coordinate_math import DEFAULT_CONVERSION
from site_analytics.models.data_models import (
    AnalyteThreshold,
    DepthInterval,
    DepthRecord,
    LatLon,
    SamplePoint,
    SourceKind,
)

ORIGIN = LatLon(39.0, -122.6)


def local_point(east_m: float, north_m: float) -> LatLon:
    """Coordinate east_m / north_m meters from the site origin."""
    return LatLon(
        ORIGIN.lat + north_m / DEFAULT_CONVERSION.meters_per_deg_lat,
        ORIGIN.lon + east_m / DEFAULT_CONVERSION.meters_per_deg_lon,
    )


def make_sample(
    east_m: float,
    north_m: float,
    values: Optional[Dict[str, Optional[float]]] = None,
    sample_id: str = "",
    kind: SourceKind = SourceKind.SURFACE,
) -> SamplePoint:
    p = local_point(east_m, north_m)
    return SamplePoint(
        lat=p.lat,
        lon=p.lon,
        analyte_values=values or {},
        source_tag=kind,
        sample_id=sample_id,
    )


@pytest.fixture
def at() -> Callable[[float, float], LatLon]:
    """Factory for coordinates relative to the site origin."""
    return local_point


@pytest.fixture
def sample() -> Callable[..., SamplePoint]:
    """Factory for samples relative to the site origin."""
    return make_sample


@pytest.fixture
def app_config() -> AppConfig:
    return AppConfig.from_dict(CONFIG)


@pytest.fixture
def mercury() -> AnalyteThreshold:
    """Dual threshold: PMB 1, ROD 204."""
    return AnalyteThreshold(low=1.0, high=204.0, unit="mg/kg", abbrev="Hg")


@pytest.fixture
def arsenic() -> AnalyteThreshold:
    """Single threshold: PMB = ROD = 23."""
    return AnalyteThreshold(low=23.0, high=23.0, unit="mg/kg", abbrev="As")


@pytest.fixture
def square_samples():
    """Four Mercury samples on the corners of a 100 m square plus a center one."""
    return [
        make_sample(0, 0, {"Mercury": 10.0}, "SS-1"),
        make_sample(100, 0, {"Mercury": 20.0}, "SS-2"),
        make_sample(100, 100, {"Mercury": 300.0}, "SS-3"),
        make_sample(0, 100, {"Mercury": 0.5}, "SS-4"),
        make_sample(50, 50, {"Mercury": None}, "SS-5"),
    ]


@pytest.fixture
def test_pit() -> DepthRecord:
    """Test pit 20 m east of the origin with three depth intervals."""
    p = local_point(20, 0)
    return DepthRecord(
        sample_id="TP-01",
        lat=p.lat,
        lon=p.lon,
        source_kind=SourceKind.TEST_PIT,
        intervals=(
            (DepthInterval(0.0, 1.0, "0-1 ft"), {"Mercury": 50.0}),
            (DepthInterval(1.0, 3.0, "1-3 ft"), {"Mercury": 250.0}),
            (DepthInterval(3.0, 6.0, "3-6 ft"), {"Mercury": None}),
        ),
    )
