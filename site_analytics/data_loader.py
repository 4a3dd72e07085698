#!/usr/bin/env python3
"""
Site Dataset Loader

ARCHITECTURAL OVERVIEW:
=======================
Responsibility: Turn raw dataset records (JSON documents or already-parsed
dicts) into the immutable SamplePoint / DepthRecord snapshots the analysis
modules consume.

Datasets:
1. samples2025    - current surface samples ({label, sampled, metals})
2. eaSamples      - historical surface samples ({id, mercury, arsenic, ...})
3. testPits2025   - multi-depth test pits ({id, depths: [...]})
4. soilBorings2025 - multi-depth soil borings ({id, depths: [...]})
5. planned        - proposed sampling points ({id, lat, lon})

Malformed records are skipped with a logged warning instead of aborting the
load; the first 10 problems per dataset are listed.

Navigation Guide:
- SiteDataset: loaded snapshot with convenience views
- parse_*: per-dataset record parsers (raise RecordValidationError)
- validate_dataset: filter a dataset through a parser
- load_site_dataset: read a combined JSON document
- samples_to_geodataframe: GeoDataFrame view for spatial joins / export

For Navigation: Use VS Code outline (Ctrl+Shift+O)
"""

import json
import logging
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple, Union

import geopandas as gpd
import pandas as pd
from shapely.geometry import Point

from site_analytics.models.data_models import DepthRecord, SamplePoint, SourceKind

logger = logging.getLogger(__name__)

# ═══════════════════════════════════════════════════════════════════════════
# 🔧 CONSTANTS
# ═══════════════════════════════════════════════════════════════════════════

CRS_WGS84 = "EPSG:4326"

# Dataset name -> accepted keys in a combined document
DATASET_KEYS: Dict[str, Tuple[str, ...]] = {
    "samples2025": ("samples2025", "samples_2025"),
    "eaSamples": ("eaSamples", "ea_samples"),
    "testPits2025": ("testPits2025", "test_pits_2025", "test_pits"),
    "soilBorings2025": ("soilBorings2025", "soil_borings_2025", "soil_borings"),
    "planned": ("planned", "planned_points"),
}

MAX_LOGGED_ERRORS = 10

DEFAULT_ANALYTES: Tuple[str, ...] = ("Mercury", "Arsenic", "Antimony", "Thallium")


class RecordValidationError(ValueError):
    """A dataset record is missing required fields."""

    def __init__(self, errors: List[str]):
        self.errors = errors
        super().__init__("; ".join(errors))


# ═══════════════════════════════════════════════════════════════════════════
# 📦 LOADED DATASET
# ═══════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class SiteDataset:
    """All datasets of one site, already validated."""

    surface_samples: Tuple[SamplePoint, ...] = ()
    historical_samples: Tuple[SamplePoint, ...] = ()
    test_pits: Tuple[DepthRecord, ...] = ()
    soil_borings: Tuple[DepthRecord, ...] = ()
    planned_points: Tuple[SamplePoint, ...] = ()
    unsampled_locations: Tuple[SamplePoint, ...] = ()

    @property
    def base_samples(self) -> List[SamplePoint]:
        """Sampled surface locations (current + historical)."""
        return list(self.surface_samples) + list(self.historical_samples)

    @property
    def depth_records(self) -> List[DepthRecord]:
        return list(self.test_pits) + list(self.soil_borings)

    def summary(self) -> Dict[str, int]:
        return {
            "surface_samples": len(self.surface_samples),
            "historical_samples": len(self.historical_samples),
            "test_pits": len(self.test_pits),
            "soil_borings": len(self.soil_borings),
            "planned_points": len(self.planned_points),
            "unsampled_locations": len(self.unsampled_locations),
        }


# ═══════════════════════════════════════════════════════════════════════════
# ✅ RECORD PARSERS
# ═══════════════════════════════════════════════════════════════════════════


def _is_number(value: Any) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and not math.isnan(value)
    )


def _coordinate_errors(record: Mapping[str, Any], index: int) -> List[str]:
    errors = []
    if not _is_number(record.get("lat")):
        errors.append(f"Item {index}: missing or invalid lat")
    if not _is_number(record.get("lon")):
        errors.append(f"Item {index}: missing or invalid lon")
    return errors


def parse_surface_sample(record: Mapping[str, Any], index: int = 0) -> SamplePoint:
    """
    Parse a current-program surface sample.

    Requires numeric lat/lon, a label and a boolean `sampled` flag.

    Raises:
        RecordValidationError: If required fields are missing or invalid
    """
    errors = _coordinate_errors(record, index)
    if not record.get("label"):
        errors.append(f"Item {index}: missing label")
    if not isinstance(record.get("sampled"), bool):
        errors.append(f"Item {index}: missing sampled flag")
    if errors:
        raise RecordValidationError(errors)

    return SamplePoint.from_dict(
        {
            "lat": record["lat"],
            "lon": record["lon"],
            "metals": record.get("metals") or {},
            "sample_id": record["label"],
        },
        default_kind=SourceKind.SURFACE,
    )


def parse_historical_sample(
    record: Mapping[str, Any],
    index: int = 0,
    analytes: Sequence[str] = DEFAULT_ANALYTES,
) -> SamplePoint:
    """
    Parse a historical (EA) surface sample.

    Results are stored as flat lower-case keys (`mercury`, `arsenic`, ...);
    a `metals` mapping is accepted as well.

    Raises:
        RecordValidationError: If lat/lon or id are missing
    """
    errors = _coordinate_errors(record, index)
    if not record.get("id"):
        errors.append(f"Item {index}: missing id")
    if errors:
        raise RecordValidationError(errors)

    values = dict(record.get("metals") or {})
    for analyte in analytes:
        if analyte not in values and analyte.lower() in record:
            values[analyte] = record[analyte.lower()]

    return SamplePoint.from_dict(
        {"lat": record["lat"], "lon": record["lon"], "metals": values, "id": record["id"]},
        default_kind=SourceKind.HISTORICAL,
    )


def make_depth_record_parser(
    kind: SourceKind,
) -> Callable[[Mapping[str, Any], int], DepthRecord]:
    """Parser for test pit / soil boring records of the given kind."""

    def parse(record: Mapping[str, Any], index: int = 0) -> DepthRecord:
        errors = _coordinate_errors(record, index)
        if not record.get("id"):
            errors.append(f"Item {index}: missing id")
        if errors:
            raise RecordValidationError(errors)
        try:
            return DepthRecord.from_dict(record, default_kind=kind)
        except (KeyError, TypeError, ValueError) as e:
            raise RecordValidationError([f"Item {index}: invalid depths ({e})"]) from e

    return parse


def parse_planned_point(record: Mapping[str, Any], index: int = 0) -> SamplePoint:
    """Parse a proposed sampling point (no results)."""
    errors = _coordinate_errors(record, index)
    if errors:
        raise RecordValidationError(errors)
    return SamplePoint(
        lat=float(record["lat"]),
        lon=float(record["lon"]),
        source_tag=SourceKind.PLANNED,
        sample_id=str(record.get("id", record.get("label", f"P-{index + 1}"))),
    )


# ═══════════════════════════════════════════════════════════════════════════
# 🔍 DATASET VALIDATION
# ═══════════════════════════════════════════════════════════════════════════


def validate_dataset(
    records: Any,
    dataset_name: str,
    parser: Callable[[Mapping[str, Any], int], Any],
) -> List[Any]:
    """
    Parse every record of a dataset, skipping invalid ones.

    Args:
        records: Raw dataset (expected to be a list of dicts)
        dataset_name: Name used in log messages
        parser: Record parser raising RecordValidationError

    Returns:
        Parsed records in input order
    """
    if not isinstance(records, list):
        logger.error(f"❌ Data validation: {dataset_name} is not a list")
        return []

    parsed = []
    all_errors: List[str] = []
    for index, record in enumerate(records):
        if not isinstance(record, Mapping):
            all_errors.append(f"Item {index}: not an object")
            continue
        try:
            parsed.append(parser(record, index))
        except RecordValidationError as e:
            all_errors.extend(e.errors)

    if all_errors:
        logger.warning(
            f"⚠️ Data validation warnings for {dataset_name} ({len(all_errors)} issues):"
        )
        for error in all_errors[:MAX_LOGGED_ERRORS]:
            logger.warning(f"   {error}")
        if len(all_errors) > MAX_LOGGED_ERRORS:
            logger.warning(f"   ... and {len(all_errors) - MAX_LOGGED_ERRORS} more")

    logger.info(f"   {dataset_name}: {len(parsed)}/{len(records)} entries valid")
    return parsed


# ═══════════════════════════════════════════════════════════════════════════
# 📂 DOCUMENT LOADING
# ═══════════════════════════════════════════════════════════════════════════


def _dataset(document: Mapping[str, Any], name: str) -> List[Any]:
    for key in DATASET_KEYS[name]:
        if key in document:
            return document[key]
    return []


def build_site_dataset(
    document: Mapping[str, Any], analytes: Sequence[str] = DEFAULT_ANALYTES
) -> SiteDataset:
    """
    Validate every dataset of a combined document.

    Surface samples with `sampled: false` are kept apart as unsampled
    locations and take no part in the analyses.
    """
    surface_entries = validate_dataset(
        _dataset(document, "samples2025"),
        "samples-2025",
        lambda r, i: (parse_surface_sample(r, i), r["sampled"]),
    )
    surface = tuple(s for s, sampled in surface_entries if sampled)
    unsampled = tuple(s for s, sampled in surface_entries if not sampled)

    historical = validate_dataset(
        _dataset(document, "eaSamples"),
        "ea-samples",
        lambda r, i: parse_historical_sample(r, i, analytes),
    )
    test_pits = validate_dataset(
        _dataset(document, "testPits2025"),
        "test-pits-2025",
        make_depth_record_parser(SourceKind.TEST_PIT),
    )
    soil_borings = validate_dataset(
        _dataset(document, "soilBorings2025"),
        "soil-borings-2025",
        make_depth_record_parser(SourceKind.SOIL_BORING),
    )
    planned = validate_dataset(_dataset(document, "planned"), "planned", parse_planned_point)

    return SiteDataset(
        surface_samples=surface,
        historical_samples=tuple(historical),
        test_pits=tuple(test_pits),
        soil_borings=tuple(soil_borings),
        planned_points=tuple(planned),
        unsampled_locations=unsampled,
    )


def load_site_dataset(
    source: Union[str, Path, Mapping[str, Any]],
    analytes: Sequence[str] = DEFAULT_ANALYTES,
) -> SiteDataset:
    """
    Load a combined site dataset.

    Args:
        source: Path to a JSON document, or an already-parsed document
        analytes: Analyte names used for historical flat keys

    Returns:
        SiteDataset

    Raises:
        FileNotFoundError: If the JSON path does not exist
        json.JSONDecodeError: If the file is not valid JSON
    """
    if isinstance(source, Mapping):
        document = source
    else:
        path = Path(source)
        logger.info(f"📂 Loading site data from: {path.name}")
        with open(path, "r", encoding="utf-8") as f:
            document = json.load(f)

    dataset = build_site_dataset(document, analytes)
    logger.info(f"✅ Site data loaded: {dataset.summary()}")
    return dataset


# ═══════════════════════════════════════════════════════════════════════════
# 🗺️ GEODATAFRAME VIEW
# ═══════════════════════════════════════════════════════════════════════════


def samples_to_geodataframe(
    samples: Sequence[SamplePoint], analytes: Optional[Sequence[str]] = None
) -> gpd.GeoDataFrame:
    """
    GeoDataFrame of samples in WGS84 with one column per analyte.

    Missing values are NaN. Analytes default to every analyte seen.
    """
    if analytes is None:
        seen: Dict[str, None] = {}
        for s in samples:
            for name in s.analyte_values:
                seen.setdefault(name, None)
        analytes = list(seen)

    rows = []
    for s in samples:
        row: Dict[str, Any] = {
            "sample_id": s.sample_id,
            "source_tag": s.source_tag.value,
            "depth_label": s.depth_interval.label if s.depth_interval else None,
        }
        for analyte in analytes:
            value = s.value(analyte)
            row[analyte] = float("nan") if value is None else value
        rows.append(row)

    columns = ["sample_id", "source_tag", "depth_label", *analytes]
    df = pd.DataFrame(rows, columns=columns)
    geometry = [Point(s.lon, s.lat) for s in samples]
    return gpd.GeoDataFrame(df, geometry=geometry, crs=CRS_WGS84)


# ═══════════════════════════════════════════════════════════════════════════
# 📦 MODULE EXPORTS
# ═══════════════════════════════════════════════════════════════════════════

__all__ = [
    "CRS_WGS84",
    "RecordValidationError",
    "SiteDataset",
    "build_site_dataset",
    "load_site_dataset",
    "make_depth_record_parser",
    "parse_historical_sample",
    "parse_planned_point",
    "parse_surface_sample",
    "samples_to_geodataframe",
    "validate_dataset",
]
