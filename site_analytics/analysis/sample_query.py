#!/usr/bin/env python3
"""
Sample Comparison and Filtering

ARCHITECTURAL OVERVIEW:
=======================
Responsibility: Answer point queries against the sample snapshot, either
side by side for two samples or as a filtered subset of all samples.

Operations:
1. compare_samples(): planar distance plus per-analyte values, ROD flags
   and difference (B minus A). Thresholded analytes come first in
   threshold order, then any other analyte either sample carries.
2. comparison_to_frame(): tabular form for reports
3. matches_filter() / filter_samples(): id text search, source kinds,
   exceedance state and an inclusive value range for one analyte

A filter left at its defaults matches every sample.

Navigation Guide:
- Use VS Code outline (Ctrl+Shift+O) to jump between functions
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional, Tuple

import pandas as pd

from site_analytics.config_types import CoordConversionConfig
from site_analytics.geometry.coordinate_math import DEFAULT_CONVERSION, meters_between
from site_analytics.models.data_models import AnalyteThreshold, SamplePoint, SourceKind

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════════
# 🔀 SIDE-BY-SIDE COMPARISON
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class AnalyteComparison:
    """One analyte row of a two-sample comparison."""

    analyte: str
    value_a: Optional[float]
    value_b: Optional[float]
    exceeds_a: bool = False
    exceeds_b: bool = False
    rod: Optional[float] = None

    @property
    def difference(self) -> Optional[float]:
        """B minus A; None unless both values are defined."""
        if self.value_a is None or self.value_b is None:
            return None
        return self.value_b - self.value_a

    @property
    def is_thresholded(self) -> bool:
        return self.rod is not None

    def as_dict(self) -> Dict[str, Any]:
        return {
            "analyte": self.analyte,
            "value_a": self.value_a,
            "value_b": self.value_b,
            "exceeds_a": self.exceeds_a,
            "exceeds_b": self.exceeds_b,
            "rod": self.rod,
            "difference": self.difference,
        }


@dataclass(frozen=True)
class SampleComparison:
    """Two samples, the distance between them and their analyte rows."""

    sample_a: SamplePoint
    sample_b: SamplePoint
    distance_m: float
    distance_ft: float
    rows: Tuple[AnalyteComparison, ...] = ()

    def row(self, analyte: str) -> AnalyteComparison:
        for r in self.rows:
            if r.analyte == analyte:
                return r
        raise KeyError(analyte)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "sample_a": self.sample_a.as_dict(),
            "sample_b": self.sample_b.as_dict(),
            "distance_m": self.distance_m,
            "distance_ft": self.distance_ft,
            "rows": [r.as_dict() for r in self.rows],
        }


def compare_samples(
    sample_a: SamplePoint,
    sample_b: SamplePoint,
    thresholds: Mapping[str, AnalyteThreshold],
    conv: CoordConversionConfig = DEFAULT_CONVERSION,
) -> SampleComparison:
    """
    Compare two samples analyte by analyte.

    Args:
        sample_a: First sample
        sample_b: Second sample
        thresholds: Analyte -> threshold; these analytes are always listed
            and flagged against ROD
        conv: Scale constants for the distance

    Returns:
        SampleComparison with thresholded analytes first, then the other
        analytes either sample carries in name order

    Raises:
        ValueError: If both arguments are the same sample
    """
    if sample_a.sample_id and sample_a.sample_id == sample_b.sample_id:
        raise ValueError(f"Cannot compare sample {sample_a.sample_id} with itself")

    rows: List[AnalyteComparison] = []
    for analyte, threshold in thresholds.items():
        value_a = sample_a.value(analyte)
        value_b = sample_b.value(analyte)
        rows.append(
            AnalyteComparison(
                analyte=analyte,
                value_a=value_a,
                value_b=value_b,
                exceeds_a=threshold.exceeds_action_level(value_a),
                exceeds_b=threshold.exceeds_action_level(value_b),
                rod=threshold.high,
            )
        )

    others = (set(sample_a.analyte_values) | set(sample_b.analyte_values)) - set(thresholds)
    for analyte in sorted(others):
        rows.append(
            AnalyteComparison(
                analyte=analyte,
                value_a=sample_a.value(analyte),
                value_b=sample_b.value(analyte),
            )
        )

    meters = meters_between(sample_a.location, sample_b.location, conv)
    logger.info(
        f"🔀 Compared {sample_a.sample_id or '?'} with {sample_b.sample_id or '?'}: "
        f"{meters * conv.meters_to_feet:.1f} ft apart, {len(rows)} analytes"
    )

    return SampleComparison(
        sample_a=sample_a,
        sample_b=sample_b,
        distance_m=meters,
        distance_ft=meters * conv.meters_to_feet,
        rows=tuple(rows),
    )


def comparison_to_frame(comparison: SampleComparison) -> pd.DataFrame:
    """One-row-per-analyte table with both values, ROD flags and difference."""
    columns = ["analyte", "value_a", "value_b", "exceeds_a", "exceeds_b", "rod", "difference"]
    return pd.DataFrame([r.as_dict() for r in comparison.rows], columns=columns)


# ═══════════════════════════════════════════════════════════════════════════════
# 🔍 SEARCH AND FILTER
# ═══════════════════════════════════════════════════════════════════════════════


class ExceedanceFilter(Enum):
    """Exceedance state a sample must be in to match."""

    ALL = "all"
    EXCEEDS = "exceeds"  # Above ROD for at least one thresholded analyte
    BELOW = "below"  # Above ROD for none

    @classmethod
    def from_string(cls, s: str) -> "ExceedanceFilter":
        """Convert a value or member name, with fallback to ALL."""
        for member in cls:
            if member.value == str(s).lower() or member.name == str(s).upper():
                return member
        return cls.ALL


@dataclass(frozen=True)
class SampleFilter:
    """
    Criteria for narrowing the sample snapshot.

    Usage Examples:
    ```python
    query = SampleFilter(text="ss-1", exceedance=ExceedanceFilter.EXCEEDS)
    hits = filter_samples(samples, query, config.thresholds)
    ```

    The value range only applies when analyte is set; samples without a
    value for that analyte then never match.
    """

    text: str = ""
    sources: Optional[FrozenSet[SourceKind]] = None
    exceedance: ExceedanceFilter = ExceedanceFilter.ALL
    analyte: Optional[str] = None
    min_value: Optional[float] = None
    max_value: Optional[float] = None

    @property
    def has_value_range(self) -> bool:
        return self.analyte is not None and (
            self.min_value is not None or self.max_value is not None
        )

    @property
    def is_active(self) -> bool:
        """True when any criterion narrows the result."""
        return bool(
            self.text.strip()
            or self.sources is not None
            or self.exceedance is not ExceedanceFilter.ALL
            or self.has_value_range
        )

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "SampleFilter":
        """Build from a query dict; unknown or empty entries keep the defaults."""
        sources = d.get("sources")
        min_value = d.get("min_value")
        max_value = d.get("max_value")
        return cls(
            text=str(d.get("text", "") or ""),
            sources=(
                frozenset(SourceKind.from_string(s) for s in sources)
                if sources
                else None
            ),
            exceedance=ExceedanceFilter.from_string(d.get("exceedance", "all")),
            analyte=d.get("analyte") or None,
            min_value=float(min_value) if min_value is not None else None,
            max_value=float(max_value) if max_value is not None else None,
        )


def has_exceedance(
    sample: SamplePoint, thresholds: Mapping[str, AnalyteThreshold]
) -> bool:
    """True when any thresholded analyte is above its ROD level."""
    return any(t.exceeds_action_level(sample.value(a)) for a, t in thresholds.items())


def matches_filter(
    sample: SamplePoint,
    query: SampleFilter,
    thresholds: Mapping[str, AnalyteThreshold],
) -> bool:
    """Check one sample against every criterion of the filter."""
    needle = query.text.strip().lower()
    if needle and needle not in sample.sample_id.lower():
        return False

    if query.sources is not None and sample.source_tag not in query.sources:
        return False

    if query.exceedance is not ExceedanceFilter.ALL:
        exceeds = has_exceedance(sample, thresholds)
        if exceeds != (query.exceedance is ExceedanceFilter.EXCEEDS):
            return False

    if query.has_value_range:
        value = sample.value(query.analyte)
        if value is None:
            return False
        if query.min_value is not None and value < query.min_value:
            return False
        if query.max_value is not None and value > query.max_value:
            return False

    return True


def filter_samples(
    samples: Iterable[SamplePoint],
    query: SampleFilter,
    thresholds: Mapping[str, AnalyteThreshold],
) -> List[SamplePoint]:
    """
    Samples matching the filter, in input order.

    Args:
        samples: Sample snapshot (not mutated)
        query: Filter criteria
        thresholds: Analyte -> threshold for the exceedance criterion

    Returns:
        Matching samples
    """
    pool = list(samples)
    matches = [s for s in pool if matches_filter(s, query, thresholds)]
    if query.is_active:
        logger.debug(f"🔍 Filter matched {len(matches)} of {len(pool)} samples")
    return matches


# ═══════════════════════════════════════════════════════════════════════════════
# 📦 MODULE EXPORTS
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = [
    "AnalyteComparison",
    "ExceedanceFilter",
    "SampleComparison",
    "SampleFilter",
    "compare_samples",
    "comparison_to_frame",
    "filter_samples",
    "has_exceedance",
    "matches_filter",
]
