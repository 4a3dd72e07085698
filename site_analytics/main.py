#!/usr/bin/env python3
"""
Site Sampling Spatial Analytics - Main Entry Point

Batch run driven by CONFIG: load the site datasets, run every analysis for
every tracked analyte and write the products for an external map renderer.

Optional sections of the input document add ad hoc queries:
    "regions":   [{"name": "...", "vertices": [{"lat": .., "lon": ..}, ...]}]
    "transects": [{"name": "...", "a": {...}, "b": {...}, "corridor_width_ft": 50}]
    "comparisons": [{"name": "...", "a": "SS-1", "b": "EA-7"}]
    "filters": [{"name": "...", "text": "ss", "sources": ["SS"], "exceedance": "exceeds",
                 "analyte": "Mercury", "min_value": 1, "max_value": 500}]

Usage:
    python -m site_analytics.main
    python -m site_analytics.main path/to/samples.json
"""

import json
import logging
import sys
import time
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

# Fix Windows console encoding for emoji support
if sys.platform == "win32":
    sys.stdout.reconfigure(encoding="utf-8", errors="replace")
    sys.stderr.reconfigure(encoding="utf-8", errors="replace")

from site_analytics.analysis.buffer_zones import buffer_union_area_sq_ft, exceedance_buffers
from site_analytics.analysis.contour import collect_valued_points, interpolate
from site_analytics.analysis.grid_scanner import gap_grid, hot_zone_grid
from site_analytics.analysis.polygon_region import analyze, region_stats_to_frame
from site_analytics.analysis.profile_layout import layout_profile
from site_analytics.analysis.sample_query import (
    SampleFilter,
    compare_samples,
    comparison_to_frame,
    filter_samples,
)
from site_analytics.analysis.transect import (
    TransectTooShortError,
    collect_profile,
    create_transect,
)
from site_analytics.config import CONFIG
from site_analytics.config_types import AppConfig
from site_analytics.data_loader import SiteDataset, load_site_dataset
from site_analytics.exporters import (
    buffers_to_geojson,
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
from site_analytics.geometry.convex_hull import buffer_hull, convex_hull
from site_analytics.models.data_models import LatLon, SamplePoint

# ═══════════════════════════════════════════════════════════════════════════
# 🎯 MODULE-LEVEL CONFIG (Single Source of Truth)
# ═══════════════════════════════════════════════════════════════════════════
APP_CONFIG = AppConfig.from_dict(CONFIG)

# Config paths are resolved against the working directory
WORKSPACE_ROOT = Path.cwd()


# ═══════════════════════════════════════════════════════════════════════════
# 📋 LOGGING SETUP
# ═══════════════════════════════════════════════════════════════════════════


def setup_logging(config: AppConfig = APP_CONFIG) -> Tuple[logging.Logger, Path]:
    """Configure logging with file and console handlers.

    Handlers go on the package logger so every module logger propagates
    into the same run log.

    Returns:
        Tuple of (logger, run_log_folder); folder name is run_{MMDD}_{HHMM}
    """
    log_dir = config.file_paths.log_dir_path(WORKSPACE_ROOT)
    log_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%m%d_%H%M")
    run_log_folder = log_dir / f"run_{timestamp}"
    run_log_folder.mkdir(parents=True, exist_ok=True)

    log_path = run_log_folder / "main.log"

    logger = logging.getLogger(config.logger_name)
    logger.setLevel(config.log_level_value)
    logger.handlers.clear()

    # File handler
    fh = logging.FileHandler(log_path, encoding="utf-8")
    fh.setLevel(config.log_level_value)
    fh.setFormatter(
        logging.Formatter(
            "%(asctime)s | %(levelname)-8s | %(message)s", datefmt="%Y-%m-%d %H:%M:%S"
        )
    )

    # Console handler
    ch = logging.StreamHandler(sys.stdout)
    ch.setLevel(config.log_level_value)
    ch.setFormatter(logging.Formatter("%(message)s"))

    logger.addHandler(fh)
    logger.addHandler(ch)

    return logger, run_log_folder


# ═══════════════════════════════════════════════════════════════════════════
# 📂 QUERY PARSING
# ═══════════════════════════════════════════════════════════════════════════


def _region_requests(document: Mapping[str, Any]) -> List[Tuple[str, List[LatLon]]]:
    """(name, vertices) for every polygon query in the document."""
    requests = []
    for i, region in enumerate(document.get("regions") or [], start=1):
        name = region.get("name") or f"region_{i}"
        vertices = [LatLon.from_dict(v) for v in region.get("vertices", [])]
        requests.append((name, vertices))
    return requests


def _transect_requests(
    document: Mapping[str, Any],
) -> List[Tuple[str, LatLon, LatLon, Optional[float]]]:
    """(name, a, b, corridor_width_ft) for every transect query."""
    requests = []
    for i, t in enumerate(document.get("transects") or [], start=1):
        name = t.get("name") or f"transect_{i}"
        requests.append(
            (name, LatLon.from_dict(t["a"]), LatLon.from_dict(t["b"]), t.get("corridor_width_ft"))
        )
    return requests


def _comparison_requests(document: Mapping[str, Any]) -> List[Tuple[str, str, str]]:
    """(name, id_a, id_b) for every two-sample comparison."""
    requests = []
    for i, c in enumerate(document.get("comparisons") or [], start=1):
        name = c.get("name") or f"comparison_{i}"
        requests.append((name, str(c["a"]), str(c["b"])))
    return requests


def _filter_requests(document: Mapping[str, Any]) -> List[Tuple[str, SampleFilter]]:
    """(name, filter) for every sample search."""
    requests = []
    for i, f in enumerate(document.get("filters") or [], start=1):
        name = f.get("name") or f"filter_{i}"
        requests.append((name, SampleFilter.from_dict(f)))
    return requests


# ═══════════════════════════════════════════════════════════════════════════
# 🔬 ANALYSIS PHASES
# ═══════════════════════════════════════════════════════════════════════════


def _run_site_wide(
    dataset: SiteDataset, output_dir: Path, config: AppConfig, logger: logging.Logger
) -> Dict[str, Any]:
    """Gap grid, sample hull and per-analyte surfaces, hot zones and buffers."""
    summary: Dict[str, Any] = {"analytes": {}}
    base = dataset.base_samples

    gaps = gap_grid(
        base,
        dataset.planned_points,
        grid=config.grid,
        conv=config.coord_conversion,
    )
    write_geojson(grid_to_geojson(gaps), output_dir / "gap_grid.geojson")
    summary["gap_grid"] = gaps.category_counts()

    hull = convex_hull(base)
    write_geojson(
        hull_to_geojson(hull, {"samples": len(base)}), output_dir / "sample_hull.geojson"
    )

    for analyte in config.tracked_analytes:
        threshold = config.get_threshold(analyte)
        logger.info(f"\n🧪 {analyte} (PMB {threshold.low:g} / ROD {threshold.high:g} {threshold.unit})")
        analyte_dir = output_dir / analyte.lower()

        raster = interpolate(
            base, analyte, threshold, config.contour, config.coord_conversion
        )
        write_json(
            raster_to_dict(raster, config.contour.overlay_opacity),
            analyte_dir / "contour.json",
            indent=None,
        )
        if raster is not None:
            clip = buffer_hull(
                convex_hull(collect_valued_points(base, analyte)),
                config.contour.hull_buffer_m,
                config.coord_conversion,
            )
            write_geojson(hull_to_geojson(clip), analyte_dir / "contour_clip.geojson")

        hot = hot_zone_grid(
            base, analyte, threshold, grid=config.grid, conv=config.coord_conversion
        )
        write_geojson(grid_to_geojson(hot), analyte_dir / "hot_zone_grid.geojson")

        zones = exceedance_buffers(
            base,
            analyte,
            threshold,
            config=config.buffer_zones,
            conv=config.coord_conversion,
        )
        write_geojson(
            buffers_to_geojson(zones, config.coord_conversion),
            analyte_dir / "exceedance_buffers.geojson",
        )

        summary["analytes"][analyte] = {
            "contour_cells": raster.filled_cells if raster is not None else 0,
            "hot_zone": hot.category_counts(),
            "exceedances": len(zones),
            "buffer_area_sq_ft": round(
                buffer_union_area_sq_ft(zones, config.coord_conversion), 1
            ),
        }

    return summary


def _run_regions(
    requests: List[Tuple[str, List[LatLon]]],
    dataset: SiteDataset,
    output_dir: Path,
    config: AppConfig,
) -> Dict[str, Any]:
    results = {}
    for name, vertices in requests:
        region = analyze(
            vertices,
            dataset.base_samples,
            config.thresholds,
            config.tracked_analytes,
            config.coord_conversion,
        )
        write_geojson(region_to_geojson(vertices, region), output_dir / f"{name}.geojson")
        write_csv(region_stats_to_frame(region, config.thresholds), output_dir / f"{name}.csv")
        results[name] = region.as_dict()
    return results


def _run_transects(
    requests: List[Tuple[str, LatLon, LatLon, Optional[float]]],
    dataset: SiteDataset,
    output_dir: Path,
    config: AppConfig,
    logger: logging.Logger,
) -> Dict[str, Any]:
    results: Dict[str, Any] = {}
    for name, a, b, width_ft in requests:
        try:
            transect = create_transect(a, b, width_ft, config.transect, config.coord_conversion)
        except TransectTooShortError as e:
            logger.warning(f"   ⚠️ {name} skipped: {e}")
            results[name] = {"rejected": str(e)}
            continue

        per_analyte = {}
        for analyte in config.tracked_analytes:
            profile = collect_profile(
                transect,
                dataset.base_samples,
                dataset.depth_records,
                analyte,
                config=config.transect,
                conv=config.coord_conversion,
            )
            layout = layout_profile(
                profile, config.get_threshold(analyte), config.profile_layout
            )
            stem = output_dir / name / analyte.lower()
            write_geojson(
                profile_to_geojson(profile, config.coord_conversion),
                stem.with_suffix(".geojson"),
            )
            write_csv(profile_to_frame(profile), stem.with_suffix(".csv"))
            per_analyte[analyte] = {
                "intervals": len(profile.intervals),
                "locations": layout.location_count,
                "max_depth_ft": layout.max_depth_ft,
            }
        results[name] = per_analyte
    return results


def _run_comparisons(
    requests: List[Tuple[str, str, str]],
    dataset: SiteDataset,
    output_dir: Path,
    config: AppConfig,
    logger: logging.Logger,
) -> Dict[str, Any]:
    by_id: Dict[str, SamplePoint] = {}
    for s in dataset.base_samples:
        by_id.setdefault(s.sample_id, s)

    results: Dict[str, Any] = {}
    for name, id_a, id_b in requests:
        missing = [i for i in (id_a, id_b) if i not in by_id]
        if missing:
            logger.warning(f"   ⚠️ {name} skipped: unknown sample {', '.join(missing)}")
            results[name] = {"rejected": f"unknown sample {', '.join(missing)}"}
            continue
        try:
            comparison = compare_samples(
                by_id[id_a], by_id[id_b], config.thresholds, config.coord_conversion
            )
        except ValueError as e:
            logger.warning(f"   ⚠️ {name} skipped: {e}")
            results[name] = {"rejected": str(e)}
            continue
        write_csv(comparison_to_frame(comparison), output_dir / f"{name}.csv")
        results[name] = {
            "distance_ft": round(comparison.distance_ft, 1),
            "exceedances_a": [r.analyte for r in comparison.rows if r.exceeds_a],
            "exceedances_b": [r.analyte for r in comparison.rows if r.exceeds_b],
        }
    return results


def _run_filters(
    requests: List[Tuple[str, SampleFilter]], dataset: SiteDataset, config: AppConfig
) -> Dict[str, Any]:
    results = {}
    for name, query in requests:
        matches = filter_samples(dataset.base_samples, query, config.thresholds)
        results[name] = {
            "matches": len(matches),
            "sample_ids": [s.sample_id for s in matches],
        }
    return results


# ═══════════════════════════════════════════════════════════════════════════
# 🚀 MAIN RUN
# ═══════════════════════════════════════════════════════════════════════════


def run_site_analysis(
    samples_path: Optional[Path] = None,
    output_dir: Optional[Path] = None,
    config: AppConfig = APP_CONFIG,
) -> Dict[str, Any]:
    """
    Run every analysis over the configured site dataset.

    Args:
        samples_path: Combined dataset JSON (defaults to config file path)
        output_dir: Output folder (defaults to config output_dir)
        config: Typed configuration

    Returns:
        Summary dict (also written to summary.json)
    """
    logger, run_log_folder = setup_logging(config)

    logger.info("=" * 60)
    logger.info("🎯 Site Sampling Spatial Analytics")
    logger.info("=" * 60)
    logger.info(f"   Log folder: {run_log_folder}")

    samples_path = Path(samples_path or WORKSPACE_ROOT / config.file_paths.samples_json)
    output_dir = Path(output_dir or config.file_paths.output_dir_path(WORKSPACE_ROOT))
    logger.info(f"   Grid size: {config.grid.size_ft} ft")
    logger.info(f"   Corridor: ±{config.transect.corridor_width_ft:g} ft")
    logger.info(f"   Analytes: {', '.join(config.tracked_analytes)}")

    total_start = time.perf_counter()

    try:
        with open(samples_path, "r", encoding="utf-8") as f:
            document = json.load(f)
        dataset = load_site_dataset(document, config.tracked_analytes)

        summary: Dict[str, Any] = {"datasets": dataset.summary()}
        summary.update(_run_site_wide(dataset, output_dir, config, logger))

        regions = _region_requests(document)
        if regions:
            logger.info(f"\n📐 Analyzing {len(regions)} regions...")
            summary["regions"] = _run_regions(regions, dataset, output_dir / "regions", config)

        transects = _transect_requests(document)
        if transects:
            logger.info(f"\n📏 Profiling {len(transects)} transects...")
            summary["transects"] = _run_transects(
                transects, dataset, output_dir / "transects", config, logger
            )

        comparisons = _comparison_requests(document)
        if comparisons:
            logger.info(f"\n🔀 Comparing {len(comparisons)} sample pairs...")
            summary["comparisons"] = _run_comparisons(
                comparisons, dataset, output_dir / "comparisons", config, logger
            )

        filters = _filter_requests(document)
        if filters:
            logger.info(f"\n🔍 Running {len(filters)} sample filters...")
            summary["filters"] = _run_filters(filters, dataset, config)

        elapsed = time.perf_counter() - total_start
        summary["elapsed_s"] = round(elapsed, 2)
        write_json(summary, output_dir / "summary.json")

        logger.info("=" * 60)
        logger.info(f"✅ Analysis complete in {elapsed:.1f}s → {output_dir}")
        logger.info("=" * 60)
        return summary

    except Exception as e:
        logger.error(f"❌ Analysis failed: {str(e)}")
        import traceback

        logger.error(traceback.format_exc())
        raise


# ═══════════════════════════════════════════════════════════════════════════
# 🚀 ENTRY POINT
# ═══════════════════════════════════════════════════════════════════════════


if __name__ == "__main__":
    run_site_analysis(Path(sys.argv[1]) if len(sys.argv) > 1 else None)
