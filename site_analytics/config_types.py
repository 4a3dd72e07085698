"""
═══════════════════════════════════════════════════════════════════════════════
📋 UNIFIED CONFIGURATION TYPES
═══════════════════════════════════════════════════════════════════════════════

ARCHITECTURAL OVERVIEW
----------------------
Responsibility: Define all configuration dataclasses for the analytics engine.
Replaces ambient module-level state (current grid size, corridor width,
conversion constants) with typed, read-only config objects that are passed
explicitly into every engine call.

Usage:
    from site_analytics.config import CONFIG
    from site_analytics.config_types import AppConfig

    # Create once at application startup
    app_config = AppConfig.from_dict(CONFIG)

    # Pass the relevant section into each computation
    product = gap_grid(samples, grid_size_ft=100, grid=app_config.grid,
                       conv=app_config.coord_conversion)

For Navigation: Use VS Code outline (Ctrl+Shift+O)

NAVIGATION GUIDE
----------------
# ═════ 1. COORDINATE CONVERSION
# ═════ 2. CONTOUR CONFIGURATION
# ═════ 3. GRID CONFIGURATION
# ═════ 4. TRANSECT CONFIGURATION
# ═════ 5. BUFFER ZONE CONFIGURATION
# ═════ 6. PROFILE LAYOUT CONFIGURATION
# ═════ 7. FILE PATHS CONFIGURATION
# ═════ 8. APP CONFIG (MASTER FACADE)

═══════════════════════════════════════════════════════════════════════════════
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Any, List, Tuple
import logging

from site_analytics.models.data_models import AnalyteThreshold


# ═══════════════════════════════════════════════════════════════════════════════
# 📐 1. COORDINATE CONVERSION
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class CoordConversionConfig:
    """
    Fixed scale factors for the site-scale flat-earth approximation.

    Attributes:
        meters_per_deg_lat: Meters per degree of latitude.
        meters_per_deg_lon: Meters per degree of longitude at the site latitude.
        feet_to_meters: Meters per foot (0.3048).
        earth_radius_m: Sphere radius used by bearing/offset formulae.
    """

    meters_per_deg_lat: float = 111320.0
    meters_per_deg_lon: float = 86510.0
    feet_to_meters: float = 0.3048
    earth_radius_m: float = 6378137.0

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "CoordConversionConfig":
        """Create CoordConversionConfig from CONFIG['coord_conversion']."""
        return cls(
            meters_per_deg_lat=float(d.get("meters_per_deg_lat", 111320.0)),
            meters_per_deg_lon=float(d.get("meters_per_deg_lon", 86510.0)),
            feet_to_meters=float(d.get("feet_to_meters", 0.3048)),
            earth_radius_m=float(d.get("earth_radius_m", 6378137.0)),
        )

    @property
    def meters_to_feet(self) -> float:
        """Feet per meter (inverse of feet_to_meters)."""
        return 1.0 / self.feet_to_meters


# ═══════════════════════════════════════════════════════════════════════════════
# 🌈 2. CONTOUR CONFIGURATION
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class ContourConfig:
    """
    IDW raster settings.

    Attributes:
        cell_size_m: Physical raster cell size in meters.
        hull_buffer_m: Outward buffer applied to the sample hull for clipping.
        bounds_pad_deg: Degree pad added around the sample extents.
        max_cells_per_axis: Safety ceiling for rows and columns.
        min_points: Minimum valued samples needed to produce a surface.
        exact_distance_sq_m2: Squared distance under which the exact sample
            value is returned.
        batch_elements: Cell x sample distance evaluations per numpy batch.
        overlay_opacity: Opacity hint passed through to the renderer.
    """

    cell_size_m: float = 10.0
    hull_buffer_m: float = 30.0
    bounds_pad_deg: float = 0.0005
    max_cells_per_axis: int = 1000
    min_points: int = 3
    exact_distance_sq_m2: float = 1.0
    batch_elements: int = 4_000_000
    overlay_opacity: float = 0.5

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ContourConfig":
        """Create ContourConfig from CONFIG['contour'] dictionary."""
        return cls(
            cell_size_m=float(d.get("cell_size_m", 10.0)),
            hull_buffer_m=float(d.get("hull_buffer_m", 30.0)),
            bounds_pad_deg=float(d.get("bounds_pad_deg", 0.0005)),
            max_cells_per_axis=int(d.get("max_cells_per_axis", 1000)),
            min_points=int(d.get("min_points", 3)),
            exact_distance_sq_m2=float(d.get("exact_distance_sq_m2", 1.0)),
            batch_elements=int(d.get("batch_elements", 4_000_000)),
            overlay_opacity=float(d.get("overlay_opacity", 0.5)),
        )


# ═══════════════════════════════════════════════════════════════════════════════
# 🔲 3. GRID CONFIGURATION
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class GridConfig:
    """
    Gap / hot-zone grid settings.

    Attributes:
        size_ft: Default cell size in feet.
        min_size_ft: Lower clamp for the user-adjustable size.
        max_size_ft: Upper clamp for the user-adjustable size.
        step_ft: Increment of the size control.
        bounds_pad_deg: Degree pad added around the base sample extents.
        include_planned: Count planned points in the gap grid by default.
    """

    size_ft: int = 100
    min_size_ft: int = 25
    max_size_ft: int = 500
    step_ft: int = 25
    bounds_pad_deg: float = 0.0005
    include_planned: bool = True

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "GridConfig":
        """Create GridConfig from CONFIG['grid'] dictionary."""
        return cls(
            size_ft=int(d.get("size_ft", 100)),
            min_size_ft=int(d.get("min_size_ft", 25)),
            max_size_ft=int(d.get("max_size_ft", 500)),
            step_ft=int(d.get("step_ft", 25)),
            bounds_pad_deg=float(d.get("bounds_pad_deg", 0.0005)),
            include_planned=bool(d.get("include_planned", True)),
        )


# ═══════════════════════════════════════════════════════════════════════════════
# 📏 4. TRANSECT CONFIGURATION
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class TransectConfig:
    """
    Transect corridor settings.

    Attributes:
        corridor_width_ft: Default corridor half-width in feet.
        min_corridor_ft: Lower clamp for corridor half-width.
        max_corridor_ft: Upper clamp for corridor half-width.
        min_length_m: Shortest accepted transect.
        surface_depth_start_ft: Top of the nominal surface-sample band.
        surface_depth_end_ft: Bottom of the nominal surface-sample band.
        surface_depth_label: Display label for the surface band.
    """

    corridor_width_ft: float = 50.0
    min_corridor_ft: float = 10.0
    max_corridor_ft: float = 500.0
    min_length_m: float = 3.0
    surface_depth_start_ft: float = 0.0
    surface_depth_end_ft: float = 0.5
    surface_depth_label: str = "0-6 in"

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "TransectConfig":
        """Create TransectConfig from CONFIG['transect'] dictionary."""
        return cls(
            corridor_width_ft=float(d.get("corridor_width_ft", 50.0)),
            min_corridor_ft=float(d.get("min_corridor_ft", 10.0)),
            max_corridor_ft=float(d.get("max_corridor_ft", 500.0)),
            min_length_m=float(d.get("min_length_m", 3.0)),
            surface_depth_start_ft=float(d.get("surface_depth_start_ft", 0.0)),
            surface_depth_end_ft=float(d.get("surface_depth_end_ft", 0.5)),
            surface_depth_label=d.get("surface_depth_label", "0-6 in"),
        )


# ═══════════════════════════════════════════════════════════════════════════════
# ⭕ 5. BUFFER ZONE CONFIGURATION
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class BufferZoneConfig:
    """Exceedance buffer radius settings (feet)."""

    radius_ft: float = 50.0
    min_radius_ft: float = 25.0
    max_radius_ft: float = 200.0

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "BufferZoneConfig":
        """Create BufferZoneConfig from CONFIG['buffer_zones'] dictionary."""
        return cls(
            radius_ft=float(d.get("radius_ft", 50.0)),
            min_radius_ft=float(d.get("min_radius_ft", 25.0)),
            max_radius_ft=float(d.get("max_radius_ft", 200.0)),
        )


# ═══════════════════════════════════════════════════════════════════════════════
# 📊 6. PROFILE LAYOUT CONFIGURATION
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class ProfileLayoutConfig:
    """
    Pixel geometry of the depth-profile plot.

    The engine never draws; these values only drive the column placement
    and depth scaling handed to the renderer.
    """

    width_px: int = 960
    height_px: int = 520
    margin_top_px: int = 80
    margin_right_px: int = 50
    margin_bottom_px: int = 70
    margin_left_px: int = 75
    column_width_px: int = 24
    column_gap_px: int = 2
    min_rect_height_px: int = 8
    max_relax_passes: int = 5

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ProfileLayoutConfig":
        """Create ProfileLayoutConfig from CONFIG['profile_layout']."""
        defaults = cls()
        return cls(
            **{
                name: int(d.get(name, getattr(defaults, name)))
                for name in defaults.__dataclass_fields__
            }
        )

    @property
    def plot_left(self) -> float:
        return float(self.margin_left_px)

    @property
    def plot_right(self) -> float:
        return float(self.width_px - self.margin_right_px)

    @property
    def plot_top(self) -> float:
        return float(self.margin_top_px)

    @property
    def plot_bottom(self) -> float:
        return float(self.height_px - self.margin_bottom_px)

    @property
    def min_column_gap(self) -> float:
        """Minimum center-to-center spacing between profile columns."""
        return float(self.column_width_px + self.column_gap_px)


# ═══════════════════════════════════════════════════════════════════════════════
# 📁 7. FILE PATHS CONFIGURATION
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class FilePathsConfig:
    """
    File path configuration for inputs and outputs.

    Attributes:
        samples_json: Path to the combined sample dataset JSON document.
        output_dir: Directory for output files.
        log_dir: Directory for log files.
    """

    samples_json: str = "data/samples.json"
    output_dir: str = "Output"
    log_dir: str = "logs"

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "FilePathsConfig":
        """Create FilePathsConfig from CONFIG['file_paths'] dictionary."""
        return cls(
            samples_json=d.get("samples_json", "data/samples.json"),
            output_dir=d.get("output_dir", "Output"),
            log_dir=d.get("log_dir", "logs"),
        )

    def output_dir_path(self, workspace_root: Path) -> Path:
        """Get output directory resolved against workspace root."""
        return workspace_root / self.output_dir

    def log_dir_path(self, workspace_root: Path) -> Path:
        """Get log directory resolved against workspace root."""
        return workspace_root / self.log_dir


# ═══════════════════════════════════════════════════════════════════════════════
# 🏛️ 8. APP CONFIG (MASTER FACADE)
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class AppConfig:
    """
    Master configuration facade.

    Wraps every section of CONFIG in its typed dataclass. Engine functions
    take the individual sections as parameters; AppConfig only bundles them
    for the orchestrating caller.
    """

    coord_conversion: CoordConversionConfig = field(
        default_factory=CoordConversionConfig
    )
    thresholds: Dict[str, AnalyteThreshold] = field(default_factory=dict)
    tracked_analytes: Tuple[str, ...] = ()
    contour: ContourConfig = field(default_factory=ContourConfig)
    grid: GridConfig = field(default_factory=GridConfig)
    transect: TransectConfig = field(default_factory=TransectConfig)
    buffer_zones: BufferZoneConfig = field(default_factory=BufferZoneConfig)
    profile_layout: ProfileLayoutConfig = field(default_factory=ProfileLayoutConfig)
    file_paths: FilePathsConfig = field(default_factory=FilePathsConfig)
    log_level: str = "INFO"
    logger_name: str = "site_analytics"

    @classmethod
    def from_dict(cls, config: Dict[str, Any]) -> "AppConfig":
        """Create AppConfig from the master CONFIG dictionary."""
        thresholds = {
            name: AnalyteThreshold.from_dict(values)
            for name, values in config.get("thresholds", {}).items()
        }
        tracked: List[str] = list(config.get("tracked_analytes", thresholds.keys()))
        logging_cfg = config.get("logging", {})

        return cls(
            coord_conversion=CoordConversionConfig.from_dict(
                config.get("coord_conversion", {})
            ),
            thresholds=thresholds,
            tracked_analytes=tuple(tracked),
            contour=ContourConfig.from_dict(config.get("contour", {})),
            grid=GridConfig.from_dict(config.get("grid", {})),
            transect=TransectConfig.from_dict(config.get("transect", {})),
            buffer_zones=BufferZoneConfig.from_dict(config.get("buffer_zones", {})),
            profile_layout=ProfileLayoutConfig.from_dict(
                config.get("profile_layout", {})
            ),
            file_paths=FilePathsConfig.from_dict(config.get("file_paths", {})),
            log_level=str(logging_cfg.get("level", "INFO")).upper(),
            logger_name=logging_cfg.get("logger_name", "site_analytics"),
        )

    def get_threshold(self, analyte: str) -> AnalyteThreshold:
        """
        Look up the threshold for an analyte.

        Raises:
            KeyError: If no threshold is configured for the analyte.
        """
        if analyte not in self.thresholds:
            raise KeyError(f"No threshold configured for analyte '{analyte}'")
        return self.thresholds[analyte]

    @property
    def log_level_value(self) -> int:
        """Numeric logging level, falling back to INFO for unknown names."""
        return getattr(logging, self.log_level, logging.INFO)

    def abbreviations(self) -> Dict[str, str]:
        """Analyte name -> short chemical symbol."""
        return {name: t.abbrev for name, t in self.thresholds.items()}
