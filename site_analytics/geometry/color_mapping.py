#!/usr/bin/env python3
"""
Threshold Color Mapping

ARCHITECTURAL OVERVIEW:
=======================
Responsibility: Map a concentration plus its two-tier regulatory threshold to
an RGB color via piecewise linear gradients. Shared leaf used by the contour
raster, hot-zone grid and depth profile.

Gradient stops:
    value <= 0            : green  (#72af26)
    value  = low (PMB)    : yellow (#f0d000)
    value  = high (ROD)   : orange (#f0932b)   dual-threshold only
    value >= overshoot    : red    (#d63e2a)

Overshoot point:
    single threshold (low == high): 2 * high
    dual threshold               : high + (high - low)

Callers must filter absent values before calling color_for().

Navigation Guide:
- Use VS Code outline (Ctrl+Shift+O) to jump between functions
"""

from typing import Dict, Optional

import numpy as np

from site_analytics.models.data_models import AnalyteThreshold, ColorRGB


# ===========================================================================
# COLOR STOPS
# ===========================================================================

GREEN = ColorRGB(114, 175, 38)
YELLOW = ColorRGB(240, 208, 0)
ORANGE = ColorRGB(240, 147, 43)
RED = ColorRGB(214, 62, 42)

# Discrete marker palette for category displays (profile rectangles, legends)
CATEGORY_COLORS: Dict[str, str] = {
    "low": "#72af26",
    "medium": "#f0932b",
    "high": "#d63e2a",
    "not_sampled": "#808080",
}


# ===========================================================================
# INTERPOLATION
# ===========================================================================


def lerp_color(c1: ColorRGB, c2: ColorRGB, t: float) -> ColorRGB:
    """
    Linearly interpolate between two colors.

    Args:
        c1: Start color
        c2: End color
        t: Interpolation factor, clamped to [0, 1]

    Returns:
        Interpolated color with rounded channels
    """
    t = max(0.0, min(1.0, t))
    return ColorRGB(
        _round_half_up(c1.r + (c2.r - c1.r) * t),
        _round_half_up(c1.g + (c2.g - c1.g) * t),
        _round_half_up(c1.b + (c2.b - c1.b) * t),
    )


def _round_half_up(x: float) -> int:
    # Half-up rounding; round() would round half to even
    return int(np.floor(x + 0.5))


# ===========================================================================
# CONTINUOUS GRADIENT
# ===========================================================================


def color_for(value: float, threshold: AnalyteThreshold) -> ColorRGB:
    """
    Map a concentration to a gradient color.

    Args:
        value: Concentration (must not be None/NaN)
        threshold: The analyte's PMB / ROD levels

    Returns:
        ColorRGB on the green -> yellow -> (orange) -> red gradient
    """
    if value <= 0:
        return GREEN

    low, high = threshold.low, threshold.high

    if threshold.is_single_threshold:
        if value < low:
            return lerp_color(GREEN, YELLOW, value / low)
        if high <= 0:
            return RED
        # Above threshold: yellow -> red over a range equal to the threshold
        return lerp_color(YELLOW, RED, min((value - high) / high, 1.0))

    if value < low:
        return lerp_color(GREEN, YELLOW, value / low)

    if value < high:
        return lerp_color(YELLOW, ORANGE, (value - low) / (high - low))

    # Above ROD: orange -> red over a range equal to (high - low)
    return lerp_color(ORANGE, RED, min((value - high) / (high - low), 1.0))


def _lerp_array(c1: ColorRGB, c2: ColorRGB, t: np.ndarray) -> np.ndarray:
    t = np.clip(t, 0.0, 1.0)[:, None]
    start = np.array(c1.as_tuple(), dtype=float)
    stop = np.array(c2.as_tuple(), dtype=float)
    return np.floor(start + (stop - start) * t + 0.5)


def color_array(values: np.ndarray, threshold: AnalyteThreshold) -> np.ndarray:
    """
    Vectorised color_for over a 1-D array of concentrations.

    Produces exactly the channels color_for would return per element.

    Args:
        values: 1-D float array (no NaN)
        threshold: The analyte's PMB / ROD levels

    Returns:
        uint8 array of shape (n, 3)
    """
    v = np.asarray(values, dtype=float)
    out = np.empty((v.size, 3), dtype=float)
    out[:] = GREEN.as_tuple()
    low, high = threshold.low, threshold.high

    positive = v > 0
    below_low = positive & (v < low)
    if below_low.any():
        out[below_low] = _lerp_array(GREEN, YELLOW, v[below_low] / low)

    with np.errstate(divide="ignore", invalid="ignore"):
        if threshold.is_single_threshold:
            above = positive & (v >= low)
            if above.any():
                t = np.minimum((v[above] - high) / high, 1.0)
                out[above] = _lerp_array(YELLOW, RED, t)
        else:
            span = high - low
            between = positive & (v >= low) & (v < high)
            if between.any():
                out[between] = _lerp_array(YELLOW, ORANGE, (v[between] - low) / span)
            above = positive & (v >= high)
            if above.any():
                t = np.minimum((v[above] - high) / span, 1.0)
                out[above] = _lerp_array(ORANGE, RED, t)

    return out.astype(np.uint8)


def overshoot_value(threshold: AnalyteThreshold) -> float:
    """Concentration at and beyond which the gradient is fully red."""
    if threshold.is_single_threshold:
        return 2.0 * threshold.high
    return threshold.high + (threshold.high - threshold.low)


# ===========================================================================
# DISCRETE CATEGORIES
# ===========================================================================


def category_for(value: Optional[float], threshold: AnalyteThreshold) -> str:
    """
    Classify a concentration into a display category.

    Returns:
        "not_sampled" for missing values, "high" above ROD,
        "medium" above PMB, otherwise "low"
    """
    if value is None:
        return "not_sampled"
    if threshold.exceeds_action_level(value):
        return "high"
    if threshold.exceeds_background(value):
        return "medium"
    return "low"


def category_color(category: str) -> str:
    """Hex color of a display category (unknown categories map to gray)."""
    return CATEGORY_COLORS.get(category, CATEGORY_COLORS["not_sampled"])


# ===========================================================================
# MODULE EXPORTS
# ===========================================================================

__all__ = [
    "CATEGORY_COLORS",
    "GREEN",
    "ORANGE",
    "RED",
    "YELLOW",
    "category_color",
    "category_for",
    "color_array",
    "color_for",
    "lerp_color",
    "overshoot_value",
]
