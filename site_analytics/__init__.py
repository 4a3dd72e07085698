"""
Site Sampling Spatial Analytics

Turns geo-located sample measurements into interpolated contamination
surfaces, coverage / hot-zone grids, region statistics and transect depth
profiles.
"""

from site_analytics.main import run_site_analysis
from site_analytics.config import CONFIG

__all__ = ["run_site_analysis", "CONFIG"]
