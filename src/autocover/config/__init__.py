"""Configuration module using Pydantic Settings.

Provides typed configuration with environment variable support.

Usage:
    from autocover.config import CoverSettings

    settings = CoverSettings(grid_size=50)
    options = settings.filter_options()
"""

from autocover.config.settings import CoverSettings, SeverityBonus

__all__ = [
    "CoverSettings",
    "SeverityBonus",
]
