"""Configuration package exports."""

from .loader import ConfigLocator, ConfigRepository
from .models import FilterSource, UpdaterConfig

__all__ = [
    "ConfigLocator",
    "ConfigRepository",
    "FilterSource",
    "UpdaterConfig",
]
