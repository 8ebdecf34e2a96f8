"""Configuration package exports."""

from .loader import CONFIG_ENV_VAR, ConfigLocator, ConfigRepository
from .models import FeedsConfig, SiteConfig

__all__ = [
    "CONFIG_ENV_VAR",
    "ConfigLocator",
    "ConfigRepository",
    "FeedsConfig",
    "SiteConfig",
]
