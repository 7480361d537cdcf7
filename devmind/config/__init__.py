"""Configuration package exports."""

from .loader import ConfigLocator, ConfigRepository
from .models import ClassifierConfig, EnrichmentConfig, GlobalConfig, StorageConfig

__all__ = [
    "ClassifierConfig",
    "ConfigLocator",
    "ConfigRepository",
    "EnrichmentConfig",
    "GlobalConfig",
    "StorageConfig",
]
