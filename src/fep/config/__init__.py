"""Configuration package."""

from fep.config.settings import EnrichmentConfig, Settings

__all__ = ["EnrichmentConfig", "Settings"]
