"""Configuration module: exports Settings and load_config."""

from clipvault.config.loader import load_config
from clipvault.config.settings import Settings

__all__ = ["Settings", "load_config"]
