"""YAML configuration loader with environment variable overrides.

Configuration is loaded in layers (later layers override earlier):

  1. config/config.yaml: static tuning defaults checked into the repo
  2. .env file: local developer overrides (not committed)
  3. Environment vars: set at deploy time

``load_config`` reads the YAML file first, then deep-merges the values
coming from :class:`Settings` on top.  Only the ``analysis`` section is
consumed (by the composition root); storage, limits and logging are read
straight from :class:`Settings`.
"""

from __future__ import annotations

from pathlib import Path

import yaml

from clipvault.config.settings import Settings


def load_config(path: str = "config/config.yaml", settings: Settings | None = None) -> dict:
    """Load YAML config and merge with environment-based Settings.

    Args:
        path: Path to the YAML configuration file.  A missing file yields
            the environment values only.
        settings: Settings to merge; a fresh ``Settings()`` when omitted.

    Returns:
        Fully resolved configuration dictionary.
    """
    config_path = Path(path)
    if config_path.exists():
        with open(config_path) as f:
            yaml_config = yaml.safe_load(f) or {}
    else:
        yaml_config = {}

    settings = settings or Settings()
    env_overrides = {
        "analysis": {
            "max_chars": settings.analysis_max_chars,
        },
    }

    _deep_merge(yaml_config, env_overrides)
    return yaml_config


def _deep_merge(base: dict, overrides: dict) -> None:
    """Recursively merge overrides into base dict, mutating base in place."""
    for key, value in overrides.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
