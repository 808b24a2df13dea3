"""
config_loader.py
-----------------
Singleton config loader. Reads config.yaml once and caches it.
All modules read thresholds through the getters below.
"""

import os
import yaml
from typing import Any, Dict


_CONFIG_CACHE: Dict[str, Any] = {}


def load_config(config_path: str | None = None) -> Dict[str, Any]:
    """
    Load and cache the YAML configuration file.

    Args:
        config_path: Path to config.yaml. Defaults to config/ relative to this file.

    Returns:
        Full config dictionary.
    """
    global _CONFIG_CACHE

    if _CONFIG_CACHE:
        return _CONFIG_CACHE

    if config_path is None:
        config_path = os.path.join(os.path.dirname(__file__), "config.yaml")

    if not os.path.exists(config_path):
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, "r") as f:
        _CONFIG_CACHE = yaml.safe_load(f)

    return _CONFIG_CACHE


def _get_section(name: str) -> Any:
    config = load_config()
    if name not in config:
        raise KeyError(
            f"No config section '{name}'. "
            f"Available: {list(config.keys())}"
        )
    return config[name]


def get_pattern_analysis_config() -> Dict[str, Any]:
    """Returns the pattern_analysis block."""
    return _get_section("pattern_analysis")


def get_quality_tiers() -> Dict[str, Dict[str, float]]:
    """Returns quality tier boundaries, highest tier first."""
    return _get_section("quality_tiers")


def get_projection_config() -> Dict[str, Any]:
    """Returns the projection block."""
    return _get_section("projection")


def get_cycle_confidence_config() -> Dict[str, Any]:
    """Returns provenance factors and staleness decay settings."""
    return _get_section("cycle_confidence")


def get_confidence_messages() -> Dict[str, Any]:
    """Returns the user-facing confidence message table."""
    return _get_section("confidence_messages")


def get_pipeline_config() -> Dict[str, Any]:
    """Returns pipeline config."""
    return _get_section("pipeline")


def get_data_sources() -> list[str]:
    """Returns all configured provenance tags."""
    return list(get_cycle_confidence_config()["source_factors"].keys())


def reset_config() -> None:
    """Clears cached config. Useful for testing."""
    global _CONFIG_CACHE
    _CONFIG_CACHE = {}
