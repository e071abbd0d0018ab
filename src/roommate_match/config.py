"""YAML configuration loader for scoring config."""

from pathlib import Path
from typing import Any

import yaml

from roommate_match.matching.scorer import DEFAULT_WEIGHTS
from roommate_match.models.pydantic_models import ScoringConfig


def _get_default_config_path() -> Path:
    """Get the default config path relative to project root."""
    return Path(__file__).parent.parent.parent / "config" / "scoring.yaml"


def _load_raw_config(path: Path | None = None) -> dict[str, Any]:
    """Load raw YAML config from path.

    Args:
        path: Path to YAML config file. If None, uses default config/scoring.yaml.

    Returns:
        Raw config dictionary.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        yaml.YAMLError: If YAML parsing fails.
    """
    if path is None:
        path = _get_default_config_path()

    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        raw_config: dict[str, Any] | None = yaml.safe_load(f)

    return raw_config if raw_config is not None else {}


def load_scoring_config(path: Path | None = None) -> ScoringConfig:
    """Load and validate scoring configuration from YAML.

    Args:
        path: Path to YAML config file. If None, uses default config/scoring.yaml.

    Returns:
        Validated ScoringConfig instance.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        yaml.YAMLError: If YAML parsing fails.
        ValueError: If a weight names an unknown criterion.
        ValidationError: If config doesn't match expected schema.
    """
    raw_config = _load_raw_config(path)

    weights = raw_config.get("weights") or {}
    unknown = set(weights) - set(DEFAULT_WEIGHTS)
    if unknown:
        raise ValueError(f"Unknown criteria in weights: {', '.join(sorted(unknown))}")

    return ScoringConfig(
        weights=weights,
        include_logistics=bool(raw_config.get("include_logistics", False)),
    )
