"""YAML config and resolution policy loading."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from imgvariants.config.schema import VariantsConfig
from imgvariants.types import ResolutionPolicy


def load_yaml(path: str | Path) -> dict[str, Any]:
    """Load any YAML file safely."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"YAML file not found: {path}")

    with open(path) as f:
        raw = yaml.safe_load(f)

    if not isinstance(raw, dict):
        raise ValueError(f"Expected YAML mapping, got {type(raw).__name__} in {path}")

    return raw


def load_policy_yaml(path: str | Path) -> ResolutionPolicy:
    """Load a resolution policy YAML file and return a validated ResolutionPolicy."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Policy YAML not found: {path}")

    with open(path) as f:
        raw = yaml.safe_load(f)

    if not isinstance(raw, dict) or "resolutions" not in raw:
        raise ValueError(f"Invalid policy YAML: missing top-level 'resolutions' key in {path}")

    return ResolutionPolicy(resolutions=raw["resolutions"])


def load_config_yaml(path: str | Path) -> VariantsConfig:
    """Load a config YAML file and return a validated VariantsConfig."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config YAML not found: {path}")

    with open(path) as f:
        raw = yaml.safe_load(f)

    if not isinstance(raw, dict) or "variants" not in raw:
        raise ValueError(f"Invalid config YAML: missing top-level 'variants' key in {path}")

    return VariantsConfig(**raw["variants"])
