"""Configuration hierarchy — merges sources in priority order.

Precedence (later overrides earlier):
  1. Package defaults
  2. Global config   (~/.imgvariants/config.yaml)
  3. Project config   (./imgvariants.yaml)
  4. Environment variables (IMGVARIANTS_*)
  5. Runtime arguments
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml

from imgvariants.config.defaults import get_defaults

logger = logging.getLogger(__name__)

_GLOBAL_CONFIG_PATH = Path.home() / ".imgvariants" / "config.yaml"
_PROJECT_CONFIG_NAME = "imgvariants.yaml"

# Map of environment variables to config keys
_ENV_MAP: dict[str, str] = {
    "IMGVARIANTS_CACHE_DIR": "cache_dir",
    "IMGVARIANTS_PROJECT_ROOT": "project_root",
    "IMGVARIANTS_URL_PREFIX": "url_prefix",
    "IMGVARIANTS_MIN_SOURCE_WIDTH": "min_source_width",
    "IMGVARIANTS_WEBP_EXTENSIONS": "webp_extensions",
    "IMGVARIANTS_JPEG_QUALITY": "jpeg_quality",
    "IMGVARIANTS_WEBP_QUALITY": "webp_quality",
    "IMGVARIANTS_ENCODE_TIMEOUT": "encode_timeout",
    "IMGVARIANTS_CACHE_EXPIRY_SECONDS": "cache_expiry_seconds",
    "IMGVARIANTS_CACHE_DB_PATH": "cache_db_path",
    "IMGVARIANTS_CACHE_MEMORY_MB": "cache_memory_mb",
    "IMGVARIANTS_CACHE_DISK_MB": "cache_disk_mb",
    "IMGVARIANTS_CACHE_DISABLED": "cache_disabled",
    "IMGVARIANTS_NO_IMAGE_PATH": "no_image_path",
    "IMGVARIANTS_MAX_WORKERS": "max_workers",
    "IMGVARIANTS_LOG_LEVEL": "log_level",
}

# Keys that should be parsed as specific types
_TYPE_MAP: dict[str, type] = {
    "min_source_width": int,
    "jpeg_quality": int,
    "webp_quality": int,
    "encode_timeout": float,
    "cache_expiry_seconds": float,
    "cache_memory_mb": float,
    "cache_disk_mb": float,
    "max_workers": int,
}

# Boolean env var values
_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off", ""}


def load_config_hierarchy(**runtime_overrides: Any) -> dict[str, Any]:
    """Load and merge configuration from all sources.

    Returns a merged dict with the final resolved values.
    """
    config = get_defaults()

    # Layer 2: Global config
    global_cfg = _load_yaml_config(_GLOBAL_CONFIG_PATH)
    if global_cfg:
        config.update(global_cfg)

    # Layer 3: Project config (search from cwd upward)
    project_path = _find_project_config()
    if project_path:
        project_cfg = _load_yaml_config(project_path)
        if project_cfg:
            config.update(project_cfg)

    # Layer 4: Environment variables
    env_cfg = _load_env_vars()
    config.update(env_cfg)

    # Layer 5: Runtime arguments (highest priority)
    for key, value in runtime_overrides.items():
        if value is not None:
            config[key] = value

    return config


def _load_yaml_config(path: Path) -> dict[str, Any] | None:
    """Load a YAML config file if it exists.

    Accepts both a flat mapping and one nested under a ``variants`` key.
    """
    if not path.exists() or not path.is_file():
        return None
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
        if isinstance(data, dict):
            nested = data.get("variants")
            return nested if isinstance(nested, dict) else data
        logger.warning("Config file %s is not a mapping, ignoring", path)
    except (OSError, yaml.YAMLError) as e:
        logger.warning("Failed to load config %s: %s", path, e)
    return None


def _find_project_config() -> Path | None:
    """Search for imgvariants.yaml from cwd upward."""
    cwd = Path.cwd()
    for parent in [cwd, *cwd.parents]:
        candidate = parent / _PROJECT_CONFIG_NAME
        if candidate.exists():
            return candidate
    return None


def _load_env_vars() -> dict[str, Any]:
    """Read IMGVARIANTS_* environment variables."""
    result: dict[str, Any] = {}
    for env_key, config_key in _ENV_MAP.items():
        value = os.environ.get(env_key)
        if value is None:
            continue
        result[config_key] = _coerce_env_value(config_key, value)
    return result


def _coerce_env_value(key: str, value: str) -> Any:
    """Coerce an environment variable string to the appropriate type."""
    if key.endswith("_disabled"):
        return value.lower() in _TRUTHY

    target_type = _TYPE_MAP.get(key)
    if target_type:
        try:
            return target_type(value)
        except (ValueError, TypeError):
            logger.warning(
                "Cannot convert env var for '%s' to %s: %s", key, target_type.__name__, value
            )
            return value

    return value
