"""Pydantic model for variant generation configuration."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator

from imgvariants.config import defaults
from imgvariants.errors.exceptions import ConfigurationError, DirectoryError
from imgvariants.types import ResolutionPolicy, VariantFamily, normalize_extension


class VariantsConfig(BaseModel):
    """Resolved settings for one ImageVariants instance.

    Resolution policies accept either a list of specs or a mapping with a
    ``resolutions`` key, so YAML files can use the short form.
    """

    cache_dir: Path | None = None
    project_root: Path | None = None
    url_prefix: str = defaults.DEFAULT_URL_PREFIX

    image_resolutions: ResolutionPolicy | None = None
    thumb_resolutions: ResolutionPolicy | None = None

    default_lazy_load: bool | None = None
    default_sizes: str = defaults.DEFAULT_SIZES
    default_thumb_sizes: str = defaults.DEFAULT_THUMB_SIZES

    min_source_width: int = defaults.DEFAULT_MIN_SOURCE_WIDTH
    webp_extensions: list[str] = Field(
        default_factory=lambda: list(defaults.DEFAULT_WEBP_EXTENSIONS)
    )
    jpeg_quality: int = defaults.DEFAULT_JPEG_QUALITY
    webp_quality: int = defaults.DEFAULT_WEBP_QUALITY
    encode_timeout: float | None = defaults.DEFAULT_ENCODE_TIMEOUT

    cache_expiry_seconds: float = defaults.DEFAULT_CACHE_EXPIRY_SECONDS
    cache_sliding: bool = defaults.DEFAULT_CACHE_SLIDING
    cache_db_path: Path | None = None
    cache_memory_mb: float = defaults.DEFAULT_CACHE_MEMORY_MB
    cache_disk_mb: float = defaults.DEFAULT_CACHE_DISK_MB
    cache_disabled: bool = defaults.DEFAULT_CACHE_DISABLED

    no_image_path: Path | None = None
    max_workers: int = defaults.DEFAULT_MAX_WORKERS

    @field_validator("image_resolutions", "thumb_resolutions", mode="before")
    @classmethod
    def _coerce_policy(cls, value: Any) -> Any:
        if isinstance(value, list):
            return {"resolutions": value}
        return value

    @field_validator("webp_extensions", mode="before")
    @classmethod
    def _coerce_webp_extensions(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.split(",")
        return [normalize_extension(v) for v in value]

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> VariantsConfig:
        """Build from a merged hierarchy dict, ignoring unknown keys."""
        known = {k: v for k, v in data.items() if k in cls.model_fields}
        return cls(**known)

    def require_cache_dir(self) -> Path:
        if self.cache_dir is None:
            raise DirectoryError("Images variants cache directory is not set")
        return self.cache_dir

    def policy_for(self, family: VariantFamily) -> ResolutionPolicy:
        policy = (
            self.thumb_resolutions if family is VariantFamily.THUMB else self.image_resolutions
        )
        if policy is None:
            label = "thumb" if family is VariantFamily.THUMB else "image"
            raise ConfigurationError(
                f"No {label} resolutions defined", setting=f"{label}_resolutions"
            )
        return policy

    def sizes_for(self, family: VariantFamily) -> str:
        return self.default_thumb_sizes if family is VariantFamily.THUMB else self.default_sizes

    def rendering_settings(self) -> dict[str, Any]:
        """Settings that change generated files or rendered artifacts."""
        return {
            "url_prefix": self.url_prefix,
            "min_source_width": self.min_source_width,
            "webp_extensions": sorted(self.webp_extensions),
            "jpeg_quality": self.jpeg_quality,
            "webp_quality": self.webp_quality,
        }
