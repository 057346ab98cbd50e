"""Shared Pydantic models for imgvariants."""

from __future__ import annotations

from enum import StrEnum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator

DEFAULT_EXTENSION = "default"

# ── Enums ──


class VariantFamily(StrEnum):
    IMAGE = "image"
    THUMB = "thumb"

    @property
    def directory(self) -> str:
        return "thumbs" if self is VariantFamily.THUMB else "image_variants"

    @property
    def name_infix(self) -> str:
        return "-thumb" if self is VariantFamily.THUMB else ""


# ── Policy models ──


class ResolutionSpec(BaseModel):
    """One target size with an ordered extension preference list.

    A width or height of 0 is treated as unconstrained. ``"default"`` in
    ``extensions`` stands for the source image's own extension.
    """

    model_config = {"frozen": True}

    width: int | None = None
    height: int | None = None
    extensions: tuple[str, ...] = (DEFAULT_EXTENSION,)

    @field_validator("width", "height", mode="before")
    @classmethod
    def _normalize_dimension(cls, value: Any) -> int | None:
        if value is None or value == 0:
            return None
        value = int(value)
        if value < 0:
            raise ValueError(f"Dimension must be positive, got {value}")
        return value

    @field_validator("extensions", mode="before")
    @classmethod
    def _normalize_extensions(cls, value: Any) -> tuple[str, ...]:
        if isinstance(value, str):
            value = [value]
        normalized = tuple(normalize_extension(v) for v in value)
        if not normalized or not all(normalized):
            raise ValueError("At least one extension is required")
        return normalized

    @property
    def is_sized(self) -> bool:
        return self.width is not None or self.height is not None


class ResolutionPolicy(BaseModel):
    """Ordered resolution specs; order defines srcset order."""

    model_config = {"frozen": True}

    resolutions: tuple[ResolutionSpec, ...] = ()

    def __len__(self) -> int:
        return len(self.resolutions)

    def serialize(self) -> list[list[Any]]:
        """Stable structure for fingerprinting."""
        return [[r.width, r.height, list(r.extensions)] for r in self.resolutions]


# ── Runtime models ──


class SourceImage(BaseModel):
    """Read-only view of a source image for the duration of one build."""

    model_config = {"frozen": True}

    absolute_path: Path
    directory_path: Path
    base_name: str
    extension: str
    pixel_width: int
    pixel_height: int

    @property
    def file_name(self) -> str:
        return self.absolute_path.name

    @classmethod
    def from_path(cls, path: str | Path, width: int, height: int) -> SourceImage:
        path = Path(path).absolute()
        return cls(
            absolute_path=path,
            directory_path=path.parent,
            base_name=path.stem,
            extension=normalize_extension(path.suffix),
            pixel_width=width,
            pixel_height=height,
        )


class VariantDescriptor(BaseModel):
    """Reference to a generated or reused variant file."""

    model_config = {"frozen": True}

    relative_path: str
    width: int
    height: int
    extension: str


class VariantFailure(BaseModel):
    resolution: ResolutionSpec
    extension: str
    error_type: str
    message: str = ""


class BuildResult(BaseModel):
    descriptors: list[VariantDescriptor] = Field(default_factory=list)
    failures: list[VariantFailure] = Field(default_factory=list)
    fallback_used: bool = False


class VariantRequest(BaseModel):
    """Everything that affects a rendered variant set."""

    source_path: Path
    family: VariantFamily = VariantFamily.IMAGE
    alt: str = ""
    device_sizes: str = ""
    lazy_load: bool | None = None
    attributes: dict[str, str] = Field(default_factory=dict)
    caption: str | None = None
    supports_webp: bool = False


class VariantSet(BaseModel):
    """Plain data handed to the presentation layer."""

    descriptors: list[VariantDescriptor] = Field(default_factory=list)
    src: str = ""
    srcset: str = ""
    sizes: str = ""
    alt: str = ""
    lazy_load: bool | None = None
    classes: list[str] = Field(default_factory=list)
    attributes: dict[str, str] = Field(default_factory=dict)
    caption: str | None = None


def normalize_extension(extension: str) -> str:
    return extension.strip().lstrip(".").lower()
