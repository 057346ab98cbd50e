"""imgvariants — responsive image variant generation with freshness-checked caching."""

from imgvariants.config.schema import VariantsConfig
from imgvariants.core import ImageVariants, build_variants, variant_set
from imgvariants.types import (
    BuildResult,
    ResolutionPolicy,
    ResolutionSpec,
    SourceImage,
    VariantDescriptor,
    VariantFamily,
    VariantRequest,
    VariantSet,
)

__version__ = "0.1.0"

__all__ = [
    "BuildResult",
    "ImageVariants",
    "ResolutionPolicy",
    "ResolutionSpec",
    "SourceImage",
    "VariantDescriptor",
    "VariantFamily",
    "VariantRequest",
    "VariantSet",
    "VariantsConfig",
    "build_variants",
    "variant_set",
]
