"""Variant generation — naming, single-variant generator and set builder."""

from imgvariants.variants.builder import VariantSetBuilder, resolve_extension, should_skip
from imgvariants.variants.generator import SourceRaster, VariantGenerator, read_source_image
from imgvariants.variants.naming import variant_base_name

__all__ = [
    "SourceRaster",
    "VariantGenerator",
    "VariantSetBuilder",
    "read_source_image",
    "resolve_extension",
    "should_skip",
    "variant_base_name",
]
