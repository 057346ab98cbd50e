"""Variant file naming."""

from __future__ import annotations

from imgvariants.types import VariantFamily


def variant_base_name(
    base_name: str,
    family: VariantFamily = VariantFamily.IMAGE,
    width: int | None = None,
    height: int | None = None,
) -> str:
    """``{base}[-thumb][-w{width}][-h{height}]``; unconstrained axes are omitted."""
    name = base_name + family.name_infix
    if width:
        name += f"-w{width}"
    if height:
        name += f"-h{height}"
    return name
