"""Join variant descriptors into srcset candidate strings."""

from __future__ import annotations

from imgvariants.types import VariantDescriptor


def descriptor_url(descriptor: VariantDescriptor, url_prefix: str = "") -> str:
    if not url_prefix:
        return descriptor.relative_path
    return f"{url_prefix.rstrip('/')}/{descriptor.relative_path}"


def format_srcset(descriptors: list[VariantDescriptor], url_prefix: str = "") -> str:
    """``"<url> <width>w, ..."`` in descriptor order."""
    return ", ".join(
        f"{descriptor_url(d, url_prefix)} {d.width}w" for d in descriptors
    )
