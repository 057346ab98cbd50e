"""Image codec — Pillow decode/resize/encode."""

from imgvariants.codec.pillow import SUPPORTED_EXTENSIONS, PillowCodec

__all__ = ["PillowCodec", "SUPPORTED_EXTENSIONS"]
