"""Pillow-backed image codec: probe, decode, resize, encode."""

from __future__ import annotations

import io
from pathlib import Path

from PIL import Image, ImageOps, UnidentifiedImageError

from imgvariants.errors.exceptions import CodecError, InvalidImageError, SourceNotFoundError

SUPPORTED_EXTENSIONS = {"jpg", "jpeg", "png", "webp", "gif", "bmp", "tif", "tiff"}

_PIL_FORMATS = {
    "jpg": "JPEG",
    "jpeg": "JPEG",
    "png": "PNG",
    "webp": "WEBP",
    "gif": "GIF",
    "bmp": "BMP",
    "tif": "TIFF",
    "tiff": "TIFF",
}

_EXIF_ORIENTATION = 0x0112
_ROTATED_ORIENTATIONS = {5, 6, 7, 8}


class PillowCodec:
    """Image codec used by the variant generator.

    Resizing preserves the aspect ratio, constrains only the axes that were
    given, and never enlarges the source.
    """

    def __init__(self, jpeg_quality: int = 85, webp_quality: int = 80) -> None:
        self._jpeg_quality = jpeg_quality
        self._webp_quality = webp_quality

    def probe(self, path: Path) -> tuple[int, int]:
        """Return display (width, height) reading only the file header."""
        try:
            with Image.open(path) as img:
                width, height = img.size
                if img.getexif().get(_EXIF_ORIENTATION) in _ROTATED_ORIENTATIONS:
                    width, height = height, width
                return width, height
        except FileNotFoundError:
            raise SourceNotFoundError(f"File not found: {path}", path=path) from None
        except (UnidentifiedImageError, OSError) as e:
            raise InvalidImageError(f"Not a valid image: {path}", path=path) from e

    def decode(self, data: bytes) -> Image.Image:
        try:
            img = Image.open(io.BytesIO(data))
            img.load()
        except (UnidentifiedImageError, OSError) as e:
            raise InvalidImageError(f"Cannot decode image: {e}") from e
        return ImageOps.exif_transpose(img)

    def resize(self, raster: Image.Image, width: int | None, height: int | None) -> Image.Image:
        box = (width or raster.width, height or raster.height)
        resized = raster.copy()
        try:
            resized.thumbnail(box, resample=Image.Resampling.LANCZOS)
        except (OSError, ValueError) as e:
            raise CodecError(f"Resize to {box} failed: {e}", error_type="resize_failure") from e
        return resized

    def encode(self, raster: Image.Image, extension: str) -> bytes:
        fmt = _PIL_FORMATS.get(extension)
        if fmt is None:
            raise CodecError(
                f"Unsupported output extension: {extension}",
                error_type="unsupported_format",
                extension=extension,
            )

        save_kwargs: dict[str, object] = {}
        if fmt == "JPEG":
            save_kwargs.update({"quality": self._jpeg_quality, "optimize": True})
            if raster.mode not in ("RGB", "L"):
                raster = raster.convert("RGB")
        elif fmt == "WEBP":
            save_kwargs["quality"] = self._webp_quality

        buf = io.BytesIO()
        try:
            raster.save(buf, format=fmt, **save_kwargs)
        except (OSError, ValueError, KeyError) as e:
            raise CodecError(
                f"Encoding {extension} failed: {e}",
                extension=extension,
                original=e,
            ) from e
        return buf.getvalue()
