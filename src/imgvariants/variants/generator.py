"""Create or reuse a single variant file."""

from __future__ import annotations

import asyncio
import logging
import os
import threading
from pathlib import Path

from PIL import Image

from imgvariants.codec.pillow import PillowCodec
from imgvariants.errors.exceptions import CodecError, InvalidImageError
from imgvariants.storage.filesystem import LocalStorage
from imgvariants.types import SourceImage, VariantDescriptor

logger = logging.getLogger(__name__)


def read_source_image(path: str | Path, codec: PillowCodec) -> SourceImage:
    """Probe a source file and return its value object."""
    width, height = codec.probe(Path(path))
    return SourceImage.from_path(path, width, height)


class SourceRaster:
    """Decodes the source image at most once, on first use."""

    def __init__(self, image: SourceImage, storage: LocalStorage, codec: PillowCodec) -> None:
        self._image = image
        self._storage = storage
        self._codec = codec
        self._raster: Image.Image | None = None

    @property
    def loaded(self) -> bool:
        return self._raster is not None

    def get(self) -> Image.Image:
        if self._raster is None:
            data = self._storage.read_bytes(self._image.absolute_path)
            self._raster = self._codec.decode(data)
        return self._raster


class VariantGenerator:
    """Writes one resized/re-encoded variant, or reuses the existing file.

    Codec work runs in a worker thread. When ``encode_timeout`` is set, a
    variant that takes longer fails with ``CodecError(error_type="timeout")``.
    """

    def __init__(
        self,
        storage: LocalStorage,
        codec: PillowCodec,
        cache_root: Path,
        encode_timeout: float | None = None,
    ) -> None:
        self._storage = storage
        self._codec = codec
        self._cache_root = Path(os.path.abspath(cache_root))
        self._encode_timeout = encode_timeout
        self._encodes = 0
        self._reuses = 0

    @property
    def encodes(self) -> int:
        return self._encodes

    @property
    def reuses(self) -> int:
        return self._reuses

    def source_raster(self, image: SourceImage) -> SourceRaster:
        return SourceRaster(image, self._storage, self._codec)

    async def ensure_variant(
        self,
        image: SourceImage,
        destination_dir: Path,
        output_base_name: str,
        extension: str,
        width: int | None = None,
        height: int | None = None,
        source: SourceRaster | None = None,
    ) -> VariantDescriptor:
        target = destination_dir / f"{output_base_name}.{extension}"

        if self._is_current(target, image):
            try:
                existing_width, existing_height = self._codec.probe(target)
            except InvalidImageError:
                logger.warning("Regenerating unreadable variant %s", target)
            else:
                self._reuses += 1
                return self._descriptor(target, existing_width, existing_height, extension)

        source = source or self.source_raster(image)
        abandoned = threading.Event()
        try:
            out_width, out_height = await asyncio.wait_for(
                asyncio.to_thread(
                    self._render, source, target, extension, width, height, abandoned
                ),
                timeout=self._encode_timeout,
            )
        except TimeoutError:
            abandoned.set()
            raise CodecError(
                f"Encoding {target.name} exceeded {self._encode_timeout}s",
                error_type="timeout",
                extension=extension,
            ) from None

        logger.debug("Generated %s (%dx%d)", target, out_width, out_height)
        return self._descriptor(target, out_width, out_height, extension)

    async def copy_original(
        self,
        image: SourceImage,
        destination_dir: Path,
        output_base_name: str,
    ) -> VariantDescriptor:
        """Pass-through copy of the unresized source."""
        target = destination_dir / f"{output_base_name}.{image.extension}"
        if not self._is_current(target, image):
            await asyncio.to_thread(self._storage.copy_file, image.absolute_path, target)
            logger.debug("Copied original %s to %s", image.absolute_path, target)
        return self._descriptor(target, image.pixel_width, image.pixel_height, image.extension)

    def _is_current(self, target: Path, image: SourceImage) -> bool:
        """True if ``target`` exists and was written no earlier than the source."""
        if not self._storage.exists(target):
            return False
        if self._storage.modified_time(target) < self._storage.modified_time(image.absolute_path):
            logger.info("Variant %s is older than its source, regenerating", target)
            return False
        return True

    def _render(
        self,
        source: SourceRaster,
        target: Path,
        extension: str,
        width: int | None,
        height: int | None,
        abandoned: threading.Event,
    ) -> tuple[int, int]:
        resized = self._codec.resize(source.get(), width, height)
        data = self._codec.encode(resized, extension)
        # The caller gave up on this encode; do not publish its output
        if abandoned.is_set():
            logger.debug("Discarding abandoned encode of %s", target)
            return resized.size
        self._storage.write_bytes(target, data)
        self._encodes += 1
        return resized.size

    def _descriptor(
        self, target: Path, width: int, height: int, extension: str
    ) -> VariantDescriptor:
        return VariantDescriptor(
            relative_path=self._storage.relative_path(target, self._cache_root),
            width=width,
            height=height,
            extension=extension,
        )
