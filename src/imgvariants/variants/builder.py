"""Build the ordered variant set for one source image and policy."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable
from pathlib import Path

from imgvariants.concurrency.locks import KeyedLock
from imgvariants.errors.exceptions import CodecError, FileError
from imgvariants.storage.filesystem import LocalStorage
from imgvariants.storage.paths import cache_directory, resolve_cache_subdir
from imgvariants.types import (
    DEFAULT_EXTENSION,
    BuildResult,
    ResolutionPolicy,
    ResolutionSpec,
    SourceImage,
    VariantFailure,
    VariantFamily,
)
from imgvariants.variants.generator import SourceRaster, VariantGenerator
from imgvariants.variants.naming import variant_base_name

logger = logging.getLogger(__name__)


class VariantSetBuilder:
    """Apply a ResolutionPolicy to one source image.

    Variants are written to
    ``<cache root>/<mirrored source dir>/<file name>/<family>/<extension>/``.
    Builds of the same source and family are serialised, so the
    exists-check / encode sequence never runs twice for the same file at once.
    """

    def __init__(
        self,
        generator: VariantGenerator,
        storage: LocalStorage,
        cache_root: Path,
        project_root: Path | None = None,
        webp_extensions: Iterable[str] = ("webp",),
        min_source_width: int = 0,
    ) -> None:
        self._generator = generator
        self._storage = storage
        self._cache_root = Path(os.path.abspath(cache_root))
        self._project_root = project_root
        self._webp_extensions = frozenset(webp_extensions)
        self._min_source_width = min_source_width
        self._locks = KeyedLock()

    @property
    def generator(self) -> VariantGenerator:
        return self._generator

    def family_directory(self, image: SourceImage, family: VariantFamily) -> Path:
        subdir = resolve_cache_subdir(image.directory_path, self._cache_root, self._project_root)
        return cache_directory(self._cache_root, subdir, image, family)

    async def build_variants(
        self,
        image: SourceImage,
        policy: ResolutionPolicy,
        family: VariantFamily = VariantFamily.IMAGE,
        supports_webp: bool = False,
        file_changed: bool = False,
    ) -> BuildResult:
        """Return descriptors in policy order; never empty.

        When ``file_changed`` is set the family directory is cleared first so
        variants from the previous source version do not linger.
        """
        family_dir = self.family_directory(image, family)

        async with self._locks.hold(str(family_dir)):
            if file_changed:
                self._storage.clear_directory(family_dir)
            self._storage.ensure_directory(family_dir)
            return await self._build(image, policy, family, supports_webp, family_dir)

    async def _build(
        self,
        image: SourceImage,
        policy: ResolutionPolicy,
        family: VariantFamily,
        supports_webp: bool,
        family_dir: Path,
    ) -> BuildResult:
        result = BuildResult()
        extension_dirs: dict[str, Path] = {}
        seen: set[str] = set()
        source = self._generator.source_raster(image)

        if image.pixel_width < self._min_source_width:
            logger.info(
                "%s is %dpx wide (minimum %d), using original only",
                image.file_name,
                image.pixel_width,
                self._min_source_width,
            )
            specs: tuple[ResolutionSpec, ...] = ()
        else:
            specs = policy.resolutions

        for spec in specs:
            if should_skip(spec, image):
                logger.debug(
                    "Skipping %sx%s for %s (%dx%d): would upscale",
                    spec.width, spec.height, image.file_name,
                    image.pixel_width, image.pixel_height,
                )
                continue

            extension = resolve_extension(
                spec, image.extension, supports_webp, self._webp_extensions
            )
            if extension is None:
                logger.debug("No usable extension in %s for %s", spec.extensions, image.file_name)
                continue

            name = variant_base_name(image.base_name, family, spec.width, spec.height)
            if f"{name}.{extension}" in seen:
                continue
            seen.add(f"{name}.{extension}")

            destination = self._extension_dir(extension_dirs, family_dir, extension)
            try:
                descriptor = await self._generator.ensure_variant(
                    image, destination, name, extension, spec.width, spec.height, source=source
                )
            except (CodecError, FileError) as e:
                logger.warning("Variant %s.%s failed: %s", name, extension, e)
                result.failures.append(
                    VariantFailure(
                        resolution=spec,
                        extension=extension,
                        error_type=getattr(e, "error_type", "file_error"),
                        message=str(e),
                    )
                )
                continue
            result.descriptors.append(descriptor)

        if not result.descriptors:
            destination = self._extension_dir(extension_dirs, family_dir, image.extension)
            name = variant_base_name(image.base_name, family)
            descriptor = await self._generator.copy_original(image, destination, name)
            result.descriptors.append(descriptor)
            result.fallback_used = True
            logger.info("No variants qualified for %s, using original", image.file_name)

        return result

    def _extension_dir(
        self, extension_dirs: dict[str, Path], family_dir: Path, extension: str
    ) -> Path:
        path = extension_dirs.get(extension)
        if path is None:
            path = self._storage.ensure_directory(family_dir / extension)
            extension_dirs[extension] = path
        return path


def should_skip(spec: ResolutionSpec, image: SourceImage) -> bool:
    """Never upscale.

    With both dimensions set, skip only when both exceed the source. With one
    dimension set, skip when that one exceeds the source.
    """
    width, height = spec.width, spec.height
    if width and height:
        return width > image.pixel_width and height > image.pixel_height
    if height:
        return height > image.pixel_height
    if width:
        return width > image.pixel_width
    return False


def resolve_extension(
    spec: ResolutionSpec,
    source_extension: str,
    supports_webp: bool,
    webp_extensions: Iterable[str] = ("webp",),
) -> str | None:
    """First usable extension of the spec, or None if every candidate is skipped."""
    webp = set(webp_extensions)
    for candidate in spec.extensions:
        extension = source_extension if candidate == DEFAULT_EXTENSION else candidate
        if extension in webp and not supports_webp:
            continue
        return extension
    return None
