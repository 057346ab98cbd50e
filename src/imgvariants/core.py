"""Top-level entry points: ImageVariants, build_variants(), variant_set()."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from imgvariants.cache.freshness import FreshnessCache
from imgvariants.cache.keys import generate_fingerprint
from imgvariants.cache.manager import CacheManager
from imgvariants.cache.stats import CacheStats
from imgvariants.codec.pillow import PillowCodec
from imgvariants.concurrency.pool import ConcurrencyPool
from imgvariants.config.schema import VariantsConfig
from imgvariants.errors.exceptions import ConfigurationError
from imgvariants.srcset import descriptor_url, format_srcset
from imgvariants.storage.filesystem import LocalStorage
from imgvariants.types import (
    BuildResult,
    VariantDescriptor,
    VariantFamily,
    VariantRequest,
    VariantSet,
)
from imgvariants.variants.builder import VariantSetBuilder
from imgvariants.variants.generator import VariantGenerator, read_source_image

logger = logging.getLogger(__name__)

_LAZY_CLASS = "lazy-image"


class ImageVariants:
    """Variant generation and caching with full lifecycle control."""

    def __init__(
        self,
        config: VariantsConfig | None = None,
        cache_manager: CacheManager | None = None,
        codec: PillowCodec | None = None,
        storage: LocalStorage | None = None,
    ) -> None:
        self._config = config or VariantsConfig()
        self._storage = storage or LocalStorage()
        self._codec = codec or PillowCodec(
            jpeg_quality=self._config.jpeg_quality,
            webp_quality=self._config.webp_quality,
        )
        self._cache_manager = cache_manager or CacheManager(
            memory_max_mb=self._config.cache_memory_mb,
            disk_max_mb=self._config.cache_disk_mb,
            disk_path=self._config.cache_db_path,
            enabled=not self._config.cache_disabled,
        )
        self._freshness = FreshnessCache(
            self._cache_manager,
            ttl_seconds=self._config.cache_expiry_seconds,
            sliding=self._config.cache_sliding,
        )
        self._builder: VariantSetBuilder | None = None

    @property
    def config(self) -> VariantsConfig:
        return self._config

    @property
    def cache_manager(self) -> CacheManager:
        return self._cache_manager

    @property
    def freshness_cache(self) -> FreshnessCache:
        return self._freshness

    @property
    def builder(self) -> VariantSetBuilder:
        if self._builder is None:
            cache_root = self._config.require_cache_dir()
            generator = VariantGenerator(
                self._storage,
                self._codec,
                cache_root,
                encode_timeout=self._config.encode_timeout,
            )
            self._builder = VariantSetBuilder(
                generator,
                self._storage,
                cache_root,
                project_root=self._config.project_root,
                webp_extensions=self._config.webp_extensions,
                min_source_width=self._config.min_source_width,
            )
        return self._builder

    # ── Uncached builds ──

    async def build(
        self,
        path: str | Path,
        family: VariantFamily = VariantFamily.IMAGE,
        supports_webp: bool = False,
        file_changed: bool = False,
    ) -> BuildResult:
        """Build (or reuse) the variants of one image for one family."""
        policy = self._config.policy_for(family)
        builder = self.builder
        image = await asyncio.to_thread(read_source_image, self._resolve_source(path), self._codec)
        return await builder.build_variants(
            image,
            policy,
            family=family,
            supports_webp=supports_webp,
            file_changed=file_changed,
        )

    async def create_image_variants(
        self, path: str | Path, supports_webp: bool = False
    ) -> list[VariantDescriptor]:
        result = await self.build(path, VariantFamily.IMAGE, supports_webp)
        return result.descriptors

    async def create_thumb_variants(
        self, path: str | Path, supports_webp: bool = False
    ) -> list[VariantDescriptor]:
        result = await self.build(path, VariantFamily.THUMB, supports_webp)
        return result.descriptors

    async def create_image_and_thumb_variants(
        self,
        image_path: str | Path,
        thumb_path: str | Path,
        supports_webp: bool = False,
    ) -> dict[str, list[VariantDescriptor]]:
        """Both families at once; a family without a policy yields an empty list."""
        self._config.require_cache_dir()
        if self._config.image_resolutions is None and self._config.thumb_resolutions is None:
            raise ConfigurationError("No image resolutions defined")

        variants: list[VariantDescriptor] = []
        thumb_variants: list[VariantDescriptor] = []
        if self._config.image_resolutions is not None:
            variants = await self.create_image_variants(image_path, supports_webp)
        if self._config.thumb_resolutions is not None:
            thumb_variants = await self.create_thumb_variants(thumb_path, supports_webp)
        return {"variants": variants, "thumb_variants": thumb_variants}

    async def warm(
        self,
        paths: list[str | Path],
        family: VariantFamily = VariantFamily.IMAGE,
        supports_webp: bool = False,
        max_workers: int | None = None,
    ) -> list[BuildResult | None]:
        """Build variants for many images; failed images yield None."""
        pool = ConcurrencyPool(max_workers=max_workers or self._config.max_workers)
        return await pool.process_batch(
            self.build, list(paths), family=family, supports_webp=supports_webp
        )

    # ── Cached artifacts ──

    async def variant_set(self, request: VariantRequest) -> VariantSet:
        """Variant set plus presentation data, memoised per source freshness."""
        policy = self._config.policy_for(request.family)
        builder = self.builder

        lazy_load = request.lazy_load
        if lazy_load is None and self._config.default_lazy_load is not None:
            lazy_load = self._config.default_lazy_load
        sizes = request.device_sizes or self._config.sizes_for(request.family)

        source = self._resolve_source(request.source_path)
        fingerprint = generate_fingerprint(
            source,
            policy,
            family=request.family,
            alt=request.alt,
            device_sizes=sizes,
            lazy_load=lazy_load,
            attributes=request.attributes,
            caption=request.caption,
            supports_webp=request.supports_webp,
            settings=self._config.rendering_settings(),
        )

        async def compute(file_changed: bool) -> str:
            image = await asyncio.to_thread(read_source_image, source, self._codec)
            result = await builder.build_variants(
                image,
                policy,
                family=request.family,
                supports_webp=request.supports_webp,
                file_changed=file_changed,
            )
            return self._to_variant_set(result, request, lazy_load, sizes).model_dump_json()

        artifact = await self._freshness.get_or_compute(fingerprint, source, compute)
        return VariantSet.model_validate_json(artifact)

    async def srcset(
        self,
        path: str | Path,
        family: VariantFamily = VariantFamily.IMAGE,
        supports_webp: bool = False,
    ) -> str:
        """Cached srcset string for one image."""
        policy = self._config.policy_for(family)
        builder = self.builder
        source = self._resolve_source(path)
        fingerprint = generate_fingerprint(
            source,
            policy,
            family=family,
            supports_webp=supports_webp,
            settings=self._config.rendering_settings(),
            kind="srcset",
        )

        async def compute(file_changed: bool) -> str:
            image = await asyncio.to_thread(read_source_image, source, self._codec)
            result = await builder.build_variants(
                image,
                policy,
                family=family,
                supports_webp=supports_webp,
                file_changed=file_changed,
            )
            return format_srcset(result.descriptors, self._config.url_prefix)

        return await self._freshness.get_or_compute(fingerprint, source, compute)

    def default_sizes(self, family: VariantFamily = VariantFamily.IMAGE) -> str:
        return self._config.sizes_for(family)

    def stats(self) -> CacheStats:
        return self._freshness.stats()

    def close(self) -> None:
        self._cache_manager.close()

    # ── Helpers ──

    def _resolve_source(self, path: str | Path) -> Path:
        path = Path(path)
        if not path.is_file() and self._config.no_image_path is not None:
            logger.warning("Image %s not found, using %s", path, self._config.no_image_path)
            return Path(self._config.no_image_path).absolute()
        return path.absolute()

    def _to_variant_set(
        self,
        result: BuildResult,
        request: VariantRequest,
        lazy_load: bool | None,
        sizes: str,
    ) -> VariantSet:
        attributes = dict(request.attributes)
        classes = [_LAZY_CLASS] if lazy_load else []
        extra_class = attributes.pop("class", None)
        if extra_class:
            classes.append(extra_class)

        prefix = self._config.url_prefix
        return VariantSet(
            descriptors=result.descriptors,
            src=descriptor_url(result.descriptors[0], prefix),
            srcset=format_srcset(result.descriptors, prefix),
            sizes=sizes,
            alt=request.alt,
            lazy_load=lazy_load,
            classes=classes,
            attributes=attributes,
            caption=request.caption,
        )


# ── Module-level convenience functions ──


def build_variants(
    path: str | Path,
    config: VariantsConfig,
    family: VariantFamily = VariantFamily.IMAGE,
    supports_webp: bool = False,
) -> BuildResult:
    """Build variants for one image (sync wrapper)."""
    variants = ImageVariants(config)
    try:
        return asyncio.run(variants.build(path, family=family, supports_webp=supports_webp))
    finally:
        variants.close()


def variant_set(request: VariantRequest, config: VariantsConfig) -> VariantSet:
    """Cached variant set for one request (sync wrapper)."""
    variants = ImageVariants(config)
    try:
        return asyncio.run(variants.variant_set(request))
    finally:
        variants.close()
