"""Tests for the single-variant generator."""

import asyncio
import os
import threading
import time

import pytest
from PIL import Image

from imgvariants.errors.exceptions import CodecError
from imgvariants.variants.generator import VariantGenerator, read_source_image


class TestReadSourceImage:
    def test_reads_dimensions(self, make_image, codec):
        image = read_source_image(make_image(size=(640, 480)), codec)
        assert (image.pixel_width, image.pixel_height) == (640, 480)
        assert image.base_name == "photo"
        assert image.extension == "jpg"


class TestEnsureVariant:
    async def test_generates_file(self, generator, source_image, cache_root):
        destination = cache_root / "out"
        destination.mkdir(parents=True)
        descriptor = await generator.ensure_variant(
            source_image, destination, "photo-w800", "jpg", 800
        )
        assert descriptor.relative_path == "out/photo-w800.jpg"
        assert (descriptor.width, descriptor.height) == (800, 600)
        assert descriptor.extension == "jpg"
        with Image.open(destination / "photo-w800.jpg") as img:
            assert img.size == (800, 600)
        assert generator.encodes == 1

    async def test_reuses_existing_file(self, generator, source_image, cache_root):
        destination = cache_root / "out"
        destination.mkdir(parents=True)
        first = await generator.ensure_variant(source_image, destination, "photo-w400", "jpg", 400)
        mtime = (destination / "photo-w400.jpg").stat().st_mtime_ns
        second = await generator.ensure_variant(source_image, destination, "photo-w400", "jpg", 400)
        assert first == second
        assert generator.encodes == 1
        assert generator.reuses == 1
        assert (destination / "photo-w400.jpg").stat().st_mtime_ns == mtime

    async def test_regenerates_unreadable_file(self, generator, source_image, cache_root):
        destination = cache_root / "out"
        destination.mkdir(parents=True)
        (destination / "photo-w400.jpg").write_text("truncated")
        descriptor = await generator.ensure_variant(
            source_image, destination, "photo-w400", "jpg", 400
        )
        assert descriptor.width == 400
        assert generator.encodes == 1

    async def test_unsupported_extension(self, generator, source_image, cache_root):
        destination = cache_root / "out"
        destination.mkdir(parents=True)
        with pytest.raises(CodecError):
            await generator.ensure_variant(source_image, destination, "photo-w400", "xyz", 400)
        assert not (destination / "photo-w400.xyz").exists()

    async def test_timeout(self, storage, codec, cache_root, source_image, monkeypatch):
        generator = VariantGenerator(storage, codec, cache_root, encode_timeout=0.05)
        original = codec.encode
        finished = threading.Event()

        def slow_encode(raster, extension):
            time.sleep(0.3)
            try:
                return original(raster, extension)
            finally:
                finished.set()

        monkeypatch.setattr(codec, "encode", slow_encode)
        destination = cache_root / "out"
        destination.mkdir(parents=True)
        with pytest.raises(CodecError) as exc_info:
            await generator.ensure_variant(source_image, destination, "photo-w400", "jpg", 400)
        assert exc_info.value.error_type == "timeout"

        # the worker finishes in the background but its output is discarded
        assert await asyncio.to_thread(finished.wait, 5)
        await asyncio.sleep(0.1)
        assert list(destination.iterdir()) == []
        assert generator.encodes == 0

    async def test_variant_older_than_source_regenerated(
        self, generator, source_image, cache_root
    ):
        destination = cache_root / "out"
        destination.mkdir(parents=True)
        await generator.ensure_variant(source_image, destination, "photo-w400", "jpg", 400)
        target = destination / "photo-w400.jpg"
        stat = target.stat()
        os.utime(target, (stat.st_atime, stat.st_mtime - 100))

        await generator.ensure_variant(source_image, destination, "photo-w400", "jpg", 400)
        assert generator.encodes == 2
        assert generator.reuses == 0

    async def test_source_decoded_once(self, generator, source_image, cache_root):
        destination = cache_root / "out"
        destination.mkdir(parents=True)
        source = generator.source_raster(source_image)
        assert not source.loaded
        await generator.ensure_variant(
            source_image, destination, "photo-w800", "jpg", 800, source=source
        )
        raster = source.get()
        await generator.ensure_variant(
            source_image, destination, "photo-w400", "jpg", 400, source=source
        )
        assert source.get() is raster


class TestCopyOriginal:
    async def test_copies_source(self, generator, make_image, codec, cache_root):
        image = read_source_image(make_image(size=(300, 200)), codec)
        destination = cache_root / "out"
        destination.mkdir(parents=True)
        descriptor = await generator.copy_original(image, destination, "photo")
        assert descriptor.relative_path == "out/photo.jpg"
        assert (descriptor.width, descriptor.height) == (300, 200)
        assert (destination / "photo.jpg").read_bytes() == image.absolute_path.read_bytes()
        assert generator.encodes == 0
