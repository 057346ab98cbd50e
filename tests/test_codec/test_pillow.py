"""Tests for the Pillow codec."""

import io

import pytest
from PIL import Image

from imgvariants.codec.pillow import PillowCodec
from imgvariants.errors.exceptions import CodecError, InvalidImageError, SourceNotFoundError


@pytest.fixture
def codec():
    return PillowCodec()


def _jpeg_bytes(size=(400, 300), exif=None):
    buf = io.BytesIO()
    img = Image.new("RGB", size, (10, 20, 30))
    if exif is not None:
        img.save(buf, format="JPEG", exif=exif)
    else:
        img.save(buf, format="JPEG")
    return buf.getvalue()


class TestProbe:
    def test_dimensions(self, codec, tmp_path):
        path = tmp_path / "a.jpg"
        path.write_bytes(_jpeg_bytes((400, 300)))
        assert codec.probe(path) == (400, 300)

    def test_exif_rotation_swaps(self, codec, tmp_path):
        exif = Image.Exif()
        exif[0x0112] = 6
        path = tmp_path / "rotated.jpg"
        path.write_bytes(_jpeg_bytes((400, 300), exif=exif))
        assert codec.probe(path) == (300, 400)

    def test_missing(self, codec, tmp_path):
        with pytest.raises(SourceNotFoundError):
            codec.probe(tmp_path / "missing.jpg")

    def test_not_an_image(self, codec, tmp_path):
        path = tmp_path / "a.jpg"
        path.write_text("not an image")
        with pytest.raises(InvalidImageError):
            codec.probe(path)


class TestDecode:
    def test_decode(self, codec):
        assert codec.decode(_jpeg_bytes()).size == (400, 300)

    def test_decode_garbage(self, codec):
        with pytest.raises(InvalidImageError):
            codec.decode(b"garbage")


class TestResize:
    def test_width_only_keeps_aspect(self, codec):
        out = codec.resize(Image.new("RGB", (1600, 1200)), 800, None)
        assert out.size == (800, 600)

    def test_height_only(self, codec):
        out = codec.resize(Image.new("RGB", (1600, 1200)), None, 300)
        assert out.size == (400, 300)

    def test_box_fits_inside(self, codec):
        out = codec.resize(Image.new("RGB", (1600, 1200)), 200, 200)
        assert out.size == (200, 150)

    def test_never_enlarges(self, codec):
        out = codec.resize(Image.new("RGB", (300, 200)), 800, None)
        assert out.size == (300, 200)

    def test_source_untouched(self, codec):
        src = Image.new("RGB", (1600, 1200))
        codec.resize(src, 100, None)
        assert src.size == (1600, 1200)


class TestEncode:
    @pytest.mark.parametrize("extension,fmt", [("jpg", "JPEG"), ("png", "PNG"), ("webp", "WEBP")])
    def test_formats(self, codec, extension, fmt):
        data = codec.encode(Image.new("RGB", (10, 10)), extension)
        assert Image.open(io.BytesIO(data)).format == fmt

    def test_jpeg_from_rgba(self, codec):
        data = codec.encode(Image.new("RGBA", (10, 10)), "jpg")
        assert Image.open(io.BytesIO(data)).mode == "RGB"

    def test_unsupported(self, codec):
        with pytest.raises(CodecError) as exc_info:
            codec.encode(Image.new("RGB", (10, 10)), "xyz")
        assert exc_info.value.error_type == "unsupported_format"
        assert exc_info.value.extension == "xyz"
