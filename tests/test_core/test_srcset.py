"""Tests for srcset formatting."""

from imgvariants.srcset import descriptor_url, format_srcset
from imgvariants.types import VariantDescriptor


def _d(path, width):
    return VariantDescriptor(relative_path=path, width=width, height=width, extension="jpg")


class TestSrcset:
    def test_no_prefix(self):
        assert descriptor_url(_d("a/b.jpg", 10)) == "a/b.jpg"

    def test_prefix_trailing_slash(self):
        assert descriptor_url(_d("a/b.jpg", 10), "/media/") == "/media/a/b.jpg"

    def test_format_preserves_order(self):
        value = format_srcset([_d("x-w800.jpg", 800), _d("x-w400.jpg", 400)], "https://cdn")
        assert value == "https://cdn/x-w800.jpg 800w, https://cdn/x-w400.jpg 400w"

    def test_empty(self):
        assert format_srcset([]) == ""
