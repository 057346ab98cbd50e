import pytest
from PIL import Image

from imgvariants.codec.pillow import PillowCodec
from imgvariants.config.schema import VariantsConfig
from imgvariants.storage.filesystem import LocalStorage
from imgvariants.types import ResolutionPolicy
from imgvariants.variants.builder import VariantSetBuilder
from imgvariants.variants.generator import VariantGenerator, read_source_image


@pytest.fixture
def project_root(tmp_path):
    root = tmp_path / "project"
    root.mkdir()
    return root


@pytest.fixture
def cache_root(tmp_path):
    return tmp_path / "cache"


@pytest.fixture
def make_image(project_root):
    """Write a solid-colour image under project/images and return its path."""

    def _make(name="photo.jpg", size=(1600, 1200), color=(200, 100, 50), subdir="images"):
        directory = project_root / subdir
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / name
        Image.new("RGB", size, color).save(path)
        return path

    return _make


@pytest.fixture
def srcset_policy():
    return ResolutionPolicy(
        resolutions=[
            {"width": 800, "extensions": ["webp", "jpg"]},
            {"width": 400, "extensions": ["webp", "jpg"]},
        ]
    )


@pytest.fixture
def thumb_policy():
    return ResolutionPolicy(
        resolutions=[{"width": 200, "height": 200, "extensions": ["default"]}]
    )


@pytest.fixture
def variants_config(tmp_path, project_root, cache_root, srcset_policy, thumb_policy):
    return VariantsConfig(
        cache_dir=cache_root,
        project_root=project_root,
        image_resolutions=srcset_policy,
        thumb_resolutions=thumb_policy,
        cache_db_path=tmp_path / "cache.db",
    )


@pytest.fixture
def storage():
    return LocalStorage()


@pytest.fixture
def codec():
    return PillowCodec()


@pytest.fixture
def generator(storage, codec, cache_root):
    return VariantGenerator(storage, codec, cache_root)


@pytest.fixture
def builder(generator, storage, cache_root, project_root):
    return VariantSetBuilder(generator, storage, cache_root, project_root=project_root)


@pytest.fixture
def source_image(make_image, codec):
    """1600x1200 photo.jpg as a SourceImage."""
    return read_source_image(make_image(), codec)
