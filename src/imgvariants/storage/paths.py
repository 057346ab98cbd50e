"""Cache path resolution: mirror a source layout under the cache root."""

from __future__ import annotations

import os
from pathlib import Path

from imgvariants.errors.exceptions import DirectoryError
from imgvariants.types import SourceImage, VariantFamily


def resolve_cache_subdir(
    source_dir: str | Path,
    cache_root: str | Path | None,
    project_root: str | Path | None = None,
) -> tuple[str, ...]:
    """Return the directory segments that mirror ``source_dir`` under the cache root.

    With a project root the mirrored path is the source directory relative to
    it. Without one, the common path prefix shared with the cache root is
    stripped instead. Either way only whole path components are removed.
    """
    if cache_root is None:
        raise DirectoryError("Images variants cache directory is not set")

    source_dir = Path(os.path.abspath(source_dir))
    cache_root = Path(os.path.abspath(cache_root))

    if project_root is not None:
        root = Path(os.path.abspath(project_root))
        try:
            relative = source_dir.relative_to(root)
        except ValueError:
            raise DirectoryError(
                f"Source directory {source_dir} is outside project root {root}",
                path=source_dir,
            ) from None
        return _segments(relative)

    common = Path(os.path.commonpath([source_dir, cache_root]))
    return _segments(source_dir.relative_to(common))


def cache_directory(
    cache_root: str | Path,
    subdir: tuple[str, ...],
    image: SourceImage,
    family: VariantFamily,
    extension: str | None = None,
) -> Path:
    """Build ``cache_root/<subdir>/<file name>/<family>[/<extension>]``.

    The source file name (with its extension) keeps ``photo.jpg`` and
    ``photo.png`` from sharing a directory.
    """
    path = Path(cache_root).joinpath(*subdir, image.file_name, family.directory)
    if extension:
        path = path / extension
    return path


def _segments(relative: Path) -> tuple[str, ...]:
    return tuple(part for part in relative.parts if part not in ("", ".", "/", os.sep))
