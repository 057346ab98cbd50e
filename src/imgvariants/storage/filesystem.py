"""Local filesystem storage with atomic writes."""

from __future__ import annotations

import contextlib
import logging
import os
import shutil
import tempfile
from pathlib import Path

from imgvariants.errors.exceptions import (
    CreateDirectoryError,
    DirectoryNotFoundError,
    FileError,
    SourceNotFoundError,
)

logger = logging.getLogger(__name__)


class LocalStorage:
    """Filesystem operations used by the variant pipeline.

    Writes go to a temporary file in the destination directory and are then
    renamed into place, so readers never observe a partially written variant.
    """

    def read_bytes(self, path: Path) -> bytes:
        try:
            return path.read_bytes()
        except FileNotFoundError:
            raise SourceNotFoundError(f"File not found: {path}", path=path) from None
        except OSError as e:
            raise SourceNotFoundError(f"Cannot read {path}: {e}", path=path) from e

    def write_bytes(self, path: Path, data: bytes) -> None:
        fd, tmp_name = self._mkstemp(path)
        try:
            with os.fdopen(fd, "wb") as fh:
                fh.write(data)
            os.replace(tmp_name, path)
        except OSError as e:
            _discard(tmp_name)
            raise FileError(f"Cannot write {path}: {e}", path=path, original=e) from e

    def copy_file(self, source: Path, destination: Path) -> None:
        if not source.is_file():
            raise SourceNotFoundError(f"File not found: {source}", path=source)
        fd, tmp_name = self._mkstemp(destination)
        os.close(fd)
        try:
            shutil.copyfile(source, tmp_name)
            os.replace(tmp_name, destination)
        except OSError as e:
            _discard(tmp_name)
            raise FileError(
                f"Cannot copy {source} to {destination}: {e}", path=destination, original=e
            ) from e

    def ensure_directory(self, path: Path) -> Path:
        """Create ``path`` (and parents) if absent; an existing directory is reused."""
        if path.is_dir():
            return path
        if path.exists():
            raise DirectoryNotFoundError(f"Not a directory: {path}", path=path)
        try:
            path.mkdir(parents=True, exist_ok=True)
        except FileExistsError:
            raise DirectoryNotFoundError(f"Not a directory: {path}", path=path) from None
        except OSError as e:
            raise CreateDirectoryError(f"Cannot create directory {path}: {e}", path=path) from e
        logger.debug("Created cache directory %s", path)
        return path

    def exists(self, path: Path) -> bool:
        return path.is_file()

    def modified_time(self, path: Path) -> float:
        try:
            return path.stat().st_mtime
        except FileNotFoundError:
            raise SourceNotFoundError(f"File not found: {path}", path=path) from None

    def clear_directory(self, path: Path) -> int:
        """Remove everything inside ``path``. Returns the number of entries removed."""
        if not path.is_dir():
            return 0
        removed = 0
        for child in path.iterdir():
            if child.is_dir() and not child.is_symlink():
                shutil.rmtree(child)
            else:
                child.unlink()
            removed += 1
        logger.info("Cleared %d stale entries from %s", removed, path)
        return removed

    @staticmethod
    def relative_path(path: Path, root: Path) -> str:
        return path.relative_to(root).as_posix()

    @staticmethod
    def _mkstemp(path: Path) -> tuple[int, str]:
        try:
            return tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
        except FileNotFoundError:
            raise DirectoryNotFoundError(
                f"Directory not found: {path.parent}", path=path.parent
            ) from None
        except OSError as e:
            raise FileError(f"Cannot create temp file for {path}: {e}", path=path) from e


def _discard(tmp_name: str) -> None:
    with contextlib.suppress(FileNotFoundError):
        os.unlink(tmp_name)
