"""Custom exception hierarchy for imgvariants."""

from __future__ import annotations

from pathlib import Path
from typing import Any


class ImgVariantsError(Exception):
    """Base exception for all imgvariants errors."""

    def __init__(self, message: str = "", **kwargs: Any) -> None:
        super().__init__(message)
        self.message = message


class ConfigurationError(ImgVariantsError):
    """Missing or invalid configuration, raised before any I/O.

    Examples: cache directory not set, no resolution policy set.
    """

    def __init__(self, message: str = "", setting: str | None = None) -> None:
        super().__init__(message)
        self.setting = setting


class DirectoryError(ImgVariantsError):
    """Cache directory is unusable (not configured, outside project root)."""

    def __init__(self, message: str = "", path: Path | str | None = None) -> None:
        super().__init__(message)
        self.path = Path(path) if path is not None else None


class CreateDirectoryError(DirectoryError):
    """A cache subdirectory could not be created."""


class DirectoryNotFoundError(DirectoryError):
    """A cache path component is missing or is not a directory."""


class SourceError(ImgVariantsError):
    """The source image cannot be used. Fatal for that source."""

    def __init__(self, message: str = "", path: Path | str | None = None) -> None:
        super().__init__(message)
        self.path = Path(path) if path is not None else None


class SourceNotFoundError(SourceError, FileNotFoundError):
    """Source file is missing or unreadable."""


class InvalidImageError(SourceError):
    """Source bytes could not be decoded as an image."""


class FileError(ImgVariantsError):
    """Writing or copying a variant file failed."""

    def __init__(
        self,
        message: str = "",
        path: Path | str | None = None,
        original: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.path = Path(path) if path is not None else None
        self.original = original


class CodecError(ImgVariantsError):
    """Resize or encode failed for a single variant. Recoverable per variant.

    Examples: unsupported output extension, encoder exception, encode timeout.
    """

    def __init__(
        self,
        message: str = "",
        error_type: str = "encode_failure",
        extension: str | None = None,
        original: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.error_type = error_type
        self.extension = extension
        self.original = original
