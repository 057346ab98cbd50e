"""Exception hierarchy for configuration, I/O and codec failures."""

from imgvariants.errors.exceptions import (
    CodecError,
    ConfigurationError,
    CreateDirectoryError,
    DirectoryError,
    DirectoryNotFoundError,
    FileError,
    ImgVariantsError,
    InvalidImageError,
    SourceError,
    SourceNotFoundError,
)

__all__ = [
    "ImgVariantsError",
    "ConfigurationError",
    "DirectoryError",
    "CreateDirectoryError",
    "DirectoryNotFoundError",
    "SourceError",
    "SourceNotFoundError",
    "InvalidImageError",
    "FileError",
    "CodecError",
]
