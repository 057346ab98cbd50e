"""Cache fingerprints and source content hashing."""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

from imgvariants.types import ResolutionPolicy, VariantFamily

_CHUNK_SIZE = 64 * 1024


def generate_fingerprint(
    source_path: str | Path,
    policy: ResolutionPolicy | None,
    family: VariantFamily = VariantFamily.IMAGE,
    alt: str = "",
    device_sizes: str = "",
    lazy_load: bool | None = None,
    attributes: dict[str, str] | None = None,
    caption: str | None = None,
    supports_webp: bool = False,
    settings: dict[str, Any] | None = None,
    kind: str = "variant_set",
) -> str:
    """SHA256 over every input that affects the cached artifact.

    Fields are serialised as one JSON document rather than joined with a
    delimiter, so values containing separator characters cannot collide.
    """
    components: list[Any] = [
        kind,
        str(source_path),
        family.value,
        policy.serialize() if policy is not None else None,
        alt,
        device_sizes,
        lazy_load,
        sorted((attributes or {}).items()),
        caption,
        supports_webp,
        sorted((settings or {}).items()),
    ]
    serialized = json.dumps(components, separators=(",", ":"), default=str)
    return hashlib.sha256(serialized.encode("utf-8")).hexdigest()


def hash_file(path: str | Path) -> str:
    """Streaming SHA256 of a file's bytes."""
    h = hashlib.sha256()
    with Path(path).open("rb") as fh:
        for chunk in iter(lambda: fh.read(_CHUNK_SIZE), b""):
            h.update(chunk)
    return h.hexdigest()
