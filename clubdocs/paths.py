"""Filesystem layout of the managed collection directories."""

from __future__ import annotations

from pathlib import Path

INDEX_FILENAME = "info.json"
STAGING_DIRNAME = ".incoming"
RESERVED_NAMES = frozenset({INDEX_FILENAME, STAGING_DIRNAME})

_UNSAFE_SEGMENTS = frozenset({"", ".", ".."})


def collection_dir(storage_root: Path, name: str) -> Path:
    """Return the managed directory for the collection ``name``."""

    return Path(storage_root) / name


def is_safe_filename(filename: str | None) -> bool:
    """Return ``True`` when ``filename`` names a plain entry of a managed directory."""

    if filename is None or filename in _UNSAFE_SEGMENTS:
        return False
    if "/" in filename or "\\" in filename or "\x00" in filename:
        return False
    # Dot entries hold staging and index temp files.
    if filename.startswith("."):
        return False
    return filename not in RESERVED_NAMES


def split_extension(filename: str) -> tuple[str, str | None]:
    """Split ``filename`` at its final dot into ``(base, extension)``.

    A leading dot (``.env``) does not start an extension.
    """

    dot = filename.rfind(".")
    if dot <= 0:
        return filename, None
    return filename[:dot], filename[dot + 1 :]


__all__ = [
    "INDEX_FILENAME",
    "RESERVED_NAMES",
    "STAGING_DIRNAME",
    "collection_dir",
    "is_safe_filename",
    "split_extension",
]
