"""Collision-free filename allocation inside a managed directory."""

from __future__ import annotations

import itertools
from pathlib import Path
from typing import Iterable

from ..paths import RESERVED_NAMES, split_extension


def _candidates(desired: str):
    yield desired
    base, extension = split_extension(desired)
    suffix = f".{extension}" if extension is not None else ""
    for counter in itertools.count():
        yield f"{base}_{counter}{suffix}"


def allocate_filename(
    directory: Path, desired: str, taken: Iterable[str] = ()
) -> str:
    """Return ``desired`` or the first free ``base_N.ext`` variant of it.

    A name is free when no entry of ``directory`` uses it, it is not reserved
    and it is not listed in ``taken``. Callers must hold the directory lock.
    """

    blocked = set(taken) | RESERVED_NAMES
    for candidate in _candidates(desired):
        if candidate in blocked:
            continue
        if not (directory / candidate).exists():
            return candidate


__all__ = ["allocate_filename"]
