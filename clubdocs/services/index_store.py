"""JSON index persistence for a managed collection directory."""

from __future__ import annotations

import json
import logging
import os
import secrets
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Sequence, Tuple

from pydantic import ValidationError as PydanticValidationError

from ..models import DocumentRecord
from ..paths import INDEX_FILENAME
from ..utils.errors import StorageError

LOGGER = logging.getLogger(__name__)

_LOCKS: Dict[Path, threading.RLock] = {}
_LOCKS_GUARD = threading.Lock()


def lock_for(directory: Path) -> threading.RLock:
    """Return the process-wide lock guarding ``directory``'s index."""

    key = Path(directory).resolve()
    with _LOCKS_GUARD:
        lock = _LOCKS.get(key)
        if lock is None:
            lock = threading.RLock()
            _LOCKS[key] = lock
        return lock


class IndexRecords(list):
    """Records loaded from an index plus the raw entries that failed validation.

    Unreadable entries take no part in matching or listing. :meth:`IndexStore.save`
    writes them back unchanged after the valid records.
    """

    def __init__(
        self,
        records: Iterable[DocumentRecord] = (),
        unreadable: Iterable[object] = (),
    ) -> None:
        super().__init__(records)
        self.unreadable = list(unreadable)

    def filenames(self) -> List[str]:
        """Return every filename the index claims, unreadable entries included."""

        names = [record.filename for record in self]
        for entry in self.unreadable:
            if isinstance(entry, dict) and isinstance(entry.get("filename"), str):
                names.append(entry["filename"])
        return names


class IndexStore:
    """Load and save the ``info.json`` record array of one managed directory.

    The store keeps no records in memory; every call reads or rewrites the
    whole file. Read-modify-write sequences go through :meth:`transaction`,
    which holds the directory lock for their whole duration.
    """

    def __init__(self, directory: Path) -> None:
        self.directory = Path(directory)
        self.path = self.directory / INDEX_FILENAME
        self.lock = lock_for(self.directory)

    def load(self) -> IndexRecords:
        """Return the stored records, or an empty list if the index is unusable.

        Records saved without an ``id`` are given one and the index is
        rewritten at once, so the id stays stable across reads.
        """

        records, assigned = self._read()
        if not assigned:
            return records

        with self.lock:
            # Re-read under the lock; a writer may have saved in the meantime.
            records, assigned = self._read()
            if assigned:
                try:
                    self.save(records)
                except StorageError as exc:
                    LOGGER.warning("Could not persist record ids for %s: %s", self.path, exc)
                else:
                    LOGGER.info("Assigned ids to %d record(s) in %s", assigned, self.path)
        return records

    def _read(self) -> Tuple[IndexRecords, int]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return IndexRecords(), 0
        except OSError as exc:
            LOGGER.warning("Unable to read index %s: %s", self.path, exc)
            return IndexRecords(), 0

        try:
            payload = json.loads(raw)
        except json.JSONDecodeError as exc:
            LOGGER.warning("Index %s is not valid JSON: %s", self.path, exc)
            return IndexRecords(), 0
        if not isinstance(payload, list):
            LOGGER.warning("Index %s does not contain a JSON array", self.path)
            return IndexRecords(), 0

        records = IndexRecords()
        assigned = 0
        for position, item in enumerate(payload):
            try:
                record = DocumentRecord.model_validate(item)
            except PydanticValidationError as exc:
                LOGGER.warning(
                    "Index %s entry %d is invalid and will be kept as is: %s",
                    self.path,
                    position,
                    exc,
                )
                records.unreadable.append(item)
                continue
            if "id" not in item:
                assigned += 1
            records.append(record)
        return records, assigned

    def save(self, records: Sequence[DocumentRecord]) -> None:
        """Replace the index file with ``records``."""

        temp_path = self.directory / f".{INDEX_FILENAME}.{secrets.token_hex(8)}.tmp"
        try:
            entries = [record.to_json() for record in records]
            entries.extend(getattr(records, "unreadable", ()))
            packed = json.dumps(entries, indent=2, ensure_ascii=False)
            self.directory.mkdir(parents=True, exist_ok=True)
            temp_path.write_text(packed + "\n", encoding="utf-8")
            os.replace(temp_path, self.path)
        except (OSError, TypeError, ValueError) as exc:
            if temp_path.exists():
                temp_path.unlink()
            raise StorageError(f"Failed to write index for {self.directory.name}") from exc

    @contextmanager
    def transaction(self) -> Iterator[IndexRecords]:
        """Yield the loaded records under the lock and save them on success."""

        with self.lock:
            records = self.load()
            yield records
            self.save(records)


__all__ = ["IndexRecords", "IndexStore", "lock_for"]
