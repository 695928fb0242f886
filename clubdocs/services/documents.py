"""Upload, delete, listing and reconciliation for one managed collection."""

from __future__ import annotations

import logging
import os
import secrets
from dataclasses import dataclass
from pathlib import Path
from typing import Awaitable, Callable, Iterable, List, Mapping, Protocol

from starlette.concurrency import run_in_threadpool

from ..config import Settings
from ..models import (
    CollectionDefinition,
    DocumentRecord,
    ReconcileReport,
    get_collection_definition,
)
from ..paths import (
    RESERVED_NAMES,
    STAGING_DIRNAME,
    collection_dir,
    is_safe_filename,
    split_extension,
)
from ..utils.errors import (
    NotFoundError,
    PayloadTooLargeError,
    StorageError,
    UploadCancelledError,
    ValidationError,
)
from .allocator import allocate_filename
from .index_store import IndexStore

LOGGER = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024  # 1MB

CancelCheck = Callable[[], Awaitable[bool]]


class UploadSource(Protocol):
    """The subset of :class:`fastapi.UploadFile` used while staging."""

    filename: str | None

    async def read(self, size: int = -1) -> bytes: ...

    async def close(self) -> None: ...


@dataclass
class StagedUpload:
    """Uploaded bytes parked in the staging area until the index commit."""

    filename: str
    path: Path
    size: int

    def discard(self) -> None:
        self.path.unlink(missing_ok=True)


@dataclass
class UploadResult:
    filename: str
    record: DocumentRecord
    replaced: bool


class DocumentCollection:
    """Keep a collection's ``info.json`` in step with the files beside it.

    Every mutation runs under the directory lock of the underlying
    :class:`IndexStore`, so concurrent uploads and deletes against the same
    directory are serialised. Receiving upload bytes happens before the lock
    is taken.
    """

    def __init__(
        self,
        definition: CollectionDefinition,
        directory: Path,
        *,
        max_upload_size: int,
        allowed_extensions: Iterable[str] = (),
    ) -> None:
        self.definition = definition
        self.directory = Path(directory)
        self.staging_dir = self.directory / STAGING_DIRNAME
        self.max_upload_size = max_upload_size
        self.allowed_extensions = frozenset(ext.lower() for ext in allowed_extensions)
        self.directory.mkdir(parents=True, exist_ok=True)
        self.index = IndexStore(self.directory)

    @property
    def name(self) -> str:
        return self.definition.name

    @property
    def identity_fields(self) -> tuple[str, ...]:
        return self.definition.identity_fields

    # ------------------------------------------------------------------
    # Listing and retrieval
    # ------------------------------------------------------------------
    def list_documents(self) -> List[DocumentRecord]:
        return list(self.index.load())

    def resolve_file(self, filename: str) -> Path:
        """Return the path of a stored document, raising when it is not servable."""

        if not is_safe_filename(filename):
            raise NotFoundError("File not found")
        path = self.directory / filename
        if not path.is_file():
            raise NotFoundError("File not found")
        return path

    # ------------------------------------------------------------------
    # Upload
    # ------------------------------------------------------------------
    def validate_upload(
        self, fields: Mapping[str, str | None], filename: str | None
    ) -> dict[str, str]:
        """Check an upload request and return its identity values."""

        missing = [name for name in self.identity_fields if not fields.get(name)]
        if not filename:
            missing.append("file")
        if missing:
            raise ValidationError(
                f"Missing required fields: {', '.join(missing)}",
                extra={"missing": missing},
            )

        if not is_safe_filename(filename):
            raise ValidationError("Invalid filename")

        if self.definition.restrict_extensions:
            _, extension = split_extension(filename)
            if extension is None or extension.lower() not in self.allowed_extensions:
                allowed = ", ".join(sorted(self.allowed_extensions))
                raise ValidationError(f"Only {allowed} files are allowed")

        return {name: str(fields[name]) for name in self.identity_fields}

    async def stage(
        self,
        upload: UploadSource,
        filename: str,
        *,
        is_cancelled: CancelCheck | None = None,
    ) -> StagedUpload:
        """Receive the upload body into the staging area.

        The partial file is removed when the size limit is exceeded, the
        client disconnects or the request task is cancelled.
        """

        self.staging_dir.mkdir(parents=True, exist_ok=True)
        temp_path = self.staging_dir / f"{secrets.token_hex(16)}.part"
        total_bytes = 0

        try:
            with temp_path.open("wb") as buffer:
                while True:
                    if is_cancelled is not None and await is_cancelled():
                        raise UploadCancelledError("Upload cancelled by client")
                    chunk = await upload.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    total_bytes += len(chunk)
                    if total_bytes > self.max_upload_size:
                        raise PayloadTooLargeError("File exceeds maximum allowed size")
                    buffer.write(chunk)
        except OSError as exc:
            temp_path.unlink(missing_ok=True)
            raise StorageError("Failed to store uploaded file") from exc
        except BaseException:
            temp_path.unlink(missing_ok=True)
            raise
        finally:
            await upload.close()

        return StagedUpload(filename=filename, path=temp_path, size=total_bytes)

    def commit_upload(
        self, identity: Mapping[str, str], staged: StagedUpload
    ) -> UploadResult:
        """Insert or update the record for ``identity`` and move the file into place.

        On an overwrite the previous file is removed only once the new one is
        in place.
        """

        with self.index.lock:
            records = self.index.load()
            existing = next(
                (
                    record
                    for record in records
                    if record.matches(self.identity_fields, identity)
                ),
                None,
            )
            replaced_name = None

            if existing is not None:
                final_name = staged.filename
                claimed_elsewhere = records.filenames()
                claimed_elsewhere.remove(existing.filename)
                if final_name in claimed_elsewhere:
                    final_name = allocate_filename(
                        self.directory, staged.filename, taken=records.filenames()
                    )
                if existing.filename != final_name:
                    replaced_name = existing.filename
                existing.filename = final_name
                record = existing
            else:
                final_name = allocate_filename(
                    self.directory, staged.filename, taken=records.filenames()
                )
                record = DocumentRecord(**identity, filename=final_name)
                records.append(record)

            try:
                self.index.save(records)
            except StorageError:
                staged.discard()
                raise

            try:
                os.replace(staged.path, self.directory / final_name)
            except OSError as exc:
                staged.discard()
                LOGGER.error(
                    "Index for %s references %s but the file could not be written: %s",
                    self.name,
                    final_name,
                    exc,
                )
                raise StorageError("Failed to store uploaded file") from exc

            if replaced_name is not None:
                self._discard_replaced_file(replaced_name)

        LOGGER.info(
            "%s %s/%s (%d bytes)",
            "Replaced" if existing is not None else "Stored",
            self.name,
            final_name,
            staged.size,
        )
        return UploadResult(
            filename=final_name, record=record, replaced=existing is not None
        )

    async def upload(
        self,
        fields: Mapping[str, str | None],
        upload: UploadSource | None,
        *,
        is_cancelled: CancelCheck | None = None,
    ) -> UploadResult:
        """Validate, receive and commit one uploaded document."""

        filename = upload.filename if upload is not None else None
        identity = self.validate_upload(fields, filename)
        if upload is None or not filename:
            raise ValidationError(
                "Missing required fields: file", extra={"missing": ["file"]}
            )
        staged = await self.stage(upload, filename, is_cancelled=is_cancelled)
        return await run_in_threadpool(self.commit_upload, identity, staged)

    def _discard_replaced_file(self, filename: str) -> None:
        # Cleanup failures leave an untracked file behind; the upload proceeds.
        if not is_safe_filename(filename):
            LOGGER.warning("Skipping cleanup of unsafe filename %r in %s", filename, self.name)
            return
        try:
            (self.directory / filename).unlink()
        except FileNotFoundError:
            LOGGER.debug("Replaced file %s/%s was already gone", self.name, filename)
        except OSError as exc:
            LOGGER.warning(
                "Could not remove replaced file %s/%s: %s", self.name, filename, exc
            )

    # ------------------------------------------------------------------
    # Delete
    # ------------------------------------------------------------------
    def delete(self, fields: Mapping[str, str | None]) -> DocumentRecord:
        """Remove the record matching ``fields`` (or its ``id``) and its file."""

        record_id = fields.get("id")
        if not record_id:
            missing = [name for name in self.identity_fields if not fields.get(name)]
            if missing:
                raise ValidationError(
                    f"Missing required fields: {', '.join(missing)}",
                    extra={"missing": missing},
                )

        with self.index.transaction() as records:
            position = self._find(records, fields, record_id)
            if position is None:
                raise NotFoundError("Document not found")
            record = records[position]
            self._remove_backing_file(record)
            del records[position]

        LOGGER.info("Deleted %s/%s", self.name, record.filename)
        return record

    def _find(
        self,
        records: List[DocumentRecord],
        fields: Mapping[str, str | None],
        record_id: str | None,
    ) -> int | None:
        for position, record in enumerate(records):
            if record_id:
                if record.id == record_id:
                    return position
            elif record.matches(self.identity_fields, fields):
                return position
        return None

    def _remove_backing_file(self, record: DocumentRecord) -> None:
        if not is_safe_filename(record.filename):
            LOGGER.error(
                "Record %s in %s points outside the collection: %r",
                record.id,
                self.name,
                record.filename,
            )
            raise StorageError("Stored filename is invalid; record kept")
        try:
            (self.directory / record.filename).unlink()
        except FileNotFoundError:
            LOGGER.warning(
                "File %s/%s was already missing; dropping its record",
                self.name,
                record.filename,
            )
        except OSError as exc:
            LOGGER.error(
                "Could not delete %s/%s, record kept until the file can be removed: %s",
                self.name,
                record.filename,
                exc,
            )
            raise StorageError("Failed to delete file") from exc

    # ------------------------------------------------------------------
    # Maintenance
    # ------------------------------------------------------------------
    def reconcile(self, *, prune: bool = False) -> ReconcileReport:
        """Compare the index with the directory, optionally dropping dangling records."""

        with self.index.lock:
            records = self.index.load()
            missing = [
                record
                for record in records
                if not is_safe_filename(record.filename)
                or not (self.directory / record.filename).is_file()
            ]
            tracked = set(records.filenames())
            untracked = sorted(
                entry.name
                for entry in self.directory.iterdir()
                if entry.is_file()
                and not entry.name.startswith(".")
                and entry.name not in RESERVED_NAMES
                and entry.name not in tracked
            )

            pruned = 0
            if prune and missing:
                dangling = {id(record) for record in missing}
                before = len(records)
                records[:] = [record for record in records if id(record) not in dangling]
                self.index.save(records)
                pruned = before - len(records)

        if missing or untracked:
            LOGGER.warning(
                "Collection %s: %d record(s) without file, %d untracked file(s), %d pruned",
                self.name,
                len(missing),
                len(untracked),
                pruned,
            )
        return ReconcileReport(
            collection=self.name,
            missing_files=missing,
            untracked_files=untracked,
            pruned=pruned,
        )


def get_collection(name: str, settings: Settings) -> DocumentCollection:
    """Return the service for collection ``name`` rooted at the configured storage."""

    definition = get_collection_definition(name)
    return DocumentCollection(
        definition,
        collection_dir(settings.storage_root, name),
        max_upload_size=settings.max_upload_size,
        allowed_extensions=settings.writeup_extensions
        if definition.restrict_extensions
        else (),
    )


__all__ = [
    "CHUNK_SIZE",
    "DocumentCollection",
    "StagedUpload",
    "UploadResult",
    "get_collection",
]
