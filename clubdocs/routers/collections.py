"""Pattern-identical routers for the managed document collections."""

from __future__ import annotations

from typing import Callable

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from fastapi.responses import FileResponse

from ..config import Settings, get_settings
from ..models import (
    COLLECTIONS,
    CollectionDefinition,
    DeleteRequest,
    DeleteResponse,
    DocumentRecord,
    ReconcileReport,
    UploadResponse,
)
from ..observability import metrics_registry
from ..services.documents import DocumentCollection, get_collection


def _collection_provider(name: str) -> Callable[..., DocumentCollection]:
    def provide(settings: Settings = Depends(get_settings)) -> DocumentCollection:
        return get_collection(name, settings)

    return provide


def build_collection_router(definition: CollectionDefinition) -> APIRouter:
    """Return the list/download/upload/delete/reconcile routes for ``definition``."""

    name = definition.name
    router = APIRouter(prefix=f"/api/{name}", tags=[name])
    provide_collection = _collection_provider(name)

    @router.get(
        "",
        response_model=list[DocumentRecord],
        response_model_exclude_none=True,
        name=f"list_{name}",
    )
    def list_documents(
        collection: DocumentCollection = Depends(provide_collection),
    ) -> list[DocumentRecord]:
        """Return the collection index exactly as stored."""

        return collection.list_documents()

    @router.post("/upload", response_model=UploadResponse, name=f"upload_{name}")
    async def upload_document(
        request: Request,
        file: UploadFile | None = File(None),
        title: str | None = Form(None),
        category: str | None = Form(None),
        description: str | None = Form(None),
        author: str | None = Form(None),
        collection: DocumentCollection = Depends(provide_collection),
    ) -> UploadResponse:
        """Store a document, replacing the file of an existing identical entry."""

        fields = {
            "title": title,
            "category": category,
            "description": description,
            "author": author,
        }
        result = await collection.upload(
            fields, file, is_cancelled=request.is_disconnected
        )
        metrics_registry.document_operation(
            name, "overwrite" if result.replaced else "upload"
        )
        return UploadResponse(filename=result.filename)

    @router.post("/delete", response_model=DeleteResponse, name=f"delete_{name}")
    def delete_document(
        payload: DeleteRequest,
        collection: DocumentCollection = Depends(provide_collection),
    ) -> DeleteResponse:
        """Delete the entry matching the identity fields and its file."""

        record = collection.delete(payload.model_dump())
        metrics_registry.document_operation(name, "delete")
        return DeleteResponse(message=f"Deleted {record.filename}")

    @router.post(
        "/reconcile", response_model=ReconcileReport, name=f"reconcile_{name}"
    )
    def reconcile_collection(
        prune: bool = False,
        collection: DocumentCollection = Depends(provide_collection),
    ) -> ReconcileReport:
        """Report index entries without files and files without entries."""

        report = collection.reconcile(prune=prune)
        metrics_registry.document_operation(name, "reconcile")
        return report

    @router.get("/{filename}", name=f"download_{name}")
    def download_document(
        filename: str,
        collection: DocumentCollection = Depends(provide_collection),
    ) -> FileResponse:
        """Return the raw bytes of a stored document."""

        return FileResponse(collection.resolve_file(filename))

    return router


routers: tuple[APIRouter, ...] = tuple(
    build_collection_router(definition) for definition in COLLECTIONS
)

__all__ = ["build_collection_router", "routers"]
