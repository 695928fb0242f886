"""Index records and request/response schemas for clubdocs."""

from .collection import COLLECTIONS, CollectionDefinition, get_collection_definition
from .document import (
    BASE_IDENTITY_FIELDS,
    DeleteRequest,
    DeleteResponse,
    DocumentRecord,
    LoginRequest,
    LoginResponse,
    ReconcileReport,
    UploadResponse,
)

__all__ = [
    "BASE_IDENTITY_FIELDS",
    "COLLECTIONS",
    "CollectionDefinition",
    "DeleteRequest",
    "DeleteResponse",
    "DocumentRecord",
    "LoginRequest",
    "LoginResponse",
    "ReconcileReport",
    "UploadResponse",
    "get_collection_definition",
]
