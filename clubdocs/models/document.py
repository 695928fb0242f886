"""Document index records and API payload schemas."""

from __future__ import annotations

import uuid
from typing import Dict, List, Mapping

from pydantic import BaseModel, ConfigDict, Field

BASE_IDENTITY_FIELDS: tuple[str, ...] = ("title", "category", "description")


def _new_record_id() -> str:
    return uuid.uuid4().hex


class DocumentRecord(BaseModel):
    """One entry of a collection's ``info.json`` index."""

    model_config = ConfigDict(extra="allow")

    id: str = Field(default_factory=_new_record_id)
    title: str
    category: str
    description: str
    author: str | None = None
    filename: str

    def matches(self, fields: tuple[str, ...], values: Mapping[str, str]) -> bool:
        """Return ``True`` when every identity field equals ``values`` exactly."""

        return all(getattr(self, name, None) == values.get(name) for name in fields)

    def to_json(self) -> Dict[str, object]:
        """Return the serialised form written to the index file."""

        return self.model_dump(mode="json", exclude_none=True)


class UploadResponse(BaseModel):
    success: bool = True
    filename: str


class DeleteRequest(BaseModel):
    """Identity fields (or a record id) naming the document to delete."""

    model_config = ConfigDict(extra="ignore")

    id: str | None = None
    title: str | None = None
    category: str | None = None
    description: str | None = None
    author: str | None = None


class DeleteResponse(BaseModel):
    success: bool = True
    message: str


class ReconcileReport(BaseModel):
    """Differences between a collection index and its managed directory."""

    collection: str
    missing_files: List[DocumentRecord] = Field(default_factory=list)
    untracked_files: List[str] = Field(default_factory=list)
    pruned: int = 0


class LoginRequest(BaseModel):
    username: str = ""
    password: str = ""


class LoginResponse(BaseModel):
    success: bool = True


__all__ = [
    "BASE_IDENTITY_FIELDS",
    "DeleteRequest",
    "DeleteResponse",
    "DocumentRecord",
    "LoginRequest",
    "LoginResponse",
    "ReconcileReport",
    "UploadResponse",
]
