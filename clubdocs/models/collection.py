"""Static description of the managed document collections."""

from __future__ import annotations

from dataclasses import dataclass

from .document import BASE_IDENTITY_FIELDS


@dataclass(frozen=True)
class CollectionDefinition:
    """Schema of one managed collection.

    ``identity_fields`` are the record attributes compared for overwrite and
    delete lookups; every one of them is required on upload.
    ``restrict_extensions`` limits uploads to the configured writeup types.
    """

    name: str
    identity_fields: tuple[str, ...] = BASE_IDENTITY_FIELDS
    restrict_extensions: bool = False


COLLECTIONS: tuple[CollectionDefinition, ...] = (
    CollectionDefinition(name="events"),
    CollectionDefinition(name="docs"),
    CollectionDefinition(
        name="writeups",
        identity_fields=BASE_IDENTITY_FIELDS + ("author",),
        restrict_extensions=True,
    ),
)


def get_collection_definition(name: str) -> CollectionDefinition:
    """Return the definition registered under ``name``."""

    for definition in COLLECTIONS:
        if definition.name == name:
            return definition
    raise KeyError(name)


__all__ = ["COLLECTIONS", "CollectionDefinition", "get_collection_definition"]
