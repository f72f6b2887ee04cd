"""Shared persistence helpers for Beanie-backed repositories."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Generic, TypeVar

from beanie import Document, PydanticObjectId
from bson import ObjectId

from ..models import utcnow

DocumentType = TypeVar("DocumentType", bound=Document)


def as_bson_datetime(value: datetime) -> datetime:
    """Naive UTC form used in query filters; stored values come back naive."""

    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def parse_object_id(raw: object) -> PydanticObjectId | None:
    """Return ``raw`` as an ObjectId when it is a 24 character hex string."""

    if isinstance(raw, ObjectId):
        return PydanticObjectId(raw)
    if not isinstance(raw, str) or len(raw) != 24 or not ObjectId.is_valid(raw):
        return None
    return PydanticObjectId(raw)


class BaseRepository(Generic[DocumentType]):
    """Provide CRUD primitives for a single document type."""

    def __init__(self, document_type: type[DocumentType]) -> None:
        self._document_type = document_type

    async def get(self, entity_id: PydanticObjectId) -> DocumentType | None:
        """Retrieve a document by ``_id``."""
        return await self._document_type.get(entity_id)

    async def add(self, instance: DocumentType) -> DocumentType:
        """Insert a new document."""
        await instance.insert()
        return instance

    async def save(self, instance: DocumentType) -> DocumentType:
        """Replace the stored document, bumping ``updated_at``."""
        if hasattr(instance, "updated_at"):
            instance.updated_at = utcnow()
        await instance.save()
        return instance

    async def delete(self, instance: DocumentType) -> None:
        await instance.delete()
