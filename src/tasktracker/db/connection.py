from __future__ import annotations

import asyncio
import logging

from beanie import init_beanie
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from ..core.config import Settings
from ..models import DOCUMENT_MODELS

logger = logging.getLogger(__name__)


class DocumentStore:
    """Owns the Motor client and binds the Beanie documents to a database."""

    def __init__(self, settings: Settings, *, client: AsyncIOMotorClient | None = None) -> None:
        self._settings = settings
        self._client = client
        self._owns_client = client is None
        self._database: AsyncIOMotorDatabase | None = None
        self._initialized = False
        self._lock = asyncio.Lock()

    @property
    def initialized(self) -> bool:
        return self._initialized

    async def init(self, *, force: bool = False) -> None:
        async with self._lock:
            if self._initialized and not force:
                return
            if self._client is None:
                self._client = AsyncIOMotorClient(
                    self._settings.mongo_url,
                    tz_aware=True,
                    uuidRepresentation="standard",
                )
                self._owns_client = True
            if self._owns_client:
                # Fail fast at startup when the server is unreachable.
                await self._client.admin.command("ping")
            self._database = self._client[self._settings.mongo_database]
            await init_beanie(database=self._database, document_models=DOCUMENT_MODELS)
            self._initialized = True
            logger.info(
                "Document store ready",
                extra={"database": self._settings.mongo_database},
            )

    async def close(self) -> None:
        client = self._client
        if client is not None and self._owns_client:
            client.close()
            self._client = None
        self._database = None
        self._initialized = False


__all__ = ["DocumentStore"]
