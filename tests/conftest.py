from __future__ import annotations

from collections.abc import AsyncIterator, Awaitable, Callable
from dataclasses import dataclass
from itertools import count

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from mongomock_motor import AsyncMongoMockClient

from tasktracker.core.config import Settings
from tasktracker.db import DocumentStore
from tasktracker.main import create_app
from tasktracker.services import ServiceContainer, build_services

DEFAULT_PASSWORD = "Secret123"


@dataclass(slots=True)
class AuthenticatedUser:
    id: str
    name: str
    email: str
    password: str
    token: str

    @property
    def headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}


@pytest.fixture
def settings() -> Settings:
    return Settings(
        environment="test",
        jwt_secret_key="test-secret",
        mongo_database="tasktracker_test",
    )


@pytest_asyncio.fixture
async def document_store(settings: Settings) -> AsyncIterator[DocumentStore]:
    store = DocumentStore(settings, client=AsyncMongoMockClient())
    await store.init()
    try:
        yield store
    finally:
        await store.close()


@pytest_asyncio.fixture
async def services(settings: Settings, document_store: DocumentStore) -> ServiceContainer:
    return build_services(settings)


@pytest_asyncio.fixture
async def app(settings: Settings, document_store: DocumentStore) -> FastAPI:
    return create_app(settings, document_store=document_store)


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as http_client:
        yield http_client


@pytest_asyncio.fixture
async def register_user(client: AsyncClient) -> Callable[..., Awaitable[AuthenticatedUser]]:
    counter = count()

    async def _factory(
        *,
        name: str = "Test User",
        email: str | None = None,
        password: str = DEFAULT_PASSWORD,
    ) -> AuthenticatedUser:
        actual_email = email or f"user-{next(counter)}@example.com"
        response = await client.post(
            "/api/auth/register",
            json={"name": name, "email": actual_email, "password": password},
        )
        assert response.status_code == 201, response.text
        body = response.json()
        return AuthenticatedUser(
            id=body["user"]["id"],
            name=name,
            email=body["user"]["email"],
            password=password,
            token=body["token"],
        )

    return _factory
