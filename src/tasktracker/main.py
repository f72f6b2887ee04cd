"""Entry point for the task tracker API."""

from __future__ import annotations

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.routers import api_router, health_router
from .core.config import Settings, get_settings
from .core.logging import configure_logging
from .core.middleware import CorrelationIdMiddleware
from .db import DocumentStore
from .deps import SettingsDependency
from .errors import register_exception_handlers
from .schemas.system import RootResponse
from .services import build_services


def _normalise_prefix(raw_prefix: str) -> str:
    prefix = raw_prefix.strip()
    if prefix and not prefix.startswith("/"):
        prefix = f"/{prefix}"
    prefix = prefix.rstrip("/")
    return "" if prefix == "/" else prefix


def create_app(
    settings: Settings | None = None,
    *,
    document_store: DocumentStore | None = None,
) -> FastAPI:
    """Instantiate and configure the FastAPI application.

    ``document_store`` lets callers supply a store bound to a different client;
    the startup hook initialises whichever store the app holds.
    """

    settings = settings or get_settings()
    configure_logging(settings)

    router_prefix = _normalise_prefix(settings.api_prefix)
    openapi_url = f"{router_prefix}/openapi.json"

    application = FastAPI(
        title=settings.project_name,
        version=settings.version,
        summary="Personal task tracking REST API.",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url=openapi_url,
    )

    application.state.settings = settings
    application.state.document_store = document_store or DocumentStore(settings)
    application.state.services = build_services(settings)

    application.add_middleware(CorrelationIdMiddleware)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )

    application.include_router(api_router, prefix=router_prefix)
    application.include_router(health_router)

    @application.get(f"{router_prefix}/metadata", response_model=RootResponse, summary="Service metadata")
    async def read_api_metadata(app_settings: SettingsDependency) -> RootResponse:
        """Expose minimal service metadata for API clients."""

        return RootResponse(
            name=app_settings.project_name,
            environment=app_settings.environment,
            version=app_settings.version,
            api_prefix=router_prefix or "/",
        )

    register_exception_handlers(application)

    @application.on_event("startup")
    async def _initialise_document_store() -> None:
        await application.state.document_store.init()

    @application.on_event("shutdown")
    async def _dispose_document_store() -> None:
        await application.state.document_store.close()

    return application


app = create_app()


def run() -> None:
    """Console entry point: ``tasktracker``."""

    settings: Settings = get_settings()
    uvicorn.run(
        "tasktracker.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=settings.reload,
        log_config=None,
    )
