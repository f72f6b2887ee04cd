"""Service metadata, health and error envelope models."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class RootResponse(BaseModel):
    """Metadata payload describing the running service."""

    name: str = Field(description="Human-friendly service name")
    environment: str = Field(description="Deployment environment identifier")
    version: str = Field(description="Semantic version of the service")
    api_prefix: str = Field(description="Base path for API routes")


class HealthCheckResponse(BaseModel):
    status: str = Field(default="ok", description="Service health indicator")
    database: str = Field(default="ok", description="Document store reachability")


class ErrorResponse(BaseModel):
    """Body of every non-2xx response."""

    code: str = Field(description="Machine-readable error identifier")
    message: str = Field(description="Human-readable error message")
    details: Any | None = Field(
        default=None,
        description="Structured context such as per-field errors and the request id.",
    )


__all__ = ["ErrorResponse", "HealthCheckResponse", "RootResponse"]
