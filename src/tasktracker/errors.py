"""Error taxonomy and the FastAPI handlers that render it."""

from __future__ import annotations

import logging
from contextvars import Token
from http import HTTPStatus
from typing import Any, Mapping, Sequence

from fastapi import FastAPI, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pymongo.errors import DuplicateKeyError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.requests import Request

from .core.context import REQUEST_ID_HEADER, bind_request_id, reset_request_id
from .schemas.system import ErrorResponse

logger = logging.getLogger(__name__)

_BEARER_CHALLENGE = {"WWW-Authenticate": "Bearer"}


class ApplicationError(Exception):
    """Base class for errors that map onto a JSON error response."""

    def __init__(
        self,
        message: str,
        *,
        code: str = "application_error",
        status_code: int = status.HTTP_400_BAD_REQUEST,
        details: Any | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details
        self.headers = dict(headers) if headers else None


class ValidationError(ApplicationError):
    """Input rejected by a business rule.

    ``errors`` is a list of ``{"field": ..., "message": ...}`` entries and is
    exposed to clients as ``details.errors``.
    """

    def __init__(
        self,
        message: str = "Validation failed.",
        *,
        code: str = "validation_error",
        errors: Sequence[Mapping[str, Any]] | None = None,
        details: Any | None = None,
    ) -> None:
        if errors is not None:
            details = {**(details or {}), "errors": [dict(item) for item in errors]}
        super().__init__(message, code=code, status_code=status.HTTP_400_BAD_REQUEST, details=details)
        self.errors = list(errors or [])


class InvalidDueDateError(ValidationError):
    def __init__(self, message: str = "Due date must be in the future.") -> None:
        super().__init__(
            message,
            code="invalid_due_date",
            errors=[{"field": "dueDate", "message": message}],
        )


class InvalidIdError(ValidationError):
    def __init__(self, message: str = "Invalid identifier.") -> None:
        super().__init__(message, code="invalid_id")


class InvalidCredentialsError(ApplicationError):
    """Login failure; one message for every cause so accounts cannot be probed."""

    def __init__(self, message: str = "Invalid credentials.") -> None:
        super().__init__(message, code="invalid_credentials", status_code=status.HTTP_400_BAD_REQUEST)


class WrongPasswordError(ApplicationError):
    def __init__(self, message: str = "Current password is incorrect.") -> None:
        super().__init__(message, code="wrong_password", status_code=status.HTTP_400_BAD_REQUEST)


class DuplicateError(ApplicationError):
    def __init__(
        self,
        message: str = "Resource already exists.",
        *,
        code: str = "duplicate_error",
        details: Any | None = None,
    ) -> None:
        super().__init__(message, code=code, status_code=status.HTTP_400_BAD_REQUEST, details=details)


class DuplicateEmailError(DuplicateError):
    def __init__(self, message: str = "Email is already registered.") -> None:
        super().__init__(message, code="duplicate_email")


class AuthenticationError(ApplicationError):
    """Base for every 401 answer; always carries a Bearer challenge."""

    def __init__(self, message: str = "Authentication required.", *, code: str = "unauthorized") -> None:
        super().__init__(
            message,
            code=code,
            status_code=status.HTTP_401_UNAUTHORIZED,
            headers=_BEARER_CHALLENGE,
        )


class MissingTokenError(AuthenticationError):
    def __init__(self, message: str = "Access token not provided.") -> None:
        super().__init__(message, code="missing_token")


class InvalidTokenError(AuthenticationError):
    def __init__(self, message: str = "Invalid access token.") -> None:
        super().__init__(message, code="invalid_token")


class TokenExpiredError(AuthenticationError):
    def __init__(self, message: str = "Access token has expired.") -> None:
        super().__init__(message, code="token_expired")


class AccountDeactivatedError(AuthenticationError):
    def __init__(self, message: str = "Account is deactivated.") -> None:
        super().__init__(message, code="account_deactivated")


class NotFoundError(ApplicationError):
    def __init__(
        self,
        message: str = "Resource not found.",
        *,
        code: str = "not_found",
        details: Any | None = None,
    ) -> None:
        super().__init__(message, code=code, status_code=status.HTTP_404_NOT_FOUND, details=details)


class ServerError(ApplicationError):
    def __init__(
        self,
        message: str = "Internal server error.",
        *,
        code: str = "server_error",
        details: Any | None = None,
    ) -> None:
        super().__init__(
            message,
            code=code,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            details=details,
        )


_HTTP_STATUS_CODE_MAP: dict[int, str] = {
    status.HTTP_400_BAD_REQUEST: "bad_request",
    status.HTTP_401_UNAUTHORIZED: "unauthorized",
    status.HTTP_403_FORBIDDEN: "forbidden",
    status.HTTP_404_NOT_FOUND: "not_found",
    status.HTTP_405_METHOD_NOT_ALLOWED: "method_not_allowed",
}


def _bind_request_context(request: Request) -> Token[str] | None:
    request_id = getattr(request.state, "request_id", None)
    if not request_id:
        return None
    return bind_request_id(request_id)


def _reset_request_context(token: Token[str] | None) -> None:
    if token is not None:
        reset_request_id(token)


def _merge_details_with_request(request: Request, details: Any | None) -> Any | None:
    request_id = getattr(request.state, "request_id", None)
    if not request_id:
        return details
    if details is None:
        return {"request_id": request_id}
    if isinstance(details, dict):
        return {**details, "request_id": details.get("request_id", request_id)}
    return {"request_id": request_id, "detail": details}


def _error_response(
    request: Request,
    *,
    status_code: int,
    code: str,
    message: str,
    details: Any | None = None,
    headers: Mapping[str, str] | None = None,
) -> JSONResponse:
    payload = ErrorResponse(
        code=code,
        message=message,
        details=_merge_details_with_request(request, details),
    )
    response = JSONResponse(status_code=status_code, content=payload.model_dump(mode="json"))
    if headers:
        response.headers.update(headers)
    request_id = getattr(request.state, "request_id", None)
    if request_id:
        response.headers.setdefault(REQUEST_ID_HEADER, request_id)
    return response


def _describe_request_errors(errors: Sequence[Mapping[str, Any]]) -> list[dict[str, str]]:
    """Flatten FastAPI's validation errors into ``field``/``message`` pairs."""

    described: list[dict[str, str]] = []
    for error in errors:
        location = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        described.append(
            {
                "field": ".".join(location) or "request",
                "message": str(error.get("msg", "Invalid value.")),
                "type": str(error.get("type", "value_error")),
            }
        )
    return described


def _http_exception_message(status_code: int, detail: Any) -> tuple[str, Any | None]:
    if isinstance(detail, str):
        return detail, None
    try:
        phrase = HTTPStatus(status_code).phrase
    except ValueError:
        phrase = "Error"
    return phrase, detail


def _exposes_error_details(request: Request) -> bool:
    settings = getattr(request.app.state, "settings", None)
    return bool(getattr(settings, "expose_error_details", False))


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the JSON error handlers to ``app``."""

    @app.exception_handler(ApplicationError)
    async def _handle_application_error(request: Request, exc: ApplicationError) -> JSONResponse:
        token = _bind_request_context(request)
        try:
            log = logger.error if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR else logger.warning
            log(
                "Application error encountered",
                extra={"code": exc.code, "status_code": exc.status_code, "path": request.url.path},
            )
            return _error_response(
                request,
                status_code=exc.status_code,
                code=exc.code,
                message=exc.message,
                details=exc.details,
                headers=exc.headers,
            )
        finally:
            _reset_request_context(token)

    @app.exception_handler(RequestValidationError)
    async def _handle_request_validation_error(
        request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        token = _bind_request_context(request)
        try:
            errors = _describe_request_errors(exc.errors())
            logger.warning("Request validation failed", extra={"errors": errors})
            return _error_response(
                request,
                status_code=status.HTTP_400_BAD_REQUEST,
                code="validation_error",
                message="Request validation failed.",
                details={"errors": errors},
            )
        finally:
            _reset_request_context(token)

    @app.exception_handler(DuplicateKeyError)
    async def _handle_duplicate_key(request: Request, exc: DuplicateKeyError) -> JSONResponse:
        token = _bind_request_context(request)
        try:
            logger.warning("Unique index rejected a write", extra={"path": request.url.path})
            return _error_response(
                request,
                status_code=status.HTTP_400_BAD_REQUEST,
                code="duplicate_error",
                message="Resource already exists.",
            )
        finally:
            _reset_request_context(token)

    @app.exception_handler(StarletteHTTPException)
    async def _handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        token = _bind_request_context(request)
        try:
            code = _HTTP_STATUS_CODE_MAP.get(exc.status_code, "http_error")
            message, details = _http_exception_message(exc.status_code, exc.detail)
            log = logger.error if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR else logger.warning
            log(
                "HTTP exception raised",
                extra={"code": code, "status_code": exc.status_code, "path": request.url.path},
            )
            return _error_response(
                request,
                status_code=exc.status_code,
                code=code,
                message=message,
                details=details,
                headers=exc.headers,
            )
        finally:
            _reset_request_context(token)

    @app.exception_handler(Exception)
    async def _handle_unhandled_exception(request: Request, exc: Exception) -> JSONResponse:
        token = _bind_request_context(request)
        try:
            logger.exception("Unhandled application error.", extra={"path": request.url.path})
            error = ServerError(details={"error": str(exc)} if _exposes_error_details(request) else None)
            return _error_response(
                request,
                status_code=error.status_code,
                code=error.code,
                message=error.message,
                details=error.details,
            )
        finally:
            _reset_request_context(token)


__all__ = [
    "AccountDeactivatedError",
    "ApplicationError",
    "AuthenticationError",
    "DuplicateEmailError",
    "DuplicateError",
    "InvalidCredentialsError",
    "InvalidDueDateError",
    "InvalidIdError",
    "InvalidTokenError",
    "MissingTokenError",
    "NotFoundError",
    "ServerError",
    "TokenExpiredError",
    "ValidationError",
    "WrongPasswordError",
    "register_exception_handlers",
]
