"""Per-request context shared with log records and error responses."""

from __future__ import annotations

from contextvars import ContextVar, Token

REQUEST_ID_HEADER = "X-Request-ID"
_UNSET = "-"

_request_id: ContextVar[str] = ContextVar("tasktracker_request_id", default=_UNSET)
_user_id: ContextVar[str] = ContextVar("tasktracker_user_id", default=_UNSET)


def get_request_id() -> str:
    return _request_id.get()


def bind_request_id(request_id: str) -> Token[str]:
    """Bind ``request_id`` to the running task; keep the token to undo it."""

    return _request_id.set(request_id)


def reset_request_id(token: Token[str]) -> None:
    _request_id.reset(token)


def get_user_id() -> str:
    return _user_id.get()


def bind_user_id(user_id: str) -> Token[str]:
    """Record the authenticated account so later log lines can name it."""

    return _user_id.set(user_id)


def reset_user_id(token: Token[str]) -> None:
    _user_id.reset(token)


__all__ = [
    "REQUEST_ID_HEADER",
    "bind_request_id",
    "bind_user_id",
    "get_request_id",
    "get_user_id",
    "reset_request_id",
    "reset_user_id",
]
