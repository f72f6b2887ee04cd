"""Timestamp helpers shared by the stored documents."""

from __future__ import annotations

from datetime import datetime, timezone


def to_storage_precision(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime truncated to milliseconds.

    MongoDB keeps millisecond precision and hands back naive UTC values, so
    every timestamp goes through here before it is stored or compared.
    """

    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    else:
        value = value.astimezone(timezone.utc)
    return value.replace(microsecond=value.microsecond // 1000 * 1000)


def utcnow() -> datetime:
    return to_storage_precision(datetime.now(timezone.utc))


def ensure_utc(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    return to_storage_precision(value)


__all__ = ["ensure_utc", "to_storage_precision", "utcnow"]
