"""Seed script for populating development data."""

from __future__ import annotations

import asyncio
from datetime import timedelta

from ..core.config import get_settings
from ..models import Category, Priority, utcnow
from ..services import build_services
from .connection import DocumentStore

DEMO_NAME = "Demo User"
DEMO_EMAIL = "demo@example.com"
DEMO_PASSWORD = "Demo1234"


async def seed(store: DocumentStore | None = None) -> None:
    """Create a demo account with a few tasks unless it already exists."""

    settings = get_settings()
    store = store or DocumentStore(settings)
    await store.init()
    services = build_services(settings)
    try:
        user = await services.users.get_user_by_email(DEMO_EMAIL)
        if user is None:
            result = await services.auth.register(name=DEMO_NAME, email=DEMO_EMAIL, password=DEMO_PASSWORD)
            user = result.user

        existing = await services.tasks.general_stats(user.id)
        if existing.total:
            return

        now = utcnow()
        await services.tasks.create_task(
            user.id,
            title="Set up local environment",
            description="Install dependencies and start MongoDB.",
            category=Category.WORK,
            priority=Priority.HIGH,
            due_date=now + timedelta(days=1),
            tags=["setup"],
        )
        await services.tasks.create_task(
            user.id,
            title="Weekly groceries",
            category=Category.SHOPPING,
            tags=["home"],
        )
        studies = await services.tasks.create_task(
            user.id,
            title="Finish chapter 3",
            category=Category.STUDIES,
            priority=Priority.MEDIUM,
            due_date=now + timedelta(days=5),
        )
        await services.tasks.add_subtask(user.id, str(studies.id), "Read section 3.1")
        await services.tasks.add_subtask(user.id, str(studies.id), "Solve exercises")
    finally:
        await store.close()


def main() -> None:
    """Entry-point hook for ``python -m`` execution."""
    asyncio.run(seed())


if __name__ == "__main__":  # pragma: no cover - manual execution entry-point
    main()
