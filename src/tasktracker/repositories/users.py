"""Repository for account documents."""

from __future__ import annotations

from ..models import User
from .base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Concrete repository for ``User`` documents."""

    def __init__(self) -> None:
        super().__init__(User)

    async def get_by_email(self, email: str) -> User | None:
        """Return the account registered under ``email`` (already normalised)."""
        return await User.find_one({"email": email})

    async def email_taken(self, email: str, *, exclude: User | None = None) -> bool:
        existing = await self.get_by_email(email)
        if existing is None:
            return False
        return exclude is None or existing.id != exclude.id
