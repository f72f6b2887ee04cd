"""Persistence adapters over the Beanie documents."""

from .base import BaseRepository, parse_object_id
from .tasks import TaskRepository
from .users import UserRepository

__all__ = ["BaseRepository", "TaskRepository", "parse_object_id", "UserRepository"]
