"""Entity repositories."""

from audio_clipper.repositories.base import EntityRepository
from audio_clipper.repositories.memory import InMemoryRepository
from audio_clipper.repositories.sql import SqlRepository

__all__ = ["EntityRepository", "InMemoryRepository", "SqlRepository"]
