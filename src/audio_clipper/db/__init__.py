"""Database models and session management."""

from audio_clipper.db.models import (
    AuthHandshakeModel,
    Base,
    JobModel,
    SelectionModel,
    SourceItemModel,
)
from audio_clipper.db.session import build_engine, build_session_factory, session_scope

__all__ = [
    "AuthHandshakeModel",
    "Base",
    "JobModel",
    "SelectionModel",
    "SourceItemModel",
    "build_engine",
    "build_session_factory",
    "session_scope",
]
