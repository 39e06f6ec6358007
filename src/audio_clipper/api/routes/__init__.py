"""API route modules."""

from audio_clipper.api.routes import (
    downloads,
    health,
    jobs,
    remote_storage,
    sources,
    websocket,
)

__all__ = ["downloads", "health", "jobs", "remote_storage", "sources", "websocket"]
