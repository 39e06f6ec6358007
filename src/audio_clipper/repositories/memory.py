"""In-memory entity repository."""

import secrets
from dataclasses import replace
from typing import Any

from audio_clipper.domain.models import AuthHandshake, Job, Selection, SourceItem
from audio_clipper.logging import get_logger
from audio_clipper.repositories.base import EntityRepository

logger = get_logger(__name__)


class InMemoryRepository(EntityRepository):
    """Repository keeping every entity in dictionaries for the process lifetime.

    Records are immutable dataclasses, so an update builds a new record and
    swaps it into the map. Readers never see a half-applied update.
    """

    def __init__(self) -> None:
        self._sources: dict[str, SourceItem] = {}
        self._jobs: dict[str, Job] = {}
        self._selections: dict[str, Selection] = {}
        self._handshakes: dict[str, AuthHandshake] = {}

    # --- Source items ---

    async def get_source(self, source_id: str) -> SourceItem | None:
        return self._sources.get(source_id)

    async def get_source_by_reference(self, reference: str) -> SourceItem | None:
        for source in self._sources.values():
            if source.remote_reference == reference:
                return source
        return None

    async def create_source(self, source: SourceItem) -> SourceItem:
        self._sources[source.id] = source
        return source

    async def update_source(self, source_id: str, **changes: Any) -> SourceItem | None:
        source = self._sources.get(source_id)
        if source is None:
            return None
        updated = replace(source, **changes)
        self._sources[source_id] = updated
        return updated

    # --- Jobs ---

    async def get_job(self, job_id: str) -> Job | None:
        return self._jobs.get(job_id)

    async def get_job_by_source(self, source_id: str) -> Job | None:
        for job in self._jobs.values():
            if job.source_id == source_id:
                return job
        return None

    async def create_job_with_selections(
        self, job: Job, selections: list[Selection]
    ) -> tuple[Job, list[Selection]]:
        self._jobs[job.id] = job
        for selection in selections:
            self._selections[selection.id] = selection
        return job, list(selections)

    async def update_job(self, job_id: str, **changes: Any) -> Job | None:
        job = self._jobs.get(job_id)
        if job is None:
            return None
        updated = replace(job, **changes)
        self._jobs[job_id] = updated
        return updated

    # --- Selections ---

    async def get_selection(self, selection_id: str) -> Selection | None:
        return self._selections.get(selection_id)

    async def list_selections_for_job(self, job_id: str) -> list[Selection]:
        selections = [s for s in self._selections.values() if s.job_id == job_id]
        return sorted(selections, key=lambda s: s.position)

    async def list_selections_for_source(self, source_id: str) -> list[Selection]:
        return [s for s in self._selections.values() if s.source_id == source_id]

    async def update_selection(self, selection_id: str, **changes: Any) -> Selection | None:
        selection = self._selections.get(selection_id)
        if selection is None:
            return None
        updated = replace(selection, **changes)
        self._selections[selection_id] = updated
        return updated

    # --- Authorization handshakes ---

    async def create_auth_handshake(self, selection_id: str) -> AuthHandshake:
        handshake = AuthHandshake(token=secrets.token_urlsafe(32), selection_id=selection_id)
        self._handshakes[handshake.token] = handshake
        return handshake

    async def get_auth_handshake(self, token: str) -> AuthHandshake | None:
        return self._handshakes.get(token)

    async def delete_auth_handshake(self, token: str) -> None:
        self._handshakes.pop(token, None)

    async def purge_expired_handshakes(self, ttl_seconds: int) -> int:
        expired = [
            token
            for token, handshake in self._handshakes.items()
            if handshake.is_expired(ttl_seconds)
        ]
        for token in expired:
            handshake = self._handshakes.pop(token)
            logger.info("auth_handshake_expired", selection_id=handshake.selection_id)
        return len(expired)
