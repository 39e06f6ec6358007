"""Base interface for entity repositories."""

from abc import ABC, abstractmethod
from typing import Any

from audio_clipper.domain.models import AuthHandshake, Job, Selection, SourceItem


class EntityRepository(ABC):
    """Storage for source items, jobs, selections and authorization handshakes.

    Every ``update_*`` call replaces the whole record in one step and returns
    the new record, or ``None`` when the id is unknown. Lookups only match
    natural keys exactly.

    Implementations:
    - InMemoryRepository: process-lifetime dictionaries
    - SqlRepository: SQLAlchemy-backed tables
    """

    # Source items

    @abstractmethod
    async def get_source(self, source_id: str) -> SourceItem | None: ...

    @abstractmethod
    async def get_source_by_reference(self, reference: str) -> SourceItem | None:
        """Find a remote-origin source item by its exact reference."""
        ...

    @abstractmethod
    async def create_source(self, source: SourceItem) -> SourceItem: ...

    @abstractmethod
    async def update_source(self, source_id: str, **changes: Any) -> SourceItem | None: ...

    # Jobs

    @abstractmethod
    async def get_job(self, job_id: str) -> Job | None: ...

    @abstractmethod
    async def get_job_by_source(self, source_id: str) -> Job | None:
        """Get the earliest job created for a source item."""
        ...

    @abstractmethod
    async def create_job_with_selections(
        self, job: Job, selections: list[Selection]
    ) -> tuple[Job, list[Selection]]:
        """Persist a job and all of its selections as one unit."""
        ...

    @abstractmethod
    async def update_job(self, job_id: str, **changes: Any) -> Job | None: ...

    # Selections

    @abstractmethod
    async def get_selection(self, selection_id: str) -> Selection | None: ...

    @abstractmethod
    async def list_selections_for_job(self, job_id: str) -> list[Selection]:
        """Selections of a job, in creation order."""
        ...

    @abstractmethod
    async def list_selections_for_source(self, source_id: str) -> list[Selection]:
        """Selections of every job run against a source item."""
        ...

    @abstractmethod
    async def update_selection(self, selection_id: str, **changes: Any) -> Selection | None: ...

    # Authorization handshakes

    @abstractmethod
    async def create_auth_handshake(self, selection_id: str) -> AuthHandshake: ...

    @abstractmethod
    async def get_auth_handshake(self, token: str) -> AuthHandshake | None: ...

    @abstractmethod
    async def delete_auth_handshake(self, token: str) -> None: ...

    @abstractmethod
    async def purge_expired_handshakes(self, ttl_seconds: int) -> int:
        """Delete handshakes older than the TTL and return how many were removed."""
        ...

    async def health_check(self) -> bool:
        """Check if the backing store is reachable."""
        return True
