"""SQLAlchemy-backed entity repository."""

import secrets
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import Engine, select
from sqlalchemy.exc import SQLAlchemyError

from audio_clipper.db.models import (
    AuthHandshakeModel,
    Base,
    JobModel,
    SelectionModel,
    SourceItemModel,
)
from audio_clipper.db.session import build_session_factory, check_connection, session_scope
from audio_clipper.domain.enums import ProcessingStatus, SourceOrigin
from audio_clipper.domain.models import AuthHandshake, Job, Selection, SourceItem
from audio_clipper.logging import get_logger
from audio_clipper.repositories.base import EntityRepository

logger = get_logger(__name__)


def _aware(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is stored in UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def _source_to_domain(row: SourceItemModel) -> SourceItem:
    return SourceItem(
        id=row.id,
        origin=SourceOrigin(row.origin),
        title=row.title,
        duration=row.duration,
        remote_reference=row.remote_reference,
        local_path=row.local_path,
        thumbnail=row.thumbnail,
        channel=row.channel,
        status=ProcessingStatus(row.status),
        created_at=_aware(row.created_at),
    )


def _job_to_domain(row: JobModel) -> Job:
    return Job(
        id=row.id,
        source_id=row.source_id,
        status=ProcessingStatus(row.status),
        progress=row.progress,
        error=row.error,
        created_at=_aware(row.created_at),
    )


def _selection_to_domain(row: SelectionModel) -> Selection:
    return Selection(
        id=row.id,
        source_id=row.source_id,
        job_id=row.job_id,
        position=row.position,
        start_time=row.start_time,
        end_time=row.end_time,
        title=row.title,
        filename=row.filename,
        status=ProcessingStatus(row.status),
        file_path=row.file_path,
        file_size=row.file_size,
    )


def _handshake_to_domain(row: AuthHandshakeModel) -> AuthHandshake:
    return AuthHandshake(
        token=row.token,
        selection_id=row.selection_id,
        created_at=_aware(row.created_at),
    )


class SqlRepository(EntityRepository):
    """Repository persisting entities through SQLAlchemy.

    Each operation runs in its own short transaction, so an update is
    committed as a single replace of the row.
    """

    def __init__(self, engine: Engine, create_tables: bool = False) -> None:
        self.engine = engine
        self._session_factory = build_session_factory(engine)
        if create_tables:
            Base.metadata.create_all(engine)

    def _apply(self, row: Any, changes: dict[str, Any]) -> None:
        for key, value in changes.items():
            if not hasattr(row, key):
                raise AttributeError(f"{type(row).__name__} has no column {key!r}")
            setattr(row, key, value)

    # --- Source items ---

    async def get_source(self, source_id: str) -> SourceItem | None:
        with session_scope(self._session_factory) as session:
            row = session.get(SourceItemModel, source_id)
            return _source_to_domain(row) if row else None

    async def get_source_by_reference(self, reference: str) -> SourceItem | None:
        with session_scope(self._session_factory) as session:
            row = session.scalars(
                select(SourceItemModel)
                .where(SourceItemModel.remote_reference == reference)
                .order_by(SourceItemModel.created_at)
                .limit(1)
            ).first()
            return _source_to_domain(row) if row else None

    async def create_source(self, source: SourceItem) -> SourceItem:
        with session_scope(self._session_factory) as session:
            session.add(
                SourceItemModel(
                    id=source.id,
                    origin=str(source.origin),
                    remote_reference=source.remote_reference,
                    local_path=source.local_path,
                    title=source.title,
                    duration=source.duration,
                    thumbnail=source.thumbnail,
                    channel=source.channel,
                    status=str(source.status),
                    created_at=source.created_at,
                )
            )
        return source

    async def update_source(self, source_id: str, **changes: Any) -> SourceItem | None:
        with session_scope(self._session_factory) as session:
            row = session.get(SourceItemModel, source_id)
            if row is None:
                return None
            self._apply(row, changes)
            session.flush()
            return _source_to_domain(row)

    # --- Jobs ---

    async def get_job(self, job_id: str) -> Job | None:
        with session_scope(self._session_factory) as session:
            row = session.get(JobModel, job_id)
            return _job_to_domain(row) if row else None

    async def get_job_by_source(self, source_id: str) -> Job | None:
        with session_scope(self._session_factory) as session:
            row = session.scalars(
                select(JobModel)
                .where(JobModel.source_id == source_id)
                .order_by(JobModel.created_at)
                .limit(1)
            ).first()
            return _job_to_domain(row) if row else None

    async def create_job_with_selections(
        self, job: Job, selections: list[Selection]
    ) -> tuple[Job, list[Selection]]:
        with session_scope(self._session_factory) as session:
            session.add(
                JobModel(
                    id=job.id,
                    source_id=job.source_id,
                    status=str(job.status),
                    progress=job.progress,
                    error=job.error,
                    created_at=job.created_at,
                )
            )
            # Flush the job first so selection foreign keys resolve.
            session.flush()
            session.add_all(
                SelectionModel(
                    id=s.id,
                    source_id=s.source_id,
                    job_id=s.job_id,
                    position=s.position,
                    start_time=s.start_time,
                    end_time=s.end_time,
                    title=s.title,
                    filename=s.filename,
                    status=str(s.status),
                    file_path=s.file_path,
                    file_size=s.file_size,
                )
                for s in selections
            )
        return job, list(selections)

    async def update_job(self, job_id: str, **changes: Any) -> Job | None:
        with session_scope(self._session_factory) as session:
            row = session.get(JobModel, job_id)
            if row is None:
                return None
            self._apply(row, changes)
            session.flush()
            return _job_to_domain(row)

    # --- Selections ---

    async def get_selection(self, selection_id: str) -> Selection | None:
        with session_scope(self._session_factory) as session:
            row = session.get(SelectionModel, selection_id)
            return _selection_to_domain(row) if row else None

    async def list_selections_for_job(self, job_id: str) -> list[Selection]:
        with session_scope(self._session_factory) as session:
            rows = session.scalars(
                select(SelectionModel)
                .where(SelectionModel.job_id == job_id)
                .order_by(SelectionModel.position)
            ).all()
            return [_selection_to_domain(r) for r in rows]

    async def list_selections_for_source(self, source_id: str) -> list[Selection]:
        with session_scope(self._session_factory) as session:
            rows = session.scalars(
                select(SelectionModel)
                .join(JobModel, SelectionModel.job_id == JobModel.id)
                .where(SelectionModel.source_id == source_id)
                .order_by(JobModel.created_at, SelectionModel.position)
            ).all()
            return [_selection_to_domain(r) for r in rows]

    async def update_selection(self, selection_id: str, **changes: Any) -> Selection | None:
        with session_scope(self._session_factory) as session:
            row = session.get(SelectionModel, selection_id)
            if row is None:
                return None
            self._apply(row, changes)
            session.flush()
            return _selection_to_domain(row)

    # --- Authorization handshakes ---

    async def create_auth_handshake(self, selection_id: str) -> AuthHandshake:
        handshake = AuthHandshake(token=secrets.token_urlsafe(32), selection_id=selection_id)
        with session_scope(self._session_factory) as session:
            session.add(
                AuthHandshakeModel(
                    token=handshake.token,
                    selection_id=handshake.selection_id,
                    created_at=handshake.created_at,
                )
            )
        return handshake

    async def get_auth_handshake(self, token: str) -> AuthHandshake | None:
        with session_scope(self._session_factory) as session:
            row = session.get(AuthHandshakeModel, token)
            return _handshake_to_domain(row) if row else None

    async def delete_auth_handshake(self, token: str) -> None:
        with session_scope(self._session_factory) as session:
            row = session.get(AuthHandshakeModel, token)
            if row is not None:
                session.delete(row)

    async def purge_expired_handshakes(self, ttl_seconds: int) -> int:
        with session_scope(self._session_factory) as session:
            rows = session.scalars(select(AuthHandshakeModel)).all()
            expired = [r for r in rows if _handshake_to_domain(r).is_expired(ttl_seconds)]
            for row in expired:
                session.delete(row)
                logger.info("auth_handshake_expired", selection_id=row.selection_id)
            return len(expired)

    async def health_check(self) -> bool:
        try:
            check_connection(self.engine)
            return True
        except SQLAlchemyError as e:
            logger.error("database_health_check_failed", error=str(e))
            return False
