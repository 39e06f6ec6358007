"""Domain models - pure Python classes independent of storage."""

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from uuid import uuid4

from audio_clipper.domain.enums import ProcessingStatus, SourceOrigin


def _new_id() -> str:
    return str(uuid4())


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True)
class SourceInfo:
    """Metadata describing a piece of source media."""

    title: str
    duration: int
    thumbnail: str | None = None
    channel: str | None = None


@dataclass(frozen=True)
class SourceItem:
    """A unit of source media, from a remote reference or a direct upload."""

    id: str
    origin: SourceOrigin
    title: str
    duration: int
    remote_reference: str | None = None
    local_path: str | None = None
    thumbnail: str | None = None
    channel: str | None = None
    status: ProcessingStatus = ProcessingStatus.PENDING
    created_at: datetime = field(default_factory=_utcnow)

    @classmethod
    def from_remote(cls, reference: str, info: SourceInfo) -> "SourceItem":
        """Create a source item for a remote reference."""
        return cls(
            id=_new_id(),
            origin=SourceOrigin.REMOTE_URL,
            title=info.title,
            duration=info.duration,
            remote_reference=reference,
            thumbnail=info.thumbnail,
            channel=info.channel,
        )

    @classmethod
    def from_upload(cls, local_path: str, info: SourceInfo) -> "SourceItem":
        """Create a source item for an uploaded audio file."""
        return cls(
            id=_new_id(),
            origin=SourceOrigin.UPLOADED_ASSET,
            title=info.title,
            duration=info.duration,
            local_path=local_path,
            thumbnail=info.thumbnail,
            channel=info.channel,
        )

    @property
    def info(self) -> SourceInfo:
        return SourceInfo(
            title=self.title,
            duration=self.duration,
            thumbnail=self.thumbnail,
            channel=self.channel,
        )


@dataclass(frozen=True)
class Job:
    """One processing run over a source item."""

    id: str
    source_id: str
    status: ProcessingStatus = ProcessingStatus.PENDING
    progress: int = 0
    error: str | None = None
    created_at: datetime = field(default_factory=_utcnow)

    @classmethod
    def create(cls, source_id: str) -> "Job":
        """Create a new pending job."""
        return cls(id=_new_id(), source_id=source_id)


@dataclass(frozen=True)
class Selection:
    """One requested time range and its resulting clip."""

    id: str
    source_id: str
    job_id: str
    position: int
    start_time: int
    end_time: int
    title: str
    filename: str | None = None
    status: ProcessingStatus = ProcessingStatus.PENDING
    file_path: str | None = None
    file_size: int | None = None

    @classmethod
    def create(
        cls,
        job: Job,
        position: int,
        start_time: int,
        end_time: int,
        title: str,
    ) -> "Selection":
        """Create a pending selection belonging to a job."""
        return cls(
            id=_new_id(),
            source_id=job.source_id,
            job_id=job.id,
            position=position,
            start_time=start_time,
            end_time=end_time,
            title=title,
        )

    @property
    def duration(self) -> int:
        return self.end_time - self.start_time


@dataclass(frozen=True)
class AuthHandshake:
    """Single-use correlation record for a remote storage consent flow."""

    token: str
    selection_id: str
    created_at: datetime = field(default_factory=_utcnow)

    def is_expired(self, ttl_seconds: int, now: datetime | None = None) -> bool:
        """Whether the handshake is older than the TTL."""
        now = now or _utcnow()
        return now - self.created_at > timedelta(seconds=ttl_seconds)


@dataclass
class SelectionSpec:
    """A requested time range, as submitted by a client."""

    start_time: str
    end_time: str
    title: str


@dataclass
class ProcessingRequest:
    """Request to cut one or more clips out of a source."""

    origin: SourceOrigin
    selections: list[SelectionSpec]
    remote_reference: str | None = None
    uploaded_source_id: str | None = None


@dataclass
class SubmissionResult:
    """Identifiers returned as soon as a processing request is accepted."""

    job_id: str
    source_id: str
    selections: list[Selection]


@dataclass
class JobStatusView:
    """A job together with its source item and selections."""

    job: Job
    source: SourceItem
    selections: list[Selection]
