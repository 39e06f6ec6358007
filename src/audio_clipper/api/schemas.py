"""Wire models shared by several route modules.

Field names are camelCase on the wire and snake_case in Python.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from audio_clipper.domain.enums import ProcessingStatus, SourceOrigin
from audio_clipper.domain.models import Job, Selection, SourceInfo, SourceItem


class CamelModel(BaseModel):
    """Base model serialized with camelCase aliases."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SourceInfoSchema(CamelModel):
    title: str
    duration: int
    thumbnail: str | None = None
    channel: str | None = None

    @classmethod
    def from_domain(cls, info: SourceInfo) -> "SourceInfoSchema":
        return cls(
            title=info.title,
            duration=info.duration,
            thumbnail=info.thumbnail,
            channel=info.channel,
        )


class SourceItemSchema(CamelModel):
    id: str
    origin_type: SourceOrigin
    title: str
    duration: int
    remote_reference: str | None = None
    thumbnail: str | None = None
    channel: str | None = None
    status: ProcessingStatus
    created_at: datetime

    @classmethod
    def from_domain(cls, source: SourceItem) -> "SourceItemSchema":
        return cls(
            id=source.id,
            origin_type=source.origin,
            title=source.title,
            duration=source.duration,
            remote_reference=source.remote_reference,
            thumbnail=source.thumbnail,
            channel=source.channel,
            status=source.status,
            created_at=source.created_at,
        )


class JobSchema(CamelModel):
    id: str
    source_id: str
    status: ProcessingStatus
    progress: int
    error: str | None = None
    created_at: datetime

    @classmethod
    def from_domain(cls, job: Job) -> "JobSchema":
        return cls(
            id=job.id,
            source_id=job.source_id,
            status=job.status,
            progress=job.progress,
            error=job.error,
            created_at=job.created_at,
        )


class SelectionSchema(CamelModel):
    """A selection as reported to clients. Times are in seconds."""

    id: str
    source_id: str
    job_id: str
    position: int
    start_time: int
    end_time: int
    title: str
    filename: str | None = None
    status: ProcessingStatus
    file_size: int | None = None

    @classmethod
    def from_domain(cls, selection: Selection) -> "SelectionSchema":
        return cls(
            id=selection.id,
            source_id=selection.source_id,
            job_id=selection.job_id,
            position=selection.position,
            start_time=selection.start_time,
            end_time=selection.end_time,
            title=selection.title,
            filename=selection.filename,
            status=selection.status,
            file_size=selection.file_size,
        )
