"""Domain models and business rules."""

from audio_clipper.domain.enums import NotificationType, ProcessingStatus, SourceOrigin
from audio_clipper.domain.exceptions import (
    AudioClipperError,
    InvalidStateError,
    MediaFetchError,
    NotFoundError,
    RemoteStorageError,
    RequestValidationError,
    SegmentExtractionError,
)
from audio_clipper.domain.models import (
    AuthHandshake,
    Job,
    JobStatusView,
    ProcessingRequest,
    Selection,
    SelectionSpec,
    SourceInfo,
    SourceItem,
    SubmissionResult,
)

__all__ = [
    "AudioClipperError",
    "AuthHandshake",
    "InvalidStateError",
    "Job",
    "JobStatusView",
    "MediaFetchError",
    "NotFoundError",
    "NotificationType",
    "ProcessingRequest",
    "ProcessingStatus",
    "RemoteStorageError",
    "RequestValidationError",
    "SegmentExtractionError",
    "Selection",
    "SelectionSpec",
    "SourceInfo",
    "SourceItem",
    "SourceOrigin",
    "SubmissionResult",
]
