"""Domain enumerations."""

from enum import StrEnum


class SourceOrigin(StrEnum):
    """Where a source item's media comes from."""

    REMOTE_URL = "remote-url"
    UPLOADED_ASSET = "uploaded-asset"


class ProcessingStatus(StrEnum):
    """Lifecycle status shared by source items, jobs and selections."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self in (ProcessingStatus.COMPLETED, ProcessingStatus.ERROR)


class NotificationType(StrEnum):
    """Events pushed over the notification channel."""

    UPLOAD_SUCCESS = "upload-success"
    UPLOAD_FAILURE = "upload-failure"
