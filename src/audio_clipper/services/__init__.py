"""Application services."""

from audio_clipper.services.archive import ARCHIVE_DOWNLOAD_NAME, archive_entries, create_zip_archive
from audio_clipper.services.container import ServiceContainer, build_services
from audio_clipper.services.notifications import NotificationChannel
from audio_clipper.services.orchestrator import ProcessingOrchestrator
from audio_clipper.services.remote_upload import RemoteUploadService, UploadAcknowledgement
from audio_clipper.services.storage import StorageService, StoredAsset
from audio_clipper.services.sweeper import HandshakeSweeper

__all__ = [
    "ARCHIVE_DOWNLOAD_NAME",
    "HandshakeSweeper",
    "NotificationChannel",
    "ProcessingOrchestrator",
    "RemoteUploadService",
    "ServiceContainer",
    "StorageService",
    "StoredAsset",
    "UploadAcknowledgement",
    "archive_entries",
    "build_services",
    "create_zip_archive",
]
