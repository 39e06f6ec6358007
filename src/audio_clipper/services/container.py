"""Composition root: one instance of every service per running process."""

from dataclasses import dataclass
from typing import Any

from audio_clipper.adapters.extractor import FfmpegExtractor, SegmentExtractor, StubSegmentExtractor
from audio_clipper.adapters.fetcher import MediaFetcher, StubMediaFetcher, YtDlpFetcher
from audio_clipper.adapters.remote_storage import (
    GoogleDriveProvider,
    RemoteStorageProvider,
    StubRemoteStorageProvider,
)
from audio_clipper.config import Settings, get_settings
from audio_clipper.logging import get_logger
from audio_clipper.repositories import EntityRepository, InMemoryRepository, SqlRepository
from audio_clipper.services.notifications import NotificationChannel
from audio_clipper.services.orchestrator import ProcessingOrchestrator
from audio_clipper.services.remote_upload import RemoteUploadService
from audio_clipper.services.storage import StorageService
from audio_clipper.services.sweeper import HandshakeSweeper

logger = get_logger(__name__)


def get_media_fetcher(settings: Settings) -> MediaFetcher:
    """Get the configured media fetcher."""
    provider = settings.media_fetcher.lower()

    if provider == "ytdlp":
        return YtDlpFetcher(
            strategies=settings.ytdlp_player_clients,
            ffmpeg_path=settings.ffmpeg_path,
        )
    if provider != "stub":
        logger.warning("unknown_media_fetcher", provider=provider, fallback="stub")
    return StubMediaFetcher()


def get_segment_extractor(settings: Settings) -> SegmentExtractor:
    """Get the configured segment extractor."""
    provider = settings.segment_extractor.lower()

    if provider == "ffmpeg":
        return FfmpegExtractor(
            ffmpeg_path=settings.ffmpeg_path,
            ffprobe_path=settings.ffprobe_path,
            bitrate=settings.audio_bitrate,
        )
    if provider != "stub":
        logger.warning("unknown_segment_extractor", provider=provider, fallback="stub")
    return StubSegmentExtractor()


def get_remote_storage_provider(settings: Settings) -> RemoteStorageProvider:
    """Get the configured remote storage provider."""
    provider = settings.remote_storage_provider.lower()

    if provider == "google_drive":
        return GoogleDriveProvider(
            client_id=settings.google_client_id,
            client_secret=settings.google_client_secret,
            redirect_uri=settings.google_redirect_uri,
        )
    if provider != "stub":
        logger.warning("unknown_remote_storage_provider", provider=provider, fallback="stub")
    return StubRemoteStorageProvider()


def get_repository(settings: Settings) -> EntityRepository:
    """Get the configured entity repository."""
    if settings.repository_backend == "sql":
        from audio_clipper.db.session import build_engine

        return SqlRepository(build_engine(settings.database_url), create_tables=True)
    return InMemoryRepository()


@dataclass
class ServiceContainer:
    """Everything the API, CLI and background tasks share."""

    settings: Settings
    repository: EntityRepository
    storage: StorageService
    fetcher: MediaFetcher
    extractor: SegmentExtractor
    remote_storage: RemoteStorageProvider
    notifications: NotificationChannel
    orchestrator: ProcessingOrchestrator
    remote_upload: RemoteUploadService
    sweeper: HandshakeSweeper

    async def health_check(self) -> dict[str, bool]:
        """Check every collaborator."""
        return {
            "repository": await self.repository.health_check(),
            "media_fetcher": await self.fetcher.health_check(),
            "segment_extractor": await self.extractor.health_check(),
            "remote_storage": await self.remote_storage.health_check(),
        }

    async def wait_for_idle(self) -> None:
        """Wait for running pipelines and uploads to finish."""
        await self.orchestrator.wait_for_idle()
        await self.remote_upload.wait_for_idle()

    async def shutdown(self) -> None:
        await self.sweeper.stop()
        await self.orchestrator.shutdown()
        await self.remote_upload.shutdown()


def build_services(settings: Settings | None = None, **overrides: Any) -> ServiceContainer:
    """Build the service graph.

    Args:
        settings: Settings to use. Defaults to the cached application settings.
        **overrides: Replacement collaborators by name (``repository``,
            ``storage``, ``fetcher``, ``extractor``, ``remote_storage``,
            ``notifications``).
    """
    settings = settings or get_settings()

    repository = overrides.pop("repository", None) or get_repository(settings)
    storage = overrides.pop("storage", None) or StorageService(settings.working_dir)
    fetcher = overrides.pop("fetcher", None) or get_media_fetcher(settings)
    extractor = overrides.pop("extractor", None) or get_segment_extractor(settings)
    remote_storage = overrides.pop("remote_storage", None) or get_remote_storage_provider(settings)
    notifications = overrides.pop("notifications", None) or NotificationChannel()
    if overrides:
        raise TypeError(f"Unknown service overrides: {', '.join(sorted(overrides))}")

    container = ServiceContainer(
        settings=settings,
        repository=repository,
        storage=storage,
        fetcher=fetcher,
        extractor=extractor,
        remote_storage=remote_storage,
        notifications=notifications,
        orchestrator=ProcessingOrchestrator(repository, fetcher, extractor, storage),
        remote_upload=RemoteUploadService(
            repository,
            remote_storage,
            notifications,
            handshake_ttl_seconds=settings.handshake_ttl_seconds,
        ),
        sweeper=HandshakeSweeper(
            repository,
            ttl_seconds=settings.handshake_ttl_seconds,
            interval_seconds=settings.handshake_sweep_interval_seconds,
        ),
    )

    logger.info(
        "services_built",
        repository=type(repository).__name__,
        media_fetcher=fetcher.name,
        segment_extractor=extractor.name,
        remote_storage=remote_storage.name,
    )
    return container
