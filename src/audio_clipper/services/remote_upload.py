"""Remote upload side-flow: push one finished clip to the user's cloud storage."""

from dataclasses import dataclass
from pathlib import Path

from audio_clipper.adapters.remote_storage.base import OAuthCredentials, RemoteStorageProvider
from audio_clipper.domain.enums import NotificationType, ProcessingStatus
from audio_clipper.domain.exceptions import (
    InvalidStateError,
    NotFoundError,
    RemoteStorageError,
    RequestValidationError,
)
from audio_clipper.domain.models import Selection
from audio_clipper.logging import get_logger
from audio_clipper.repositories.base import EntityRepository
from audio_clipper.services.notifications import NotificationChannel
from audio_clipper.utils.async_utils import DetachedTasks

logger = get_logger(__name__)


@dataclass
class UploadAcknowledgement:
    """Returned by the callback before the upload itself has run."""

    selection_id: str
    job_id: str
    file_name: str


class RemoteUploadService:
    """Authorization handshake plus detached upload for a single selection.

    Handshake and credential failures are raised to the caller. Failures of
    the upload itself only reach the client through the notification channel.
    """

    def __init__(
        self,
        repository: EntityRepository,
        provider: RemoteStorageProvider,
        notifications: NotificationChannel,
        handshake_ttl_seconds: int = 600,
    ) -> None:
        self.repository = repository
        self.provider = provider
        self.notifications = notifications
        self.handshake_ttl_seconds = handshake_ttl_seconds
        self._uploads = DetachedTasks("remote-upload")

    async def initiate(self, selection_id: str | None) -> str:
        """Start a consent flow for a selection and return the provider's auth URL.

        Raises:
            RequestValidationError: If no selection id is given.
            NotFoundError: If the selection is unknown.
            RemoteStorageError: If the provider cannot build the URL.
        """
        if not selection_id:
            raise RequestValidationError("selectionId is required")
        if await self.repository.get_selection(selection_id) is None:
            raise NotFoundError("Selection not found")

        handshake = await self.repository.create_auth_handshake(selection_id)
        try:
            auth_url = self.provider.get_authorization_url(handshake.token)
        except RemoteStorageError:
            await self.repository.delete_auth_handshake(handshake.token)
            raise

        logger.info(
            "auth_handshake_created",
            selection_id=selection_id,
            provider=self.provider.name,
        )
        return auth_url

    async def complete_authorization(self, code: str | None, state: str | None) -> UploadAcknowledgement:
        """Consume a handshake, exchange the code and start the upload.

        The handshake is deleted before anything else happens, so a token can
        only ever be used once.

        Raises:
            InvalidStateError: Unknown, reused or expired handshake, or a
                selection with no finished clip.
            RequestValidationError: No authorization code.
            RemoteStorageError: The code exchange was rejected.
            NotFoundError: The selection or its job disappeared.
        """
        if not state:
            raise InvalidStateError("Missing authorization state")

        handshake = await self.repository.get_auth_handshake(state)
        if handshake is None:
            logger.warning("auth_handshake_rejected", reason="unknown")
            raise InvalidStateError("Invalid or expired authorization state")
        await self.repository.delete_auth_handshake(state)

        if handshake.is_expired(self.handshake_ttl_seconds):
            logger.warning(
                "auth_handshake_rejected",
                reason="expired",
                selection_id=handshake.selection_id,
            )
            raise InvalidStateError("Invalid or expired authorization state")

        logger.info("auth_handshake_consumed", selection_id=handshake.selection_id)

        if not code:
            raise RequestValidationError("Missing authorization code")

        credentials = await self.provider.exchange_code(code)

        selection = await self.repository.get_selection(handshake.selection_id)
        if selection is None:
            raise NotFoundError("Selection not found")
        if selection.status != ProcessingStatus.COMPLETED or not selection.file_path:
            raise InvalidStateError("Selection has no finished clip to upload")
        if await self.repository.get_job(selection.job_id) is None:
            raise NotFoundError("Job not found")

        file_name = selection.filename or f"{selection.title}.mp3"
        self._uploads.spawn(
            self._upload(selection, file_name, credentials),
            label=selection.id,
        )
        return UploadAcknowledgement(
            selection_id=selection.id,
            job_id=selection.job_id,
            file_name=file_name,
        )

    async def _upload(
        self,
        selection: Selection,
        file_name: str,
        credentials: OAuthCredentials,
    ) -> None:
        log = logger.bind(job_id=selection.job_id, selection_id=selection.id)
        log.info("remote_upload_started", provider=self.provider.name, file_name=file_name)

        try:
            remote = await self.provider.upload(Path(selection.file_path), file_name, credentials)
        except Exception as e:
            # Reported through the notification channel only.
            log.error("remote_upload_failed", error=str(e))
            await self.notifications.send(
                selection.job_id,
                NotificationType.UPLOAD_FAILURE,
                {"selectionId": selection.id, "fileName": file_name, "error": str(e)},
            )
            return

        log.info("remote_upload_completed", remote_file_id=remote.id)
        await self.notifications.send(
            selection.job_id,
            NotificationType.UPLOAD_SUCCESS,
            {"selectionId": selection.id, "fileName": file_name, "remoteFileId": remote.id},
        )

    async def wait_for_idle(self) -> None:
        """Wait for every started upload to finish."""
        await self._uploads.wait()

    async def shutdown(self) -> None:
        await self._uploads.cancel_all()
