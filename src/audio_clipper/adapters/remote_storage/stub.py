"""Stub remote storage provider for testing."""

import asyncio
from pathlib import Path
from urllib.parse import urlencode
from uuid import uuid4

from audio_clipper.adapters.remote_storage.base import (
    OAuthCredentials,
    RemoteFile,
    RemoteStorageProvider,
)
from audio_clipper.domain.exceptions import RemoteStorageError
from audio_clipper.logging import get_logger

logger = get_logger(__name__)


class StubRemoteStorageProvider(RemoteStorageProvider):
    """Stub provider that accepts any code except ``bad-code``.

    Set ``fail_uploads`` to make every upload raise.
    """

    def __init__(self, fail_uploads: bool = False, delay: float = 0.0) -> None:
        self.fail_uploads = fail_uploads
        self.delay = delay
        self.uploads: list[RemoteFile] = []

    @property
    def name(self) -> str:
        return "stub"

    def get_authorization_url(self, state: str) -> str:
        return f"https://storage.example.com/authorize?{urlencode({'state': state})}"

    async def exchange_code(self, code: str) -> OAuthCredentials:
        if code == "bad-code":
            raise RemoteStorageError("Token exchange failed: invalid_grant")
        return OAuthCredentials(access_token=f"stub-token-{code}")

    async def upload(
        self,
        file_path: Path,
        file_name: str,
        credentials: OAuthCredentials,
    ) -> RemoteFile:
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail_uploads:
            raise RemoteStorageError("Upload failed: quota exceeded")
        if not file_path.exists():
            raise RemoteStorageError(f"File not found: {file_path}")

        remote = RemoteFile(
            id=f"stub_{uuid4().hex[:12]}",
            name=file_name,
            mime_type="audio/mpeg",
            metadata={"size": file_path.stat().st_size},
        )
        self.uploads.append(remote)
        logger.info("stub_upload_completed", file_name=file_name, remote_id=remote.id)
        return remote
