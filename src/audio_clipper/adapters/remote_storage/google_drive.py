"""Google Drive storage provider using OAuth 2.0 and the Drive v3 API."""

import json
from pathlib import Path
from typing import Any
from urllib.parse import urlencode

import httpx

from audio_clipper.adapters.remote_storage.base import (
    OAuthCredentials,
    RemoteFile,
    RemoteStorageProvider,
)
from audio_clipper.domain.exceptions import RemoteStorageError
from audio_clipper.logging import get_logger

logger = get_logger(__name__)

# Google OAuth endpoints
GOOGLE_AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"

# Drive API endpoints
DRIVE_UPLOAD_URL = "https://www.googleapis.com/upload/drive/v3/files"

# Only files created by this app are visible to it
DRIVE_SCOPES = ["https://www.googleapis.com/auth/drive.file"]

DRIVE_FILE_FIELDS = "id,name,mimeType,parents"
AUDIO_MIME_TYPE = "audio/mpeg"
SIMPLE_UPLOAD_LIMIT = 5 * 1024 * 1024


class GoogleDriveProvider(RemoteStorageProvider):
    """Upload clips to the authorizing user's Google Drive.

    Small files go up in a single multipart request; larger ones use a
    resumable session.
    """

    def __init__(
        self,
        client_id: str | None,
        client_secret: str | None,
        redirect_uri: str,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self._client = client

    @property
    def name(self) -> str:
        return "google_drive"

    @property
    def client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=300)  # 5 min timeout for uploads
        return self._client

    def _require_config(self) -> tuple[str, str]:
        if not self.client_id or not self.client_secret:
            raise RemoteStorageError(
                "GOOGLE_CLIENT_ID and GOOGLE_CLIENT_SECRET environment variables are required. "
                "Create OAuth credentials at https://console.cloud.google.com/apis/credentials"
            )
        return self.client_id, self.client_secret

    def get_authorization_url(self, state: str) -> str:
        client_id, _ = self._require_config()
        params = {
            "client_id": client_id,
            "redirect_uri": self.redirect_uri,
            "response_type": "code",
            "scope": " ".join(DRIVE_SCOPES),
            "access_type": "offline",
            "prompt": "consent",  # Force refresh token
            "state": state,
        }
        return f"{GOOGLE_AUTH_URL}?{urlencode(params)}"

    async def exchange_code(self, code: str) -> OAuthCredentials:
        client_id, client_secret = self._require_config()
        try:
            response = await self.client.post(
                GOOGLE_TOKEN_URL,
                data={
                    "client_id": client_id,
                    "client_secret": client_secret,
                    "code": code,
                    "grant_type": "authorization_code",
                    "redirect_uri": self.redirect_uri,
                },
            )
        except httpx.HTTPError as e:
            raise RemoteStorageError(f"Token exchange failed: {e}") from e

        if response.status_code != 200:
            raise RemoteStorageError(f"Token exchange failed: {response.text}")

        data = response.json()
        return OAuthCredentials(
            access_token=data["access_token"],
            token_type=data.get("token_type", "Bearer"),
            expires_in=data.get("expires_in"),
            refresh_token=data.get("refresh_token"),
            scope=data.get("scope", ""),
        )

    async def upload(
        self,
        file_path: Path,
        file_name: str,
        credentials: OAuthCredentials,
    ) -> RemoteFile:
        if not file_path.exists():
            raise RemoteStorageError(f"File not found: {file_path}")

        metadata = {"name": file_name}
        file_size = file_path.stat().st_size

        try:
            if file_size < SIMPLE_UPLOAD_LIMIT:
                response = await self._multipart_upload(file_path, metadata, credentials)
            else:
                response = await self._resumable_upload(file_path, metadata, credentials)
        except httpx.HTTPError as e:
            raise RemoteStorageError(f"Upload failed: {e}") from e

        if response.status_code not in (200, 201):
            raise RemoteStorageError(f"Upload failed: {response.text}")

        data = response.json()
        if not data:
            raise RemoteStorageError("Upload failed: no data returned by the Drive API")

        logger.info("drive_upload_completed", file_name=file_name, drive_file_id=data.get("id"))
        return RemoteFile(
            id=data["id"],
            name=data.get("name", file_name),
            mime_type=data.get("mimeType"),
            parents=data.get("parents", []),
            metadata=data,
        )

    def _auth_header(self, credentials: OAuthCredentials) -> dict[str, str]:
        return {"Authorization": f"{credentials.token_type} {credentials.access_token}"}

    async def _multipart_upload(
        self,
        file_path: Path,
        metadata: dict[str, Any],
        credentials: OAuthCredentials,
    ) -> httpx.Response:
        """Single-request upload for small files."""
        boundary = "audio_clipper_upload_boundary"

        body_parts = [
            f"--{boundary}",
            "Content-Type: application/json; charset=UTF-8",
            "",
            json.dumps(metadata),
            f"--{boundary}",
            f"Content-Type: {AUDIO_MIME_TYPE}",
            "",
        ]
        text_body = "\r\n".join(body_parts) + "\r\n"
        final_boundary = f"\r\n--{boundary}--"
        full_body = text_body.encode() + file_path.read_bytes() + final_boundary.encode()

        return await self.client.post(
            DRIVE_UPLOAD_URL,
            params={"uploadType": "multipart", "fields": DRIVE_FILE_FIELDS},
            headers={
                **self._auth_header(credentials),
                "Content-Type": f"multipart/related; boundary={boundary}",
            },
            content=full_body,
        )

    async def _resumable_upload(
        self,
        file_path: Path,
        metadata: dict[str, Any],
        credentials: OAuthCredentials,
    ) -> httpx.Response:
        """Resumable upload for larger files."""
        file_size = file_path.stat().st_size

        init_response = await self.client.post(
            DRIVE_UPLOAD_URL,
            params={"uploadType": "resumable", "fields": DRIVE_FILE_FIELDS},
            headers={
                **self._auth_header(credentials),
                "Content-Type": "application/json; charset=UTF-8",
                "X-Upload-Content-Length": str(file_size),
                "X-Upload-Content-Type": AUDIO_MIME_TYPE,
            },
            json=metadata,
        )
        if init_response.status_code != 200:
            raise RemoteStorageError(f"Failed to initialize upload: {init_response.text}")

        upload_url = init_response.headers.get("Location")
        if not upload_url:
            raise RemoteStorageError("No upload URL in response")

        return await self.client.put(
            upload_url,
            headers={
                "Content-Type": AUDIO_MIME_TYPE,
                "Content-Length": str(file_size),
            },
            content=file_path.read_bytes(),
        )

    async def health_check(self) -> bool:
        return bool(self.client_id and self.client_secret)
