"""Base interface for remote storage providers."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any


@dataclass
class OAuthCredentials:
    """Credentials obtained by exchanging an authorization code."""

    access_token: str
    token_type: str = "Bearer"
    expires_in: int | None = None
    refresh_token: str | None = None
    scope: str = ""


@dataclass
class RemoteFile:
    """A file stored by a remote provider."""

    id: str
    name: str
    mime_type: str | None = None
    parents: list[str] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)


class RemoteStorageProvider(ABC):
    """Abstract base class for cloud storage providers clips can be pushed to.

    Implementations:
    - GoogleDriveProvider: Google Drive via OAuth 2.0
    - StubRemoteStorageProvider: records uploads in memory for tests
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name for logging."""
        ...

    @abstractmethod
    def get_authorization_url(self, state: str) -> str:
        """Build the consent URL the user is redirected to.

        Args:
            state: Correlation token echoed back to the callback.
        """
        ...

    @abstractmethod
    async def exchange_code(self, code: str) -> OAuthCredentials:
        """Exchange an authorization code for credentials.

        Raises:
            RemoteStorageError: If the exchange is rejected.
        """
        ...

    @abstractmethod
    async def upload(
        self,
        file_path: Path,
        file_name: str,
        credentials: OAuthCredentials,
    ) -> RemoteFile:
        """Upload one file.

        Raises:
            RemoteStorageError: If the upload fails.
        """
        ...

    async def health_check(self) -> bool:
        """Check if the provider is configured."""
        return True
