"""Remote storage providers for pushing clips to the cloud."""

from audio_clipper.adapters.remote_storage.base import (
    OAuthCredentials,
    RemoteFile,
    RemoteStorageProvider,
)
from audio_clipper.adapters.remote_storage.google_drive import GoogleDriveProvider
from audio_clipper.adapters.remote_storage.stub import StubRemoteStorageProvider

__all__ = [
    "GoogleDriveProvider",
    "OAuthCredentials",
    "RemoteFile",
    "RemoteStorageProvider",
    "StubRemoteStorageProvider",
]
