"""Base interface for source media fetchers."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path

from audio_clipper.domain.models import SourceInfo


@dataclass
class FetchResult:
    """A downloaded source audio asset."""

    file_path: Path
    strategy: str
    file_size_bytes: int | None = None


class MediaFetcher(ABC):
    """Abstract base class for fetching audio from a remote video platform.

    Implementations:
    - YtDlpFetcher: downloads through yt-dlp, trying several strategies
    - StubMediaFetcher: writes placeholder audio for tests
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name for logging."""
        ...

    @abstractmethod
    async def validate(self, reference: str) -> bool:
        """Check that a reference points to accessible media.

        Never raises for an inaccessible reference; returns False instead.
        """
        ...

    @abstractmethod
    async def describe(self, reference: str) -> SourceInfo:
        """Probe title, duration, thumbnail and channel of a reference.

        Raises:
            MediaFetchError: If the probe fails.
        """
        ...

    @abstractmethod
    async def fetch_audio(self, reference: str, output_dir: Path) -> FetchResult:
        """Download the audio track of a reference into output_dir.

        Raises:
            MediaFetchError: If every download strategy failed.
        """
        ...

    async def health_check(self) -> bool:
        """Check if the fetcher is available."""
        return True
