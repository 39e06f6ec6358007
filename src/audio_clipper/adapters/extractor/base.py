"""Base interface for audio segment extractors."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path


@dataclass
class ExtractionRequest:
    """Request to cut one time range out of an audio asset."""

    input_path: Path
    output_path: Path
    start_time: int  # seconds
    end_time: int  # seconds

    @property
    def duration(self) -> int:
        return self.end_time - self.start_time


@dataclass
class ExtractionResult:
    """A produced clip."""

    file_path: Path
    file_size_bytes: int


class SegmentExtractor(ABC):
    """Abstract base class for cutting clips out of audio files.

    Implementations:
    - FfmpegExtractor: re-encodes the range to mp3 with ffmpeg
    - StubSegmentExtractor: writes placeholder clips for tests
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name for logging."""
        ...

    @abstractmethod
    async def extract(self, request: ExtractionRequest) -> ExtractionResult:
        """Cut a time range into request.output_path.

        Raises:
            SegmentExtractionError: If the clip could not be produced.
        """
        ...

    @abstractmethod
    async def probe_duration(self, path: Path) -> int:
        """Duration of an audio file in whole seconds.

        Raises:
            SegmentExtractionError: If the file cannot be read.
        """
        ...

    async def health_check(self) -> bool:
        """Check if the extractor is available."""
        return True
