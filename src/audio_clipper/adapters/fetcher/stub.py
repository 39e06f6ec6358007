"""Stub media fetcher for testing."""

import asyncio
from pathlib import Path
from uuid import uuid4

from audio_clipper.adapters.fetcher.base import FetchResult, MediaFetcher
from audio_clipper.domain.exceptions import MediaFetchError
from audio_clipper.domain.models import SourceInfo
from audio_clipper.logging import get_logger

logger = get_logger(__name__)

# Minimal MPEG audio frame header repeated; enough to look like an mp3.
STUB_AUDIO = b"\xff\xfb\x90\x64" + b"\x00" * 412


class StubMediaFetcher(MediaFetcher):
    """Stub fetcher that simulates downloads without network access.

    References containing ``invalid`` fail validation and probing;
    references containing ``unavailable`` validate but fail to download.
    """

    def __init__(self, duration: int = 300, delay: float = 0.0) -> None:
        self.duration = duration
        self.delay = delay
        self.fetch_count = 0

    @property
    def name(self) -> str:
        return "stub"

    async def validate(self, reference: str) -> bool:
        return "invalid" not in reference

    async def describe(self, reference: str) -> SourceInfo:
        if "invalid" in reference:
            raise MediaFetchError(f"Failed to get video info: {reference}")
        return SourceInfo(
            title=f"Stub video {reference.rsplit('=', 1)[-1][:11]}",
            duration=self.duration,
            thumbnail="https://example.com/thumbnail.jpg",
            channel="Stub Channel",
        )

    async def fetch_audio(self, reference: str, output_dir: Path) -> FetchResult:
        logger.info("stub_fetch_started", reference=reference)
        if self.delay:
            await asyncio.sleep(self.delay)

        if "unavailable" in reference or "invalid" in reference:
            raise MediaFetchError(f"Failed to download audio: {reference}")

        self.fetch_count += 1
        output_dir.mkdir(parents=True, exist_ok=True)
        file_path = output_dir / f"source-{uuid4().hex[:12]}.mp3"
        file_path.write_bytes(STUB_AUDIO)

        return FetchResult(
            file_path=file_path,
            strategy="stub",
            file_size_bytes=len(STUB_AUDIO),
        )
