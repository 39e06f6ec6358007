"""Stub segment extractor for testing."""

import asyncio
from pathlib import Path

from audio_clipper.adapters.extractor.base import (
    ExtractionRequest,
    ExtractionResult,
    SegmentExtractor,
)
from audio_clipper.domain.exceptions import SegmentExtractionError
from audio_clipper.logging import get_logger

logger = get_logger(__name__)


class StubSegmentExtractor(SegmentExtractor):
    """Stub extractor that writes one byte per second of clip.

    Ranges listed in ``fail_ranges`` raise instead of producing a clip.
    """

    def __init__(
        self,
        fail_ranges: set[tuple[int, int]] | None = None,
        duration: int = 300,
        delay: float = 0.0,
    ) -> None:
        self.fail_ranges = fail_ranges or set()
        self.duration = duration
        self.delay = delay
        self.calls: list[ExtractionRequest] = []

    @property
    def name(self) -> str:
        return "stub"

    async def extract(self, request: ExtractionRequest) -> ExtractionResult:
        self.calls.append(request)
        if self.delay:
            await asyncio.sleep(self.delay)

        if (request.start_time, request.end_time) in self.fail_ranges:
            raise SegmentExtractionError(
                f"FFmpeg failed: cannot cut {request.start_time}-{request.end_time}"
            )

        data = b"\x00" * request.duration
        request.output_path.parent.mkdir(parents=True, exist_ok=True)
        request.output_path.write_bytes(data)
        logger.info(
            "stub_extract_completed",
            output_path=str(request.output_path),
            file_size=len(data),
        )
        return ExtractionResult(file_path=request.output_path, file_size_bytes=len(data))

    async def probe_duration(self, path: Path) -> int:
        if not path.exists():
            raise SegmentExtractionError(f"File not found: {path}")
        return self.duration
