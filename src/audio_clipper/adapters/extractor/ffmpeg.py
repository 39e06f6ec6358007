"""FFmpeg segment extractor."""

import asyncio
import shutil
from pathlib import Path

from audio_clipper.adapters.extractor.base import (
    ExtractionRequest,
    ExtractionResult,
    SegmentExtractor,
)
from audio_clipper.domain.exceptions import SegmentExtractionError
from audio_clipper.logging import get_logger

logger = get_logger(__name__)


class FfmpegExtractor(SegmentExtractor):
    """Cut clips by re-encoding the requested range to mp3 with ffmpeg."""

    def __init__(
        self,
        ffmpeg_path: str = "ffmpeg",
        ffprobe_path: str = "ffprobe",
        bitrate: str = "192k",
    ) -> None:
        self.ffmpeg_path = ffmpeg_path
        self.ffprobe_path = ffprobe_path
        self.bitrate = bitrate

    @property
    def name(self) -> str:
        return "ffmpeg"

    def build_command(self, request: ExtractionRequest) -> list[str]:
        """Build the ffmpeg argument list for a request."""
        return [
            self.ffmpeg_path,
            "-i", str(request.input_path),
            "-ss", str(request.start_time),
            "-t", str(request.duration),
            "-acodec", "libmp3lame",
            "-ab", self.bitrate,
            "-y",
            str(request.output_path),
        ]

    async def _run(self, args: list[str]) -> tuple[int, bytes, bytes]:
        try:
            process = await asyncio.create_subprocess_exec(
                *args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise SegmentExtractionError(f"{args[0]} error: {e}") from e

        stdout, stderr = await process.communicate()
        return process.returncode or 0, stdout, stderr

    async def extract(self, request: ExtractionRequest) -> ExtractionResult:
        request.output_path.parent.mkdir(parents=True, exist_ok=True)
        args = self.build_command(request)

        logger.info(
            "ffmpeg_extract_started",
            input_path=str(request.input_path),
            start_time=request.start_time,
            duration=request.duration,
        )

        code, _, stderr = await self._run(args)
        if code != 0:
            raise SegmentExtractionError(
                f"FFmpeg failed: {stderr.decode(errors='replace')[-2000:]}"
            )

        try:
            file_size = request.output_path.stat().st_size
        except OSError as e:
            raise SegmentExtractionError(f"Failed to get file stats: {e}") from e

        logger.info(
            "ffmpeg_extract_completed",
            output_path=str(request.output_path),
            file_size=file_size,
        )
        return ExtractionResult(file_path=request.output_path, file_size_bytes=file_size)

    async def probe_duration(self, path: Path) -> int:
        code, stdout, stderr = await self._run(
            [
                self.ffprobe_path,
                "-v", "error",
                "-show_entries", "format=duration",
                "-of", "default=noprint_wrappers=1:nokey=1",
                str(path),
            ]
        )
        if code != 0:
            raise SegmentExtractionError(
                f"ffprobe failed: {stderr.decode(errors='replace')[-2000:]}"
            )

        try:
            return int(float(stdout.decode().strip()))
        except ValueError as e:
            raise SegmentExtractionError(f"Unreadable duration for {path}") from e

    async def health_check(self) -> bool:
        return shutil.which(self.ffmpeg_path) is not None
