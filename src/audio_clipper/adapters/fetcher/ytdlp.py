"""Media fetcher backed by the yt-dlp library.

Downloads are attempted with an ordered list of strategies (YouTube player
clients). The first strategy that produces an mp3 wins; the fetch only fails
once every strategy has been tried.
"""

import asyncio
from pathlib import Path
from typing import Any
from uuid import uuid4

from yt_dlp import YoutubeDL
from yt_dlp.utils import DownloadError, ExtractorError

from audio_clipper.adapters.fetcher.base import FetchResult, MediaFetcher
from audio_clipper.domain.exceptions import MediaFetchError
from audio_clipper.domain.models import SourceInfo
from audio_clipper.logging import get_logger

logger = get_logger(__name__)

DEFAULT_STRATEGIES = ["default", "android", "ios", "tv"]


class YtDlpLogger:
    """Routes yt-dlp's own output into structlog instead of stderr."""

    def debug(self, msg: str) -> None:
        # yt-dlp sends info-level lines through debug() as well
        if msg.startswith("[debug] "):
            return
        logger.debug("ytdlp_output", message=msg)

    def info(self, msg: str) -> None:
        logger.debug("ytdlp_output", message=msg)

    def warning(self, msg: str) -> None:
        logger.warning("ytdlp_warning", message=msg)

    def error(self, msg: str) -> None:
        logger.error("ytdlp_error", message=msg)


class YtDlpFetcher(MediaFetcher):
    """Fetch and probe remote media with yt-dlp.

    Features:
    - Metadata probe without download
    - Audio extraction to mp3 through yt-dlp's ffmpeg post-processor
    - Ordered fallback across player clients
    """

    def __init__(
        self,
        strategies: list[str] | None = None,
        ffmpeg_path: str | None = None,
    ) -> None:
        """Initialize the fetcher.

        Args:
            strategies: Player clients tried in order; ``default`` leaves
                yt-dlp's own client selection untouched.
            ffmpeg_path: Location of ffmpeg if it is not on PATH.
        """
        self.strategies = strategies or list(DEFAULT_STRATEGIES)
        self.ffmpeg_path = ffmpeg_path

    @property
    def name(self) -> str:
        return "ytdlp"

    def _base_options(self) -> dict[str, Any]:
        options: dict[str, Any] = {
            "quiet": True,
            "noplaylist": True,
            "logger": YtDlpLogger(),
        }
        if self.ffmpeg_path and self.ffmpeg_path != "ffmpeg":
            options["ffmpeg_location"] = self.ffmpeg_path
        return options

    def _probe(self, reference: str) -> dict[str, Any]:
        with YoutubeDL({**self._base_options(), "skip_download": True}) as ydl:
            info = ydl.extract_info(reference, download=False)
        if not info:
            raise MediaFetchError(f"No metadata returned for {reference}")
        return info

    async def validate(self, reference: str) -> bool:
        try:
            await asyncio.to_thread(self._probe, reference)
            return True
        except (DownloadError, ExtractorError, MediaFetchError) as e:
            logger.info("ytdlp_validate_rejected", reference=reference, error=str(e))
            return False

    async def describe(self, reference: str) -> SourceInfo:
        try:
            info = await asyncio.to_thread(self._probe, reference)
        except (DownloadError, ExtractorError) as e:
            logger.error("ytdlp_probe_failed", reference=reference, error=str(e))
            raise MediaFetchError(f"Failed to get video info: {e}") from e

        return SourceInfo(
            title=info.get("title") or "Unknown Title",
            duration=int(info.get("duration") or 0),
            thumbnail=info.get("thumbnail") or None,
            channel=info.get("uploader") or info.get("channel") or None,
        )

    def _download_options(self, strategy: str, output_template: str) -> dict[str, Any]:
        options = {
            **self._base_options(),
            "format": "bestaudio/best",
            "outtmpl": output_template,
            "postprocessors": [
                {
                    "key": "FFmpegExtractAudio",
                    "preferredcodec": "mp3",
                    "preferredquality": "0",
                }
            ],
        }
        if strategy != "default":
            options["extractor_args"] = {"youtube": {"player_client": [strategy]}}
        return options

    def _download(self, reference: str, output_dir: Path, strategy: str) -> Path:
        stem = f"source-{uuid4().hex[:12]}"
        template = str(output_dir / f"{stem}.%(ext)s")

        with YoutubeDL(self._download_options(strategy, template)) as ydl:
            ydl.download([reference])

        file_path = output_dir / f"{stem}.mp3"
        if not file_path.exists():
            raise MediaFetchError(f"Could not determine downloaded file path for {reference}")
        return file_path

    async def fetch_audio(self, reference: str, output_dir: Path) -> FetchResult:
        output_dir.mkdir(parents=True, exist_ok=True)
        failures: list[str] = []

        for strategy in self.strategies:
            logger.info("ytdlp_download_attempt", reference=reference, strategy=strategy)
            try:
                file_path = await asyncio.to_thread(
                    self._download, reference, output_dir, strategy
                )
            except (DownloadError, ExtractorError, MediaFetchError, OSError) as e:
                logger.warning(
                    "ytdlp_download_strategy_failed",
                    reference=reference,
                    strategy=strategy,
                    error=str(e),
                )
                failures.append(f"{strategy}: {e}")
                continue

            logger.info(
                "ytdlp_download_completed",
                reference=reference,
                strategy=strategy,
                file_path=str(file_path),
            )
            return FetchResult(
                file_path=file_path,
                strategy=strategy,
                file_size_bytes=file_path.stat().st_size,
            )

        raise MediaFetchError(
            f"Failed to download audio after {len(failures)} attempts: " + "; ".join(failures)
        )
