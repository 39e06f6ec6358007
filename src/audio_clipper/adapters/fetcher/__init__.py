"""Source media fetchers."""

from audio_clipper.adapters.fetcher.base import FetchResult, MediaFetcher
from audio_clipper.adapters.fetcher.stub import StubMediaFetcher
from audio_clipper.adapters.fetcher.ytdlp import YtDlpFetcher

__all__ = ["FetchResult", "MediaFetcher", "StubMediaFetcher", "YtDlpFetcher"]
