"""Audio segment extractors."""

from audio_clipper.adapters.extractor.base import (
    ExtractionRequest,
    ExtractionResult,
    SegmentExtractor,
)
from audio_clipper.adapters.extractor.ffmpeg import FfmpegExtractor
from audio_clipper.adapters.extractor.stub import StubSegmentExtractor

__all__ = [
    "ExtractionRequest",
    "ExtractionResult",
    "FfmpegExtractor",
    "SegmentExtractor",
    "StubSegmentExtractor",
]
