"""Tests for domain models and timecode helpers."""

from datetime import UTC, datetime, timedelta

import pytest

from audio_clipper.domain.enums import ProcessingStatus, SourceOrigin
from audio_clipper.domain.models import AuthHandshake, Job, Selection, SourceInfo, SourceItem
from audio_clipper.domain.timecodes import (
    derive_filename,
    format_timecode,
    is_valid_timecode,
    parse_timecode,
)


class TestTimecodes:
    """Test timecode grammar and parsing."""

    @pytest.mark.parametrize(
        "value,seconds",
        [
            ("1:30", 90),
            ("01:30", 90),
            ("0:00", 0),
            ("59:59", 3599),
            ("1:02:03", 3723),
            ("19:59:59", 71999),
        ],
    )
    def test_parse_valid(self, value: str, seconds: int) -> None:
        assert is_valid_timecode(value)
        assert parse_timecode(value) == seconds

    @pytest.mark.parametrize(
        "value",
        ["61:99", "abc", "", "1:5", "60:00", "20:00:00", "1:30\n", " 1:30", "1:30:"],
    )
    def test_rejects_malformed(self, value: str) -> None:
        assert not is_valid_timecode(value)
        with pytest.raises(ValueError):
            parse_timecode(value)

    def test_format(self) -> None:
        assert format_timecode(90) == "01:30"
        assert format_timecode(3723) == "1:02:03"
        assert format_timecode(0) == "00:00"


class TestDeriveFilename:
    """Test clip filename derivation."""

    def test_examples(self) -> None:
        assert derive_filename("Intro Guitar Solo!!") == "intro-guitar-solo.mp3"
        assert derive_filename("a--b") == "a-b.mp3"

    def test_strips_edges(self) -> None:
        assert derive_filename("  --Hello, World--  ") == "hello-world.mp3"

    def test_no_alphanumerics_falls_back(self) -> None:
        assert derive_filename("!!!") == "clip.mp3"

    def test_deterministic(self) -> None:
        assert derive_filename("Chorus #2") == derive_filename("Chorus #2")


def test_source_item_from_remote() -> None:
    """Test creating a source item for a remote reference."""
    info = SourceInfo(title="Song", duration=245, channel="Band")
    source = SourceItem.from_remote("https://example.com/v", info)

    assert source.origin == SourceOrigin.REMOTE_URL
    assert source.remote_reference == "https://example.com/v"
    assert source.local_path is None
    assert source.status == ProcessingStatus.PENDING
    assert source.info == info


def test_source_item_from_upload() -> None:
    source = SourceItem.from_upload("/tmp/a.mp3", SourceInfo(title="a", duration=10))

    assert source.origin == SourceOrigin.UPLOADED_ASSET
    assert source.local_path == "/tmp/a.mp3"
    assert source.remote_reference is None


def test_job_and_selection_creation() -> None:
    """Test creating a job and its selections."""
    job = Job.create("source-1")
    selection = Selection.create(job, 0, 10, 45, "Intro")

    assert job.status == ProcessingStatus.PENDING
    assert job.progress == 0
    assert selection.job_id == job.id
    assert selection.source_id == "source-1"
    assert selection.status == ProcessingStatus.PENDING
    assert selection.duration == 35
    assert selection.filename is None


def test_ids_are_unique() -> None:
    assert Job.create("s").id != Job.create("s").id


def test_handshake_expiry() -> None:
    created = datetime(2026, 1, 1, tzinfo=UTC)
    handshake = AuthHandshake(token="t", selection_id="s", created_at=created)

    assert not handshake.is_expired(600, now=created + timedelta(seconds=600))
    assert handshake.is_expired(600, now=created + timedelta(seconds=601))


def test_status_terminal() -> None:
    assert ProcessingStatus.COMPLETED.is_terminal
    assert ProcessingStatus.ERROR.is_terminal
    assert not ProcessingStatus.PENDING.is_terminal
    assert not ProcessingStatus.PROCESSING.is_terminal
