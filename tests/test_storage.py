"""Tests for working-directory storage and archive bundling."""

import hashlib
import zipfile
from dataclasses import replace
from pathlib import Path

import pytest

from audio_clipper.domain.enums import ProcessingStatus
from audio_clipper.domain.exceptions import RequestValidationError
from audio_clipper.domain.models import Job, Selection
from audio_clipper.services.archive import archive_entries, create_zip_archive


class ChunkedReader:
    """Async reader over an in-memory payload."""

    def __init__(self, data: bytes) -> None:
        self.data = data
        self.offset = 0

    async def read(self, size: int = -1) -> bytes:
        if size < 0:
            size = len(self.data)
        chunk = self.data[self.offset : self.offset + size]
        self.offset += len(chunk)
        return chunk


class TestStorageService:
    @pytest.mark.asyncio
    async def test_store_upload(self, storage) -> None:
        data = b"\xff\xfb" * 1000

        asset = await storage.store_upload(ChunkedReader(data), max_bytes=10_000)

        assert asset.file_path.parent == storage.base_path
        assert asset.file_path.suffix == ".mp3"
        assert asset.file_path.read_bytes() == data
        assert asset.file_size_bytes == 2000
        assert asset.checksum == hashlib.sha256(data).hexdigest()

    @pytest.mark.asyncio
    async def test_store_upload_too_large(self, storage) -> None:
        with pytest.raises(RequestValidationError, match="maximum upload size"):
            await storage.store_upload(ChunkedReader(b"\x00" * 101), max_bytes=100)

        assert list(storage.base_path.iterdir()) == []

    @pytest.mark.asyncio
    async def test_store_upload_empty(self, storage) -> None:
        with pytest.raises(RequestValidationError, match="empty"):
            await storage.store_upload(ChunkedReader(b""), max_bytes=100)

        assert list(storage.base_path.iterdir()) == []

    def test_finalize_clip(self, storage) -> None:
        raw = storage.extraction_path("sel-1")
        raw.write_bytes(b"clip")

        final = storage.finalize_clip("sel-1", raw, "intro.mp3")

        assert final == storage.base_path / "sel-1" / "intro.mp3"
        assert final.read_bytes() == b"clip"
        assert not raw.exists()

    def test_same_filename_different_selections(self, storage) -> None:
        for selection_id in ("a", "b"):
            raw = storage.extraction_path(selection_id)
            raw.write_bytes(selection_id.encode())
            storage.finalize_clip(selection_id, raw, "intro.mp3")

        assert (storage.base_path / "a" / "intro.mp3").read_bytes() == b"a"
        assert (storage.base_path / "b" / "intro.mp3").read_bytes() == b"b"

    def test_archive_path_is_unique(self, storage) -> None:
        first = storage.archive_path("source-1")
        second = storage.archive_path("source-1")

        assert first != second
        assert first.parent == storage.base_path
        assert first.name.startswith("source-1-all-")
        assert first.suffix == ".zip"

    def test_delete_asset(self, storage) -> None:
        path = storage.base_path / "x.mp3"
        path.write_bytes(b"x")

        assert storage.delete_asset(path) is True
        assert not path.exists()
        # Missing files are fine
        assert storage.delete_asset(path) is True


def make_selection(tmp_path: Path, title: str, status=ProcessingStatus.COMPLETED, filename=None):
    job = Job.create("source-1")
    selection = Selection.create(job, 0, 0, 10, title)
    path = tmp_path / f"{selection.id}.mp3"
    path.write_bytes(title.encode())
    return replace(selection, status=status, file_path=str(path), filename=filename)


class TestArchive:
    def test_entries_skip_unfinished(self, tmp_path: Path) -> None:
        done = make_selection(tmp_path, "Intro", filename="intro.mp3")
        failed = make_selection(tmp_path, "Broken", status=ProcessingStatus.ERROR)

        entries = archive_entries([done, failed])

        assert [name for _, name in entries] == ["intro.mp3"]

    def test_entries_skip_missing_files(self, tmp_path: Path) -> None:
        gone = make_selection(tmp_path, "Gone", filename="gone.mp3")
        Path(gone.file_path).unlink()

        assert archive_entries([gone]) == []

    def test_duplicate_names_get_suffix(self, tmp_path: Path) -> None:
        selections = [make_selection(tmp_path, "Intro", filename="intro.mp3") for _ in range(3)]

        names = [name for _, name in archive_entries(selections)]

        assert names == ["intro.mp3", "intro-2.mp3", "intro-3.mp3"]

    def test_falls_back_to_derived_name(self, tmp_path: Path) -> None:
        selection = make_selection(tmp_path, "Big Finale!")

        assert archive_entries([selection])[0][1] == "big-finale.mp3"

    def test_create_zip_archive(self, tmp_path: Path) -> None:
        selections = [
            make_selection(tmp_path, "One", filename="one.mp3"),
            make_selection(tmp_path, "Two", filename="two.mp3"),
        ]
        output = tmp_path / "out" / "source-1-all.zip"

        create_zip_archive(archive_entries(selections), output)

        with zipfile.ZipFile(output) as bundle:
            assert sorted(bundle.namelist()) == ["one.mp3", "two.mp3"]
            assert bundle.read("one.mp3") == b"One"
