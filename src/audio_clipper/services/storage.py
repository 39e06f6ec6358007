"""Local working directory for source audio, clips and archives."""

import hashlib
import shutil
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Protocol
from uuid import uuid4

from audio_clipper.domain.exceptions import RequestValidationError
from audio_clipper.logging import get_logger

logger = get_logger(__name__)

UPLOAD_CHUNK_SIZE = 1024 * 1024


class AsyncReadable(Protocol):
    async def read(self, size: int = -1) -> bytes: ...


@dataclass
class StoredAsset:
    """Metadata for a locally stored file."""

    id: str
    file_path: Path
    file_size_bytes: int
    checksum: str
    created_at: datetime


class StorageService:
    """Owns the shared working directory.

    Layout:
    - ``<id>.mp3``: uploaded and fetched source audio
    - ``<selection_id>.mp3``: raw extractor output
    - ``<selection_id>/<filename>``: finished clip under its derived name
    - ``<source_id>-all.zip``: ephemeral download-all archive
    """

    def __init__(self, base_path: Path | None = None, create_dirs: bool = True) -> None:
        """Initialize storage service.

        Args:
            base_path: Working directory. Defaults to ./uploads
            create_dirs: Whether to create the directory if it doesn't exist
        """
        self.base_path = base_path or Path("./uploads")

        if create_dirs:
            self.base_path.mkdir(parents=True, exist_ok=True)

    def extraction_path(self, selection_id: str) -> Path:
        """Where the extractor writes a selection's raw output."""
        return self.base_path / f"{selection_id}.mp3"

    def archive_path(self, source_id: str) -> Path:
        """A fresh archive location per call; each download gets its own bundle."""
        return self.base_path / f"{source_id}-all-{uuid4().hex}.zip"

    def finalize_clip(self, selection_id: str, raw_path: Path, filename: str) -> Path:
        """Move an extracted clip to its final, title-derived name.

        Each selection gets its own directory, so clips with equal titles
        never overwrite each other.
        """
        target_dir = self.base_path / selection_id
        target_dir.mkdir(parents=True, exist_ok=True)
        target = target_dir / filename
        shutil.move(str(raw_path), target)
        return target

    async def store_upload(
        self,
        source: AsyncReadable,
        max_bytes: int,
        suffix: str = ".mp3",
    ) -> StoredAsset:
        """Stream an uploaded file into the working directory.

        Raises:
            RequestValidationError: If the file is empty or larger than max_bytes.
        """
        asset_id = uuid4().hex
        file_path = self.base_path / f"{asset_id}{suffix}"
        digest = hashlib.sha256()
        size = 0

        with file_path.open("wb") as out:
            while chunk := await source.read(UPLOAD_CHUNK_SIZE):
                size += len(chunk)
                if size > max_bytes:
                    out.close()
                    file_path.unlink(missing_ok=True)
                    raise RequestValidationError(
                        f"File exceeds the maximum upload size of {max_bytes} bytes"
                    )
                digest.update(chunk)
                out.write(chunk)

        if size == 0:
            file_path.unlink(missing_ok=True)
            raise RequestValidationError("Uploaded file is empty")

        logger.info("storage_upload_stored", file_path=str(file_path), file_size=size)
        return StoredAsset(
            id=asset_id,
            file_path=file_path,
            file_size_bytes=size,
            checksum=digest.hexdigest(),
            created_at=datetime.now(UTC),
        )

    def delete_asset(self, path: Path) -> bool:
        """Delete a locally stored file."""
        try:
            path.unlink(missing_ok=True)
            return True
        except OSError as e:
            logger.error("storage_delete_failed", path=str(path), error=str(e))
            return False
