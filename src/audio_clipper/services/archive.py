"""Zip bundling of finished clips."""

import zipfile
from pathlib import Path

from audio_clipper.domain.enums import ProcessingStatus
from audio_clipper.domain.models import Selection
from audio_clipper.domain.timecodes import derive_filename
from audio_clipper.logging import get_logger

logger = get_logger(__name__)

ARCHIVE_DOWNLOAD_NAME = "audio-selections.zip"


def archive_entries(selections: list[Selection]) -> list[tuple[Path, str]]:
    """Pick the completed clips of a source and give each a unique entry name.

    Repeated names get a numeric suffix: ``intro.mp3``, ``intro-2.mp3``.
    """
    entries: list[tuple[Path, str]] = []
    used: set[str] = set()

    for selection in selections:
        if selection.status != ProcessingStatus.COMPLETED or not selection.file_path:
            continue
        path = Path(selection.file_path)
        if not path.exists():
            continue

        name = selection.filename or derive_filename(selection.title)
        stem, dot, ext = name.rpartition(".")
        if not dot:
            stem, ext = ext, ""
        candidate, counter = name, 2
        while candidate in used:
            candidate = f"{stem}-{counter}{dot}{ext}"
            counter += 1
        used.add(candidate)
        entries.append((path, candidate))

    return entries


def create_zip_archive(entries: list[tuple[Path, str]], output_path: Path) -> Path:
    """Write the given files into a zip archive.

    Clips are already compressed, so entries are stored without deflate.
    """
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(output_path, "w", compression=zipfile.ZIP_STORED) as bundle:
        for path, arcname in entries:
            bundle.write(path, arcname)

    logger.info("archive_created", path=str(output_path), entries=len(entries))
    return output_path
