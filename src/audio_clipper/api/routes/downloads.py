"""Clip download endpoints."""

import asyncio
from pathlib import Path

from fastapi import APIRouter, HTTPException, status
from fastapi.responses import FileResponse
from starlette.background import BackgroundTask

from audio_clipper.api.deps import ServicesDep
from audio_clipper.domain.enums import ProcessingStatus
from audio_clipper.logging import get_logger
from audio_clipper.services.archive import (
    ARCHIVE_DOWNLOAD_NAME,
    archive_entries,
    create_zip_archive,
)

router = APIRouter(prefix="/downloads", tags=["Downloads"])
logger = get_logger(__name__)


@router.get(
    "/{selection_id}",
    response_class=FileResponse,
    summary="Download clip",
    description="Download the extracted clip of one selection.",
)
async def download_selection(selection_id: str, services: ServicesDep) -> FileResponse:
    selection = await services.repository.get_selection(selection_id)
    if selection is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Selection not found")
    if selection.status != ProcessingStatus.COMPLETED or not selection.file_path:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Clip not available")

    path = Path(selection.file_path)
    if not path.exists():
        logger.warning("clip_file_missing", selection_id=selection_id, path=str(path))
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Clip file not found")

    return FileResponse(
        path,
        media_type="audio/mpeg",
        filename=selection.filename or f"{selection.title}.mp3",
    )


@router.get(
    "/source/{source_id}",
    response_class=FileResponse,
    summary="Download all clips",
    description="Download every completed clip of a source as one zip archive.",
)
async def download_source_archive(source_id: str, services: ServicesDep) -> FileResponse:
    selections = await services.repository.list_selections_for_source(source_id)
    entries = archive_entries(selections)
    if not entries:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No completed clips for this source",
        )

    archive_path = services.storage.archive_path(source_id)
    await asyncio.to_thread(create_zip_archive, entries, archive_path)

    return FileResponse(
        archive_path,
        media_type="application/zip",
        filename=ARCHIVE_DOWNLOAD_NAME,
        background=BackgroundTask(services.storage.delete_asset, archive_path),
    )
