"""Source probing and upload endpoints."""

from pathlib import Path

from fastapi import APIRouter, File, HTTPException, UploadFile, status
from pydantic import Field

from audio_clipper.api.deps import ServicesDep
from audio_clipper.api.errors import to_http_exception
from audio_clipper.api.schemas import CamelModel, SourceInfoSchema
from audio_clipper.logging import get_logger

router = APIRouter(prefix="/sources", tags=["Sources"])
logger = get_logger(__name__)

ACCEPTED_AUDIO_TYPES = {"audio/mpeg", "audio/mp3"}
ACCEPTED_AUDIO_SUFFIX = ".mp3"


class ValidateSourceRequest(CamelModel):
    """Request to check a remote reference."""

    reference: str = Field(..., min_length=1)


class ValidateSourceResponse(CamelModel):
    valid: bool
    info: SourceInfoSchema


class UploadSourceResponse(CamelModel):
    source_id: str
    info: SourceInfoSchema


def is_accepted_audio(upload: UploadFile) -> bool:
    """Accept mp3 by content type or by file extension."""
    if upload.content_type in ACCEPTED_AUDIO_TYPES:
        return True
    return Path(upload.filename or "").suffix.lower() == ACCEPTED_AUDIO_SUFFIX


@router.post(
    "/validate",
    response_model=ValidateSourceResponse,
    summary="Validate source",
    description="Check that a remote reference is accessible and describe it.",
)
async def validate_source(
    request: ValidateSourceRequest,
    services: ServicesDep,
) -> ValidateSourceResponse:
    reference = request.reference.strip()
    try:
        valid = await services.orchestrator.validate_source_reference(reference)
        if not valid:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Invalid or inaccessible source reference",
            )
        info = await services.orchestrator.describe_source(reference)
    except HTTPException:
        raise
    except Exception as e:
        raise to_http_exception(e) from e

    logger.info("source_validated", reference=reference, title=info.title)
    return ValidateSourceResponse(valid=True, info=SourceInfoSchema.from_domain(info))


@router.post(
    "/upload",
    response_model=UploadSourceResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Upload source",
    description="Upload an mp3 file to clip from.",
)
async def upload_source(
    services: ServicesDep,
    audio: UploadFile | None = File(default=None),
) -> UploadSourceResponse:
    if audio is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No file uploaded")
    if not is_accepted_audio(audio):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Only mp3 audio files are supported",
        )

    stored = None
    try:
        stored = await services.storage.store_upload(audio, services.settings.max_upload_bytes)
        source = await services.orchestrator.register_upload(
            stored.file_path, audio.filename or "upload.mp3"
        )
    except Exception as e:
        if stored is not None:
            services.storage.delete_asset(stored.file_path)
        raise to_http_exception(e) from e
    finally:
        await audio.close()

    logger.info("source_uploaded", source_id=source.id, file_size=stored.file_size_bytes)
    return UploadSourceResponse(source_id=source.id, info=SourceInfoSchema.from_domain(source.info))
