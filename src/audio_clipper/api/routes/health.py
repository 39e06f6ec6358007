"""Health check endpoints."""

from fastapi import APIRouter, status
from pydantic import BaseModel

from audio_clipper.api.deps import ServicesDep

router = APIRouter(tags=["Health"])


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    components: dict[str, bool] | None = None


class ReadinessResponse(BaseModel):
    """Readiness check response."""

    ready: bool
    components: dict[str, bool]


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Health check",
    description="Basic health check endpoint that verifies the API is running.",
)
async def health_check(services: ServicesDep) -> HealthResponse:
    """Basic health check - is the API up?

    Reports which collaborators are real implementations rather than stubs.
    """
    from audio_clipper import __version__

    names = {
        "media_fetcher": services.fetcher.name,
        "segment_extractor": services.extractor.name,
        "remote_storage": services.remote_storage.name,
    }

    return HealthResponse(
        status="healthy",
        version=__version__,
        components={k: v != "stub" for k, v in names.items()},
    )


@router.get(
    "/health/ready",
    response_model=ReadinessResponse,
    summary="Readiness check",
    description="Readiness check that verifies every collaborator.",
)
async def readiness_check(services: ServicesDep) -> ReadinessResponse:
    components = await services.health_check()
    return ReadinessResponse(ready=all(components.values()), components=components)


@router.get(
    "/health/live",
    status_code=status.HTTP_200_OK,
    summary="Liveness probe",
    description="Simple liveness probe for Kubernetes.",
)
async def liveness_check() -> dict[str, str]:
    """Kubernetes liveness probe - is the process alive?"""
    return {"status": "alive"}
