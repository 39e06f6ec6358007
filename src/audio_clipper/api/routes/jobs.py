"""Processing job endpoints."""

from fastapi import APIRouter, status
from pydantic import Field

from audio_clipper.api.deps import OrchestratorDep
from audio_clipper.api.errors import to_http_exception
from audio_clipper.api.schemas import CamelModel, JobSchema, SelectionSchema, SourceItemSchema
from audio_clipper.domain.enums import SourceOrigin
from audio_clipper.domain.models import ProcessingRequest, SelectionSpec
from audio_clipper.logging import get_logger

router = APIRouter(prefix="/jobs", tags=["Jobs"])
logger = get_logger(__name__)


class SelectionRequest(CamelModel):
    """One requested clip."""

    start_time: str = Field(..., description="MM:SS or H:MM:SS")
    end_time: str = Field(..., description="MM:SS or H:MM:SS")
    title: str


class SubmitProcessingRequest(CamelModel):
    """Request to cut clips out of a remote or uploaded source."""

    origin_type: SourceOrigin
    remote_reference: str | None = None
    uploaded_source_id: str | None = None
    selections: list[SelectionRequest]

    def to_domain(self) -> ProcessingRequest:
        return ProcessingRequest(
            origin=self.origin_type,
            remote_reference=self.remote_reference.strip() if self.remote_reference else None,
            uploaded_source_id=self.uploaded_source_id,
            selections=[
                SelectionSpec(start_time=s.start_time, end_time=s.end_time, title=s.title)
                for s in self.selections
            ],
        )


class SubmitProcessingResponse(CamelModel):
    job_id: str
    source_id: str
    selections: list[SelectionSchema]


class JobStatusResponse(CamelModel):
    job: JobSchema
    source_item: SourceItemSchema
    selections: list[SelectionSchema]


@router.post(
    "",
    response_model=SubmitProcessingResponse,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Submit processing request",
    description="Create a job for the given selections. Clips are extracted in the background.",
)
async def submit_processing(
    request: SubmitProcessingRequest,
    orchestrator: OrchestratorDep,
) -> SubmitProcessingResponse:
    try:
        result = await orchestrator.submit_processing_request(request.to_domain())
    except Exception as e:
        raise to_http_exception(e) from e

    return SubmitProcessingResponse(
        job_id=result.job_id,
        source_id=result.source_id,
        selections=[SelectionSchema.from_domain(s) for s in result.selections],
    )


@router.get(
    "/{job_id}",
    response_model=JobStatusResponse,
    summary="Get job status",
    description="Get a job with its source item and every selection.",
)
async def get_job_status(job_id: str, orchestrator: OrchestratorDep) -> JobStatusResponse:
    try:
        view = await orchestrator.get_job_status(job_id)
    except Exception as e:
        raise to_http_exception(e) from e

    return JobStatusResponse(
        job=JobSchema.from_domain(view.job),
        source_item=SourceItemSchema.from_domain(view.source),
        selections=[SelectionSchema.from_domain(s) for s in view.selections],
    )
