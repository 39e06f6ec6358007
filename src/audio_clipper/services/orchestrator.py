"""Processing orchestrator: turns one source into many independently tracked clips.

A submitted request is validated and persisted synchronously (one job plus
all of its selections), then a detached pipeline runs per job:

    job pending -> processing (10%) -> source acquired (30%)
      -> each selection in order: pending -> processing -> completed | error
         (progress = 30 + floor((i + 1) / n * 60) after each completed clip)
      -> job completed (100%)

A selection failing never fails the job. Failing to obtain the source audio,
or any error outside the per-selection step, puts the job in ``error`` and
leaves the remaining selections ``pending``.
"""

from pathlib import Path

from audio_clipper.adapters.extractor.base import ExtractionRequest, SegmentExtractor
from audio_clipper.adapters.fetcher.base import MediaFetcher
from audio_clipper.domain.enums import ProcessingStatus, SourceOrigin
from audio_clipper.domain.exceptions import (
    MediaFetchError,
    NotFoundError,
    RequestValidationError,
)
from audio_clipper.domain.models import (
    Job,
    JobStatusView,
    ProcessingRequest,
    Selection,
    SourceInfo,
    SourceItem,
    SubmissionResult,
)
from audio_clipper.domain.timecodes import derive_filename, is_valid_timecode, parse_timecode
from audio_clipper.logging import get_logger
from audio_clipper.repositories.base import EntityRepository
from audio_clipper.services.storage import StorageService
from audio_clipper.utils.async_utils import DetachedTasks, KeyedLocks

logger = get_logger(__name__)

PROGRESS_STARTED = 10
PROGRESS_SOURCE_READY = 30
PROGRESS_EXTRACTION_SPAN = 60
PROGRESS_DONE = 100


def selection_progress(completed_index: int, total: int) -> int:
    """Job progress after the selection at completed_index finished."""
    return PROGRESS_SOURCE_READY + ((completed_index + 1) * PROGRESS_EXTRACTION_SPAN) // total


class ProcessingOrchestrator:
    """Validates processing requests and drives one pipeline per job.

    Pipelines of different jobs interleave freely. Pipelines of jobs on the
    same source item run one after another: a later job stays ``pending``
    until the earlier one has finished.
    """

    def __init__(
        self,
        repository: EntityRepository,
        fetcher: MediaFetcher,
        extractor: SegmentExtractor,
        storage: StorageService,
    ) -> None:
        self.repository = repository
        self.fetcher = fetcher
        self.extractor = extractor
        self.storage = storage
        self._pipelines = DetachedTasks("pipeline")
        self._source_locks = KeyedLocks()
        self._reference_locks = KeyedLocks()

    # --- Probing ---

    async def validate_source_reference(self, reference: str) -> bool:
        """Check that a remote reference exists and is accessible."""
        return await self.fetcher.validate(reference)

    async def describe_source(self, reference: str) -> SourceInfo:
        """Probe a remote reference for title, duration, thumbnail and channel."""
        return await self.fetcher.describe(reference)

    async def register_upload(self, local_path: Path, original_name: str) -> SourceItem:
        """Create a source item for an audio file already stored locally."""
        duration = await self.extractor.probe_duration(local_path)
        title = Path(original_name).stem or "Uploaded audio"
        source = SourceItem.from_upload(str(local_path), SourceInfo(title=title, duration=duration))
        await self.repository.create_source(source)
        logger.info("upload_source_created", source_id=source.id, duration=duration)
        return source

    # --- Submission ---

    def _parse_selections(self, request: ProcessingRequest) -> list[tuple[int, int, str]]:
        if not request.selections:
            raise RequestValidationError("At least one selection is required")

        for item in request.selections:
            if not item.title or not item.title.strip():
                raise RequestValidationError("Selection title must not be empty")
            for value in (item.start_time, item.end_time):
                if not is_valid_timecode(value):
                    raise RequestValidationError(
                        f"Invalid time {value!r}: expected MM:SS or H:MM:SS"
                    )

        parsed = []
        for item in request.selections:
            start, end = parse_timecode(item.start_time), parse_timecode(item.end_time)
            if start >= end:
                raise RequestValidationError("Start time must be before end time")
            parsed.append((start, end, item.title))
        return parsed

    async def _resolve_source(self, request: ProcessingRequest) -> SourceItem:
        if request.origin == SourceOrigin.REMOTE_URL:
            if not request.remote_reference:
                raise RequestValidationError("remoteReference is required for remote sources")
            return await self._resolve_remote_source(request.remote_reference)

        if not request.uploaded_source_id:
            raise RequestValidationError("uploadedSourceId is required for uploaded sources")
        source = await self.repository.get_source(request.uploaded_source_id)
        if source is None:
            raise NotFoundError(f"Uploaded source {request.uploaded_source_id} not found")
        if source.origin != SourceOrigin.UPLOADED_ASSET:
            raise RequestValidationError(f"Source {source.id} is not an uploaded asset")
        return source

    async def _resolve_remote_source(self, reference: str) -> SourceItem:
        # One lookup-describe-create per reference at a time.
        async with self._reference_locks.hold(reference):
            existing = await self.repository.get_source_by_reference(reference)
            if existing is not None:
                return existing
            info = await self.describe_source(reference)
            source = SourceItem.from_remote(reference, info)
            await self.repository.create_source(source)
        logger.info("remote_source_created", source_id=source.id, title=source.title)
        return source

    async def submit_processing_request(self, request: ProcessingRequest) -> SubmissionResult:
        """Validate a request, persist its job and selections, and start the pipeline.

        Returns as soon as the job is stored; extraction happens in the
        background.

        Raises:
            RequestValidationError: Malformed request or a start >= end range.
            NotFoundError: Unknown uploaded source id.
            MediaFetchError: A new remote source could not be described.
        """
        # Every range is checked before anything is written.
        parsed = self._parse_selections(request)
        source = await self._resolve_source(request)

        job = Job.create(source.id)
        selections = [
            Selection.create(job, position, start, end, title)
            for position, (start, end, title) in enumerate(parsed)
        ]
        job, selections = await self.repository.create_job_with_selections(job, selections)

        logger.info(
            "processing_request_accepted",
            job_id=job.id,
            source_id=source.id,
            selections=len(selections),
        )
        self._pipelines.spawn(self.run_pipeline(job.id), label=job.id)

        return SubmissionResult(job_id=job.id, source_id=source.id, selections=selections)

    async def get_job_status(self, job_id: str) -> JobStatusView:
        """Assemble a job with its source item and selections.

        Raises:
            NotFoundError: If the job or its source item is unknown.
        """
        job = await self.repository.get_job(job_id)
        if job is None:
            raise NotFoundError("Job not found")
        source = await self.repository.get_source(job.source_id)
        if source is None:
            raise NotFoundError("Source item not found")
        selections = await self.repository.list_selections_for_job(job_id)
        return JobStatusView(job=job, source=source, selections=selections)

    # --- Pipeline ---

    async def run_pipeline(self, job_id: str) -> None:
        """Run a job's pipeline once no other pipeline holds its source item."""
        job = await self.repository.get_job(job_id)
        if job is None:
            logger.error("pipeline_job_missing", job_id=job_id)
            return

        source_id = job.source_id
        if self._source_locks.is_locked(source_id):
            logger.info("pipeline_waiting_for_source", job_id=job_id, source_id=source_id)
        async with self._source_locks.hold(source_id):
            await self._execute(job)

    async def _execute(self, job: Job) -> None:
        log = logger.bind(job_id=job.id, source_id=job.source_id)
        fetched_path: Path | None = None

        try:
            await self.repository.update_job(
                job.id, status=ProcessingStatus.PROCESSING, progress=PROGRESS_STARTED
            )
            log.info("pipeline_started")

            source = await self.repository.get_source(job.source_id)
            if source is None:
                raise NotFoundError("Source item not found")

            audio_path = await self._acquire_source_audio(source)
            if source.origin == SourceOrigin.REMOTE_URL:
                fetched_path = audio_path
            await self.repository.update_job(job.id, progress=PROGRESS_SOURCE_READY)
            log.info("pipeline_source_ready", audio_path=str(audio_path))

            selections = await self.repository.list_selections_for_job(job.id)
            total = len(selections)
            completed = 0
            for index, selection in enumerate(selections):
                if await self._extract_selection(selection, audio_path):
                    completed += 1
                    await self.repository.update_job(
                        job.id, progress=selection_progress(index, total)
                    )

            await self.repository.update_job(
                job.id, status=ProcessingStatus.COMPLETED, progress=PROGRESS_DONE
            )
            log.info("pipeline_completed", completed=completed, failed=total - completed)
        except Exception as e:
            # Pipeline boundary: whatever escapes is recorded on the job.
            log.exception("pipeline_failed", error=str(e))
            await self.repository.update_job(
                job.id,
                status=ProcessingStatus.ERROR,
                error=str(e) or "Processing failed",
            )
            return

        if fetched_path is not None:
            self.storage.delete_asset(fetched_path)
            await self.repository.update_source(job.source_id, local_path=None)
            log.info("pipeline_source_audio_removed", audio_path=str(fetched_path))

    async def _acquire_source_audio(self, source: SourceItem) -> Path:
        if source.origin == SourceOrigin.UPLOADED_ASSET:
            if not source.local_path or not Path(source.local_path).exists():
                raise MediaFetchError(f"Uploaded audio for source {source.id} is missing")
            return Path(source.local_path)

        if not source.remote_reference:
            raise MediaFetchError(f"Source {source.id} has no remote reference")

        result = await self.fetcher.fetch_audio(source.remote_reference, self.storage.base_path)
        await self.repository.update_source(source.id, local_path=str(result.file_path))
        return result.file_path

    async def _extract_selection(self, selection: Selection, audio_path: Path) -> bool:
        await self.repository.update_selection(selection.id, status=ProcessingStatus.PROCESSING)
        log = logger.bind(job_id=selection.job_id, selection_id=selection.id)

        try:
            result = await self.extractor.extract(
                ExtractionRequest(
                    input_path=audio_path,
                    output_path=self.storage.extraction_path(selection.id),
                    start_time=selection.start_time,
                    end_time=selection.end_time,
                )
            )
            filename = derive_filename(selection.title)
            final_path = self.storage.finalize_clip(selection.id, result.file_path, filename)
        except Exception as e:
            # Isolated per selection; siblings still run.
            log.warning("selection_extraction_failed", error=str(e))
            await self.repository.update_selection(selection.id, status=ProcessingStatus.ERROR)
            return False

        await self.repository.update_selection(
            selection.id,
            status=ProcessingStatus.COMPLETED,
            file_path=str(final_path),
            file_size=result.file_size_bytes,
            filename=filename,
        )
        log.info("selection_completed", filename=filename, file_size=result.file_size_bytes)
        return True

    # --- Lifecycle ---

    @property
    def running_pipelines(self) -> int:
        return self._pipelines.pending

    async def wait_for_idle(self) -> None:
        """Wait for every started pipeline to finish."""
        await self._pipelines.wait()

    async def shutdown(self) -> None:
        await self._pipelines.cancel_all()
