"""Tests for entity repository backends."""

from dataclasses import replace
from datetime import UTC, datetime, timedelta

import pytest

from audio_clipper.db.session import build_engine
from audio_clipper.domain.enums import ProcessingStatus
from audio_clipper.domain.models import Job, Selection, SourceInfo, SourceItem
from audio_clipper.repositories import InMemoryRepository, SqlRepository


@pytest.fixture(params=["memory", "sql"])
def repo(request):
    """Run each test against both backends."""
    if request.param == "memory":
        return InMemoryRepository()
    return SqlRepository(build_engine("sqlite://"), create_tables=True)


def make_source(reference: str = "https://example.com/watch?v=1") -> SourceItem:
    return SourceItem.from_remote(reference, SourceInfo(title="Song", duration=200))


async def seed_job(repo, source: SourceItem, count: int = 2):
    await repo.create_source(source)
    job = Job.create(source.id)
    selections = [Selection.create(job, i, i * 10, i * 10 + 5, f"Clip {i}") for i in range(count)]
    return await repo.create_job_with_selections(job, selections)


@pytest.mark.asyncio
async def test_source_roundtrip(repo) -> None:
    source = make_source()
    await repo.create_source(source)

    loaded = await repo.get_source(source.id)
    assert loaded == source
    assert await repo.get_source("missing") is None


@pytest.mark.asyncio
async def test_source_by_reference_is_exact(repo) -> None:
    source = make_source("https://example.com/watch?v=abc")
    await repo.create_source(source)

    assert (await repo.get_source_by_reference("https://example.com/watch?v=abc")).id == source.id
    assert await repo.get_source_by_reference("https://example.com/watch?v=ab") is None


@pytest.mark.asyncio
async def test_update_source(repo) -> None:
    source = make_source()
    await repo.create_source(source)

    updated = await repo.update_source(source.id, local_path="/tmp/x.mp3")
    assert updated.local_path == "/tmp/x.mp3"
    assert updated.title == source.title
    assert (await repo.get_source(source.id)).local_path == "/tmp/x.mp3"


@pytest.mark.asyncio
async def test_update_unknown_returns_none(repo) -> None:
    assert await repo.update_source("missing", title="x") is None
    assert await repo.update_job("missing", progress=10) is None
    assert await repo.update_selection("missing", status=ProcessingStatus.ERROR) is None


@pytest.mark.asyncio
async def test_job_with_selections(repo) -> None:
    source = make_source()
    job, selections = await seed_job(repo, source, count=3)

    assert await repo.get_job(job.id) == job
    assert (await repo.get_job_by_source(source.id)).id == job.id

    listed = await repo.list_selections_for_job(job.id)
    assert [s.id for s in listed] == [s.id for s in selections]
    assert [s.position for s in listed] == [0, 1, 2]


@pytest.mark.asyncio
async def test_update_job(repo) -> None:
    job, _ = await seed_job(repo, make_source())

    updated = await repo.update_job(job.id, status=ProcessingStatus.PROCESSING, progress=10)
    assert updated.status == ProcessingStatus.PROCESSING
    assert updated.progress == 10
    assert (await repo.get_job(job.id)).progress == 10


@pytest.mark.asyncio
async def test_update_selection(repo) -> None:
    _, selections = await seed_job(repo, make_source())

    updated = await repo.update_selection(
        selections[0].id,
        status=ProcessingStatus.COMPLETED,
        file_path="/tmp/clip.mp3",
        file_size=42,
        filename="clip-0.mp3",
    )
    assert updated.status == ProcessingStatus.COMPLETED
    assert updated.file_size == 42
    assert (await repo.get_selection(selections[0].id)).filename == "clip-0.mp3"
    assert (await repo.get_selection(selections[1].id)).status == ProcessingStatus.PENDING


@pytest.mark.asyncio
async def test_selections_for_source_span_jobs(repo) -> None:
    source = make_source()
    first_job, _ = await seed_job(repo, source, count=2)
    second_job = Job.create(source.id)
    await repo.create_job_with_selections(
        second_job, [Selection.create(second_job, 0, 0, 5, "Again")]
    )

    assert len(await repo.list_selections_for_source(source.id)) == 3
    assert len(await repo.list_selections_for_job(first_job.id)) == 2
    assert len(await repo.list_selections_for_job(second_job.id)) == 1


@pytest.mark.asyncio
async def test_auth_handshake_lifecycle(repo) -> None:
    handshake = await repo.create_auth_handshake("selection-1")
    assert len(handshake.token) >= 32

    loaded = await repo.get_auth_handshake(handshake.token)
    assert loaded.selection_id == "selection-1"

    await repo.delete_auth_handshake(handshake.token)
    assert await repo.get_auth_handshake(handshake.token) is None

    # Deleting twice is harmless
    await repo.delete_auth_handshake(handshake.token)


@pytest.mark.asyncio
async def test_tokens_are_unique(repo) -> None:
    first = await repo.create_auth_handshake("s")
    second = await repo.create_auth_handshake("s")
    assert first.token != second.token


@pytest.mark.asyncio
async def test_purge_expired_handshakes(repo) -> None:
    fresh = await repo.create_auth_handshake("fresh")
    stale = await repo.create_auth_handshake("stale")
    await _age_handshake(repo, stale.token, timedelta(minutes=11))

    removed = await repo.purge_expired_handshakes(600)

    assert removed == 1
    assert await repo.get_auth_handshake(stale.token) is None
    assert await repo.get_auth_handshake(fresh.token) is not None


@pytest.mark.asyncio
async def test_health_check(repo) -> None:
    assert await repo.health_check() is True


async def _age_handshake(repo, token: str, age: timedelta) -> None:
    created = datetime.now(UTC) - age
    if isinstance(repo, InMemoryRepository):
        repo._handshakes[token] = replace(repo._handshakes[token], created_at=created)
        return

    from audio_clipper.db.models import AuthHandshakeModel
    from audio_clipper.db.session import session_scope

    with session_scope(repo._session_factory) as session:
        session.get(AuthHandshakeModel, token).created_at = created
