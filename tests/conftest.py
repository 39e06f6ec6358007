"""Pytest configuration and fixtures."""

import os
import tempfile
import time
from collections.abc import Generator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Set test environment before importing app modules
os.environ["WORKING_DIR"] = tempfile.mkdtemp(prefix="audio-clipper-tests-")
os.environ["REPOSITORY_BACKEND"] = "memory"
os.environ["MEDIA_FETCHER"] = "stub"
os.environ["SEGMENT_EXTRACTOR"] = "stub"
os.environ["REMOTE_STORAGE_PROVIDER"] = "stub"
os.environ["LOG_LEVEL"] = "WARNING"

VIDEO_URL = "https://www.youtube.com/watch?v=dQw4w9WgXcQ"


@pytest.fixture(scope="session")
def test_client() -> Generator[TestClient, None, None]:
    """Create a test client for the FastAPI app."""
    from audio_clipper.main import app

    with TestClient(app) as client:
        yield client


@pytest.fixture
def repository():
    """Get a fresh in-memory repository."""
    from audio_clipper.repositories import InMemoryRepository

    return InMemoryRepository()


@pytest.fixture
def storage(tmp_path: Path):
    """Get a storage service rooted in a temporary directory."""
    from audio_clipper.services.storage import StorageService

    return StorageService(tmp_path / "work")


@pytest.fixture
def media_fetcher():
    """Get a stub media fetcher."""
    from audio_clipper.adapters.fetcher.stub import StubMediaFetcher

    return StubMediaFetcher()


@pytest.fixture
def segment_extractor():
    """Get a stub segment extractor."""
    from audio_clipper.adapters.extractor.stub import StubSegmentExtractor

    return StubSegmentExtractor()


@pytest.fixture
def remote_storage():
    """Get a stub remote storage provider."""
    from audio_clipper.adapters.remote_storage.stub import StubRemoteStorageProvider

    return StubRemoteStorageProvider()


@pytest.fixture
def orchestrator(repository, media_fetcher, segment_extractor, storage):
    """Get an orchestrator wired to stub collaborators."""
    from audio_clipper.services.orchestrator import ProcessingOrchestrator

    return ProcessingOrchestrator(repository, media_fetcher, segment_extractor, storage)


@pytest.fixture
def services(repository, storage, media_fetcher, segment_extractor, remote_storage):
    """Get a service container built around the stub fixtures."""
    from audio_clipper.config import get_settings
    from audio_clipper.services.container import build_services

    return build_services(
        get_settings(),
        repository=repository,
        storage=storage,
        fetcher=media_fetcher,
        extractor=segment_extractor,
        remote_storage=remote_storage,
    )


@pytest.fixture
def client(services) -> Generator[TestClient, None, None]:
    """Create a test client around an isolated service container."""
    from audio_clipper.main import create_app

    with TestClient(create_app(services)) as client:
        yield client


def wait_for_job(client: TestClient, job_id: str, timeout: float = 5.0) -> dict:
    """Poll a job until it reaches a terminal status."""
    deadline = time.monotonic() + timeout
    while True:
        data = client.get(f"/api/v1/jobs/{job_id}").json()
        if data["job"]["status"] in ("completed", "error"):
            return data
        if time.monotonic() > deadline:
            raise AssertionError(f"Job {job_id} did not finish: {data['job']}")
        time.sleep(0.02)


@pytest.fixture
def job_waiter():
    """Get a helper that polls a job over HTTP until it finishes."""
    return wait_for_job
