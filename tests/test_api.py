"""Tests for the HTTP and WebSocket API."""

import io
import json
import zipfile
from pathlib import Path
from urllib.parse import parse_qs, urlparse

import pytest
from fastapi.testclient import TestClient

from audio_clipper.api.routes.downloads import download_source_archive
from audio_clipper.domain.enums import SourceOrigin
from audio_clipper.domain.models import ProcessingRequest, SelectionSpec

VIDEO_URL = "https://www.youtube.com/watch?v=dQw4w9WgXcQ"


def submit(client: TestClient, *selections: dict, url: str = VIDEO_URL):
    return client.post(
        "/api/v1/jobs",
        json={
            "originType": "remote-url",
            "remoteReference": url,
            "selections": list(selections),
        },
    )


INTRO = {"startTime": "0:10", "endTime": "0:45", "title": "Intro"}
SOLO = {"startTime": "1:00", "endTime": "2:00", "title": "Guitar Solo!!"}


class TestSourceEndpoints:
    """Test source validation and upload."""

    def test_validate_source(self, client: TestClient) -> None:
        response = client.post("/api/v1/sources/validate", json={"reference": VIDEO_URL})

        assert response.status_code == 200
        data = response.json()
        assert data["valid"] is True
        assert data["info"]["duration"] == 300
        assert data["info"]["channel"] == "Stub Channel"

    def test_validate_invalid_source(self, client: TestClient) -> None:
        response = client.post(
            "/api/v1/sources/validate", json={"reference": "https://example.com/invalid"}
        )

        assert response.status_code == 400
        assert "message" in response.json()

    def test_validate_requires_reference(self, client: TestClient) -> None:
        response = client.post("/api/v1/sources/validate", json={})

        assert response.status_code == 400
        data = response.json()
        assert "reference" in data["message"]
        assert data["errors"]

    def test_upload_source(self, client: TestClient, storage) -> None:
        response = client.post(
            "/api/v1/sources/upload",
            files={"audio": ("My Mix.mp3", b"\xff\xfb\x90\x64" + b"\x00" * 64, "audio/mpeg")},
        )

        assert response.status_code == 201
        data = response.json()
        assert data["sourceId"]
        assert data["info"]["title"] == "My Mix"
        assert len(list(storage.base_path.glob("*.mp3"))) == 1

    def test_upload_accepts_mp3_extension(self, client: TestClient) -> None:
        response = client.post(
            "/api/v1/sources/upload",
            files={"audio": ("track.MP3", b"\x00" * 16, "application/octet-stream")},
        )
        assert response.status_code == 201

    def test_upload_rejects_other_types(self, client: TestClient) -> None:
        response = client.post(
            "/api/v1/sources/upload",
            files={"audio": ("notes.txt", b"hello", "text/plain")},
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Only mp3 audio files are supported"

    def test_upload_without_file(self, client: TestClient) -> None:
        response = client.post("/api/v1/sources/upload")

        assert response.status_code == 400
        assert response.json()["message"] == "No file uploaded"

    def test_upload_then_process(self, client: TestClient, job_waiter) -> None:
        upload = client.post(
            "/api/v1/sources/upload",
            files={"audio": ("set.mp3", b"\x00" * 32, "audio/mpeg")},
        ).json()

        response = client.post(
            "/api/v1/jobs",
            json={
                "originType": "uploaded-asset",
                "uploadedSourceId": upload["sourceId"],
                "selections": [INTRO],
            },
        )
        assert response.status_code == 202

        data = job_waiter(client, response.json()["jobId"])
        assert data["job"]["status"] == "completed"
        assert data["sourceItem"]["originType"] == "uploaded-asset"


class TestJobEndpoints:
    """Test job submission and status."""

    def test_submit_and_complete(self, client: TestClient, job_waiter) -> None:
        response = submit(client, INTRO, SOLO)

        assert response.status_code == 202
        data = response.json()
        assert len(data["selections"]) == 2
        assert all(s["status"] == "pending" for s in data["selections"])

        status = job_waiter(client, data["jobId"])
        assert status["job"]["status"] == "completed"
        assert status["job"]["progress"] == 100
        assert status["sourceItem"]["id"] == data["sourceId"]
        assert [s["filename"] for s in status["selections"]] == [
            "intro.mp3",
            "guitar-solo.mp3",
        ]

    def test_submit_rejects_backwards_range(self, client: TestClient) -> None:
        response = submit(client, INTRO, {"startTime": "2:00", "endTime": "1:00", "title": "x"})

        assert response.status_code == 400
        assert response.json()["message"] == "Start time must be before end time"

    def test_submit_rejects_bad_timecode(self, client: TestClient) -> None:
        response = submit(client, {"startTime": "61:99", "endTime": "62:00", "title": "x"})
        assert response.status_code == 400

    def test_submit_rejects_unknown_origin(self, client: TestClient) -> None:
        response = client.post(
            "/api/v1/jobs",
            json={"originType": "ftp", "remoteReference": VIDEO_URL, "selections": [INTRO]},
        )
        assert response.status_code == 400
        assert "errors" in response.json()

    def test_submit_unknown_upload(self, client: TestClient) -> None:
        response = client.post(
            "/api/v1/jobs",
            json={
                "originType": "uploaded-asset",
                "uploadedSourceId": "missing",
                "selections": [INTRO],
            },
        )
        assert response.status_code == 404

    def test_submit_describe_failure(self, client: TestClient) -> None:
        response = submit(client, INTRO, url="https://example.com/invalid")

        assert response.status_code == 500
        assert "Failed to get video info" in response.json()["message"]

    def test_job_not_found(self, client: TestClient) -> None:
        response = client.get("/api/v1/jobs/does-not-exist")

        assert response.status_code == 404
        assert response.json() == {"message": "Job not found"}

    def test_fetch_failure_reported_on_job(self, client: TestClient, job_waiter) -> None:
        response = submit(client, INTRO, url="https://example.com/unavailable")

        status = job_waiter(client, response.json()["jobId"])
        assert status["job"]["status"] == "error"
        assert status["job"]["error"]
        assert status["selections"][0]["status"] == "pending"


class TestDownloadEndpoints:
    """Test clip and archive downloads."""

    def test_download_selection(self, client: TestClient, job_waiter) -> None:
        job = submit(client, SOLO).json()
        status = job_waiter(client, job["jobId"])
        selection_id = status["selections"][0]["id"]

        response = client.get(f"/api/v1/downloads/{selection_id}")

        assert response.status_code == 200
        assert response.headers["content-type"] == "audio/mpeg"
        assert 'filename="guitar-solo.mp3"' in response.headers["content-disposition"]
        assert len(response.content) == 60

    def test_download_unknown_selection(self, client: TestClient) -> None:
        response = client.get("/api/v1/downloads/missing")
        assert response.status_code == 404

    def test_download_all(self, client: TestClient, job_waiter, storage) -> None:
        job = submit(client, INTRO, SOLO, {**INTRO, "startTime": "3:00", "endTime": "3:30"}).json()
        job_waiter(client, job["jobId"])

        response = client.get(f"/api/v1/downloads/source/{job['sourceId']}")

        assert response.status_code == 200
        assert 'filename="audio-selections.zip"' in response.headers["content-disposition"]
        with zipfile.ZipFile(io.BytesIO(response.content)) as bundle:
            assert sorted(bundle.namelist()) == ["guitar-solo.mp3", "intro-2.mp3", "intro.mp3"]
        # Archive is removed once streamed
        assert list(storage.base_path.glob("*.zip")) == []

    def test_download_all_without_completed(self, client: TestClient) -> None:
        response = client.get("/api/v1/downloads/source/missing")
        assert response.status_code == 404


class TestRemoteStorageEndpoints:
    """Test the remote upload authorization flow over HTTP."""

    def _completed_selection(self, client: TestClient, job_waiter) -> dict:
        job = submit(client, INTRO).json()
        return job_waiter(client, job["jobId"])["selections"][0]

    def test_authorize(self, client: TestClient, job_waiter) -> None:
        selection = self._completed_selection(client, job_waiter)

        response = client.post(
            "/api/v1/remote-storage/authorize", json={"selectionId": selection["id"]}
        )

        assert response.status_code == 200
        assert response.json()["authUrl"].startswith("https://storage.example.com/authorize")

    def test_authorize_requires_selection(self, client: TestClient) -> None:
        response = client.post("/api/v1/remote-storage/authorize", json={})

        assert response.status_code == 400
        assert response.json()["message"] == "selectionId is required"

    def test_callback_with_invalid_state(self, client: TestClient) -> None:
        response = client.get(
            "/api/v1/remote-storage/callback", params={"code": "c", "state": "bogus"}
        )

        assert response.status_code == 400
        assert response.headers["content-type"].startswith("text/html")
        assert '"type": "error"' in response.text
        assert "window.close()" in response.text

    def test_callback_provider_denied(self, client: TestClient) -> None:
        response = client.get("/api/v1/remote-storage/callback", params={"error": "access_denied"})

        assert response.status_code == 400
        assert "access_denied" in response.text

    def test_full_flow_over_websocket(
        self, client: TestClient, job_waiter, remote_storage
    ) -> None:
        selection = self._completed_selection(client, job_waiter)
        auth_url = client.post(
            "/api/v1/remote-storage/authorize", json={"selectionId": selection["id"]}
        ).json()["authUrl"]
        state = parse_qs(urlparse(auth_url).query)["state"][0]

        with client.websocket_connect("/ws") as ws:
            ws.send_text(json.dumps({"type": "register", "jobId": selection["jobId"]}))
            assert ws.receive_json() == {
                "type": "registered",
                "payload": {"jobId": selection["jobId"]},
            }

            response = client.get(
                "/api/v1/remote-storage/callback", params={"code": "ok", "state": state}
            )
            assert response.status_code == 200
            assert '"type": "success"' in response.text

            event = ws.receive_json()

        assert event["type"] == "upload-success"
        assert event["payload"]["selectionId"] == selection["id"]
        assert event["payload"]["fileName"] == "intro.mp3"
        assert len(remote_storage.uploads) == 1

        # Handshake is single use
        again = client.get(
            "/api/v1/remote-storage/callback", params={"code": "ok", "state": state}
        )
        assert again.status_code == 400


def test_websocket_ignores_garbage(client: TestClient) -> None:
    with client.websocket_connect("/ws") as ws:
        ws.send_text("not json")
        ws.send_text(json.dumps({"type": "ping"}))
        assert ws.receive_json() == {"type": "pong", "payload": {}}


def test_working_dir_layout(client: TestClient, job_waiter, storage) -> None:
    job = submit(client, INTRO).json()
    status = job_waiter(client, job["jobId"])

    clip = Path(storage.base_path, status["selections"][0]["id"], "intro.mp3")
    assert clip.exists()
    # Fetched source audio is not retained
    assert list(storage.base_path.glob("source-*.mp3")) == []


@pytest.mark.asyncio
async def test_overlapping_archive_downloads(services, storage) -> None:
    result = await services.orchestrator.submit_processing_request(
        ProcessingRequest(
            origin=SourceOrigin.REMOTE_URL,
            remote_reference=VIDEO_URL,
            selections=[SelectionSpec("0:10", "0:45", "Intro")],
        )
    )
    await services.orchestrator.wait_for_idle()

    first = await download_source_archive(result.source_id, services)
    second = await download_source_archive(result.source_id, services)

    assert first.path != second.path
    # Cleaning up after the first response leaves the second one intact
    await first.background()
    assert not Path(first.path).exists()
    assert Path(second.path).exists()

    await second.background()
    assert list(storage.base_path.glob("*.zip")) == []
