"""Tests for the notification channel."""

from typing import Any

import pytest

from audio_clipper.domain.enums import NotificationType
from audio_clipper.services.notifications import NotificationChannel


class FakeConnection:
    """Connection double that records what it was sent."""

    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.sent: list[Any] = []

    async def send_json(self, data: Any) -> None:
        if self.fail:
            raise RuntimeError("socket closed")
        self.sent.append(data)


@pytest.mark.asyncio
async def test_send_to_registered_connection() -> None:
    channel = NotificationChannel()
    conn = FakeConnection()
    channel.register("job-1", conn)

    delivered = await channel.send("job-1", NotificationType.UPLOAD_SUCCESS, {"selectionId": "s"})

    assert delivered is True
    assert conn.sent == [{"type": "upload-success", "payload": {"selectionId": "s"}}]


@pytest.mark.asyncio
async def test_send_without_connection_is_dropped() -> None:
    channel = NotificationChannel()

    delivered = await channel.send("job-1", NotificationType.UPLOAD_FAILURE, {})

    assert delivered is False


@pytest.mark.asyncio
async def test_last_registration_wins() -> None:
    channel = NotificationChannel()
    old, new = FakeConnection(), FakeConnection()
    channel.register("job-1", old)
    channel.register("job-1", new)

    await channel.send("job-1", NotificationType.UPLOAD_SUCCESS, {})

    assert old.sent == []
    assert len(new.sent) == 1
    assert channel.connection_count == 1


@pytest.mark.asyncio
async def test_failed_send_unregisters() -> None:
    channel = NotificationChannel()
    channel.register("job-1", FakeConnection(fail=True))

    delivered = await channel.send("job-1", NotificationType.UPLOAD_SUCCESS, {})

    assert delivered is False
    assert not channel.is_registered("job-1")


def test_unregister_only_own_entry() -> None:
    channel = NotificationChannel()
    old, new = FakeConnection(), FakeConnection()
    channel.register("job-1", old)
    channel.register("job-1", new)

    # A stale connection closing must not drop the newer registration
    assert channel.unregister("job-1", old) is False
    assert channel.is_registered("job-1")
    assert channel.unregister("job-1", new) is True
    assert not channel.is_registered("job-1")


def test_unregister_connection_removes_all_its_jobs() -> None:
    channel = NotificationChannel()
    conn, other = FakeConnection(), FakeConnection()
    channel.register("job-1", conn)
    channel.register("job-2", conn)
    channel.register("job-3", other)

    removed = channel.unregister_connection(conn)

    assert sorted(removed) == ["job-1", "job-2"]
    assert channel.is_registered("job-3")
    assert channel.connection_count == 1
