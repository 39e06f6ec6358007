"""Push channel for asynchronous per-job events."""

from typing import Any, Protocol

from audio_clipper.domain.enums import NotificationType
from audio_clipper.logging import get_logger

logger = get_logger(__name__)


class Connection(Protocol):
    """A live duplex connection able to push JSON messages."""

    async def send_json(self, data: Any) -> None: ...


class NotificationChannel:
    """Maps a job id to the one connection that wants its events.

    The last registration for a job wins. Delivery is best effort: events for
    a job without a live connection are logged and dropped, never queued.
    """

    def __init__(self) -> None:
        self._connections: dict[str, Connection] = {}

    def register(self, job_id: str, connection: Connection) -> None:
        previous = self._connections.get(job_id)
        self._connections[job_id] = connection
        logger.info("notification_client_registered", job_id=job_id, replaced=previous is not None)

    def unregister(self, job_id: str, connection: Connection | None = None) -> bool:
        """Remove a job's registration.

        When a connection is given, the entry is only removed if it still
        belongs to that connection.
        """
        current = self._connections.get(job_id)
        if current is None or (connection is not None and current is not connection):
            return False
        del self._connections[job_id]
        logger.info("notification_client_unregistered", job_id=job_id)
        return True

    def unregister_connection(self, connection: Connection) -> list[str]:
        """Remove every job registration held by a closed connection."""
        job_ids = [job_id for job_id, conn in self._connections.items() if conn is connection]
        for job_id in job_ids:
            self.unregister(job_id, connection)
        return job_ids

    def is_registered(self, job_id: str) -> bool:
        return job_id in self._connections

    @property
    def connection_count(self) -> int:
        return len(self._connections)

    async def send(
        self,
        job_id: str,
        event_type: NotificationType,
        payload: dict[str, Any],
    ) -> bool:
        """Push an event to the job's connection.

        Returns:
            True if the event was handed to a live connection.
        """
        connection = self._connections.get(job_id)
        if connection is None:
            logger.warning("notification_dropped", job_id=job_id, event_type=str(event_type))
            return False

        try:
            await connection.send_json({"type": str(event_type), "payload": payload})
        except Exception as e:
            # A dead socket only surfaces on write; forget it and report non-delivery.
            logger.warning(
                "notification_delivery_failed",
                job_id=job_id,
                event_type=str(event_type),
                error=str(e),
            )
            self.unregister(job_id, connection)
            return False

        logger.info("notification_delivered", job_id=job_id, event_type=str(event_type))
        return True
