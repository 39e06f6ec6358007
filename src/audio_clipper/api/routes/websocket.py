"""WebSocket endpoint for per-job push notifications.

Clients send ``{"type": "register", "jobId": ...}`` to bind the connection to
a job. The server pushes ``{"type": "upload-success" | "upload-failure",
"payload": {...}}`` as remote uploads finish.
"""

import json

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from audio_clipper.api.deps import NotificationsDep
from audio_clipper.logging import get_logger

router = APIRouter(tags=["WebSocket"])
logger = get_logger(__name__)


@router.websocket("/ws")
async def notifications_websocket(websocket: WebSocket, notifications: NotificationsDep) -> None:
    await websocket.accept()
    logger.info("websocket_connected")

    try:
        while True:
            data = await websocket.receive_text()
            try:
                message = json.loads(data)
            except json.JSONDecodeError:
                logger.warning("websocket_message_invalid", reason="not_json")
                continue

            if not isinstance(message, dict):
                continue
            if message.get("type") == "register" and message.get("jobId"):
                job_id = str(message["jobId"])
                notifications.register(job_id, websocket)
                await websocket.send_json({"type": "registered", "payload": {"jobId": job_id}})
            elif message.get("type") == "ping":
                await websocket.send_json({"type": "pong", "payload": {}})

    except WebSocketDisconnect:
        pass
    finally:
        job_ids = notifications.unregister_connection(websocket)
        logger.info("websocket_disconnected", job_ids=job_ids)
