"""FastAPI dependencies."""

from typing import Annotated

from fastapi import Depends, Request, WebSocket

from audio_clipper.services.container import ServiceContainer
from audio_clipper.services.notifications import NotificationChannel
from audio_clipper.services.orchestrator import ProcessingOrchestrator
from audio_clipper.services.remote_upload import RemoteUploadService


def get_services(request: Request) -> ServiceContainer:
    """Get the service container built in the application lifespan."""
    return request.app.state.services


def get_orchestrator(request: Request) -> ProcessingOrchestrator:
    return get_services(request).orchestrator


def get_remote_upload(request: Request) -> RemoteUploadService:
    return get_services(request).remote_upload


def get_notifications(websocket: WebSocket) -> NotificationChannel:
    return websocket.app.state.services.notifications


ServicesDep = Annotated[ServiceContainer, Depends(get_services)]
OrchestratorDep = Annotated[ProcessingOrchestrator, Depends(get_orchestrator)]
RemoteUploadDep = Annotated[RemoteUploadService, Depends(get_remote_upload)]
NotificationsDep = Annotated[NotificationChannel, Depends(get_notifications)]
