"""Remote storage authorization endpoints."""

import json

from fastapi import APIRouter, status
from fastapi.responses import HTMLResponse

from audio_clipper.api.deps import RemoteUploadDep
from audio_clipper.api.errors import to_http_exception
from audio_clipper.api.schemas import CamelModel
from audio_clipper.domain.exceptions import AudioClipperError
from audio_clipper.logging import get_logger

router = APIRouter(prefix="/remote-storage", tags=["Remote storage"])
logger = get_logger(__name__)

CALLBACK_PAGE = """<!DOCTYPE html>
<html>
<head><title>Audio Clipper</title></head>
<body>
<p>{text}</p>
<script>
  if (window.opener) {{
    window.opener.postMessage({message}, "*");
  }}
  window.close();
</script>
</body>
</html>
"""


class AuthorizeRequest(CamelModel):
    selection_id: str | None = None


class AuthorizeResponse(CamelModel):
    auth_url: str


def render_callback_page(kind: str, message: str, status_code: int = status.HTTP_200_OK) -> HTMLResponse:
    """Page that reports the outcome to the opener window and closes itself."""
    payload = json.dumps({"type": kind, "message": message}).replace("</", "<\\/")
    text = message.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")
    return HTMLResponse(
        CALLBACK_PAGE.format(text=text, message=payload),
        status_code=status_code,
    )


@router.post(
    "/authorize",
    response_model=AuthorizeResponse,
    summary="Start remote upload",
    description="Create an authorization handshake for a selection and return the consent URL.",
)
async def authorize(request: AuthorizeRequest, remote_upload: RemoteUploadDep) -> AuthorizeResponse:
    try:
        auth_url = await remote_upload.initiate(request.selection_id)
    except Exception as e:
        raise to_http_exception(e) from e
    return AuthorizeResponse(auth_url=auth_url)


@router.get(
    "/callback",
    response_class=HTMLResponse,
    summary="Authorization callback",
    description="Redirect target of the consent flow. Starts the upload in the background.",
)
async def authorization_callback(
    remote_upload: RemoteUploadDep,
    code: str | None = None,
    state: str | None = None,
    error: str | None = None,
) -> HTMLResponse:
    if error:
        logger.warning("remote_authorization_denied", error=error)
        return render_callback_page("error", f"Authorization failed: {error}", status.HTTP_400_BAD_REQUEST)

    try:
        ack = await remote_upload.complete_authorization(code, state)
    except AudioClipperError as e:
        http_error = to_http_exception(e)
        return render_callback_page("error", str(e), http_error.status_code)

    return render_callback_page("success", f"Uploading {ack.file_name}")
