"""
Video management endpoints.

Each endpoint maps to one StreamClient operation. Videos are
identified by their resource URL (the Location Cloudflare returned at
upload time), passed as a query parameter or in the request body.

Client errors are translated to HTTP responses by the exception
handlers registered in main.py.
"""

import logging
import shutil
import tempfile
from pathlib import Path
from typing import Annotated, Any

from fastapi import APIRouter, File, HTTPException, Query, Response, UploadFile, status
from pydantic import BaseModel, Field

from ...core.models import resource_uid
from ..dependencies import AuthenticatedUser, SettingsDep, StreamClientDep

logger = logging.getLogger(__name__)

router = APIRouter()

DEFAULT_UPLOAD_FILENAME = "video.mp4"

ResourceUrlQuery = Annotated[
    str,
    Query(description="Resource URL returned by the upload endpoint"),
]


# ---------------------------------------------------------------------------
# Request/Response Models
# ---------------------------------------------------------------------------

class VideoUploadResponse(BaseModel):
    """Response after uploading a video to Stream."""
    resource_url: str = Field(description="URL identifying the video on Cloudflare Stream")
    uid: str = Field(description="Video identifier")
    filename: str = Field(description="Name the video was uploaded under")
    size_bytes: int = Field(description="Uploaded size")


class EmbedCodeResponse(BaseModel):
    """HTML embed code for a video."""
    resource_url: str
    code: str


class AllowedOriginsRequest(BaseModel):
    """Restrict playback of a video to one origin."""
    resource_url: str = Field(description="Resource URL of the video")
    origins: str = Field(description="Hostname allowed to embed the video, e.g. example.com")


class SignedUrlsRequest(BaseModel):
    """Require signed URLs for a video."""
    resource_url: str = Field(description="Resource URL of the video")


# ---------------------------------------------------------------------------
# Helper Functions
# ---------------------------------------------------------------------------

def upload_filename(client_filename: str | None) -> str:
    """Basename of the client-supplied filename, or video.mp4 if none is usable."""
    name = Path(client_filename or "").name
    if name in ("", ".", ".."):
        return DEFAULT_UPLOAD_FILENAME
    return name


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.post(
    "/upload",
    response_model=VideoUploadResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Upload a video",
    description="Upload a video file to Cloudflare Stream using the TUS protocol",
)
def upload_video(
    video: Annotated[UploadFile, File(description="Video file (MP4, MOV, etc.)")],
    api_key: AuthenticatedUser,
    client: StreamClientDep,
    settings: SettingsDep,
) -> VideoUploadResponse:
    """
    Upload a video.

    The upload is spooled to a temporary file under its original name,
    so Cloudflare records the caller's filename, then sent with
    StreamClient.upload.
    """
    filename = upload_filename(video.filename)
    max_size_bytes = settings.max_upload_size_mb * 1024 * 1024

    with tempfile.TemporaryDirectory() as tmp_dir:
        local_path = Path(tmp_dir) / filename
        with open(local_path, "wb") as out:
            shutil.copyfileobj(video.file, out)

        size_bytes = local_path.stat().st_size
        if size_bytes > max_size_bytes:
            raise HTTPException(
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                detail=f"Video too large. Maximum size: {settings.max_upload_size_mb}MB"
            )

        logger.info(
            "Video upload started",
            extra={"video_filename": filename, "size_bytes": size_bytes}
        )

        resource_url = client.upload(local_path)

    return VideoUploadResponse(
        resource_url=resource_url,
        uid=resource_uid(resource_url),
        filename=filename,
        size_bytes=size_bytes,
    )


@router.get(
    "/status",
    summary="Get video status",
    description="Return Cloudflare's JSON description of the video",
)
def get_video_status(
    resource_url: ResourceUrlQuery,
    api_key: AuthenticatedUser,
    client: StreamClientDep,
) -> Any:
    return client.status(resource_url)


@router.get(
    "/embed",
    response_model=EmbedCodeResponse,
    summary="Get embed code",
)
def get_embed_code(
    resource_url: ResourceUrlQuery,
    api_key: AuthenticatedUser,
    client: StreamClientDep,
) -> EmbedCodeResponse:
    return EmbedCodeResponse(
        resource_url=resource_url,
        code=client.code(resource_url),
    )


@router.delete(
    "",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a video",
)
def delete_video(
    resource_url: ResourceUrlQuery,
    api_key: AuthenticatedUser,
    client: StreamClientDep,
) -> Response:
    client.delete(resource_url)

    logger.info("Video deleted", extra={"resource_url": resource_url})

    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/allowed-origins",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Restrict playback origins",
    description="Only the given hostname may embed the video",
)
def set_allowed_origins(
    request: AllowedOriginsRequest,
    api_key: AuthenticatedUser,
    client: StreamClientDep,
) -> Response:
    client.allow(request.resource_url, request.origins)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/require-signed-urls",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Require signed playback URLs",
)
def require_signed_urls(
    request: SignedUrlsRequest,
    api_key: AuthenticatedUser,
    client: StreamClientDep,
) -> Response:
    client.require_signed_urls(request.resource_url)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
