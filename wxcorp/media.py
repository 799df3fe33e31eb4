"""Media endpoints of the corp API.

Each function is a thin parameter-marshalling layer over `CorpClient.upload`.
Vendor error codes are returned inside the result model.
"""

from __future__ import annotations

import os
from typing import Optional
from urllib.parse import urlencode

from wxcorp.access_token import DEFAULT_BASE_URL
from wxcorp.client.corp import CorpClient
from wxcorp.client.multipart import UploadContent, read_file_bounded
from wxcorp.models import ImageURL, MaterialInfo, MediaInfo, VideoDescription

MEDIA_TYPES = frozenset({"image", "voice", "video", "file"})

MEDIA_FIELD = "media"


def _check_media_type(media_type: str) -> None:
    if media_type not in MEDIA_TYPES:
        raise ValueError(f"unsupported media type {media_type!r}; expected one of {sorted(MEDIA_TYPES)}")


def _endpoint(base_url: str, path: str, **params: object) -> str:
    """Build `<base><path>?<params>&access_token=` ready for the token suffix."""

    query = urlencode(params)
    prefix = base_url.rstrip("/") + "/" + path
    return f"{prefix}?{query}&access_token=" if query else f"{prefix}?access_token="


def upload_media(
    client: CorpClient,
    media_type: str,
    filename: str,
    content: UploadContent,
    *,
    base_url: str = DEFAULT_BASE_URL,
) -> MediaInfo:
    """Upload a temporary media file (kept by the server for three days)."""

    _check_media_type(media_type)
    return client.upload(
        _endpoint(base_url, "media/upload", type=media_type),
        MEDIA_FIELD,
        filename,
        content,
        response_model=MediaInfo,
    )


def upload_image(
    client: CorpClient,
    filename: str,
    content: UploadContent,
    *,
    base_url: str = DEFAULT_BASE_URL,
) -> ImageURL:
    """Upload an image for use inside message bodies; returns a permanent URL."""

    return client.upload(
        _endpoint(base_url, "media/uploadimg"),
        MEDIA_FIELD,
        filename,
        content,
        response_model=ImageURL,
    )


def upload_material(
    client: CorpClient,
    agent_id: int,
    media_type: str,
    filename: str,
    content: UploadContent,
    *,
    description: Optional[VideoDescription] = None,
    base_url: str = DEFAULT_BASE_URL,
) -> MaterialInfo:
    """Upload a permanent material for an agent.

    For videos, `description` is sent as the JSON `description` form field.
    """

    _check_media_type(media_type)
    if description is not None and media_type != "video":
        raise ValueError("description is only accepted for video material")

    return client.upload(
        _endpoint(base_url, "material/add_material", agentid=int(agent_id), type=media_type),
        MEDIA_FIELD,
        filename,
        content,
        extra_field="description" if description is not None else None,
        extra_value=description.model_dump_json() if description is not None else None,
        response_model=MaterialInfo,
    )


def upload_media_from_file(
    client: CorpClient, media_type: str, path: str, *, base_url: str = DEFAULT_BASE_URL
) -> MediaInfo:
    data = read_file_bounded(path, client.max_upload_bytes)
    return upload_media(client, media_type, os.path.basename(path), data, base_url=base_url)


def upload_image_from_file(
    client: CorpClient, path: str, *, base_url: str = DEFAULT_BASE_URL
) -> ImageURL:
    data = read_file_bounded(path, client.max_upload_bytes)
    return upload_image(client, os.path.basename(path), data, base_url=base_url)


def upload_material_from_file(
    client: CorpClient,
    agent_id: int,
    media_type: str,
    path: str,
    *,
    description: Optional[VideoDescription] = None,
    base_url: str = DEFAULT_BASE_URL,
) -> MaterialInfo:
    data = read_file_bounded(path, client.max_upload_bytes)
    return upload_material(
        client,
        agent_id,
        media_type,
        os.path.basename(path),
        data,
        description=description,
        base_url=base_url,
    )
