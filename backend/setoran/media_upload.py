"""Audio upload to the hosted media service (Cloudinary unsigned uploads)."""

from __future__ import annotations

import logging
import time
from typing import Optional

import httpx
from pydantic import BaseModel, ValidationError

from .config import Settings, get_settings
from .errors import InputValidationError, MediaUploadError

logger = logging.getLogger(__name__)

DEFAULT_AUDIO_CONTENT_TYPE = "audio/m4a"
UPLOAD_ENDPOINT = "https://api.cloudinary.com/v1_1/{cloud_name}/video/upload"


class _UploadResponse(BaseModel):
    secure_url: str
    public_id: Optional[str] = None
    resource_type: Optional[str] = None


class MediaUploader:
    """Either a URL comes back or the upload failed; nothing partial is kept."""

    def __init__(self, settings: Settings | None = None, *, client: Optional[httpx.Client] = None) -> None:
        self._settings = settings or get_settings()
        self._client = client

    def upload_audio(
        self,
        content: bytes,
        *,
        filename: Optional[str] = None,
        content_type: Optional[str] = None,
    ) -> str:
        if not content:
            raise InputValidationError("Audio file is empty.")

        name = filename or f"hafalan_{int(time.time() * 1000)}.m4a"
        # Cloudinary stores audio under the "video" resource type.
        endpoint = UPLOAD_ENDPOINT.format(cloud_name=self._settings.cloudinary_cloud_name)
        files = {"file": (name, content, content_type or DEFAULT_AUDIO_CONTENT_TYPE)}
        data = {"upload_preset": self._settings.cloudinary_upload_preset, "resource_type": "video"}

        local_client = self._client or httpx.Client(timeout=self._settings.http_timeout_seconds)
        close_client = self._client is None
        try:
            response = local_client.post(endpoint, files=files, data=data)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.warning("Media upload failed for %s: %s", name, exc)
            raise MediaUploadError("Failed to upload audio file.") from exc
        finally:
            if close_client:
                local_client.close()

        try:
            parsed = _UploadResponse.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise MediaUploadError("Media service returned an invalid upload payload.") from exc

        logger.debug("Uploaded %s as %s", name, parsed.public_id)
        return parsed.secure_url


__all__ = ["MediaUploader"]
