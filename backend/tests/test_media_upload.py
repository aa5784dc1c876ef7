from __future__ import annotations

import httpx
import pytest

from setoran.config import Settings
from setoran.errors import InputValidationError, MediaUploadError
from setoran.media_upload import MediaUploader


def _uploader(handler) -> MediaUploader:
    settings = Settings(CLOUDINARY_CLOUD_NAME="demo-cloud", CLOUDINARY_UPLOAD_PRESET="hafalan_preset")  # type: ignore[arg-type]
    return MediaUploader(settings, client=httpx.Client(transport=httpx.MockTransport(handler)))


def test_upload_returns_secure_url() -> None:
    seen: dict[str, object] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["body"] = request.read()
        return httpx.Response(
            200,
            json={
                "secure_url": "https://res.cloudinary.com/demo-cloud/video/upload/v1/rec.m4a",
                "public_id": "rec",
                "resource_type": "video",
            },
        )

    url = _uploader(handler).upload_audio(b"audio-bytes", filename="rec.m4a", content_type="audio/m4a")

    assert url == "https://res.cloudinary.com/demo-cloud/video/upload/v1/rec.m4a"
    assert seen["url"] == "https://api.cloudinary.com/v1_1/demo-cloud/video/upload"
    body = seen["body"]
    assert isinstance(body, bytes)
    assert b"hafalan_preset" in body
    assert b"audio-bytes" in body
    assert b'filename="rec.m4a"' in body


def test_empty_audio_is_rejected_before_upload() -> None:
    def handler(request: httpx.Request) -> httpx.Response:  # pragma: no cover - must not be called
        raise AssertionError("upload should not be attempted")

    with pytest.raises(InputValidationError):
        _uploader(handler).upload_audio(b"")


def test_http_failure_raises_upload_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, json={"error": {"message": "Upload preset not found"}})

    with pytest.raises(MediaUploadError, match="Failed to upload audio file"):
        _uploader(handler).upload_audio(b"audio-bytes")


def test_payload_without_url_raises_upload_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"public_id": "rec"})

    with pytest.raises(MediaUploadError):
        _uploader(handler).upload_audio(b"audio-bytes")
