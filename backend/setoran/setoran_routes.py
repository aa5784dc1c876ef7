"""Setoran submission (multipart audio upload) and teacher review endpoints."""

from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from pydantic import BaseModel, Field

from .capabilities import Capability
from .dependencies import get_current_user, get_media_uploader, require_capability
from .domain import Setoran, SetoranCategory, SetoranStatus, User
from .errors import InputValidationError, SetoranError, http_error
from .media_upload import MediaUploader
from .setoran_workflow import setoran_workflow

router = APIRouter(prefix="/api/setoran", tags=["setoran"])
logger = logging.getLogger(__name__)


class ReviewRequest(BaseModel):
    status: SetoranStatus
    catatan: Optional[str] = Field(default=None, max_length=2000)
    poin: Optional[int] = Field(default=None, ge=0)


def _parse_juz(value: Optional[str]) -> Optional[int]:
    if value is None or not value.strip():
        return None
    try:
        return int(value)
    except ValueError as exc:
        raise InputValidationError("Juz must be a number.") from exc


@router.post("", response_model=Setoran, status_code=status.HTTP_201_CREATED)
def submit_setoran(
    file: Optional[UploadFile] = File(default=None),
    jenis: str = Form(default=SetoranCategory.MEMORIZATION.value),
    surah: str = Form(default=""),
    juz: Optional[str] = Form(default=None),
    catatan: Optional[str] = Form(default=None),
    user: User = Depends(require_capability(Capability.SUBMIT_SETORAN)),
    uploader: MediaUploader = Depends(get_media_uploader),
) -> Setoran:
    try:
        draft = setoran_workflow.prepare_submission(
            user,
            category=jenis,
            surah=surah,
            juz=_parse_juz(juz),
            note=catatan,
            has_media=file is not None,
        )
        content = file.file.read()
        file_url = uploader.upload_audio(content, filename=file.filename, content_type=file.content_type)
        return setoran_workflow.create_submission(
            user.id,
            file_url,
            draft.jenis,
            draft.surah,
            juz=draft.juz,
            note=draft.catatan,
        )
    except SetoranError as exc:
        logger.warning("Setoran submission by %s failed: %s", user.id, exc)
        raise http_error(exc) from exc


@router.get("", response_model=List[Setoran])
def list_setoran(
    status_filter: Optional[SetoranStatus] = Query(default=None, alias="status"),
    user: User = Depends(get_current_user),
) -> List[Setoran]:
    try:
        return setoran_workflow.list_for_user(user, status_filter)
    except SetoranError as exc:
        raise http_error(exc) from exc


@router.post("/{setoran_id}/review", response_model=Setoran)
def review_setoran(
    setoran_id: str,
    payload: ReviewRequest,
    user: User = Depends(require_capability(Capability.REVIEW_SETORAN)),
) -> Setoran:
    try:
        return setoran_workflow.review_submission(
            user.id,
            setoran_id,
            payload.status,
            note=payload.catatan,
            points=payload.poin,
        )
    except SetoranError as exc:
        raise http_error(exc) from exc
