"""Administrative endpoints: classes, parent links and ledger repair."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel, Field

from .capabilities import Capability
from .classes import create_class
from .dependencies import require_capability
from .domain import Organize, PointBalance, User
from .errors import SetoranError, http_error
from .family import link_parent
from .point_ledger import point_ledger

router = APIRouter(prefix="/api/admin", tags=["admin"])


class OrganizeCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    guru_id: str = Field(..., min_length=1)
    description: Optional[str] = None


class ParentLinkRequest(BaseModel):
    ortu_id: str = Field(..., min_length=1)
    siswa_id: str = Field(..., min_length=1)


@router.post("/organizes", response_model=Organize, status_code=status.HTTP_201_CREATED)
def create_organize(
    payload: OrganizeCreateRequest,
    user: User = Depends(require_capability(Capability.MANAGE_CLASSES)),
) -> Organize:
    try:
        return create_class(payload.name, payload.guru_id, payload.description)
    except SetoranError as exc:
        raise http_error(exc) from exc


@router.post("/parent-links", status_code=status.HTTP_204_NO_CONTENT)
def create_parent_link(
    payload: ParentLinkRequest,
    user: User = Depends(require_capability(Capability.MANAGE_USERS)),
) -> Response:
    try:
        link_parent(payload.ortu_id, payload.siswa_id)
    except SetoranError as exc:
        raise http_error(exc) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/ledger/{siswa_id}/reconcile", response_model=PointBalance)
def reconcile_ledger(
    siswa_id: str,
    user: User = Depends(require_capability(Capability.RECONCILE_LEDGER)),
) -> PointBalance:
    try:
        return point_ledger.reconcile(siswa_id)
    except SetoranError as exc:
        raise http_error(exc) from exc
