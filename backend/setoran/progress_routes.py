"""Achievements, dashboards, rosters and juz labels."""

from __future__ import annotations

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field

from .achievements import AchievementSummary, achievement_summary
from .capabilities import Capability
from .classes import students_for_teacher
from .dashboard import DashboardStats, dashboard_for
from .dependencies import require_capability
from .domain import TOTAL_JUZ, CompletionLabel, User
from .errors import SetoranError, http_error
from .family import children_of, resolve_student_id
from .setoran_workflow import setoran_workflow

router = APIRouter(prefix="/api", tags=["progress"])


class LabelRequest(BaseModel):
    siswa_id: str = Field(..., min_length=1)
    juz: int = Field(..., ge=1, le=TOTAL_JUZ)
    tanggal: Optional[date] = None


@router.get("/achievements", response_model=AchievementSummary)
def achievements(
    child_id: Optional[str] = Query(default=None),
    user: User = Depends(require_capability(Capability.VIEW_OWN_ACHIEVEMENTS, Capability.VIEW_CHILD_PROGRESS)),
) -> AchievementSummary:
    try:
        siswa_id = resolve_student_id(user, child_id)
    except SetoranError as exc:
        raise http_error(exc) from exc
    return achievement_summary(siswa_id)


@router.get("/children", response_model=List[User])
def children(user: User = Depends(require_capability(Capability.VIEW_CHILD_PROGRESS))) -> List[User]:
    return children_of(user)


@router.get("/dashboard", response_model=DashboardStats)
def dashboard(
    child_id: Optional[str] = Query(default=None),
    user: User = Depends(require_capability(Capability.VIEW_DASHBOARD)),
) -> DashboardStats:
    try:
        return dashboard_for(user, child_id)
    except SetoranError as exc:
        raise http_error(exc) from exc


@router.get("/students", response_model=List[User])
def students(user: User = Depends(require_capability(Capability.VIEW_STUDENTS))) -> List[User]:
    return students_for_teacher(user.id)


@router.post("/labels", response_model=CompletionLabel, status_code=status.HTTP_201_CREATED)
def grant_label(
    payload: LabelRequest,
    user: User = Depends(require_capability(Capability.GRANT_LABELS)),
) -> CompletionLabel:
    try:
        return setoran_workflow.grant_label(user.id, payload.siswa_id, payload.juz, granted_on=payload.tanggal)
    except SetoranError as exc:
        raise http_error(exc) from exc
