"""Role-specific dashboard counters."""

from __future__ import annotations

from typing import Dict, Optional

from pydantic import BaseModel, Field

from .db.session import session_scope
from .domain import Role, SetoranStatus, User
from .errors import PermissionDeniedError
from .family import resolve_student_id
from .repositories import labels, organizes, point_ledger_rows, setoran_rows, users


class DashboardStats(BaseModel):
    role: Role
    siswa_id: Optional[str] = None
    total_setoran: int = 0
    pending_setoran: int = 0
    total_poin: int = 0
    completed_juz: int = 0
    users_by_role: Dict[str, int] = Field(default_factory=dict)
    setoran_by_status: Dict[str, int] = Field(default_factory=dict)
    class_count: int = 0


def student_stats(siswa_id: str, *, role: Role = Role.STUDENT) -> DashboardStats:
    with session_scope(commit=False) as session:
        counts = setoran_rows.count_by_status(session, siswa_id=siswa_id)
        balance = point_ledger_rows.get(session, siswa_id)
        completed = len(labels.list_for_student(session, siswa_id))
    return DashboardStats(
        role=role,
        siswa_id=siswa_id,
        total_setoran=sum(counts.values()),
        pending_setoran=counts[SetoranStatus.PENDING.value],
        total_poin=balance.total_poin,
        completed_juz=completed,
        setoran_by_status=counts,
    )


def teacher_stats(guru_id: str) -> DashboardStats:
    with session_scope(commit=False) as session:
        counts = setoran_rows.count_by_status(session, guru_id=guru_id)
    return DashboardStats(
        role=Role.TEACHER,
        total_setoran=sum(counts.values()),
        pending_setoran=counts[SetoranStatus.PENDING.value],
        setoran_by_status=counts,
    )


def admin_stats() -> DashboardStats:
    with session_scope(commit=False) as session:
        counts = setoran_rows.count_by_status(session)
        return DashboardStats(
            role=Role.ADMIN,
            total_setoran=sum(counts.values()),
            pending_setoran=counts[SetoranStatus.PENDING.value],
            setoran_by_status=counts,
            users_by_role=users.count_by_role(session),
            class_count=organizes.count(session),
        )


def dashboard_for(user: User, child_id: Optional[str] = None) -> DashboardStats:
    if user.role == Role.STUDENT:
        return student_stats(user.id)
    if user.role == Role.PARENT:
        return student_stats(resolve_student_id(user, child_id), role=Role.PARENT)
    if user.role == Role.TEACHER:
        return teacher_stats(user.id)
    if user.role == Role.ADMIN:
        return admin_stats()
    raise PermissionDeniedError("Unknown role.")


__all__ = ["DashboardStats", "admin_stats", "dashboard_for", "student_stats", "teacher_stats"]
