"""Setoran submission, teacher review and juz completion labels."""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Dict, FrozenSet, List, Optional

from pydantic import BaseModel
from sqlalchemy.exc import IntegrityError

from .config import Settings, get_settings
from .db.session import session_scope
from .domain import (
    TOTAL_JUZ,
    CompletionLabel,
    Role,
    Setoran,
    SetoranCategory,
    SetoranStatus,
    User,
)
from .errors import (
    DuplicateLabelError,
    InputValidationError,
    InvalidTransitionError,
    NotFoundError,
    PermissionDeniedError,
)
from .repositories import labels, organizes, setoran_rows, users
from .telemetry import emit_event

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS: Dict[SetoranStatus, FrozenSet[SetoranStatus]] = {
    SetoranStatus.PENDING: frozenset({SetoranStatus.ACCEPTED, SetoranStatus.REJECTED}),
    SetoranStatus.ACCEPTED: frozenset({SetoranStatus.COMPLETED}),
    SetoranStatus.REJECTED: frozenset({SetoranStatus.COMPLETED}),
    SetoranStatus.COMPLETED: frozenset(),
}


def can_transition(current: SetoranStatus, target: SetoranStatus) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, frozenset())


class SubmissionDraft(BaseModel):
    """Validated setoran input, produced before the audio is uploaded."""

    siswa_id: str
    organize_id: str
    jenis: SetoranCategory
    surah: str
    juz: Optional[int] = None
    catatan: Optional[str] = None


def _validate_juz(juz: Optional[int]) -> Optional[int]:
    if juz is None:
        return None
    if not 1 <= juz <= TOTAL_JUZ:
        raise InputValidationError(f"Juz must be between 1 and {TOTAL_JUZ}.")
    return juz


def _today() -> date:
    return datetime.now(timezone.utc).date()


class SetoranWorkflow:
    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings

    @property
    def settings(self) -> Settings:
        return self._settings or get_settings()

    def prepare_submission(
        self,
        student: User,
        *,
        category: SetoranCategory | str,
        surah: str,
        juz: Optional[int] = None,
        note: Optional[str] = None,
        has_media: bool = True,
    ) -> SubmissionDraft:
        """Validate a submission without touching the store or the media host."""
        if student.role != Role.STUDENT:
            raise PermissionDeniedError("Only students can submit setoran.")
        if not has_media:
            raise InputValidationError("Please record or select an audio file.")
        surah_name = (surah or "").strip()
        if not surah_name:
            raise InputValidationError("Please enter the surah name.")
        if not student.organize_id:
            raise InputValidationError("You are not assigned to any class.")
        try:
            jenis = SetoranCategory(category)
        except ValueError as exc:
            raise InputValidationError(f"Unknown setoran category '{category}'.") from exc
        return SubmissionDraft(
            siswa_id=student.id,
            organize_id=student.organize_id,
            jenis=jenis,
            surah=surah_name,
            juz=_validate_juz(juz),
            catatan=(note or "").strip() or None,
        )

    def create_submission(
        self,
        siswa_id: str,
        media_ref: str,
        category: SetoranCategory | str,
        surah: str,
        juz: Optional[int] = None,
        note: Optional[str] = None,
    ) -> Setoran:
        """Create a pending setoran with the class teacher resolved at creation time."""
        if not media_ref or not media_ref.strip():
            raise InputValidationError("A media URL is required to create a setoran.")

        with session_scope() as session:
            student = users.get(session, siswa_id)
            if student is None:
                raise NotFoundError(f"Student '{siswa_id}' was not found.")
            draft = self.prepare_submission(student, category=category, surah=surah, juz=juz, note=note)
            organize = organizes.get(session, draft.organize_id)
            if organize is None:
                raise NotFoundError("Failed to find class teacher.")
            setoran = setoran_rows.insert(
                session,
                siswa_id=draft.siswa_id,
                guru_id=organize.guru_id,
                organize_id=organize.id,
                file_url=media_ref.strip(),
                jenis=draft.jenis,
                tanggal=_today(),
                surah=draft.surah,
                juz=draft.juz,
                catatan=draft.catatan,
                poin=self._creation_points(),
            )

        logger.info("Stored setoran %s for %s (guru=%s)", setoran.id, siswa_id, setoran.guru_id)
        emit_event(
            "setoran_created",
            user_id=siswa_id,
            setoran_id=setoran.id,
            guru_id=setoran.guru_id,
            jenis=setoran.jenis,
            surah=setoran.surah,
            juz=setoran.juz,
        )
        return setoran

    def review_submission(
        self,
        guru_id: str,
        setoran_id: str,
        status: SetoranStatus | str,
        *,
        note: Optional[str] = None,
        points: Optional[int] = None,
    ) -> Setoran:
        try:
            target = SetoranStatus(status)
        except ValueError as exc:
            raise InputValidationError(f"Unknown setoran status '{status}'.") from exc
        if points is not None:
            if self.settings.point_policy != "on_review":
                raise InputValidationError("Setoran points are fixed at submission time.")
            if points < 0:
                raise InputValidationError("Setoran points cannot be negative.")

        with session_scope() as session:
            current = setoran_rows.get(session, setoran_id)
            if current is None:
                raise NotFoundError(f"Setoran '{setoran_id}' was not found.")
            if current.guru_id != guru_id:
                raise PermissionDeniedError("Only the assigned teacher can review this setoran.")
            if not can_transition(current.status, target):
                raise InvalidTransitionError(
                    f"Setoran cannot move from '{current.status.value}' to '{target.value}'."
                )
            updated = setoran_rows.apply_review(
                session,
                setoran_id,
                expected_status=current.status,
                status=target,
                reviewed_at=datetime.now(timezone.utc),
                catatan=note.strip() if note and note.strip() else None,
                poin=points,
            )
            if updated is None:
                raise InvalidTransitionError(
                    f"Setoran '{setoran_id}' was reviewed concurrently; it is no longer '{current.status.value}'."
                )

        logger.info("Setoran %s moved %s -> %s", setoran_id, current.status.value, target.value)
        emit_event(
            "setoran_reviewed",
            user_id=updated.siswa_id,
            setoran_id=setoran_id,
            guru_id=guru_id,
            previous_status=current.status,
            status=target,
            poin=updated.poin,
        )
        return updated

    def list_for_user(self, user: User, status: Optional[SetoranStatus] = None) -> List[Setoran]:
        with session_scope(commit=False) as session:
            if user.role == Role.STUDENT:
                return setoran_rows.list_for_student(session, user.id, status)
            if user.role == Role.TEACHER:
                return setoran_rows.list_for_teacher(session, user.id, status)
        raise PermissionDeniedError("Setoran lists are available for students and teachers.")

    def grant_label(
        self,
        guru_id: str,
        siswa_id: str,
        juz: int,
        *,
        granted_on: Optional[date] = None,
    ) -> CompletionLabel:
        if _validate_juz(juz) is None:
            raise InputValidationError("Juz is required.")
        with session_scope() as session:
            student = users.get(session, siswa_id)
            if student is None or student.role != Role.STUDENT:
                raise NotFoundError(f"Student '{siswa_id}' was not found.")
            organize = organizes.get(session, student.organize_id) if student.organize_id else None
            if organize is None or organize.guru_id != guru_id:
                raise PermissionDeniedError("Only the student's class teacher can grant juz labels.")
            if labels.exists(session, siswa_id, juz):
                raise DuplicateLabelError(f"Juz {juz} is already recorded for this student.")
            try:
                label = labels.append(
                    session,
                    siswa_id=siswa_id,
                    juz=juz,
                    tanggal=granted_on or _today(),
                    diberikan_oleh=guru_id,
                )
            except IntegrityError as exc:
                raise DuplicateLabelError(f"Juz {juz} is already recorded for this student.") from exc

        emit_event("label_granted", user_id=siswa_id, juz=juz, guru_id=guru_id, label_id=label.id)
        return label

    def _creation_points(self) -> int:
        if self.settings.point_policy == "on_creation":
            return self.settings.creation_points
        return 0


setoran_workflow = SetoranWorkflow()

__all__ = [
    "ALLOWED_TRANSITIONS",
    "SetoranWorkflow",
    "SubmissionDraft",
    "can_transition",
    "setoran_workflow",
]
