from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import date, datetime, timezone

import pytest
from sqlalchemy import update

from setoran import setoran_workflow as setoran_workflow_module
from setoran.config import get_settings
from setoran.db.models import OrganizeModel, UserModel
from setoran.db.session import session_scope
from setoran.domain import Role, SetoranCategory, SetoranStatus
from setoran.errors import (
    DuplicateLabelError,
    InputValidationError,
    InvalidTransitionError,
    NotFoundError,
    PermissionDeniedError,
)
from setoran.point_ledger import point_ledger
from setoran.setoran_workflow import SetoranWorkflow, can_transition

AUDIO_URL = "https://res.cloudinary.com/demo/video/upload/v1/hafalan_1.m4a"


def _submit(workflow: SetoranWorkflow, siswa_id: str, **overrides):
    kwargs = {"category": SetoranCategory.MEMORIZATION, "surah": "Al-Mulk", "juz": 29, "note": None}
    kwargs.update(overrides)
    return workflow.create_submission(
        siswa_id,
        AUDIO_URL,
        kwargs["category"],
        kwargs["surah"],
        juz=kwargs["juz"],
        note=kwargs["note"],
    )


def test_allowed_transitions() -> None:
    assert can_transition(SetoranStatus.PENDING, SetoranStatus.ACCEPTED)
    assert can_transition(SetoranStatus.PENDING, SetoranStatus.REJECTED)
    assert can_transition(SetoranStatus.ACCEPTED, SetoranStatus.COMPLETED)
    assert can_transition(SetoranStatus.REJECTED, SetoranStatus.COMPLETED)
    assert not can_transition(SetoranStatus.PENDING, SetoranStatus.COMPLETED)
    assert not can_transition(SetoranStatus.ACCEPTED, SetoranStatus.REJECTED)
    assert not can_transition(SetoranStatus.COMPLETED, SetoranStatus.PENDING)


def test_create_submission_is_pending_with_class_teacher(seed) -> None:
    guru, organize, siswa = seed.classroom()

    setoran = _submit(SetoranWorkflow(), siswa.id, note="  ayat 1-10  ")

    assert setoran.status == SetoranStatus.PENDING
    assert setoran.guru_id == guru.id
    assert setoran.organize_id == organize.id
    assert setoran.file_url == AUDIO_URL
    assert setoran.surah == "Al-Mulk"
    assert setoran.catatan == "ayat 1-10"
    assert setoran.poin == 0
    assert setoran.tanggal == datetime.now(timezone.utc).date()


def test_teacher_is_fixed_at_submission_time(seed) -> None:
    _, organize, siswa = seed.classroom()
    workflow = SetoranWorkflow()
    original = _submit(workflow, siswa.id)
    new_guru = seed.user(Role.TEACHER, name="Ustadzah Fatimah")
    with session_scope() as session:
        session.execute(update(OrganizeModel).where(OrganizeModel.id == organize.id).values(guru_id=new_guru.id))

    later = _submit(workflow, siswa.id, surah="Al-Qalam")

    assert later.guru_id == new_guru.id
    [kept] = [entry for entry in workflow.list_for_user(siswa) if entry.id == original.id]
    assert kept.guru_id == original.guru_id
    assert kept.guru_id != new_guru.id


def test_prepare_submission_validations(seed) -> None:
    _, _, siswa = seed.classroom()
    unassigned = seed.user(Role.STUDENT)
    parent = seed.user(Role.PARENT)
    workflow = SetoranWorkflow()

    with pytest.raises(InputValidationError, match="audio file"):
        workflow.prepare_submission(siswa, category="hafalan", surah="Al-Mulk", has_media=False)
    with pytest.raises(InputValidationError, match="surah name"):
        workflow.prepare_submission(siswa, category="hafalan", surah="   ")
    with pytest.raises(InputValidationError, match="not assigned"):
        workflow.prepare_submission(unassigned, category="hafalan", surah="Al-Mulk")
    with pytest.raises(InputValidationError):
        workflow.prepare_submission(siswa, category="tilawah", surah="Al-Mulk")
    with pytest.raises(InputValidationError):
        workflow.prepare_submission(siswa, category="murojaah", surah="Al-Mulk", juz=31)
    with pytest.raises(PermissionDeniedError):
        workflow.prepare_submission(parent, category="hafalan", surah="Al-Mulk")

    draft = workflow.prepare_submission(siswa, category="murojaah", surah=" Yasin ", juz=22)
    assert draft.jenis == SetoranCategory.REVISION
    assert draft.surah == "Yasin"


def test_missing_class_reports_teacher_lookup_failure(seed) -> None:
    siswa = seed.user(Role.STUDENT)
    with session_scope() as session:
        session.execute(update(UserModel).where(UserModel.id == siswa.id).values(organize_id="gone"))

    with pytest.raises(NotFoundError, match="Failed to find class teacher"):
        _submit(SetoranWorkflow(), siswa.id)


def test_review_follows_status_machine(seed) -> None:
    guru, _, siswa = seed.classroom()
    workflow = SetoranWorkflow()
    setoran = _submit(workflow, siswa.id)

    accepted = workflow.review_submission(guru.id, setoran.id, SetoranStatus.ACCEPTED, note="Bagus", points=20)
    assert accepted.status == SetoranStatus.ACCEPTED
    assert accepted.catatan == "Bagus"
    assert accepted.poin == 20
    assert accepted.reviewed_at is not None

    with pytest.raises(InvalidTransitionError):
        workflow.review_submission(guru.id, setoran.id, SetoranStatus.REJECTED)

    completed = workflow.review_submission(guru.id, setoran.id, "selesai")
    assert completed.status == SetoranStatus.COMPLETED
    assert completed.catatan == "Bagus"

    with pytest.raises(InvalidTransitionError):
        workflow.review_submission(guru.id, setoran.id, SetoranStatus.ACCEPTED)


def test_review_points_do_not_touch_quiz_ledger(seed) -> None:
    guru, _, siswa = seed.classroom()
    workflow = SetoranWorkflow()
    setoran = _submit(workflow, siswa.id)

    workflow.review_submission(guru.id, setoran.id, SetoranStatus.ACCEPTED, points=50)

    assert point_ledger.balance(siswa.id).total_poin == 0


def test_only_assigned_teacher_reviews(seed) -> None:
    _, _, siswa = seed.classroom()
    stranger = seed.user(Role.TEACHER)
    workflow = SetoranWorkflow()
    setoran = _submit(workflow, siswa.id)

    with pytest.raises(PermissionDeniedError):
        workflow.review_submission(stranger.id, setoran.id, SetoranStatus.ACCEPTED)
    with pytest.raises(NotFoundError):
        workflow.review_submission(stranger.id, "missing", SetoranStatus.ACCEPTED)


def test_review_rejects_unknown_status_and_negative_points(seed) -> None:
    guru, _, siswa = seed.classroom()
    workflow = SetoranWorkflow()
    setoran = _submit(workflow, siswa.id)

    with pytest.raises(InputValidationError):
        workflow.review_submission(guru.id, setoran.id, "lulus")
    with pytest.raises(InputValidationError):
        workflow.review_submission(guru.id, setoran.id, SetoranStatus.ACCEPTED, points=-1)


def test_on_creation_policy_fixes_points_at_submission(seed, monkeypatch) -> None:
    monkeypatch.setenv("SETORAN_POINT_POLICY", "on_creation")
    monkeypatch.setenv("SETORAN_CREATION_POINTS", "5")
    get_settings.cache_clear()
    guru, _, siswa = seed.classroom()
    workflow = SetoranWorkflow()

    setoran = _submit(workflow, siswa.id)
    assert setoran.poin == 5

    with pytest.raises(InputValidationError):
        workflow.review_submission(guru.id, setoran.id, SetoranStatus.ACCEPTED, points=30)
    accepted = workflow.review_submission(guru.id, setoran.id, SetoranStatus.ACCEPTED)
    assert accepted.poin == 5


def test_list_for_user_by_role_and_status(seed) -> None:
    guru, _, siswa = seed.classroom()
    workflow = SetoranWorkflow()
    first = _submit(workflow, siswa.id)
    _submit(workflow, siswa.id, surah="Al-Qalam")
    workflow.review_submission(guru.id, first.id, SetoranStatus.REJECTED, note="Ulangi")

    assert len(workflow.list_for_user(siswa)) == 2
    assert [entry.id for entry in workflow.list_for_user(guru, SetoranStatus.REJECTED)] == [first.id]
    assert len(workflow.list_for_user(guru, SetoranStatus.PENDING)) == 1
    with pytest.raises(PermissionDeniedError):
        workflow.list_for_user(seed.user(Role.PARENT))


def test_grant_label_once_per_juz(seed) -> None:
    guru, _, siswa = seed.classroom()
    workflow = SetoranWorkflow()

    label = workflow.grant_label(guru.id, siswa.id, 30, granted_on=date(2025, 3, 1))
    assert label.juz == 30
    assert label.diberikan_oleh == guru.id
    assert label.tanggal == date(2025, 3, 1)

    with pytest.raises(DuplicateLabelError):
        workflow.grant_label(guru.id, siswa.id, 30)
    with pytest.raises(InputValidationError):
        workflow.grant_label(guru.id, siswa.id, 0)


def test_grant_label_requires_class_teacher(seed) -> None:
    _, _, siswa = seed.classroom()
    stranger = seed.user(Role.TEACHER)
    with pytest.raises(PermissionDeniedError):
        SetoranWorkflow().grant_label(stranger.id, siswa.id, 1)


def test_memorization_submission_for_al_fatihah(seed) -> None:
    _, _, siswa = seed.classroom()

    setoran = _submit(SetoranWorkflow(), siswa.id, category="hafalan", surah="Al-Fatihah", juz=1)

    assert setoran.jenis == SetoranCategory.MEMORIZATION
    assert setoran.jenis.value == "hafalan"
    assert setoran.surah == "Al-Fatihah"
    assert setoran.juz == 1
    assert setoran.status == SetoranStatus.PENDING


def test_overlapping_reviews_move_status_once(seed, monkeypatch) -> None:
    guru, _, siswa = seed.classroom()
    workflow = SetoranWorkflow()
    setoran = _submit(workflow, siswa.id)
    both_checked = threading.Barrier(2, timeout=10)

    def checked_together(current: SetoranStatus, target: SetoranStatus) -> bool:
        allowed = can_transition(current, target)
        both_checked.wait()
        return allowed

    monkeypatch.setattr(setoran_workflow_module, "can_transition", checked_together)

    def review(target: SetoranStatus) -> str:
        try:
            return workflow.review_submission(guru.id, setoran.id, target).status.value
        except InvalidTransitionError:
            return "conflict"

    with ThreadPoolExecutor(max_workers=2) as pool:
        outcomes = list(pool.map(review, [SetoranStatus.ACCEPTED, SetoranStatus.REJECTED]))

    assert outcomes.count("conflict") == 1
    [winner] = [outcome for outcome in outcomes if outcome != "conflict"]
    [stored] = workflow.list_for_user(siswa)
    assert stored.status.value == winner
