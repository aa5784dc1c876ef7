from __future__ import annotations

from sqlalchemy import select

from setoran import telemetry_pipeline
from setoran.db.models import AuditEventModel
from setoran.db.session import session_scope
from setoran.domain import Role
from setoran.repositories import audit_events
from setoran.setoran_workflow import SetoranWorkflow
from setoran.telemetry import emit_event, register_listener, unregister_listener


def test_monitored_events_are_persisted(seed) -> None:
    register_listener(telemetry_pipeline._persist_event)
    guru, _, siswa = seed.classroom()

    SetoranWorkflow().grant_label(guru.id, siswa.id, 30)

    with session_scope(commit=False) as session:
        events = audit_events.recent(session, siswa.id)
        assert [event.event_type for event in events] == ["label_granted"]
        assert events[0].payload["juz"] == 30
        assert events[0].payload["guru_id"] == guru.id


def test_unmonitored_events_are_skipped(seed) -> None:
    register_listener(telemetry_pipeline._persist_event)
    siswa = seed.user(Role.STUDENT)

    emit_event("points_awarded", siswa_id=siswa.id, amount=10, total_poin=10)

    with session_scope(commit=False) as session:
        assert audit_events.recent(session, siswa.id) == []


def test_events_for_unknown_users_are_kept_without_owner(seed) -> None:
    register_listener(telemetry_pipeline._persist_event)

    emit_event("ledger_reconciled", siswa_id="no-such-user", previous_total=5, total_poin=0)

    with session_scope(commit=False) as session:
        rows = session.execute(select(AuditEventModel)).scalars().all()
        assert [(row.event_type, row.user_id) for row in rows] == [("ledger_reconciled", None)]


def test_failing_listener_does_not_break_emit(database) -> None:
    calls: list[str] = []

    def broken(event) -> None:
        calls.append(event.name)
        raise RuntimeError("listener crashed")

    register_listener(broken)
    try:
        emit_event("setoran_created", user_id="x")
    finally:
        unregister_listener(broken)
    assert calls == ["setoran_created"]
