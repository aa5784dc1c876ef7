"""Telemetry listener that persists workflow events to ``audit_events``."""

from __future__ import annotations

import logging
from typing import Set

from .db.session import session_scope
from .repositories import audit_events
from .telemetry import TelemetryEvent, register_listener

logger = logging.getLogger(__name__)

_MONITORED_EVENTS: Set[str] = {
    "setoran_created",
    "setoran_reviewed",
    "label_granted",
    "ledger_consistency_gap",
    "ledger_reconciled",
}


def _persist_event(event: TelemetryEvent) -> None:
    if event.name not in _MONITORED_EVENTS:
        return
    user_id = event.payload.get("user_id") or event.payload.get("siswa_id")
    if not isinstance(user_id, str) or not user_id.strip():
        user_id = None
    try:
        with session_scope() as session:
            audit_events.record(session, event.name, dict(event.payload), user_id=user_id)
    except Exception:  # noqa: BLE001
        logger.exception("Failed to persist telemetry event %s for user_id=%s", event.name, user_id)


register_listener(_persist_event)

__all__ = ["_MONITORED_EVENTS"]
