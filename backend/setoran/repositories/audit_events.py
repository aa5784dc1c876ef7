"""Persisted copies of selected telemetry events."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..db.models import AuditEventModel, UserModel


class AuditEventRepository:
    def record(
        self,
        session: Session,
        event_type: str,
        payload: Dict[str, Any],
        *,
        user_id: Optional[str] = None,
        actor: str = "system",
    ) -> None:
        if user_id is not None and session.get(UserModel, user_id) is None:
            user_id = None
        session.add(AuditEventModel(user_id=user_id, event_type=event_type, payload=payload, actor=actor))
        session.flush()

    def recent(self, session: Session, user_id: str, limit: int = 20) -> List[AuditEventModel]:
        stmt = (
            select(AuditEventModel)
            .where(AuditEventModel.user_id == user_id)
            .order_by(AuditEventModel.created_at.desc())
            .limit(limit)
        )
        return list(session.execute(stmt).scalars().all())


audit_events = AuditEventRepository()

__all__ = ["AuditEventRepository", "audit_events"]
