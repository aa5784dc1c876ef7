"""Point ledger: durable accumulation of quiz points per student."""

from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .db.session import session_scope
from .domain import PointBalance, Role
from .errors import InputValidationError, NotFoundError
from .repositories import point_ledger_rows, quizzes, users
from .telemetry import emit_event

logger = logging.getLogger(__name__)

# One retry is enough: after a lost insert race the row exists and the UPDATE applies.
_MAX_INCREMENT_ATTEMPTS = 2


def _require_student(session: Session, siswa_id: str) -> None:
    user = users.get(session, siswa_id)
    if user is None or user.role != Role.STUDENT:
        raise NotFoundError(f"Student '{siswa_id}' was not found.")


class PointLedger:
    """Store-backed facade over ``siswa_poin``.

    ``award_points`` never reads the current total before writing it; the
    increment happens inside a single UPDATE so concurrent awards for the same
    student cannot overwrite each other. Only student accounts carry a ledger row.
    """

    def award_points(self, siswa_id: str, amount: int) -> PointBalance:
        if not siswa_id:
            raise InputValidationError("Student id is required to award points.")
        if amount < 0:
            raise InputValidationError("Awarded points cannot be negative.")

        for attempt in range(1, _MAX_INCREMENT_ATTEMPTS + 1):
            try:
                with session_scope() as session:
                    _require_student(session, siswa_id)
                    balance = point_ledger_rows.increment(session, siswa_id, amount)
                break
            except IntegrityError:
                if attempt >= _MAX_INCREMENT_ATTEMPTS:
                    raise
                logger.info("Ledger row for %s created concurrently; retrying increment", siswa_id)

        emit_event("points_awarded", siswa_id=siswa_id, amount=amount, total_poin=balance.total_poin)
        return balance

    def balance(self, siswa_id: str) -> PointBalance:
        with session_scope(commit=False) as session:
            return point_ledger_rows.get(session, siswa_id)

    def reconcile(self, siswa_id: str) -> PointBalance:
        """Rewrite the total as the sum of the student's awarded quiz points."""
        with session_scope() as session:
            _require_student(session, siswa_id)
            before = point_ledger_rows.get(session, siswa_id)
            expected = quizzes.awarded_total(session, siswa_id)
            balance = point_ledger_rows.set_total(session, siswa_id, expected)
        if before.total_poin != expected:
            logger.warning(
                "Reconciled ledger for %s: %d -> %d",
                siswa_id,
                before.total_poin,
                expected,
            )
        emit_event(
            "ledger_reconciled",
            siswa_id=siswa_id,
            previous_total=before.total_poin,
            total_poin=expected,
        )
        return balance


point_ledger = PointLedger()

__all__ = ["PointLedger", "point_ledger"]
