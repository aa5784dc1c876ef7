"""Per-student point totals (``siswa_poin``)."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from ..db.models import SiswaPoinModel
from ..domain import PointBalance


def _balance(model: SiswaPoinModel) -> PointBalance:
    return PointBalance(
        siswa_id=model.siswa_id,
        total_poin=model.total_poin,
        updated_at=model.updated_at,
        exists=True,
    )


class PointLedgerRepository:
    def get(self, session: Session, siswa_id: str) -> PointBalance:
        """Return the ledger row, or an empty balance with ``exists=False``."""
        stmt = select(SiswaPoinModel).where(SiswaPoinModel.siswa_id == siswa_id)
        model = session.execute(stmt).scalar_one_or_none()
        if model is None:
            return PointBalance(siswa_id=siswa_id)
        return _balance(model)

    def increment(self, session: Session, siswa_id: str, amount: int) -> PointBalance:
        """Add ``amount`` in a single UPDATE, inserting the row when it is missing.

        A concurrent insert of the same row surfaces as ``IntegrityError`` on flush;
        callers retry, at which point the UPDATE branch applies.
        """
        now = datetime.now(timezone.utc)
        stmt = (
            update(SiswaPoinModel)
            .where(SiswaPoinModel.siswa_id == siswa_id)
            .values(total_poin=SiswaPoinModel.total_poin + amount, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        result = session.execute(stmt)
        if result.rowcount == 0:
            session.add(SiswaPoinModel(siswa_id=siswa_id, total_poin=amount, updated_at=now))
            session.flush()
        session.expire_all()
        return self.get(session, siswa_id)

    def set_total(self, session: Session, siswa_id: str, total: int) -> PointBalance:
        now = datetime.now(timezone.utc)
        stmt = select(SiswaPoinModel).where(SiswaPoinModel.siswa_id == siswa_id)
        model = session.execute(stmt).scalar_one_or_none()
        if model is None:
            model = SiswaPoinModel(siswa_id=siswa_id, total_poin=total, updated_at=now)
            session.add(model)
        else:
            model.total_poin = total
            model.updated_at = now
        session.flush()
        return _balance(model)


point_ledger_rows = PointLedgerRepository()

__all__ = ["PointLedgerRepository", "point_ledger_rows"]
