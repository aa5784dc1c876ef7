"""Setoran (recitation submission) rows."""

from __future__ import annotations

from datetime import date, datetime
from typing import Dict, List, Optional

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from ..db.models import SetoranModel
from ..domain import Setoran, SetoranCategory, SetoranStatus


class SetoranRepository:
    def get(self, session: Session, setoran_id: str) -> Setoran | None:
        model = session.get(SetoranModel, setoran_id)
        return Setoran.model_validate(model) if model is not None else None

    def insert(
        self,
        session: Session,
        *,
        siswa_id: str,
        guru_id: str,
        organize_id: str,
        file_url: str,
        jenis: SetoranCategory,
        tanggal: date,
        surah: Optional[str],
        juz: Optional[int],
        catatan: Optional[str],
        poin: int,
    ) -> Setoran:
        model = SetoranModel(
            siswa_id=siswa_id,
            guru_id=guru_id,
            organize_id=organize_id,
            file_url=file_url,
            jenis=jenis.value,
            tanggal=tanggal,
            status=SetoranStatus.PENDING.value,
            surah=surah,
            juz=juz,
            catatan=catatan,
            poin=poin,
        )
        session.add(model)
        session.flush()
        return Setoran.model_validate(model)

    def list_for_student(
        self, session: Session, siswa_id: str, status: Optional[SetoranStatus] = None
    ) -> List[Setoran]:
        stmt = select(SetoranModel).where(SetoranModel.siswa_id == siswa_id)
        if status is not None:
            stmt = stmt.where(SetoranModel.status == status.value)
        stmt = stmt.order_by(SetoranModel.created_at.desc())
        return [Setoran.model_validate(row) for row in session.execute(stmt).scalars().all()]

    def list_for_teacher(
        self, session: Session, guru_id: str, status: Optional[SetoranStatus] = None
    ) -> List[Setoran]:
        stmt = select(SetoranModel).where(SetoranModel.guru_id == guru_id)
        if status is not None:
            stmt = stmt.where(SetoranModel.status == status.value)
        stmt = stmt.order_by(SetoranModel.created_at.desc())
        return [Setoran.model_validate(row) for row in session.execute(stmt).scalars().all()]

    def count_by_status(
        self,
        session: Session,
        *,
        siswa_id: Optional[str] = None,
        guru_id: Optional[str] = None,
    ) -> Dict[str, int]:
        stmt = select(SetoranModel.status, func.count(SetoranModel.id)).group_by(SetoranModel.status)
        if siswa_id is not None:
            stmt = stmt.where(SetoranModel.siswa_id == siswa_id)
        if guru_id is not None:
            stmt = stmt.where(SetoranModel.guru_id == guru_id)
        counts = {status.value: 0 for status in SetoranStatus}
        for status, total in session.execute(stmt).all():
            counts[status] = int(total)
        return counts

    def apply_review(
        self,
        session: Session,
        setoran_id: str,
        *,
        expected_status: SetoranStatus,
        status: SetoranStatus,
        reviewed_at: datetime,
        catatan: Optional[str] = None,
        poin: Optional[int] = None,
    ) -> Setoran | None:
        """Move the row to ``status`` only while it still holds ``expected_status``.

        Returns ``None`` when another review changed the status first.
        """
        values: Dict[str, object] = {"status": status.value, "reviewed_at": reviewed_at}
        if catatan is not None:
            values["catatan"] = catatan
        if poin is not None:
            values["poin"] = poin
        stmt = (
            update(SetoranModel)
            .where(SetoranModel.id == setoran_id, SetoranModel.status == expected_status.value)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        if session.execute(stmt).rowcount == 0:
            return None
        model = session.get(SetoranModel, setoran_id, populate_existing=True)
        return Setoran.model_validate(model) if model is not None else None


setoran_rows = SetoranRepository()

__all__ = ["SetoranRepository", "setoran_rows"]
