"""Juz completion labels. Rows are only ever appended."""

from __future__ import annotations

from datetime import date
from typing import List

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..db.models import LabelModel
from ..domain import CompletionLabel


class LabelRepository:
    def list_for_student(self, session: Session, siswa_id: str) -> List[CompletionLabel]:
        stmt = select(LabelModel).where(LabelModel.siswa_id == siswa_id).order_by(LabelModel.juz.asc())
        return [CompletionLabel.model_validate(row) for row in session.execute(stmt).scalars().all()]

    def exists(self, session: Session, siswa_id: str, juz: int) -> bool:
        stmt = select(LabelModel.id).where(LabelModel.siswa_id == siswa_id, LabelModel.juz == juz)
        return session.execute(stmt).first() is not None

    def append(
        self,
        session: Session,
        *,
        siswa_id: str,
        juz: int,
        tanggal: date,
        diberikan_oleh: str,
    ) -> CompletionLabel:
        model = LabelModel(siswa_id=siswa_id, juz=juz, tanggal=tanggal, diberikan_oleh=diberikan_oleh)
        session.add(model)
        session.flush()
        return CompletionLabel.model_validate(model)


labels = LabelRepository()

__all__ = ["LabelRepository", "labels"]
