"""Class (``organizes``) rows."""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from ..db.models import OrganizeModel
from ..domain import Organize


class OrganizeRepository:
    def get(self, session: Session, organize_id: str) -> Organize | None:
        model = session.get(OrganizeModel, organize_id)
        return Organize.model_validate(model) if model is not None else None

    def list_all(self, session: Session) -> List[Organize]:
        stmt = select(OrganizeModel).order_by(OrganizeModel.name.asc())
        return [Organize.model_validate(row) for row in session.execute(stmt).scalars().all()]

    def list_for_teacher(self, session: Session, guru_id: str) -> List[Organize]:
        stmt = (
            select(OrganizeModel)
            .where(OrganizeModel.guru_id == guru_id)
            .order_by(OrganizeModel.name.asc())
        )
        return [Organize.model_validate(row) for row in session.execute(stmt).scalars().all()]

    def create(
        self,
        session: Session,
        *,
        name: str,
        guru_id: str,
        description: Optional[str] = None,
    ) -> Organize:
        model = OrganizeModel(name=name.strip(), guru_id=guru_id, description=description)
        session.add(model)
        session.flush()
        return Organize.model_validate(model)

    def count(self, session: Session) -> int:
        return int(session.execute(select(func.count(OrganizeModel.id))).scalar_one())


organizes = OrganizeRepository()

__all__ = ["OrganizeRepository", "organizes"]
