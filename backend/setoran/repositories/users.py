"""User profile rows and parent/child links."""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from ..db.models import ParentChildModel, UserModel
from ..domain import Role, User, UserType


def _normalize_email(email: str) -> str:
    normalized = email.strip().lower()
    if not normalized:
        raise ValueError("Email cannot be empty.")
    return normalized


class UserRepository:
    def get(self, session: Session, user_id: str) -> User | None:
        model = session.get(UserModel, user_id)
        return User.model_validate(model) if model is not None else None

    def get_by_email(self, session: Session, email: str) -> User | None:
        stmt = select(UserModel).where(UserModel.email == _normalize_email(email))
        model = session.execute(stmt).scalar_one_or_none()
        return User.model_validate(model) if model is not None else None

    def create(
        self,
        session: Session,
        *,
        user_id: str,
        email: str,
        name: str,
        role: Role,
        user_type: Optional[UserType] = None,
        organize_id: Optional[str] = None,
    ) -> User:
        model = UserModel(
            id=user_id,
            email=_normalize_email(email),
            name=name.strip(),
            role=role.value,
            type=user_type.value if user_type else None,
            organize_id=organize_id or None,
        )
        session.add(model)
        session.flush()
        return User.model_validate(model)

    def list_students(self, session: Session, organize_ids: Iterable[str]) -> List[User]:
        ids = list(organize_ids)
        if not ids:
            return []
        stmt = (
            select(UserModel)
            .where(UserModel.organize_id.in_(ids), UserModel.role == Role.STUDENT.value)
            .order_by(UserModel.name.asc())
        )
        return [User.model_validate(row) for row in session.execute(stmt).scalars().all()]

    def count_by_role(self, session: Session) -> Dict[str, int]:
        stmt = select(UserModel.role, func.count(UserModel.id)).group_by(UserModel.role)
        counts = {role.value: 0 for role in Role}
        for role, total in session.execute(stmt).all():
            counts[role] = int(total)
        return counts

    def children_of(self, session: Session, parent_id: str) -> List[User]:
        stmt = (
            select(UserModel)
            .join(ParentChildModel, ParentChildModel.siswa_id == UserModel.id)
            .where(ParentChildModel.ortu_id == parent_id)
            .order_by(UserModel.name.asc())
        )
        return [User.model_validate(row) for row in session.execute(stmt).scalars().all()]

    def is_parent_of(self, session: Session, parent_id: str, child_id: str) -> bool:
        stmt = select(ParentChildModel.id).where(
            ParentChildModel.ortu_id == parent_id,
            ParentChildModel.siswa_id == child_id,
        )
        return session.execute(stmt).first() is not None

    def link_parent(self, session: Session, parent_id: str, child_id: str) -> None:
        if self.is_parent_of(session, parent_id, child_id):
            return
        session.add(ParentChildModel(ortu_id=parent_id, siswa_id=child_id))
        session.flush()


users = UserRepository()

__all__ = ["UserRepository", "users"]
