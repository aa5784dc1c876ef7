"""Class (organize) management and teacher rosters."""

from __future__ import annotations

import logging
from typing import List, Optional

from .db.session import session_scope
from .domain import Organize, Role, User
from .errors import InputValidationError, NotFoundError
from .repositories import organizes, users

logger = logging.getLogger(__name__)


def create_class(name: str, guru_id: str, description: Optional[str] = None) -> Organize:
    if not name or not name.strip():
        raise InputValidationError("Class name is required.")
    with session_scope() as session:
        teacher = users.get(session, guru_id)
        if teacher is None or teacher.role != Role.TEACHER:
            raise NotFoundError(f"Teacher '{guru_id}' was not found.")
        organize = organizes.create(
            session,
            name=name,
            guru_id=guru_id,
            description=description.strip() if description and description.strip() else None,
        )
    logger.info("Created class %s (%s) for teacher %s", organize.id, organize.name, guru_id)
    return organize


def students_for_teacher(guru_id: str) -> List[User]:
    with session_scope(commit=False) as session:
        organize_ids = [organize.id for organize in organizes.list_for_teacher(session, guru_id)]
        return users.list_students(session, organize_ids)


__all__ = ["create_class", "students_for_teacher"]
