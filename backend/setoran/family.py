"""Parent -> children links and the "whose data is this read about" rule."""

from __future__ import annotations

from typing import List, Optional

from .db.session import session_scope
from .domain import Role, User
from .errors import InputValidationError, NotFoundError, PermissionDeniedError
from .repositories import users


def children_of(parent: User) -> List[User]:
    if parent.role != Role.PARENT:
        raise PermissionDeniedError("Only parents have linked children.")
    with session_scope(commit=False) as session:
        return users.children_of(session, parent.id)


def resolve_student_id(user: User, child_id: Optional[str] = None) -> str:
    """Return the student a progress read is about.

    Students always read their own data. Parents must name one of their linked
    children explicitly; there is no implicit first child.
    """
    if user.role == Role.STUDENT:
        if child_id and child_id != user.id:
            raise PermissionDeniedError("Students can only view their own progress.")
        return user.id
    if user.role == Role.PARENT:
        if not child_id:
            raise InputValidationError("Select a child to view their progress.")
        with session_scope(commit=False) as session:
            if not users.is_parent_of(session, user.id, child_id):
                raise PermissionDeniedError("This student is not linked to your account.")
        return child_id
    raise PermissionDeniedError("Progress is available for students and parents.")


def link_parent(parent_id: str, child_id: str) -> None:
    with session_scope() as session:
        parent = users.get(session, parent_id)
        child = users.get(session, child_id)
        if parent is None or parent.role != Role.PARENT:
            raise NotFoundError(f"Parent '{parent_id}' was not found.")
        if child is None or child.role != Role.STUDENT:
            raise NotFoundError(f"Student '{child_id}' was not found.")
        users.link_parent(session, parent_id, child_id)


__all__ = ["children_of", "link_parent", "resolve_student_id"]
