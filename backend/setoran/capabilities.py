"""Single role -> capability mapping and the navigation tabs each role sees."""

from __future__ import annotations

from enum import Enum
from typing import Dict, FrozenSet, List, Tuple

from pydantic import BaseModel

from .domain import Role


class Capability(str, Enum):
    VIEW_DASHBOARD = "view_dashboard"
    SUBMIT_SETORAN = "submit_setoran"
    REVIEW_SETORAN = "review_setoran"
    VIEW_QUIZZES = "view_quizzes"
    ANSWER_QUIZ = "answer_quiz"
    MANAGE_QUIZZES = "manage_quizzes"
    VIEW_OWN_ACHIEVEMENTS = "view_own_achievements"
    VIEW_CHILD_PROGRESS = "view_child_progress"
    VIEW_STUDENTS = "view_students"
    GRANT_LABELS = "grant_labels"
    MANAGE_USERS = "manage_users"
    MANAGE_CLASSES = "manage_classes"
    RECONCILE_LEDGER = "reconcile_ledger"


class NavigationTab(BaseModel):
    name: str
    title: str


ROLE_CAPABILITIES: Dict[Role, FrozenSet[Capability]] = {
    Role.STUDENT: frozenset(
        {
            Capability.VIEW_DASHBOARD,
            Capability.SUBMIT_SETORAN,
            Capability.VIEW_QUIZZES,
            Capability.ANSWER_QUIZ,
            Capability.VIEW_OWN_ACHIEVEMENTS,
        }
    ),
    Role.TEACHER: frozenset(
        {
            Capability.VIEW_DASHBOARD,
            Capability.REVIEW_SETORAN,
            Capability.VIEW_QUIZZES,
            Capability.MANAGE_QUIZZES,
            Capability.VIEW_STUDENTS,
            Capability.GRANT_LABELS,
        }
    ),
    Role.PARENT: frozenset(
        {
            Capability.VIEW_DASHBOARD,
            Capability.VIEW_CHILD_PROGRESS,
        }
    ),
    Role.ADMIN: frozenset(
        {
            Capability.VIEW_DASHBOARD,
            Capability.MANAGE_USERS,
            Capability.MANAGE_CLASSES,
            Capability.RECONCILE_LEDGER,
        }
    ),
}

_ROLE_TABS: Dict[Role, Tuple[Tuple[str, str], ...]] = {
    Role.STUDENT: (("index", "Home"), ("upload", "Upload"), ("quiz", "Quiz"), ("achievements", "Prestasi")),
    Role.TEACHER: (("index", "Dashboard"), ("setoran", "Setoran"), ("quiz", "Quiz"), ("students", "Siswa")),
    Role.PARENT: (("index", "Home"), ("progress", "Progress"), ("achievements", "Prestasi")),
    Role.ADMIN: (("index", "Dashboard"), ("users", "Users"), ("analytics", "Analytics"), ("settings", "Settings")),
}


def capabilities_for(role: Role) -> FrozenSet[Capability]:
    return ROLE_CAPABILITIES.get(role, frozenset())


def has_capability(role: Role, capability: Capability) -> bool:
    return capability in capabilities_for(role)


def tabs_for(role: Role) -> List[NavigationTab]:
    return [NavigationTab(name=name, title=title) for name, title in _ROLE_TABS.get(role, ())]


__all__ = [
    "Capability",
    "NavigationTab",
    "ROLE_CAPABILITIES",
    "capabilities_for",
    "has_capability",
    "tabs_for",
]
