"""Repositories wrapping the SQLAlchemy data store, one per table family."""

from .audit_events import AuditEventRepository, audit_events
from .labels import LabelRepository, labels
from .ledger import PointLedgerRepository, point_ledger_rows
from .organizes import OrganizeRepository, organizes
from .quizzes import QuizRepository, quizzes
from .setoran import SetoranRepository, setoran_rows
from .users import UserRepository, users

__all__ = [
    "AuditEventRepository",
    "LabelRepository",
    "OrganizeRepository",
    "PointLedgerRepository",
    "QuizRepository",
    "SetoranRepository",
    "UserRepository",
    "audit_events",
    "labels",
    "organizes",
    "point_ledger_rows",
    "quizzes",
    "setoran_rows",
    "users",
]
