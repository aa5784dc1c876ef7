"""ORM models for the setoran schema.

Table and column names match the schema the mobile client and review tooling
already read (``setoran``, ``siswa_poin``, ``labels`` ...), so they stay in
Indonesian.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.types import JSON

from .base import Base, CreatedAtMixin, IdMixin

JSONType = JSON


class UserModel(IdMixin, CreatedAtMixin, Base):
    __tablename__ = "users"
    __table_args__ = (
        Index("ix_users_email", "email", unique=True),
        Index("ix_users_organize_role", "organize_id", "role"),
    )

    email: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(16), nullable=False)
    type: Mapped[Optional[str]] = mapped_column(String(16), nullable=True)
    # Plain reference: organizes.guru_id already points back at users.
    organize_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)


class OrganizeModel(IdMixin, CreatedAtMixin, Base):
    __tablename__ = "organizes"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    guru_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="RESTRICT"), nullable=False, index=True
    )

    guru: Mapped[UserModel] = relationship()


class ParentChildModel(IdMixin, CreatedAtMixin, Base):
    __tablename__ = "ortu_siswa"
    __table_args__ = (UniqueConstraint("ortu_id", "siswa_id", name="uq_ortu_siswa_pair"),)

    ortu_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    siswa_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )


class SetoranModel(IdMixin, CreatedAtMixin, Base):
    __tablename__ = "setoran"
    __table_args__ = (
        Index("ix_setoran_siswa", "siswa_id"),
        Index("ix_setoran_guru_status", "guru_id", "status"),
        CheckConstraint("poin >= 0", name="ck_setoran_poin_non_negative"),
    )

    siswa_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    guru_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id", ondelete="RESTRICT"), nullable=False)
    organize_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("organizes.id", ondelete="RESTRICT"), nullable=False
    )
    file_url: Mapped[str] = mapped_column(Text, nullable=False)
    jenis: Mapped[str] = mapped_column(String(16), nullable=False)
    tanggal: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(String(16), default="pending", nullable=False)
    catatan: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    surah: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    juz: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    poin: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    reviewed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)


class QuizModel(IdMixin, CreatedAtMixin, Base):
    __tablename__ = "quizzes"
    __table_args__ = (
        Index("ix_quizzes_organize_created", "organize_id", "created_at"),
        CheckConstraint("poin >= 0", name="ck_quizzes_poin_non_negative"),
    )

    question: Mapped[str] = mapped_column(Text, nullable=False)
    options: Mapped[list[str]] = mapped_column(JSONType, default=list, nullable=False)
    correct_option: Mapped[str] = mapped_column(Text, nullable=False)
    poin: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    organize_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("organizes.id", ondelete="CASCADE"), nullable=False
    )


class QuizAnswerModel(IdMixin, Base):
    __tablename__ = "quiz_answers"
    __table_args__ = (
        UniqueConstraint("quiz_id", "siswa_id", name="uq_quiz_answers_quiz_siswa"),
        Index("ix_quiz_answers_siswa", "siswa_id"),
    )

    quiz_id: Mapped[str] = mapped_column(String(36), ForeignKey("quizzes.id", ondelete="CASCADE"), nullable=False)
    siswa_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    selected_option: Mapped[str] = mapped_column(Text, nullable=False)
    is_correct: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    poin: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    answered_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False
    )


class SiswaPoinModel(IdMixin, Base):
    __tablename__ = "siswa_poin"
    __table_args__ = (
        UniqueConstraint("siswa_id", name="uq_siswa_poin_siswa"),
        CheckConstraint("total_poin >= 0", name="ck_siswa_poin_total_non_negative"),
    )

    siswa_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    total_poin: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False
    )


class LabelModel(IdMixin, CreatedAtMixin, Base):
    __tablename__ = "labels"
    __table_args__ = (
        UniqueConstraint("siswa_id", "juz", name="uq_labels_siswa_juz"),
        CheckConstraint("juz >= 1 AND juz <= 30", name="ck_labels_juz_range"),
    )

    siswa_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    juz: Mapped[int] = mapped_column(Integer, nullable=False)
    tanggal: Mapped[date] = mapped_column(Date, nullable=False)
    diberikan_oleh: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="RESTRICT"), nullable=False
    )


class AuditEventModel(IdMixin, CreatedAtMixin, Base):
    __tablename__ = "audit_events"
    __table_args__ = (Index("ix_audit_events_user_created", "user_id", "created_at"),)

    user_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    event_type: Mapped[str] = mapped_column(String(64), nullable=False)
    payload: Mapped[dict] = mapped_column(JSONType, default=dict, nullable=False)
    actor: Mapped[Optional[str]] = mapped_column(String(128))


__all__ = [
    "AuditEventModel",
    "LabelModel",
    "OrganizeModel",
    "ParentChildModel",
    "QuizAnswerModel",
    "QuizModel",
    "SetoranModel",
    "SiswaPoinModel",
    "UserModel",
]
