"""Initial setoran schema: users, classes, submissions, quizzes, points and labels."""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "20251019_01_initial_setoran_schema"
down_revision = None
branch_labels = None
depends_on = None


def _created_at() -> sa.Column:
    return sa.Column(
        "created_at",
        sa.DateTime(timezone=True),
        server_default=sa.text("CURRENT_TIMESTAMP"),
        nullable=False,
    )


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        _created_at(),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("role", sa.String(length=16), nullable=False),
        sa.Column("type", sa.String(length=16), nullable=True),
        sa.Column("organize_id", sa.String(length=36), nullable=True),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_organize_role", "users", ["organize_id", "role"])

    op.create_table(
        "organizes",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        _created_at(),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("guru_id", sa.String(length=36), sa.ForeignKey("users.id", ondelete="RESTRICT"), nullable=False),
    )
    op.create_index("ix_organizes_guru_id", "organizes", ["guru_id"])

    op.create_table(
        "ortu_siswa",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        _created_at(),
        sa.Column("ortu_id", sa.String(length=36), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("siswa_id", sa.String(length=36), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.UniqueConstraint("ortu_id", "siswa_id", name="uq_ortu_siswa_pair"),
    )
    op.create_index("ix_ortu_siswa_ortu_id", "ortu_siswa", ["ortu_id"])

    op.create_table(
        "setoran",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        _created_at(),
        sa.Column("siswa_id", sa.String(length=36), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("guru_id", sa.String(length=36), sa.ForeignKey("users.id", ondelete="RESTRICT"), nullable=False),
        sa.Column(
            "organize_id",
            sa.String(length=36),
            sa.ForeignKey("organizes.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("file_url", sa.Text(), nullable=False),
        sa.Column("jenis", sa.String(length=16), nullable=False),
        sa.Column("tanggal", sa.Date(), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False, server_default="pending"),
        sa.Column("catatan", sa.Text(), nullable=True),
        sa.Column("surah", sa.String(length=128), nullable=True),
        sa.Column("juz", sa.Integer(), nullable=True),
        sa.Column("poin", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("reviewed_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("poin >= 0", name="ck_setoran_poin_non_negative"),
    )
    op.create_index("ix_setoran_siswa", "setoran", ["siswa_id"])
    op.create_index("ix_setoran_guru_status", "setoran", ["guru_id", "status"])

    op.create_table(
        "quizzes",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        _created_at(),
        sa.Column("question", sa.Text(), nullable=False),
        sa.Column("options", sa.JSON(), nullable=False),
        sa.Column("correct_option", sa.Text(), nullable=False),
        sa.Column("poin", sa.Integer(), nullable=False, server_default="0"),
        sa.Column(
            "organize_id",
            sa.String(length=36),
            sa.ForeignKey("organizes.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.CheckConstraint("poin >= 0", name="ck_quizzes_poin_non_negative"),
    )
    op.create_index("ix_quizzes_organize_created", "quizzes", ["organize_id", "created_at"])

    op.create_table(
        "quiz_answers",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("quiz_id", sa.String(length=36), sa.ForeignKey("quizzes.id", ondelete="CASCADE"), nullable=False),
        sa.Column("siswa_id", sa.String(length=36), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("selected_option", sa.Text(), nullable=False),
        sa.Column("is_correct", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("poin", sa.Integer(), nullable=False, server_default="0"),
        sa.Column(
            "answered_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.UniqueConstraint("quiz_id", "siswa_id", name="uq_quiz_answers_quiz_siswa"),
    )
    op.create_index("ix_quiz_answers_siswa", "quiz_answers", ["siswa_id"])

    op.create_table(
        "siswa_poin",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("siswa_id", sa.String(length=36), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("total_poin", sa.Integer(), nullable=False, server_default="0"),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.UniqueConstraint("siswa_id", name="uq_siswa_poin_siswa"),
        sa.CheckConstraint("total_poin >= 0", name="ck_siswa_poin_total_non_negative"),
    )

    op.create_table(
        "labels",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        _created_at(),
        sa.Column("siswa_id", sa.String(length=36), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("juz", sa.Integer(), nullable=False),
        sa.Column("tanggal", sa.Date(), nullable=False),
        sa.Column(
            "diberikan_oleh",
            sa.String(length=36),
            sa.ForeignKey("users.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.UniqueConstraint("siswa_id", "juz", name="uq_labels_siswa_juz"),
        sa.CheckConstraint("juz >= 1 AND juz <= 30", name="ck_labels_juz_range"),
    )

    op.create_table(
        "audit_events",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        _created_at(),
        sa.Column("user_id", sa.String(length=36), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("event_type", sa.String(length=64), nullable=False),
        sa.Column("payload", sa.JSON(), nullable=False),
        sa.Column("actor", sa.String(length=128), nullable=True),
    )
    op.create_index("ix_audit_events_user_created", "audit_events", ["user_id", "created_at"])


def downgrade() -> None:
    op.drop_index("ix_audit_events_user_created", table_name="audit_events")
    op.drop_table("audit_events")
    op.drop_table("labels")
    op.drop_table("siswa_poin")
    op.drop_index("ix_quiz_answers_siswa", table_name="quiz_answers")
    op.drop_table("quiz_answers")
    op.drop_index("ix_quizzes_organize_created", table_name="quizzes")
    op.drop_table("quizzes")
    op.drop_index("ix_setoran_guru_status", table_name="setoran")
    op.drop_index("ix_setoran_siswa", table_name="setoran")
    op.drop_table("setoran")
    op.drop_index("ix_ortu_siswa_ortu_id", table_name="ortu_siswa")
    op.drop_table("ortu_siswa")
    op.drop_index("ix_organizes_guru_id", table_name="organizes")
    op.drop_table("organizes")
    op.drop_index("ix_users_organize_role", table_name="users")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
