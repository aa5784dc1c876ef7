"""Quiz and quiz answer rows."""

from __future__ import annotations

from typing import Iterable, List, Sequence

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from ..db.models import QuizAnswerModel, QuizModel
from ..domain import Quiz, QuizAnswer


class QuizRepository:
    def get(self, session: Session, quiz_id: str) -> Quiz | None:
        model = session.get(QuizModel, quiz_id)
        return Quiz.model_validate(model) if model is not None else None

    def list_for_organizes(self, session: Session, organize_ids: Iterable[str]) -> List[Quiz]:
        ids = list(organize_ids)
        if not ids:
            return []
        stmt = (
            select(QuizModel)
            .where(QuizModel.organize_id.in_(ids))
            .order_by(QuizModel.created_at.desc())
        )
        return [Quiz.model_validate(row) for row in session.execute(stmt).scalars().all()]

    def create(
        self,
        session: Session,
        *,
        question: str,
        options: Sequence[str],
        correct_option: str,
        poin: int,
        organize_id: str,
    ) -> Quiz:
        model = QuizModel(
            question=question,
            options=list(options),
            correct_option=correct_option,
            poin=poin,
            organize_id=organize_id,
        )
        session.add(model)
        session.flush()
        return Quiz.model_validate(model)

    def find_answer(self, session: Session, quiz_id: str, siswa_id: str) -> QuizAnswer | None:
        stmt = select(QuizAnswerModel).where(
            QuizAnswerModel.quiz_id == quiz_id,
            QuizAnswerModel.siswa_id == siswa_id,
        )
        model = session.execute(stmt).scalar_one_or_none()
        return QuizAnswer.model_validate(model) if model is not None else None

    def insert_answer(
        self,
        session: Session,
        *,
        quiz_id: str,
        siswa_id: str,
        selected_option: str,
        is_correct: bool,
        poin: int,
    ) -> QuizAnswer:
        model = QuizAnswerModel(
            quiz_id=quiz_id,
            siswa_id=siswa_id,
            selected_option=selected_option,
            is_correct=is_correct,
            poin=poin,
        )
        session.add(model)
        session.flush()
        return QuizAnswer.model_validate(model)

    def answers_for_student(self, session: Session, siswa_id: str) -> List[QuizAnswer]:
        stmt = (
            select(QuizAnswerModel)
            .where(QuizAnswerModel.siswa_id == siswa_id)
            .order_by(QuizAnswerModel.answered_at.asc())
        )
        return [QuizAnswer.model_validate(row) for row in session.execute(stmt).scalars().all()]

    def awarded_total(self, session: Session, siswa_id: str) -> int:
        stmt = select(func.coalesce(func.sum(QuizAnswerModel.poin), 0)).where(
            QuizAnswerModel.siswa_id == siswa_id
        )
        return int(session.execute(stmt).scalar_one())


quizzes = QuizRepository()

__all__ = ["QuizRepository", "quizzes"]
