"""Quiz listing, authoring and answer submission (which feeds the point ledger)."""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from pydantic import BaseModel
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from .db.session import session_scope
from .domain import Quiz, QuizAnswer, Role, User
from .errors import (
    AlreadyAnsweredError,
    InputValidationError,
    LedgerConsistencyError,
    NotFoundError,
    PermissionDeniedError,
)
from .point_ledger import PointLedger, point_ledger
from .repositories import organizes, quizzes, users
from .telemetry import emit_event

logger = logging.getLogger(__name__)

MIN_QUIZ_OPTIONS = 2


class AnswerResult(BaseModel):
    quiz_id: str
    answer_id: str
    is_correct: bool
    poin: int
    correct_option: str
    total_poin: int


class QuizListing(BaseModel):
    """A quiz as shown in a list; the correct option stays hidden until answered."""

    id: str
    question: str
    options: List[str]
    poin: int
    organize_id: str
    correct_option: Optional[str] = None
    answered: bool = False
    selected_option: Optional[str] = None
    is_correct: Optional[bool] = None
    awarded_poin: Optional[int] = None

    @classmethod
    def build(cls, quiz: Quiz, answer: Optional[QuizAnswer] = None, *, reveal: bool = False) -> "QuizListing":
        return cls(
            id=quiz.id,
            question=quiz.question,
            options=list(quiz.options),
            poin=quiz.poin,
            organize_id=quiz.organize_id,
            correct_option=quiz.correct_option if reveal or answer is not None else None,
            answered=answer is not None,
            selected_option=answer.selected_option if answer else None,
            is_correct=answer.is_correct if answer else None,
            awarded_poin=answer.poin if answer else None,
        )


class StudentQuizSummary(BaseModel):
    siswa_id: str
    total_poin: int = 0
    correct_count: int = 0
    answered_count: int = 0


def score_answer(quiz: Quiz, selected_option: str) -> tuple[bool, int]:
    """Exact string match against the correct option; points are all or nothing."""
    is_correct = selected_option == quiz.correct_option
    return is_correct, quiz.poin if is_correct else 0


class QuizWorkflow:
    def __init__(self, ledger: PointLedger | None = None) -> None:
        self._ledger = ledger or point_ledger

    def submit_answer(self, quiz_id: str, siswa_id: str, selected_option: str) -> AnswerResult:
        """Record the answer, then award its points.

        The two writes are separate transactions. When the award fails after the
        answer was stored, ``LedgerConsistencyError`` names the stored answer so the
        gap can be repaired with ``PointLedger.reconcile``.
        """
        if not selected_option:
            raise InputValidationError("Select an answer before submitting.")

        try:
            with session_scope() as session:
                quiz = quizzes.get(session, quiz_id)
                if quiz is None:
                    raise NotFoundError(f"Quiz '{quiz_id}' was not found.")
                student = users.get(session, siswa_id)
                if student is None or student.role != Role.STUDENT:
                    raise PermissionDeniedError("Only students can answer quizzes.")
                if student.organize_id != quiz.organize_id:
                    raise PermissionDeniedError("This quiz belongs to a different class.")
                if quizzes.find_answer(session, quiz_id, siswa_id) is not None:
                    raise AlreadyAnsweredError("You have already answered this quiz.")
                if selected_option not in quiz.options:
                    raise InputValidationError("The selected answer is not one of the quiz options.")

                is_correct, awarded = score_answer(quiz, selected_option)
                answer = quizzes.insert_answer(
                    session,
                    quiz_id=quiz_id,
                    siswa_id=siswa_id,
                    selected_option=selected_option,
                    is_correct=is_correct,
                    poin=awarded,
                )
        except IntegrityError as exc:
            raise AlreadyAnsweredError("You have already answered this quiz.") from exc

        emit_event(
            "quiz_answer_recorded",
            quiz_id=quiz_id,
            siswa_id=siswa_id,
            answer_id=answer.id,
            is_correct=is_correct,
            poin=awarded,
        )

        try:
            balance = self._ledger.award_points(siswa_id, awarded)
        except SQLAlchemyError as exc:
            logger.exception("Answer %s stored but %d points were not awarded to %s", answer.id, awarded, siswa_id)
            emit_event(
                "ledger_consistency_gap",
                siswa_id=siswa_id,
                quiz_id=quiz_id,
                answer_id=answer.id,
                poin=awarded,
                error=str(exc),
            )
            raise LedgerConsistencyError(
                "Your answer was saved but the points could not be added yet.",
                answer_id=answer.id,
                siswa_id=siswa_id,
                poin=awarded,
            ) from exc

        return AnswerResult(
            quiz_id=quiz_id,
            answer_id=answer.id,
            is_correct=is_correct,
            poin=awarded,
            correct_option=quiz.correct_option,
            total_poin=balance.total_poin,
        )

    def list_quizzes(self, user: User) -> List[QuizListing]:
        with session_scope(commit=False) as session:
            if user.role == Role.STUDENT:
                if not user.organize_id:
                    return []
                entries = quizzes.list_for_organizes(session, [user.organize_id])
                answers = {answer.quiz_id: answer for answer in quizzes.answers_for_student(session, user.id)}
                return [QuizListing.build(quiz, answers.get(quiz.id)) for quiz in entries]
            if user.role == Role.TEACHER:
                organize_ids = [organize.id for organize in organizes.list_for_teacher(session, user.id)]
                return [
                    QuizListing.build(quiz, reveal=True)
                    for quiz in quizzes.list_for_organizes(session, organize_ids)
                ]
        raise PermissionDeniedError("Quizzes are available for students and teachers.")

    def create_quiz(
        self,
        teacher: User,
        *,
        organize_id: str,
        question: str,
        options: Sequence[str],
        correct_option: str,
        poin: int,
    ) -> Quiz:
        question = question.strip()
        cleaned = [option.strip() for option in options if option and option.strip()]
        if not question:
            raise InputValidationError("Question text is required.")
        if len(cleaned) < MIN_QUIZ_OPTIONS:
            raise InputValidationError(f"A quiz needs at least {MIN_QUIZ_OPTIONS} answer options.")
        if len(set(cleaned)) != len(cleaned):
            raise InputValidationError("Answer options must be unique.")
        if correct_option.strip() not in cleaned:
            raise InputValidationError("The correct option must be one of the answer options.")
        if poin < 0:
            raise InputValidationError("Quiz points cannot be negative.")

        with session_scope() as session:
            organize = organizes.get(session, organize_id)
            if organize is None:
                raise NotFoundError(f"Class '{organize_id}' was not found.")
            if organize.guru_id != teacher.id:
                raise PermissionDeniedError("You can only create quizzes for your own classes.")
            quiz = quizzes.create(
                session,
                question=question,
                options=cleaned,
                correct_option=correct_option.strip(),
                poin=poin,
                organize_id=organize_id,
            )
        logger.info("Created quiz %s for class %s", quiz.id, organize_id)
        return quiz

    def student_summary(self, siswa_id: str) -> StudentQuizSummary:
        with session_scope(commit=False) as session:
            answers = quizzes.answers_for_student(session, siswa_id)
        return StudentQuizSummary(
            siswa_id=siswa_id,
            total_poin=sum(answer.poin for answer in answers),
            correct_count=sum(1 for answer in answers if answer.is_correct),
            answered_count=len(answers),
        )


quiz_workflow = QuizWorkflow()

__all__ = [
    "AnswerResult",
    "QuizListing",
    "QuizWorkflow",
    "StudentQuizSummary",
    "quiz_workflow",
    "score_answer",
]
