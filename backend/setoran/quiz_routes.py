"""Quiz endpoints: listing, authoring and answering."""

from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from .capabilities import Capability
from .dependencies import require_capability
from .domain import Quiz, User
from .errors import SetoranError, http_error
from .quiz_workflow import AnswerResult, QuizListing, StudentQuizSummary, quiz_workflow

router = APIRouter(prefix="/api/quizzes", tags=["quiz"])
logger = logging.getLogger(__name__)


class QuizCreateRequest(BaseModel):
    organize_id: str = Field(..., min_length=1)
    question: str = Field(..., min_length=1)
    options: List[str] = Field(default_factory=list)
    correct_option: str = Field(..., min_length=1)
    poin: int = Field(default=10, ge=0)


class AnswerRequest(BaseModel):
    selected_option: str = ""


@router.get("", response_model=List[QuizListing])
def list_quizzes(user: User = Depends(require_capability(Capability.VIEW_QUIZZES))) -> List[QuizListing]:
    try:
        return quiz_workflow.list_quizzes(user)
    except SetoranError as exc:
        raise http_error(exc) from exc


@router.post("", response_model=Quiz, status_code=status.HTTP_201_CREATED)
def create_quiz(
    payload: QuizCreateRequest,
    user: User = Depends(require_capability(Capability.MANAGE_QUIZZES)),
) -> Quiz:
    try:
        return quiz_workflow.create_quiz(
            user,
            organize_id=payload.organize_id,
            question=payload.question,
            options=payload.options,
            correct_option=payload.correct_option,
            poin=payload.poin,
        )
    except SetoranError as exc:
        raise http_error(exc) from exc


@router.get("/summary", response_model=StudentQuizSummary)
def quiz_summary(user: User = Depends(require_capability(Capability.ANSWER_QUIZ))) -> StudentQuizSummary:
    return quiz_workflow.student_summary(user.id)


@router.post("/{quiz_id}/answer", response_model=AnswerResult)
def answer_quiz(
    quiz_id: str,
    payload: AnswerRequest,
    user: User = Depends(require_capability(Capability.ANSWER_QUIZ)),
) -> AnswerResult:
    try:
        result = quiz_workflow.submit_answer(quiz_id, user.id, payload.selected_option)
    except SetoranError as exc:
        raise http_error(exc) from exc
    logger.info("Quiz %s answered by %s (correct=%s)", quiz_id, user.id, result.is_correct)
    return result
