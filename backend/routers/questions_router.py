"""Group Q&A: questions, answers and votes. Members of the group only."""

from typing import List

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

import authentication.auth as auth
import models.schemas as schemas
import repositories.db_models as db_models
from repositories.database import get_db
from services.question_service import QuestionService

router = APIRouter(tags=["questions"])


@router.get("/groups/{group_id}/questions", response_model=List[schemas.Question])
async def list_questions(
    group_id: int,
    current_user: db_models.User = Depends(auth.get_current_active_user),
    db: Session = Depends(get_db),
) -> List[schemas.Question]:
    """Questions of a group, newest first, with answers ranked by score."""
    user_id: int = current_user.id  # type: ignore[assignment]
    return QuestionService.list_questions(db, group_id, user_id)


@router.post(
    "/groups/{group_id}/questions",
    response_model=schemas.Question,
    status_code=status.HTTP_201_CREATED,
)
async def create_question(
    group_id: int,
    question: schemas.QuestionCreate,
    current_user: db_models.User = Depends(auth.get_verified_user),
    db: Session = Depends(get_db),
) -> schemas.Question:
    user_id: int = current_user.id  # type: ignore[assignment]
    return QuestionService.create_question(db, group_id, user_id, question)


@router.delete("/questions/{question_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_question(
    question_id: int,
    current_user: db_models.User = Depends(auth.get_current_active_user),
    db: Session = Depends(get_db),
) -> Response:
    """
    Delete a question with its answers. Author, teacher or admin only.

    Domain exceptions are caught by centralized exception handlers.
    """
    QuestionService.delete_question(db, question_id, current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/questions/{question_id}/answers",
    response_model=schemas.Answer,
    status_code=status.HTTP_201_CREATED,
)
async def create_answer(
    question_id: int,
    answer: schemas.AnswerCreate,
    current_user: db_models.User = Depends(auth.get_verified_user),
    db: Session = Depends(get_db),
) -> schemas.Answer:
    user_id: int = current_user.id  # type: ignore[assignment]
    return QuestionService.create_answer(db, question_id, user_id, answer)


@router.delete("/answers/{answer_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_answer(
    answer_id: int,
    current_user: db_models.User = Depends(auth.get_current_active_user),
    db: Session = Depends(get_db),
) -> Response:
    QuestionService.delete_answer(db, answer_id, current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/questions/{question_id}/vote", response_model=schemas.QaVoteResult)
async def vote_on_question(
    question_id: int,
    vote: schemas.QaVoteCreate,
    current_user: db_models.User = Depends(auth.get_current_active_user),
    db: Session = Depends(get_db),
) -> schemas.QaVoteResult:
    """Vote up or down. Repeating the same vote withdraws it."""
    user_id: int = current_user.id  # type: ignore[assignment]
    return QuestionService.vote(db, "question", question_id, user_id, vote.vote_type)


@router.post("/answers/{answer_id}/vote", response_model=schemas.QaVoteResult)
async def vote_on_answer(
    answer_id: int,
    vote: schemas.QaVoteCreate,
    current_user: db_models.User = Depends(auth.get_current_active_user),
    db: Session = Depends(get_db),
) -> schemas.QaVoteResult:
    user_id: int = current_user.id  # type: ignore[assignment]
    return QuestionService.vote(db, "answer", answer_id, user_id, vote.vote_type)
