"""
Group Q&A service: questions, answers and up/down votes.

Every operation is limited to members of the group the question belongs to.
"""

from typing import List, Literal

from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

import models.schemas as schemas
import repositories.db_models as db_models
from helpers.sanitization import sanitize_plain_text
from models.exceptions import (
    AnswerNotFoundException,
    CannotVoteOwnContentException,
    GroupNotFoundException,
    NotContentOwnerException,
    NotGroupMemberException,
    QuestionNotFoundException,
    ValidationException,
)
from repositories.group_repository import GroupRepository
from repositories.question_repository import (
    AnswerRepository,
    QaVoteRepository,
    QuestionRepository,
)

VoteTarget = Literal["question", "answer"]


def _require_member(db: Session, group_id: int, user_id: int) -> None:
    group_repo = GroupRepository(db)
    if not group_repo.exists(group_id):
        raise GroupNotFoundException()
    if not group_repo.is_member(group_id, user_id):
        raise NotGroupMemberException()


def _can_remove(user: db_models.User, author_id: int) -> bool:
    """Authors remove their own entries; teachers and admins moderate."""
    return user.is_moderator or user.id == author_id


class QuestionService:
    """Service for group Q&A business logic."""

    @staticmethod
    def _to_schemas(
        db: Session, questions: List[db_models.Question], viewer_id: int
    ) -> List[schemas.Question]:
        """Attach scores and the viewer's votes; answers are ranked by score."""
        vote_repo = QaVoteRepository(db)
        question_ids = [q.id for q in questions]
        answer_ids = [a.id for q in questions for a in q.answers]
        question_scores = vote_repo.scores("question", question_ids)
        answer_scores = vote_repo.scores("answer", answer_ids)
        my_question_votes = vote_repo.user_votes("question", question_ids, viewer_id)
        my_answer_votes = vote_repo.user_votes("answer", answer_ids, viewer_id)

        result = []
        for question in questions:
            answers = [
                schemas.Answer.model_validate(answer).model_copy(
                    update={
                        "score": answer_scores.get(answer.id, 0),
                        "user_vote": my_answer_votes.get(answer.id),
                    }
                )
                for answer in question.answers
            ]
            answers.sort(key=lambda a: (-a.score, a.created_at, a.id))
            result.append(
                schemas.Question.model_validate(question).model_copy(
                    update={
                        "score": question_scores.get(question.id, 0),
                        "user_vote": my_question_votes.get(question.id),
                        "answers": answers,
                    }
                )
            )
        return result

    @staticmethod
    def list_questions(
        db: Session, group_id: int, viewer_id: int
    ) -> List[schemas.Question]:
        """
        Questions of a group, newest first, each with its answers.

        Raises:
            GroupNotFoundException: If the group does not exist
            NotGroupMemberException: If the caller is not a member
        """
        _require_member(db, group_id, viewer_id)
        questions = QuestionRepository(db).get_for_group(group_id)
        return QuestionService._to_schemas(db, questions, viewer_id)

    @staticmethod
    def create_question(
        db: Session, group_id: int, author_id: int, data: schemas.QuestionCreate
    ) -> schemas.Question:
        _require_member(db, group_id, author_id)
        title = sanitize_plain_text(data.title)
        content = sanitize_plain_text(data.content)
        if not title or not content:
            raise ValidationException("Question needs a title and a body")

        question = QuestionRepository(db).create(
            db_models.Question(
                group_id=group_id, author_id=author_id, title=title, content=content
            )
        )
        logger.info(f"Question {question.id} asked in group {group_id} by user {author_id}")
        return QuestionService._to_schemas(db, [question], author_id)[0]

    @staticmethod
    def create_answer(
        db: Session, question_id: int, author_id: int, data: schemas.AnswerCreate
    ) -> schemas.Answer:
        """
        Answer a question.

        Raises:
            QuestionNotFoundException: If the question does not exist
            NotGroupMemberException: If the caller is not in the question's group
            ValidationException: If the content is empty after sanitisation
        """
        question = QuestionRepository(db).get_by_id(question_id)
        if question is None:
            raise QuestionNotFoundException()
        _require_member(db, question.group_id, author_id)
        content = sanitize_plain_text(data.content)
        if not content:
            raise ValidationException("Answer cannot be empty")

        answer = AnswerRepository(db).create(
            db_models.Answer(question_id=question_id, author_id=author_id, content=content)
        )
        logger.info(f"Answer {answer.id} added to question {question_id} by user {author_id}")
        return schemas.Answer.model_validate(answer)

    @staticmethod
    def delete_question(db: Session, question_id: int, user: db_models.User) -> None:
        """Delete a question with its answers and votes (author or moderator)."""
        question_repo = QuestionRepository(db)
        question = question_repo.get_by_id(question_id)
        if question is None:
            raise QuestionNotFoundException()
        if not _can_remove(user, question.author_id):
            raise NotContentOwnerException()
        question_repo.delete(question)
        logger.info(f"Question {question_id} deleted by user {user.id}")

    @staticmethod
    def delete_answer(db: Session, answer_id: int, user: db_models.User) -> None:
        answer_repo = AnswerRepository(db)
        answer = answer_repo.get_by_id(answer_id)
        if answer is None:
            raise AnswerNotFoundException()
        if not _can_remove(user, answer.author_id):
            raise NotContentOwnerException()
        answer_repo.delete(answer)
        logger.info(f"Answer {answer_id} deleted by user {user.id}")

    @staticmethod
    def vote(
        db: Session,
        target: VoteTarget,
        target_id: int,
        user_id: int,
        vote_type: db_models.VoteType,
    ) -> schemas.QaVoteResult:
        """
        Vote on a question or answer.

        A first vote is recorded, a vote in the other direction replaces it,
        and repeating the same vote withdraws it.

        Args:
            db: Database session
            target: "question" or "answer"
            target_id: Question or answer ID
            user_id: Voter's user ID
            vote_type: UP or DOWN

        Returns:
            The target's score and the caller's current vote

        Raises:
            QuestionNotFoundException: If the question does not exist
            AnswerNotFoundException: If the answer does not exist
            NotGroupMemberException: If the caller is not in the group
            CannotVoteOwnContentException: If the caller wrote the target
        """
        if target == "question":
            question = QuestionRepository(db).get_by_id(target_id)
            if question is None:
                raise QuestionNotFoundException()
            group_id, author_id = question.group_id, question.author_id
        else:
            answer = AnswerRepository(db).get_with_question(target_id)
            if answer is None:
                raise AnswerNotFoundException()
            group_id, author_id = answer.question.group_id, answer.author_id

        _require_member(db, group_id, user_id)
        if author_id == user_id:
            raise CannotVoteOwnContentException()

        vote_repo = QaVoteRepository(db)
        existing = vote_repo.get_by_target_and_user(target, target_id, user_id)
        if existing is not None and existing.vote_type == vote_type:
            vote_repo.delete(existing)
            user_vote = None
        elif existing is not None:
            existing.vote_type = vote_type
            vote_repo.update(existing)
            user_vote = vote_type
        else:
            new_vote = db_models.QaVote(user_id=user_id, vote_type=vote_type)
            if target == "question":
                new_vote.question_id = target_id
            else:
                new_vote.answer_id = target_id
            try:
                vote_repo.create(new_vote)
            except IntegrityError:
                # A concurrent request from the same user already voted
                vote_repo.rollback()
            user_vote = vote_type

        score = vote_repo.scores(target, [target_id]).get(target_id, 0)
        return schemas.QaVoteResult(score=score, user_vote=user_vote)
