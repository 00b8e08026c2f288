"""
Q&A repositories: group questions, their answers and the votes on both.
"""

from typing import List, Optional

from sqlalchemy import case, func
from sqlalchemy.orm import Session, joinedload, selectinload

import repositories.db_models as db_models
from .base import BaseRepository


class QuestionRepository(BaseRepository[db_models.Question]):
    """Repository for Question entity database operations."""

    def __init__(self, db: Session):
        super().__init__(db_models.Question, db)

    def get_for_group(self, group_id: int) -> List[db_models.Question]:
        """
        Questions of a group, newest first, with authors and answers loaded.

        Args:
            group_id: Group ID

        Returns:
            List of questions
        """
        return (
            self.db.query(db_models.Question)
            .options(
                joinedload(db_models.Question.author),
                selectinload(db_models.Question.answers).joinedload(
                    db_models.Answer.author
                ),
            )
            .filter(db_models.Question.group_id == group_id)
            .order_by(db_models.Question.created_at.desc(), db_models.Question.id.desc())
            .all()
        )


class AnswerRepository(BaseRepository[db_models.Answer]):
    """Repository for Answer entity database operations."""

    def __init__(self, db: Session):
        super().__init__(db_models.Answer, db)

    def get_with_question(self, answer_id: int) -> Optional[db_models.Answer]:
        return (
            self.db.query(db_models.Answer)
            .options(joinedload(db_models.Answer.question))
            .filter(db_models.Answer.id == answer_id)
            .first()
        )


class QaVoteRepository(BaseRepository[db_models.QaVote]):
    """Repository for QaVote rows. A vote targets a question or an answer."""

    def __init__(self, db: Session):
        super().__init__(db_models.QaVote, db)

    @staticmethod
    def _target_column(target: str):
        if target == "question":
            return db_models.QaVote.question_id
        if target == "answer":
            return db_models.QaVote.answer_id
        raise ValueError(f"Unknown vote target: {target!r}")

    def get_by_target_and_user(
        self, target: str, target_id: int, user_id: int
    ) -> Optional[db_models.QaVote]:
        """
        Get a user's vote on a question or answer.

        Args:
            target: "question" or "answer"
            target_id: Question or answer ID
            user_id: User ID

        Returns:
            Vote if found, None otherwise
        """
        column = self._target_column(target)
        return (
            self.db.query(db_models.QaVote)
            .filter(column == target_id, db_models.QaVote.user_id == user_id)
            .first()
        )

    def scores(self, target: str, target_ids: List[int]) -> dict[int, int]:
        """
        Net score (up minus down) for several questions or answers in one query.

        Args:
            target: "question" or "answer"
            target_ids: IDs to score

        Returns:
            Mapping of ID to score (missing means 0)
        """
        if not target_ids:
            return {}
        column = self._target_column(target)
        rows = (
            self.db.query(
                column,
                func.sum(
                    case(
                        (db_models.QaVote.vote_type == db_models.VoteType.UP, 1),
                        else_=-1,
                    )
                ),
            )
            .filter(column.in_(target_ids))
            .group_by(column)
            .all()
        )
        return {target_id: int(score or 0) for target_id, score in rows}

    def user_votes(
        self, target: str, target_ids: List[int], user_id: int
    ) -> dict[int, db_models.VoteType]:
        """The user's vote direction on each of target_ids they voted on."""
        if not target_ids:
            return {}
        column = self._target_column(target)
        rows = (
            self.db.query(column, db_models.QaVote.vote_type)
            .filter(column.in_(target_ids), db_models.QaVote.user_id == user_id)
            .all()
        )
        return {target_id: vote_type for target_id, vote_type in rows}
