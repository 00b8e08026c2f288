"""
Unit tests for QuestionService: group Q&A questions, answers and votes.
"""

import pytest
from sqlalchemy.orm import Session

import models.schemas as schemas
import repositories.db_models as db_models
from models.exceptions import (
    AnswerNotFoundException,
    CannotVoteOwnContentException,
    GroupNotFoundException,
    NotContentOwnerException,
    NotGroupMemberException,
    QuestionNotFoundException,
    ValidationException,
)
from services.group_service import GroupService
from services.question_service import QuestionService

UP = db_models.VoteType.UP
DOWN = db_models.VoteType.DOWN


def _ask(db: Session, group: db_models.Group, author: db_models.User) -> schemas.Question:
    return QuestionService.create_question(
        db,
        group.id,
        author.id,
        schemas.QuestionCreate(title="¿Cómo factorizo?", content="x² - 9 no me sale"),
    )


def _answer(db: Session, question_id: int, author: db_models.User, text: str) -> schemas.Answer:
    return QuestionService.create_answer(
        db, question_id, author.id, schemas.AnswerCreate(content=text)
    )


@pytest.fixture
def classmate(db_session: Session, other_user: db_models.User, test_group: db_models.Group):
    """other_user as a plain member of test_group."""
    GroupService.join_group(db_session, test_group.id, other_user.id)
    return other_user


class TestQuestions:
    """Tests for asking, listing and deleting questions."""

    def test_ask_and_list(
        self,
        db_session: Session,
        test_user: db_models.User,
        classmate: db_models.User,
        test_group: db_models.Group,
    ):
        question = _ask(db_session, test_group, test_user)
        _answer(db_session, question.id, classmate, "Diferencia de cuadrados: (x-3)(x+3)")

        listed = QuestionService.list_questions(db_session, test_group.id, classmate.id)

        assert [q.id for q in listed] == [question.id]
        assert listed[0].author.first_name == "Ana"
        assert listed[0].score == 0
        assert [a.content for a in listed[0].answers] == ["Diferencia de cuadrados: (x-3)(x+3)"]

    def test_markup_is_stripped(
        self, db_session: Session, test_user: db_models.User, test_group: db_models.Group
    ):
        question = QuestionService.create_question(
            db_session,
            test_group.id,
            test_user.id,
            schemas.QuestionCreate(title="<b>Duda</b>", content="<script>x</script>Tarea 4"),
        )
        assert question.title == "Duda"
        assert "<script>" not in question.content

    def test_markup_only_title_rejected(
        self, db_session: Session, test_user: db_models.User, test_group: db_models.Group
    ):
        with pytest.raises(ValidationException):
            QuestionService.create_question(
                db_session,
                test_group.id,
                test_user.id,
                schemas.QuestionCreate(title="<br>", content="algo"),
            )

    def test_members_only(
        self,
        db_session: Session,
        test_user: db_models.User,
        other_user: db_models.User,
        test_group: db_models.Group,
    ):
        question = _ask(db_session, test_group, test_user)

        with pytest.raises(NotGroupMemberException):
            QuestionService.list_questions(db_session, test_group.id, other_user.id)
        with pytest.raises(NotGroupMemberException):
            _ask(db_session, test_group, other_user)
        with pytest.raises(NotGroupMemberException):
            _answer(db_session, question.id, other_user, "Yo sé")

    def test_missing_group_and_question(self, db_session: Session, test_user: db_models.User):
        with pytest.raises(GroupNotFoundException):
            QuestionService.list_questions(db_session, 999, test_user.id)
        with pytest.raises(QuestionNotFoundException):
            _answer(db_session, 999, test_user, "Hola")

    def test_delete_permissions(
        self,
        db_session: Session,
        test_user: db_models.User,
        classmate: db_models.User,
        teacher_user: db_models.User,
        test_group: db_models.Group,
    ):
        """Other students cannot delete; a teacher can, and answers go with it."""
        question = _ask(db_session, test_group, test_user)
        _answer(db_session, question.id, classmate, "Respuesta")

        with pytest.raises(NotContentOwnerException):
            QuestionService.delete_question(db_session, question.id, classmate)

        QuestionService.delete_question(db_session, question.id, teacher_user)

        assert db_session.query(db_models.Question).count() == 0
        assert db_session.query(db_models.Answer).count() == 0
        with pytest.raises(QuestionNotFoundException):
            QuestionService.delete_question(db_session, question.id, teacher_user)

    def test_group_delete_removes_board(
        self,
        db_session: Session,
        test_user: db_models.User,
        classmate: db_models.User,
        test_group: db_models.Group,
    ):
        question = _ask(db_session, test_group, test_user)
        answer = _answer(db_session, question.id, classmate, "Respuesta")
        QuestionService.vote(db_session, "answer", answer.id, test_user.id, UP)

        GroupService.delete_group(db_session, test_group.id, test_user)

        assert db_session.query(db_models.Question).count() == 0
        assert db_session.query(db_models.QaVote).count() == 0


class TestAnswers:
    """Tests for answering and deleting answers."""

    def test_author_deletes_own_answer(
        self,
        db_session: Session,
        test_user: db_models.User,
        classmate: db_models.User,
        test_group: db_models.Group,
    ):
        question = _ask(db_session, test_group, test_user)
        answer = _answer(db_session, question.id, classmate, "Borrador")

        with pytest.raises(NotContentOwnerException):
            QuestionService.delete_answer(db_session, answer.id, test_user)

        QuestionService.delete_answer(db_session, answer.id, classmate)
        with pytest.raises(AnswerNotFoundException):
            QuestionService.delete_answer(db_session, answer.id, classmate)

    def test_empty_answer_rejected(
        self,
        db_session: Session,
        test_user: db_models.User,
        test_group: db_models.Group,
    ):
        question = _ask(db_session, test_group, test_user)
        with pytest.raises(ValidationException):
            _answer(db_session, question.id, test_user, "<p> </p>")


class TestVotes:
    """Tests for QuestionService.vote."""

    def test_vote_switch_and_withdraw(
        self,
        db_session: Session,
        test_user: db_models.User,
        classmate: db_models.User,
        test_group: db_models.Group,
    ):
        question = _ask(db_session, test_group, test_user)

        first = QuestionService.vote(db_session, "question", question.id, classmate.id, UP)
        assert (first.score, first.user_vote) == (1, UP)

        switched = QuestionService.vote(db_session, "question", question.id, classmate.id, DOWN)
        assert (switched.score, switched.user_vote) == (-1, DOWN)

        withdrawn = QuestionService.vote(db_session, "question", question.id, classmate.id, DOWN)
        assert (withdrawn.score, withdrawn.user_vote) == (0, None)
        assert db_session.query(db_models.QaVote).count() == 0

    def test_one_vote_per_user(
        self,
        db_session: Session,
        test_user: db_models.User,
        classmate: db_models.User,
        user_factory,
        test_group: db_models.Group,
    ):
        question = _ask(db_session, test_group, test_user)
        third = user_factory("carla@loyola.edu.mx", first_name="Carla")
        GroupService.join_group(db_session, test_group.id, third.id)

        QuestionService.vote(db_session, "question", question.id, classmate.id, UP)
        QuestionService.vote(db_session, "question", question.id, third.id, UP)
        result = QuestionService.vote(db_session, "question", question.id, third.id, UP)

        assert result.score == 1
        assert db_session.query(db_models.QaVote).count() == 1

    def test_answers_ranked_by_score(
        self,
        db_session: Session,
        test_user: db_models.User,
        classmate: db_models.User,
        test_group: db_models.Group,
    ):
        question = _ask(db_session, test_group, test_user)
        early = _answer(db_session, question.id, classmate, "Primera")
        better = _answer(db_session, question.id, classmate, "Mejor")
        QuestionService.vote(db_session, "answer", better.id, test_user.id, UP)

        listed = QuestionService.list_questions(db_session, test_group.id, test_user.id)

        assert [a.id for a in listed[0].answers] == [better.id, early.id]
        assert listed[0].answers[0].user_vote == UP
        assert listed[0].answers[1].user_vote is None

    def test_cannot_vote_own_content(
        self, db_session: Session, test_user: db_models.User, test_group: db_models.Group
    ):
        question = _ask(db_session, test_group, test_user)
        with pytest.raises(CannotVoteOwnContentException):
            QuestionService.vote(db_session, "question", question.id, test_user.id, UP)

    def test_missing_targets(self, db_session: Session, test_user: db_models.User):
        with pytest.raises(QuestionNotFoundException):
            QuestionService.vote(db_session, "question", 999, test_user.id, UP)
        with pytest.raises(AnswerNotFoundException):
            QuestionService.vote(db_session, "answer", 999, test_user.id, UP)
