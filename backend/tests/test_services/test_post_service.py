"""
Unit tests for PostService: feed, posts, reactions and comments.
"""

import pytest
from sqlalchemy.orm import Session

import models.schemas as schemas
import repositories.db_models as db_models
from models.exceptions import (
    NotContentOwnerException,
    PostNotFoundException,
    ValidationException,
)
from services.post_service import PostService


class TestCreatePost:
    """Tests for PostService.create_post."""

    def test_content_is_sanitized(self, db_session: Session, test_user: db_models.User):
        post = PostService.create_post(
            db_session,
            test_user.id,
            schemas.PostCreate(
                content="<b>Feria</b> de <i>ciencias</i> ",
                media=["https://img.example/a.png", "javascript:alert(1)"],
            ),
        )

        assert post.content == "Feria de ciencias"
        assert post.media == ["https://img.example/a.png"]
        assert post.author.first_name == "Ana"

    def test_markup_only_content_rejected(
        self, db_session: Session, test_user: db_models.User
    ):
        with pytest.raises(ValidationException):
            PostService.create_post(
                db_session, test_user.id, schemas.PostCreate(content="<br/>")
            )

    def test_main_feed_post_notifies_others(
        self, db_session: Session, test_user: db_models.User, other_user: db_models.User
    ):
        post = PostService.create_post(
            db_session, test_user.id, schemas.PostCreate(content="Hola a todos")
        )

        notifications = db_session.query(db_models.Notification).all()
        assert [(n.user_id, n.related_id) for n in notifications] == [
            (other_user.id, post.id)
        ]


class TestFeed:
    """Tests for PostService.get_feed."""

    def test_pinned_first_and_group_posts_excluded(
        self, db_session: Session, test_user: db_models.User, test_group: db_models.Group
    ):
        older = db_models.Post(author_id=test_user.id, content="Aviso fijo", pinned=True)
        db_session.add(older)
        db_session.commit()
        newer = db_models.Post(author_id=test_user.id, content="Reciente")
        in_group = db_models.Post(
            author_id=test_user.id, group_id=test_group.id, content="Sólo del grupo"
        )
        db_session.add_all([newer, in_group])
        db_session.commit()

        feed = PostService.get_feed(db_session, test_user.id)

        assert [p.id for p in feed] == [older.id, newer.id]


class TestReactions:
    """Tests for PostService.toggle_reaction."""

    def test_toggle_on_and_off(
        self,
        db_session: Session,
        other_user: db_models.User,
        test_post: db_models.Post,
    ):
        first = PostService.toggle_reaction(db_session, test_post.id, other_user.id)
        assert first.reacted is True
        assert first.reaction_count == 1
        assert PostService.get_post(db_session, test_post.id, other_user.id).user_has_reacted

        second = PostService.toggle_reaction(db_session, test_post.id, other_user.id)
        assert second.reacted is False
        assert second.reaction_count == 0

    def test_missing_post(self, db_session: Session, other_user: db_models.User):
        with pytest.raises(PostNotFoundException):
            PostService.toggle_reaction(db_session, 999, other_user.id)


class TestModifyPost:
    """Tests for update_post and delete_post permissions."""

    def test_author_can_edit(
        self, db_session: Session, test_user: db_models.User, test_post: db_models.Post
    ):
        updated = PostService.update_post(
            db_session, test_post.id, test_user, schemas.PostUpdate(content="Editado")
        )
        assert updated.content == "Editado"

    def test_other_user_cannot_edit(
        self, db_session: Session, other_user: db_models.User, test_post: db_models.Post
    ):
        with pytest.raises(NotContentOwnerException):
            PostService.update_post(
                db_session, test_post.id, other_user, schemas.PostUpdate(pinned=True)
            )

    def test_admin_can_pin_and_delete(
        self, db_session: Session, admin_user: db_models.User, test_post: db_models.Post
    ):
        pinned = PostService.update_post(
            db_session, test_post.id, admin_user, schemas.PostUpdate(pinned=True)
        )
        assert pinned.pinned is True

        PostService.delete_post(db_session, test_post.id, admin_user)
        assert db_session.query(db_models.Post).count() == 0


class TestComments:
    """Tests for comment creation and deletion."""

    def test_comments_are_oldest_first(
        self, db_session: Session, other_user: db_models.User, test_post: db_models.Post
    ):
        first = PostService.create_comment(
            db_session, test_post.id, other_user.id, schemas.CommentCreate(content="Yo la tengo")
        )
        second = PostService.create_comment(
            db_session, test_post.id, other_user.id, schemas.CommentCreate(content="Te la paso")
        )

        comments = PostService.get_comments(db_session, test_post.id)
        assert [c.id for c in comments] == [first.id, second.id]
        assert PostService.get_post(db_session, test_post.id).comment_count == 2

    def test_only_author_or_admin_deletes(
        self,
        db_session: Session,
        test_user: db_models.User,
        other_user: db_models.User,
        admin_user: db_models.User,
        test_post: db_models.Post,
    ):
        comment = PostService.create_comment(
            db_session, test_post.id, other_user.id, schemas.CommentCreate(content="Hola")
        )

        with pytest.raises(NotContentOwnerException):
            PostService.delete_comment(db_session, comment.id, test_user)

        PostService.delete_comment(db_session, comment.id, admin_user)
        assert PostService.get_comments(db_session, test_post.id) == []
