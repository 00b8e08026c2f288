"""
Unit tests for ReportService: filing, listing and resolving reports.
"""

from datetime import timedelta

import pytest
from sqlalchemy.orm import Session

import repositories.db_models as db_models
from helpers.time_utils import to_db_datetime, utc_now
from models.exceptions import (
    ReportAlreadyResolvedException,
    ReportNotFoundException,
    ValidationException,
)
from services.file_service import FileService
from services.report_service import (
    CommentTarget,
    FileTarget,
    PostTarget,
    ReportService,
    UserAccountTarget,
    report_target,
)

ReportTargetType = db_models.ReportTargetType
ReportStatus = db_models.ReportStatus
ReportAction = db_models.ReportAction


@pytest.fixture
def file_report(db_session: Session, other_user: db_models.User, test_user: db_models.User):
    """A stored library file and a pending report against it."""
    path = FileService.storage_path("library/reported.pdf")
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"%PDF-1.4 test")
    library_file = db_models.LibraryFile(
        uploader_id=test_user.id,
        file_name="reported.pdf",
        file_url="/api/files/1/download",
        storage_key="library/reported.pdf",
        file_type="pdf",
        file_size=13,
        approved=True,
    )
    db_session.add(library_file)
    db_session.commit()
    report = ReportService.create_report(
        db_session, other_user.id, ReportTargetType.FILE, library_file.id, "Material copiado"
    )
    return report, library_file, path


class TestReportTarget:
    """Tests for report_target."""

    @pytest.mark.parametrize(
        "target_type, expected",
        [
            (ReportTargetType.POST, PostTarget(5)),
            (ReportTargetType.COMMENT, CommentTarget(5)),
            (ReportTargetType.FILE, FileTarget(5)),
            (ReportTargetType.USER, UserAccountTarget(5)),
        ],
    )
    def test_typed_view(self, target_type, expected):
        report = db_models.Report(target_type=target_type, target_id=5)
        assert report_target(report) == expected


class TestCreateAndList:
    """Tests for create_report, parse_status_filter and list_reports."""

    def test_new_report_is_pending(
        self, db_session: Session, other_user: db_models.User, test_post: db_models.Post
    ):
        report = ReportService.create_report(
            db_session, other_user.id, ReportTargetType.POST, test_post.id, "  Spam  "
        )
        assert report.status == ReportStatus.PENDING
        assert report.reason == "Spam"
        assert report.reviewed_by is None

    def test_default_filter_is_pending(
        self, db_session: Session, other_user: db_models.User, test_post: db_models.Post
    ):
        open_report = ReportService.create_report(
            db_session, other_user.id, ReportTargetType.POST, test_post.id, "Spam"
        )
        closed = ReportService.create_report(
            db_session, other_user.id, ReportTargetType.USER, other_user.id, "Prueba"
        )
        closed.status = ReportStatus.DISMISSED
        db_session.commit()

        assert [r.id for r in ReportService.list_reports(db_session)] == [open_report.id]
        assert len(ReportService.list_reports(db_session, "all")) == 2
        assert [r.id for r in ReportService.list_reports(db_session, "dismissed")] == [
            closed.id
        ]

    def test_invalid_filter(self, db_session: Session):
        with pytest.raises(ValidationException):
            ReportService.list_reports(db_session, "archived")


class TestResolveReport:
    """Tests for ReportService.resolve_report."""

    def test_dismiss_leaves_target(
        self,
        db_session: Session,
        admin_user: db_models.User,
        other_user: db_models.User,
        test_post: db_models.Post,
    ):
        report = ReportService.create_report(
            db_session, other_user.id, ReportTargetType.POST, test_post.id, "Spam"
        )

        resolved = ReportService.resolve_report(
            db_session, report.id, admin_user.id, ReportAction.DISMISS, "Sin problema"
        )

        assert resolved.status == ReportStatus.DISMISSED
        assert resolved.reviewed_by == admin_user.id
        assert resolved.review_notes == "Sin problema"
        assert resolved.resolved_at.tzinfo is None
        assert abs(to_db_datetime(utc_now()) - resolved.resolved_at) < timedelta(minutes=1)
        assert db_session.get(db_models.Post, test_post.id) is not None

    def test_delete_post_cascades(
        self,
        db_session: Session,
        admin_user: db_models.User,
        other_user: db_models.User,
        test_post: db_models.Post,
    ):
        """Deleting a reported post also removes its comments and reactions."""
        db_session.add(
            db_models.Comment(post_id=test_post.id, author_id=other_user.id, content="x")
        )
        db_session.add(db_models.Reaction(post_id=test_post.id, user_id=other_user.id))
        db_session.commit()
        report = ReportService.create_report(
            db_session, other_user.id, ReportTargetType.POST, test_post.id, "Spam"
        )

        resolved = ReportService.resolve_report(
            db_session, report.id, admin_user.id, ReportAction.DELETE
        )

        assert resolved.status == ReportStatus.RESOLVED
        assert resolved.review_notes == ""
        assert db_session.query(db_models.Post).count() == 0
        assert db_session.query(db_models.Comment).count() == 0
        assert db_session.query(db_models.Reaction).count() == 0

    def test_delete_comment(
        self,
        db_session: Session,
        admin_user: db_models.User,
        other_user: db_models.User,
        test_post: db_models.Post,
    ):
        comment = db_models.Comment(post_id=test_post.id, author_id=other_user.id, content="x")
        db_session.add(comment)
        db_session.commit()
        report = ReportService.create_report(
            db_session, admin_user.id, ReportTargetType.COMMENT, comment.id, "Ofensivo"
        )

        ReportService.resolve_report(db_session, report.id, admin_user.id, ReportAction.DELETE)

        assert db_session.query(db_models.Comment).count() == 0
        assert db_session.get(db_models.Post, test_post.id) is not None

    def test_delete_file_removes_row_and_bytes(
        self, db_session: Session, admin_user: db_models.User, file_report
    ):
        report, library_file, path = file_report

        ReportService.resolve_report(db_session, report.id, admin_user.id, ReportAction.DELETE)

        assert db_session.query(db_models.LibraryFile).count() == 0
        assert not path.exists()

    def test_delete_on_user_target_only_closes_report(
        self,
        db_session: Session,
        admin_user: db_models.User,
        other_user: db_models.User,
        test_user: db_models.User,
    ):
        """User accounts are never deleted by the resolver."""
        report = ReportService.create_report(
            db_session, other_user.id, ReportTargetType.USER, test_user.id, "Acoso"
        )

        resolved = ReportService.resolve_report(
            db_session, report.id, admin_user.id, ReportAction.DELETE
        )

        assert resolved.status == ReportStatus.RESOLVED
        assert db_session.get(db_models.User, test_user.id) is not None

    def test_delete_when_target_already_gone(
        self, db_session: Session, admin_user: db_models.User, other_user: db_models.User
    ):
        report = ReportService.create_report(
            db_session, other_user.id, ReportTargetType.POST, 4242, "Ya no existe"
        )

        resolved = ReportService.resolve_report(
            db_session, report.id, admin_user.id, ReportAction.DELETE
        )

        assert resolved.status == ReportStatus.RESOLVED

    def test_second_resolution_conflicts(
        self,
        db_session: Session,
        admin_user: db_models.User,
        other_user: db_models.User,
        test_post: db_models.Post,
    ):
        """A closed report cannot be re-resolved; the first decision stands."""
        report = ReportService.create_report(
            db_session, other_user.id, ReportTargetType.POST, test_post.id, "Spam"
        )
        ReportService.resolve_report(db_session, report.id, admin_user.id, ReportAction.DISMISS)

        with pytest.raises(ReportAlreadyResolvedException):
            ReportService.resolve_report(
                db_session, report.id, admin_user.id, ReportAction.DELETE
            )
        assert db_session.get(db_models.Post, test_post.id) is not None

    def test_missing_report(self, db_session: Session, admin_user: db_models.User):
        with pytest.raises(ReportNotFoundException):
            ReportService.resolve_report(db_session, 999, admin_user.id, ReportAction.DISMISS)
