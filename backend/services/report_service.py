"""
Moderation: user reports and their resolution by admins.

A report points at a post, comment, library file or user account through
(target_type, target_id). Resolving with `delete` removes the target when it
is content; user accounts are never deleted, the report is only closed.
"""

from dataclasses import dataclass
from typing import List, Optional, Union

from loguru import logger
from sqlalchemy.orm import Session

import repositories.db_models as db_models
from helpers.time_utils import to_db_datetime, utc_now
from models.exceptions import (
    ReportAlreadyResolvedException,
    ReportNotFoundException,
    ValidationException,
)
from repositories.file_repository import FileRepository
from repositories.post_repository import CommentRepository, PostRepository
from repositories.report_repository import ReportRepository
from services.admin_alert_service import AdminAlertService
from services.file_service import FileService


@dataclass(frozen=True)
class PostTarget:
    post_id: int


@dataclass(frozen=True)
class CommentTarget:
    comment_id: int


@dataclass(frozen=True)
class FileTarget:
    file_id: int


@dataclass(frozen=True)
class UserAccountTarget:
    user_id: int


ReportTarget = Union[PostTarget, CommentTarget, FileTarget, UserAccountTarget]

_OPEN_STATUSES = (db_models.ReportStatus.PENDING, db_models.ReportStatus.REVIEWED)


def report_target(report: db_models.Report) -> ReportTarget:
    """Typed view of a report's polymorphic (target_type, target_id)."""
    match report.target_type:
        case db_models.ReportTargetType.POST:
            return PostTarget(report.target_id)
        case db_models.ReportTargetType.COMMENT:
            return CommentTarget(report.target_id)
        case db_models.ReportTargetType.FILE:
            return FileTarget(report.target_id)
        case db_models.ReportTargetType.USER:
            return UserAccountTarget(report.target_id)
    raise ValueError(f"Unknown report target type: {report.target_type!r}")


class ReportService:
    """Service for report business logic."""

    @staticmethod
    def create_report(
        db: Session,
        reporter_id: int,
        target_type: db_models.ReportTargetType,
        target_id: int,
        reason: str,
    ) -> db_models.Report:
        """
        File a report. Admins get an ntfy alert.

        The target is not checked for existence; the resolver tolerates
        targets that have disappeared in the meantime.

        Args:
            db: Database session
            reporter_id: Caller's user ID
            target_type: Kind of reported entity
            target_id: ID of the reported entity
            reason: Free-text reason

        Returns:
            The pending report
        """
        report = ReportRepository(db).create(
            db_models.Report(
                reporter_id=reporter_id,
                target_type=target_type,
                target_id=target_id,
                reason=reason.strip(),
                status=db_models.ReportStatus.PENDING,
            )
        )
        logger.info(
            f"Report {report.id} filed by user {reporter_id} "
            f"on {target_type.value} {target_id}"
        )
        AdminAlertService.notify_new_report(
            report.id, target_type.value, target_id, report.reason
        )
        return report

    @staticmethod
    def parse_status_filter(status: Optional[str]) -> Optional[db_models.ReportStatus]:
        """
        Turn the ?status= query value into a filter.

        Missing means pending; "all" means no filter.

        Raises:
            ValidationException: For an unknown status value
        """
        if status is None or status == "":
            return db_models.ReportStatus.PENDING
        if status == "all":
            return None
        try:
            return db_models.ReportStatus(status)
        except ValueError:
            raise ValidationException(f"Invalid report status filter: {status}")

    @staticmethod
    def list_reports(
        db: Session,
        status: Optional[str] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[db_models.Report]:
        """Reports newest first, filtered by status (default pending)."""
        return ReportRepository(db).list_by_status(
            ReportService.parse_status_filter(status), skip, limit
        )

    @staticmethod
    def _delete_target(
        db: Session, target: ReportTarget
    ) -> tuple[bool, Optional[str]]:
        """
        Stage deletion of the content a report points at. Does not commit.

        Returns:
            (deleted, storage key of a library file to unlink after commit)
        """
        match target:
            case PostTarget(post_id=post_id):
                post_repo = PostRepository(db)
                post = post_repo.get_by_id(post_id)
                if post is None:
                    return False, None
                post_repo.remove(post)
                return True, None
            case CommentTarget(comment_id=comment_id):
                comment_repo = CommentRepository(db)
                comment = comment_repo.get_by_id(comment_id)
                if comment is None:
                    return False, None
                comment_repo.remove(comment)
                return True, None
            case FileTarget(file_id=file_id):
                file_repo = FileRepository(db)
                library_file = file_repo.get_by_id(file_id)
                if library_file is None:
                    return False, None
                file_repo.remove(library_file)
                return True, library_file.storage_key
            case UserAccountTarget():
                # Accounts are blocked from the admin console, never deleted
                return False, None

    @staticmethod
    def resolve_report(
        db: Session,
        report_id: int,
        reviewer_id: int,
        action: db_models.ReportAction,
        notes: Optional[str] = None,
    ) -> db_models.Report:
        """
        Close a report with an admin decision.

        `dismiss` marks it dismissed. `delete` removes the target content
        (when it still exists) and marks the report resolved. Both record
        the reviewer, the notes and the resolution time in one commit.

        Args:
            db: Database session
            report_id: Report ID
            reviewer_id: Admin's user ID
            action: dismiss or delete
            notes: Optional review notes

        Returns:
            The updated report

        Raises:
            ReportNotFoundException: If the report does not exist
            ReportAlreadyResolvedException: If it is already resolved or dismissed
        """
        report_repo = ReportRepository(db)
        report = report_repo.get_by_id(report_id)
        if report is None:
            raise ReportNotFoundException()
        if report.status not in _OPEN_STATUSES:
            raise ReportAlreadyResolvedException(report_id)

        target_deleted, orphaned_key = False, None
        if action == db_models.ReportAction.DELETE:
            target_deleted, orphaned_key = ReportService._delete_target(
                db, report_target(report)
            )
            report.status = db_models.ReportStatus.RESOLVED
        else:
            report.status = db_models.ReportStatus.DISMISSED

        report.reviewed_by = reviewer_id
        report.review_notes = notes or ""
        report.resolved_at = to_db_datetime(utc_now())
        report = report_repo.update(report)
        if orphaned_key:
            FileService.remove_stored_file(orphaned_key)

        logger.info(
            f"Report {report_id} {report.status.value} by admin {reviewer_id}"
            + (" (target deleted)" if target_deleted else "")
        )
        return report
