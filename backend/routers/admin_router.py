from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

import authentication.auth as auth
import models.schemas as schemas
import repositories.db_models as db_models
from helpers.pagination import PaginationLimitLarge, PaginationSkip
from repositories.database import get_db
from services import FileService, ReportService, StatsService, UserService

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/stats", response_model=schemas.AdminStats)
def get_admin_stats(
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_admin_user),
) -> schemas.AdminStats:
    """Counters for the admin dashboard."""
    return StatsService.get_admin_stats(db)


# ============================================================================
# Users
# ============================================================================


@router.get("/users", response_model=List[schemas.User])
def list_users(
    skip: PaginationSkip = 0,
    limit: PaginationLimitLarge = 100,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_admin_user),
) -> List[db_models.User]:
    """All accounts, newest first, including blocked and unverified ones."""
    return UserService.list_users_for_admin(db, skip, limit)


@router.post("/users/{user_id}/verify", response_model=schemas.User)
def verify_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_admin_user),
) -> db_models.User:
    return UserService.verify_user(db, user_id)


@router.post("/users/{user_id}/block", response_model=schemas.User)
def toggle_block(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_admin_user),
) -> db_models.User:
    """
    Block an account, or unblock it if already blocked.

    Domain exceptions are caught by centralized exception handlers.
    """
    admin_id: int = current_user.id  # type: ignore[assignment]
    return UserService.toggle_block(db, user_id, admin_id)


@router.patch("/users/{user_id}/role", response_model=schemas.User)
def change_role(
    user_id: int,
    role_update: schemas.UserRoleUpdate,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_admin_user),
) -> db_models.User:
    admin_id: int = current_user.id  # type: ignore[assignment]
    return UserService.change_role(db, user_id, role_update.role, admin_id)


# ============================================================================
# Reports
# ============================================================================


@router.get("/reports", response_model=List[schemas.Report])
def list_reports(
    status_filter: Optional[str] = Query(
        default=None,
        alias="status",
        description="pending (default), reviewed, resolved, dismissed or all",
    ),
    skip: PaginationSkip = 0,
    limit: PaginationLimitLarge = 100,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_admin_user),
) -> List[db_models.Report]:
    """
    Moderation queue, newest first.

    Domain exceptions are caught by centralized exception handlers.
    """
    return ReportService.list_reports(db, status_filter, skip, limit)


@router.post("/reports/{report_id}/resolve", response_model=schemas.Report)
def resolve_report(
    report_id: int,
    resolution: schemas.ReportResolve,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_admin_user),
) -> db_models.Report:
    """
    Dismiss a report, or delete the reported content and resolve it.

    Domain exceptions are caught by centralized exception handlers.
    """
    admin_id: int = current_user.id  # type: ignore[assignment]
    return ReportService.resolve_report(
        db, report_id, admin_id, resolution.action, resolution.notes
    )


# ============================================================================
# Library moderation
# ============================================================================


@router.get("/files/pending", response_model=List[schemas.LibraryFile])
def list_pending_files(
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_moderator_user),
) -> List[db_models.LibraryFile]:
    return FileService.list_pending_files(db)


@router.post("/files/{file_id}/approve", response_model=schemas.LibraryFile)
def approve_file(
    file_id: int,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_moderator_user),
) -> db_models.LibraryFile:
    return FileService.approve_file(db, file_id)


@router.delete("/files/{file_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_file(
    file_id: int,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_moderator_user),
) -> Response:
    FileService.delete_file(db, file_id, current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
