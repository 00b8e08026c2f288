"""User-facing report submission."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

import authentication.auth as auth
import models.schemas as schemas
import repositories.db_models as db_models
from repositories.database import get_db
from services.report_service import ReportService

router = APIRouter(prefix="/reports", tags=["reports"])


@router.post("", response_model=schemas.Report, status_code=status.HTTP_201_CREATED)
def create_report(
    report: schemas.ReportCreate,
    current_user: db_models.User = Depends(auth.get_current_active_user),
    db: Session = Depends(get_db),
) -> db_models.Report:
    """Report a post, comment, file or user to the admins."""
    user_id: int = current_user.id  # type: ignore[assignment]
    return ReportService.create_report(
        db, user_id, report.target_type, report.target_id, report.reason
    )
