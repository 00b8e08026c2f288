from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

import models.schemas as schemas
from repositories.database import get_db
from services.stats_service import StatsService

router = APIRouter(prefix="/stats", tags=["stats"])


@router.get("", response_model=schemas.PublicStats)
async def get_public_stats(db: Session = Depends(get_db)) -> schemas.PublicStats:
    """Community counters for the landing page. No authentication."""
    return StatsService.get_public_stats(db)
