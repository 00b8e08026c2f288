"""
Badge, user badge and recognition repositories.
"""

from typing import List, Optional

from sqlalchemy.orm import Session, joinedload

import repositories.db_models as db_models
from .base import BaseRepository


class BadgeRepository(BaseRepository[db_models.Badge]):
    """Repository for Badge and UserBadge rows."""

    def __init__(self, db: Session):
        super().__init__(db_models.Badge, db)

    def list_badges(self) -> List[db_models.Badge]:
        return self.db.query(db_models.Badge).order_by(db_models.Badge.name).all()

    def get_by_name(self, name: str) -> Optional[db_models.Badge]:
        return self.db.query(db_models.Badge).filter(db_models.Badge.name == name).first()

    def get_user_badge(
        self, user_id: int, badge_id: int
    ) -> Optional[db_models.UserBadge]:
        return (
            self.db.query(db_models.UserBadge)
            .filter(
                db_models.UserBadge.user_id == user_id,
                db_models.UserBadge.badge_id == badge_id,
            )
            .first()
        )

    def list_for_user(self, user_id: int) -> List[db_models.UserBadge]:
        """Badges earned by a user, most recent first."""
        return (
            self.db.query(db_models.UserBadge)
            .options(joinedload(db_models.UserBadge.badge))
            .filter(db_models.UserBadge.user_id == user_id)
            .order_by(db_models.UserBadge.earned_at.desc(), db_models.UserBadge.id.desc())
            .all()
        )


class RecognitionRepository(BaseRepository[db_models.Recognition]):
    """Repository for Recognition rows."""

    def __init__(self, db: Session):
        super().__init__(db_models.Recognition, db)

    def list_latest(self, limit: int = 10) -> List[db_models.Recognition]:
        return (
            self.db.query(db_models.Recognition)
            .options(
                joinedload(db_models.Recognition.author),
                joinedload(db_models.Recognition.recipient),
            )
            .order_by(
                db_models.Recognition.created_at.desc(),
                db_models.Recognition.id.desc(),
            )
            .limit(limit)
            .all()
        )
