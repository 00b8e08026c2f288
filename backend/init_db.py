"""Initialize the database with the default badges and the seed admin account."""

from sqlalchemy.orm import Session

from authentication.auth import get_password_hash
from models.config import settings
from repositories.database import Base, SessionLocal, engine
from repositories.db_models import User, UserRole
from repositories.user_repository import UserRepository
from services.badge_service import BadgeService


def seed_admin(db: Session) -> bool:
    """Create the admin from ADMIN_EMAIL/ADMIN_PASSWORD. Returns False if it exists."""
    user_repo = UserRepository(db)
    if user_repo.email_exists(settings.ADMIN_EMAIL):
        return False

    user_repo.create(
        User(
            email=settings.ADMIN_EMAIL.strip().lower(),
            hashed_password=get_password_hash(settings.ADMIN_PASSWORD),
            first_name="Admin",
            last_name="Loyola",
            role=UserRole.ADMIN,
            verified=True,
        )
    )
    return True


def init_db(db: Session | None = None) -> None:
    """Create tables and seed default data. Safe to run repeatedly."""
    Base.metadata.create_all(bind=engine if db is None else db.get_bind())

    should_close = db is None
    if db is None:
        db = SessionLocal()

    try:
        added = BadgeService.ensure_default_badges(db)
        if added:
            print(f"[OK] {added} default badges created")

        if seed_admin(db):
            print("[OK] Admin user created")
            print(f"  Email: {settings.ADMIN_EMAIL}")
            print("  Password: (from ADMIN_PASSWORD in .env)")
            print("  IMPORTANT: Change this password in production!")

        print("\n[OK] Database initialization complete!")
    except Exception:
        db.rollback()
        raise
    finally:
        if should_close:
            db.close()


if __name__ == "__main__":
    init_db()
