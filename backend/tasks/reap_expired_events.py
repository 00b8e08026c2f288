#!/usr/bin/env python3
"""
Delete events whose end time has passed, with their bookings.

The API sweeps on every event listing and the in-process scheduler sweeps
every EVENT_REAPER_INTERVAL_MINUTES. This script is for deployments that
run the API with the scheduler off:

- Via cron: */15 * * * * cd /path/to/backend && python -m tasks.reap_expired_events
- Manually: python -m tasks.reap_expired_events
"""

import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING

# Add backend to path for imports
backend_path = Path(__file__).parent.parent
sys.path.insert(0, str(backend_path))

from loguru import logger  # noqa: E402

from repositories.database import SessionLocal  # noqa: E402
from services.event_service import EventService  # noqa: E402

if TYPE_CHECKING:
    from sqlalchemy.orm import Session


def reap_expired_events(
    db: "Session | None" = None, now: datetime | None = None
) -> dict[str, int]:
    """
    Run one sweep.

    Args:
        db: Optional database session; a new one is opened when omitted.
        now: Reference time, defaults to the current UTC time.

    Returns:
        {"deleted_count": number of events removed}
    """
    should_close = db is None
    if db is None:
        db = SessionLocal()

    try:
        started = datetime.now(timezone.utc)
        deleted_count = EventService.reap_expired_events(db, now)
        elapsed = (datetime.now(timezone.utc) - started).total_seconds()
        logger.info(
            f"Expired event sweep finished in {elapsed:.2f}s, deleted {deleted_count}"
        )
        return {"deleted_count": deleted_count}
    except Exception as e:
        logger.error(f"Expired event sweep failed: {e!r}")
        db.rollback()
        raise
    finally:
        if should_close:
            db.close()


if __name__ == "__main__":
    logger.remove()
    logger.add(
        sys.stderr,
        format="{time:YYYY-MM-DD HH:mm:ss} | {level} | {message}",
        level="INFO",
    )

    try:
        result = reap_expired_events()
        print(f"Sweep completed: {result}")
        sys.exit(0)
    except Exception as e:
        print(f"Sweep failed: {e}", file=sys.stderr)
        sys.exit(1)
