"""
Periodic sweep of expired time windows. Runs once at start-up and then every
sweep_interval_seconds on the scheduler owned by the app lifespan.
"""
import logging

from apscheduler.schedulers.background import BackgroundScheduler
from sqlalchemy.orm import sessionmaker

from courtbook.core.constants import WINDOW_CLEANUP_JOB_ID
from courtbook.db.session import SessionLocal
from courtbook.services.cleanup_service import SweepResult, sweep_expired_windows

logger = logging.getLogger(__name__)


def run_window_cleanup_job(session_factory: sessionmaker = SessionLocal) -> SweepResult | None:
    db = session_factory()
    try:
        return sweep_expired_windows(db)
    except Exception as e:
        logger.exception("Window cleanup job failed: %s", e)
        db.rollback()
        return None
    finally:
        db.close()


def schedule_window_cleanup(
    scheduler: BackgroundScheduler,
    session_factory: sessionmaker,
    interval_seconds: int,
) -> None:
    scheduler.add_job(
        run_window_cleanup_job,
        "interval",
        seconds=interval_seconds,
        id=WINDOW_CLEANUP_JOB_ID,
        kwargs={"session_factory": session_factory},
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )
