"""
Retire time windows whose end has passed: delete their reservations, courts, then the windows.
Idempotent; nothing expired means nothing deleted. Admission already rejects expired windows,
so a window may be removed the moment it is observed as expired.
"""
import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.orm import Session

from courtbook.core.timeutil import as_utc, utcnow
from courtbook.models.court import Court
from courtbook.models.reservation import Reservation
from courtbook.models.time_window import TimeWindow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SweepResult:
    windows: int = 0
    reservations: int = 0


def sweep_expired_windows(db: Session, now: datetime | None = None) -> SweepResult:
    now = as_utc(now) if now else utcnow()
    window_ids = [wid for (wid,) in db.query(TimeWindow.id).filter(TimeWindow.end_time < now).all()]
    if not window_ids:
        logger.debug("sweep_expired_windows: no past windows to clean up")
        return SweepResult()

    # Bulk deletes bypass ORM cascades, so children go first explicitly
    reservations = (
        db.query(Reservation).filter(Reservation.window_id.in_(window_ids)).delete(synchronize_session=False)
    )
    db.query(Court).filter(Court.window_id.in_(window_ids)).delete(synchronize_session=False)
    windows = db.query(TimeWindow).filter(TimeWindow.id.in_(window_ids)).delete(synchronize_session=False)
    db.commit()
    db.expire_all()
    logger.info("Cleaned up %s past windows and %s reservations", windows, reservations)
    return SweepResult(windows=windows, reservations=reservations)
