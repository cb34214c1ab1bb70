"""
Reservation ledger reads: a requester's own bookings and the admin overview.
Writes go through the allocator only.
"""
from sqlalchemy.orm import Session

from courtbook.core.constants import RESERVATION_PAGE_SIZE
from courtbook.core.timeutil import as_utc
from courtbook.models.reservation import Reservation
from courtbook.models.time_window import TimeWindow


def reservation_to_dict(row: Reservation, window: TimeWindow | None = None) -> dict:
    out = {
        "id": row.id,
        "requester_id": row.requester_id,
        "window_id": row.window_id,
        "court_index": row.court_index,
        "game_mode": row.game_mode,
        "occupancy_units": row.occupancy_units,
        "created_at": as_utc(row.created_at).isoformat() if row.created_at else None,
        "cancelled_at": as_utc(row.cancelled_at).isoformat() if row.cancelled_at else None,
    }
    if window is not None:
        out["start_time"] = as_utc(window.start_time).isoformat()
        out["end_time"] = as_utc(window.end_time).isoformat()
    return out


def _active_with_windows(db: Session):
    return (
        db.query(Reservation, TimeWindow)
        .join(TimeWindow, TimeWindow.id == Reservation.window_id)
        .filter(Reservation.cancelled_at.is_(None))
    )


def get_requester_reservations(db: Session, requester_id: str) -> list[dict]:
    """Active bookings of one requester, soonest window first."""
    rows = (
        _active_with_windows(db)
        .filter(Reservation.requester_id == requester_id)
        .order_by(TimeWindow.start_time.asc(), Reservation.court_index.asc())
        .all()
    )
    return [reservation_to_dict(r, w) for r, w in rows]


def count_active_reservations(db: Session) -> int:
    return db.query(Reservation).filter(Reservation.cancelled_at.is_(None)).count()


def get_all_active_reservations(db: Session, limit: int = RESERVATION_PAGE_SIZE, offset: int = 0) -> list[dict]:
    """One page of all active bookings, newest first (admin view). Page with offset until fewer than limit come back."""
    rows = (
        _active_with_windows(db)
        .order_by(Reservation.created_at.desc(), Reservation.id.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )
    return [reservation_to_dict(r, w) for r, w in rows]


def get_active_reservations_for_window(db: Session, window_id: int) -> list[Reservation]:
    return (
        db.query(Reservation)
        .filter(Reservation.window_id == window_id, Reservation.cancelled_at.is_(None))
        .order_by(Reservation.court_index.asc(), Reservation.id.asc())
        .all()
    )
