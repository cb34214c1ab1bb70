"""
Availability projection: per-court occupancy, status and mode eligibility derived from active reservations.

Read-only and lock-free. It may trail a concurrent admission by one commit; it is for display only,
admission always re-derives occupancy inside its own unit of work.
"""
from dataclasses import dataclass, field
from datetime import datetime

from sqlalchemy import func
from sqlalchemy.orm import Session

from courtbook.core.constants import GAME_MODES, STATUS_AVAILABLE, STATUS_FULL, STATUS_PARTIAL
from courtbook.core.timeutil import as_utc, utcnow
from courtbook.models.reservation import Reservation
from courtbook.models.time_window import TimeWindow
from courtbook.services.reservation_ledger import get_active_reservations_for_window


@dataclass
class CourtAvailability:
    court_index: int
    game_mode: str
    capacity: int
    occupied_units: int
    bookings: list[dict] = field(default_factory=list)

    @property
    def available(self) -> int:
        return max(self.capacity - self.occupied_units, 0)

    @property
    def status(self) -> str:
        if self.available == 0:
            return STATUS_FULL
        if self.occupied_units == 0:
            return STATUS_AVAILABLE
        return STATUS_PARTIAL

    @property
    def eligibility(self) -> dict[str, bool]:
        return {mode: mode == self.game_mode and self.available >= 1 for mode in GAME_MODES}

    def to_dict(self) -> dict:
        return {
            "court_index": self.court_index,
            "game_mode": self.game_mode,
            "capacity": self.capacity,
            "occupied_units": self.occupied_units,
            "available": self.available,
            "status": self.status,
            "eligibility": self.eligibility,
            "bookings": self.bookings,
        }


@dataclass
class WindowAvailability:
    window_id: int
    start_time: datetime
    end_time: datetime
    expired: bool
    courts: list[CourtAvailability]

    @property
    def status(self) -> str:
        return summarize_status(self.courts)

    def to_dict(self) -> dict:
        return {
            "window_id": self.window_id,
            "start_time": as_utc(self.start_time).isoformat(),
            "end_time": as_utc(self.end_time).isoformat(),
            "expired": self.expired,
            "status": self.status,
            "courts": [c.to_dict() for c in self.courts],
        }


def summarize_status(courts: list[CourtAvailability]) -> str:
    """available: nothing booked anywhere; full: every court has zero left; partial otherwise."""
    if all(c.occupied_units == 0 for c in courts):
        return STATUS_AVAILABLE
    if all(c.available == 0 for c in courts):
        return STATUS_FULL
    return STATUS_PARTIAL


def _occupancy_by_court(db: Session, window_id: int) -> dict[int, int]:
    rows = (
        db.query(Reservation.court_index, func.sum(Reservation.occupancy_units))
        .filter(Reservation.window_id == window_id, Reservation.cancelled_at.is_(None))
        .group_by(Reservation.court_index)
        .all()
    )
    return {court_index: int(total or 0) for court_index, total in rows}


def _court_views(window: TimeWindow, occupancy: dict[int, int]) -> list[CourtAvailability]:
    return [
        CourtAvailability(
            court_index=c.court_index,
            game_mode=c.game_mode,
            capacity=c.capacity,
            occupied_units=occupancy.get(c.court_index, 0),
        )
        for c in window.courts
    ]


def project_window(db: Session, window_id: int, now: datetime | None = None) -> WindowAvailability | None:
    """Full projection for one window, including each court's active bookings (mode and units only)."""
    window = db.get(TimeWindow, window_id)
    if window is None:
        return None
    now = as_utc(now) if now else utcnow()
    active = get_active_reservations_for_window(db, window_id)
    occupancy: dict[int, int] = {}
    bookings: dict[int, list[dict]] = {}
    for r in active:
        occupancy[r.court_index] = occupancy.get(r.court_index, 0) + r.occupancy_units
        bookings.setdefault(r.court_index, []).append(
            {"game_mode": r.game_mode, "occupancy_units": r.occupancy_units}
        )
    courts = _court_views(window, occupancy)
    for c in courts:
        c.bookings = bookings.get(c.court_index, [])
    return WindowAvailability(
        window_id=window.id,
        start_time=window.start_time,
        end_time=window.end_time,
        expired=as_utc(window.end_time) <= now,
        courts=courts,
    )


def window_summary(db: Session, window: TimeWindow) -> dict:
    """Compact projection for listings: window status plus per-court occupancy, one aggregate query."""
    courts = _court_views(window, _occupancy_by_court(db, window.id))
    return {
        "id": window.id,
        "start_time": as_utc(window.start_time).isoformat(),
        "end_time": as_utc(window.end_time).isoformat(),
        "status": summarize_status(courts),
        "courts": [
            {
                "court_index": c.court_index,
                "game_mode": c.game_mode,
                "capacity": c.capacity,
                "occupied_units": c.occupied_units,
                "status": c.status,
            }
            for c in courts
        ],
    }
