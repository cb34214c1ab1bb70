"""
Capacity allocator: admission and cancellation of court reservations.

Each admission is one unit of work: read the court's version, run the six checks against the ledger,
then write the reservation and bump the version with a compare-and-swap
(UPDATE ... WHERE version = seen). If another admission or cancellation on the same court committed
in between, the swap touches no row and the whole unit of work is rolled back and re-run, so occupancy
is always re-derived from committed state. Concurrent bookings by one requester on different courts
are caught by the partial unique index on (requester_id, window_id) for active rows.

Business rejections come back as typed results; only ContentionError (retries exhausted) and
infrastructure errors are raised.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from courtbook.config import settings
from courtbook.core.constants import OCCUPANCY_UNIT, GameMode
from courtbook.core.errors import ContentionError, Rejection, RejectionReason
from courtbook.core.timeutil import as_utc, utcnow
from courtbook.models.court import Court
from courtbook.models.reservation import Reservation
from courtbook.models.time_window import TimeWindow

logger = logging.getLogger(__name__)


class _StaleCourt(Exception):
    """The court changed since this unit of work read it."""


@dataclass
class AdmitResult:
    reservation: Reservation | None = None
    confirmation: dict[str, Any] | None = None
    rejection: Rejection | None = None

    @property
    def ok(self) -> bool:
        return self.rejection is None


@dataclass
class CancelResult:
    reservation: Reservation | None = None
    rejection: Rejection | None = None

    @property
    def ok(self) -> bool:
        return self.rejection is None


def _reject(reason: RejectionReason, **context: Any) -> AdmitResult:
    return AdmitResult(rejection=Rejection(reason, context))


def active_occupancy(db: Session, window_id: int, court_index: int) -> int:
    total = (
        db.query(func.coalesce(func.sum(Reservation.occupancy_units), 0))
        .filter(
            Reservation.window_id == window_id,
            Reservation.court_index == court_index,
            Reservation.cancelled_at.is_(None),
        )
        .scalar()
    )
    return int(total or 0)


def _bump_court_version(db: Session, court_id: int, seen_version: int | None = None) -> int:
    """Increment the court version; with seen_version, only if nobody else did first. Returns rows touched."""
    q = db.query(Court).filter(Court.id == court_id)
    if seen_version is not None:
        q = q.filter(Court.version == seen_version)
    return q.update({Court.version: Court.version + 1}, synchronize_session=False)


def _confirmation(window: TimeWindow, court: Court, reservation: Reservation) -> dict[str, Any]:
    return {
        "reservation_id": reservation.id,
        "window_id": window.id,
        "start_time": as_utc(window.start_time).isoformat(),
        "end_time": as_utc(window.end_time).isoformat(),
        "court_index": court.court_index,
        "game_mode": court.game_mode,
        "occupancy_units": reservation.occupancy_units,
    }


def _admit_once(
    db: Session,
    requester_id: str,
    window_id: int,
    court_index: int,
    game_mode: GameMode,
    now: datetime,
) -> AdmitResult:
    window = db.get(TimeWindow, window_id)
    if window is None:
        return _reject(RejectionReason.WINDOW_NOT_FOUND)
    if as_utc(window.end_time) <= now:
        return _reject(RejectionReason.WINDOW_EXPIRED)
    court = window.court(court_index)
    if court is None:
        return _reject(RejectionReason.INVALID_COURT)
    if court.game_mode != game_mode.value:
        return _reject(RejectionReason.MODE_MISMATCH, court_mode=court.game_mode)
    # Version is read before the ledger so a commit in between can only make the swap miss
    seen_version = court.version

    existing = (
        db.query(Reservation.id)
        .filter(
            Reservation.requester_id == requester_id,
            Reservation.window_id == window_id,
            Reservation.cancelled_at.is_(None),
        )
        .first()
    )
    if existing is not None:
        return _reject(RejectionReason.DUPLICATE_RESERVATION)

    occupied = active_occupancy(db, window_id, court_index)
    if occupied + OCCUPANCY_UNIT > court.capacity:
        return _reject(RejectionReason.CAPACITY_EXCEEDED, occupied=occupied, capacity=court.capacity)

    if _bump_court_version(db, court.id, seen_version) != 1:
        raise _StaleCourt()
    reservation = Reservation(
        requester_id=requester_id,
        window_id=window_id,
        court_index=court_index,
        game_mode=game_mode.value,
        occupancy_units=OCCUPANCY_UNIT,
    )
    db.add(reservation)
    db.flush()
    return AdmitResult(reservation=reservation, confirmation=_confirmation(window, court, reservation))


def try_admit(
    db: Session,
    requester_id: str,
    window_id: int,
    court_index: int,
    game_mode: GameMode | str,
    now: datetime | None = None,
    max_retries: int | None = None,
) -> AdmitResult:
    """
    Admit one player onto (window, court) or return the first failing rule:
    window_not_found, window_expired, invalid_court, mode_mismatch, duplicate_reservation, capacity_exceeded.
    Raises ContentionError when the court kept changing under us for max_retries attempts.
    """
    game_mode = GameMode(game_mode)
    now = as_utc(now) if now else utcnow()
    attempts = max_retries or settings.admit_max_retries
    for attempt in range(1, attempts + 1):
        try:
            result = _admit_once(db, requester_id, window_id, court_index, game_mode, now)
        except _StaleCourt:
            db.rollback()
            logger.debug("try_admit: court %s/%s changed, retry %s/%s", window_id, court_index, attempt, attempts)
            continue
        except IntegrityError:
            # Concurrent active booking by the same requester (or window deleted underneath); re-check
            db.rollback()
            logger.debug("try_admit: integrity conflict for %s on window %s, retry %s/%s", requester_id, window_id, attempt, attempts)
            continue
        if not result.ok:
            db.rollback()
            return result
        db.commit()
        logger.info(
            "Admitted reservation %s: requester=%s window=%s court=%s mode=%s",
            result.reservation.id, requester_id, window_id, court_index, game_mode.value,
        )
        return result
    logger.warning("try_admit: gave up on window %s court %s after %s attempts", window_id, court_index, attempts)
    raise ContentionError(attempts)


def _cancel(db: Session, reservation_id: int, requester_id: str | None, now: datetime | None) -> CancelResult:
    now = as_utc(now) if now else utcnow()
    row = db.get(Reservation, reservation_id)
    # Someone else's booking looks exactly like a missing one
    if row is None or (requester_id is not None and row.requester_id != requester_id):
        db.rollback()
        return CancelResult(rejection=Rejection(RejectionReason.NOT_FOUND))
    if row.cancelled_at is not None:
        db.rollback()
        return CancelResult(rejection=Rejection(RejectionReason.ALREADY_CANCELLED))

    updated = (
        db.query(Reservation)
        .filter(Reservation.id == reservation_id, Reservation.cancelled_at.is_(None))
        .update({Reservation.cancelled_at: now}, synchronize_session=False)
    )
    if updated != 1:
        db.rollback()
        return CancelResult(rejection=Rejection(RejectionReason.ALREADY_CANCELLED))
    court_id = (
        db.query(Court.id)
        .filter(Court.window_id == row.window_id, Court.court_index == row.court_index)
        .scalar()
    )
    if court_id is not None:
        _bump_court_version(db, court_id)
    db.commit()
    db.refresh(row)
    logger.info(
        "Cancelled reservation %s (window=%s court=%s, by %s)",
        reservation_id, row.window_id, row.court_index, requester_id or "admin",
    )
    return CancelResult(reservation=row)


def cancel(db: Session, reservation_id: int, requester_id: str, now: datetime | None = None) -> CancelResult:
    """Owner cancellation: not_found (missing or not yours) or already_cancelled."""
    return _cancel(db, reservation_id, requester_id, now)


def admin_cancel(db: Session, reservation_id: int, now: datetime | None = None) -> CancelResult:
    """Privileged cancellation: no ownership check, same already_cancelled guard."""
    return _cancel(db, reservation_id, None, now)
