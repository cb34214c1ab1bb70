"""
Reservations API: admit onto a court, cancel (own or admin), list own / all active bookings.

Every business rejection maps to its own status and code via core.errors; nothing is reported as a
generic failure.
"""
import logging
from typing import Any

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from courtbook.api.deps import get_requester, require_admin
from courtbook.core.constants import MAX_ID, RESERVATION_PAGE_SIZE, RESERVATION_PAGE_SIZE_MAX, GameMode
from courtbook.core.errors import ContentionError, contention_to_http, rejection_to_http
from courtbook.core.security import Requester
from courtbook.db.session import get_db
from courtbook.services.allocator import CancelResult, admin_cancel, cancel, try_admit
from courtbook.services.reservation_ledger import (
    count_active_reservations,
    get_all_active_reservations,
    get_requester_reservations,
    reservation_to_dict,
)

router = APIRouter()
logger = logging.getLogger(__name__)


class AdmitRequest(BaseModel):
    window_id: int = Field(..., ge=1, le=MAX_ID)
    court_index: int = Field(..., ge=0, le=MAX_ID)
    game_mode: GameMode


class CancelRequest(BaseModel):
    reservation_id: int = Field(..., ge=1, le=MAX_ID)


@router.post("", status_code=201)
def admit_reservation(
    body: AdmitRequest,
    db: Session = Depends(get_db),
    requester: Requester = Depends(get_requester),
) -> dict[str, Any]:
    try:
        result = try_admit(db, requester.id, body.window_id, body.court_index, body.game_mode)
    except ContentionError as e:
        raise contention_to_http(e) from e
    if not result.ok:
        raise rejection_to_http(result.rejection)
    return {
        "id": result.reservation.id,
        "message": "Booking confirmed successfully!",
        "booking": result.confirmation,
    }


def _cancel_response(result: CancelResult) -> dict[str, Any]:
    if not result.ok:
        raise rejection_to_http(result.rejection)
    return {"ok": True, "reservation": reservation_to_dict(result.reservation)}


@router.post("/cancel")
def cancel_reservation(
    body: CancelRequest,
    db: Session = Depends(get_db),
    requester: Requester = Depends(get_requester),
) -> dict[str, Any]:
    return _cancel_response(cancel(db, body.reservation_id, requester.id))


@router.post("/admin-cancel")
def admin_cancel_reservation(
    body: CancelRequest,
    db: Session = Depends(get_db),
    admin: Requester = Depends(require_admin),
) -> dict[str, Any]:
    logger.info("Admin %s cancelling reservation %s", admin.id, body.reservation_id)
    return _cancel_response(admin_cancel(db, body.reservation_id))


@router.get("/mine")
def my_reservations(
    db: Session = Depends(get_db),
    requester: Requester = Depends(get_requester),
) -> dict[str, Any]:
    return {"reservations": get_requester_reservations(db, requester.id)}


@router.get("")
def all_reservations(
    db: Session = Depends(get_db),
    _admin: Requester = Depends(require_admin),
    limit: int = Query(RESERVATION_PAGE_SIZE, ge=1, le=RESERVATION_PAGE_SIZE_MAX),
    offset: int = Query(0, ge=0),
) -> dict[str, Any]:
    total = count_active_reservations(db)
    page = get_all_active_reservations(db, limit=limit, offset=offset)
    next_offset = offset + len(page)
    return {
        "reservations": page,
        "total": total,
        "offset": offset,
        "limit": limit,
        "next_offset": next_offset if next_offset < total else None,
    }
