"""
Centralized error handling for booking rejections and transient failures.
Constants and a reusable helper so routes stay thin and new rejection reasons are easy to add.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from fastapi import HTTPException


class RejectionReason(str, Enum):
    WINDOW_NOT_FOUND = "window_not_found"
    WINDOW_EXPIRED = "window_expired"
    INVALID_COURT = "invalid_court"
    MODE_MISMATCH = "mode_mismatch"
    DUPLICATE_RESERVATION = "duplicate_reservation"
    CAPACITY_EXCEEDED = "capacity_exceeded"
    NOT_FOUND = "not_found"
    ALREADY_CANCELLED = "already_cancelled"
    ALL_DUPLICATES = "all_duplicates"


@dataclass(frozen=True)
class Rejection:
    """An expected business-rule outcome. Returned, never raised, by the services."""

    reason: RejectionReason
    context: dict[str, Any] = field(default_factory=dict)

    @property
    def message(self) -> str:
        return REJECTION_RULES[self.reason][1].format(**self.context)


class ContentionError(Exception):
    """Concurrent writers kept invalidating the unit of work; safe to retry later."""

    def __init__(self, attempts: int):
        super().__init__(f"Booking is busy, gave up after {attempts} attempts")
        self.attempts = attempts


# ---------------------------------------------------------------------------
# Constants: status codes and user-facing messages
# ---------------------------------------------------------------------------

STATUS_BAD_REQUEST = 400
STATUS_NOT_FOUND = 404
STATUS_CONFLICT = 409
STATUS_GONE = 410
STATUS_SERVICE_UNAVAILABLE = 503  # contention retries exhausted

CODE_CONTENTION = "contention"
MSG_CONTENTION = "Too many people are booking this court right now. Please try again."

# reason -> (status_code, message template). Message fields come from Rejection.context.
REJECTION_RULES: dict[RejectionReason, tuple[int, str]] = {
    RejectionReason.WINDOW_NOT_FOUND: (STATUS_NOT_FOUND, "Time window not found"),
    RejectionReason.WINDOW_EXPIRED: (STATUS_GONE, "This time window has already ended"),
    RejectionReason.INVALID_COURT: (STATUS_BAD_REQUEST, "Court does not exist in this time window"),
    RejectionReason.MODE_MISMATCH: (STATUS_BAD_REQUEST, "This court is for {court_mode} games only"),
    RejectionReason.DUPLICATE_RESERVATION: (STATUS_CONFLICT, "You already have a booking in this time window"),
    RejectionReason.CAPACITY_EXCEEDED: (
        STATUS_CONFLICT,
        "Court is full: {occupied}/{capacity} players already booked",
    ),
    RejectionReason.NOT_FOUND: (STATUS_NOT_FOUND, "Booking not found"),
    RejectionReason.ALREADY_CANCELLED: (STATUS_CONFLICT, "Booking already cancelled"),
    RejectionReason.ALL_DUPLICATES: (STATUS_BAD_REQUEST, "All selected time slots already exist"),
}


def rejection_to_http(rejection: Rejection, **extra: Any) -> HTTPException:
    """
    Map a business rejection to an HTTPException with a stable code and an actionable message.
    Extra keyword arguments are added to the detail payload (e.g. duplicates for all_duplicates).
    """
    status_code, _ = REJECTION_RULES[rejection.reason]
    detail: dict[str, Any] = {"code": rejection.reason.value, "message": rejection.message}
    detail.update(extra)
    return HTTPException(status_code=status_code, detail=detail)


def contention_to_http(exc: ContentionError) -> HTTPException:
    return HTTPException(
        status_code=STATUS_SERVICE_UNAVAILABLE,
        detail={"code": CODE_CONTENTION, "message": MSG_CONTENTION, "attempts": exc.attempts},
        headers={"Retry-After": "1"},
    )
