"""
Time windows API: availability of one window, streamed listing by start range, admin bulk creation.
"""
import json
import logging
from collections.abc import Iterator
from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Path, Query
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session, sessionmaker

from courtbook.api.deps import require_admin
from courtbook.core.constants import MAX_ID
from courtbook.core.errors import Rejection, RejectionReason, rejection_to_http
from courtbook.core.security import Requester
from courtbook.core.timeutil import as_utc
from courtbook.db.session import get_db, get_session_factory
from courtbook.services.availability import project_window, window_summary
from courtbook.services.window_registry import create_windows, iter_windows

router = APIRouter()
logger = logging.getLogger(__name__)


class CreateWindowsRequest(BaseModel):
    start_times: list[datetime] = Field(..., min_length=1, max_length=500)


@router.get("/{window_id}/availability")
def window_availability(
    window_id: int = Path(..., ge=1, le=MAX_ID),
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    projection = project_window(db, window_id)
    if projection is None:
        raise rejection_to_http(Rejection(RejectionReason.WINDOW_NOT_FOUND))
    return projection.to_dict()


def _stream_windows(session_factory: sessionmaker, start_from: datetime, start_to: datetime) -> Iterator[bytes]:
    """JSON array written one window at a time; the response owns its session for the whole stream."""
    db = session_factory()
    try:
        yield b"["
        first = True
        for window in iter_windows(db, start_from, start_to):
            chunk = json.dumps(window_summary(db, window))
            yield (chunk if first else "," + chunk).encode("utf-8")
            first = False
        yield b"]"
    finally:
        db.close()


@router.get("")
def list_windows(
    start_from: datetime = Query(..., alias="from"),
    start_to: datetime = Query(..., alias="to"),
    session_factory: sessionmaker = Depends(get_session_factory),
) -> StreamingResponse:
    if as_utc(start_to) <= as_utc(start_from):
        raise HTTPException(status_code=422, detail={"code": "invalid_range", "message": "'to' must be after 'from'"})
    return StreamingResponse(
        _stream_windows(session_factory, start_from, start_to),
        media_type="application/json",
    )


@router.post("", status_code=201)
def create_time_windows(
    body: CreateWindowsRequest,
    db: Session = Depends(get_db),
    admin: Requester = Depends(require_admin),
) -> dict[str, Any]:
    result = create_windows(db, body.start_times)
    if not result.ok:
        raise rejection_to_http(result.rejection, duplicates=result.duplicates)
    logger.info("Admin %s created %s windows", admin.id, result.created_count)
    return {
        "count": result.created_count,
        "created": [
            {"id": w.id, "start_time": as_utc(w.start_time).isoformat(), "end_time": as_utc(w.end_time).isoformat()}
            for w in result.created
        ],
        "duplicates": result.duplicates,
    }
