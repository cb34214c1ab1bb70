"""
Time window registry: bulk creation from a list of start instants, lookup and batched listing.

Duplicates (start instant already stored, or repeated in the request) are reported back for display
and do not fail the request. Each new window is committed on its own so a unique-constraint race on
one start instant cannot abort its siblings.
"""
import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from datetime import datetime

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from courtbook.core.constants import DUPLICATE_TIME_FORMAT, WINDOW_LIST_BATCH_SIZE
from courtbook.core.errors import Rejection, RejectionReason
from courtbook.core.slot_template import SlotTemplate, default_slot_template
from courtbook.core.timeutil import as_utc
from courtbook.models.court import Court
from courtbook.models.time_window import TimeWindow

logger = logging.getLogger(__name__)


@dataclass
class CreateWindowsResult:
    created: list[TimeWindow] = field(default_factory=list)
    duplicates: list[str] = field(default_factory=list)
    rejection: Rejection | None = None

    @property
    def created_count(self) -> int:
        return len(self.created)

    @property
    def ok(self) -> bool:
        return self.rejection is None


def format_duplicate(start: datetime) -> str:
    return as_utc(start).strftime(DUPLICATE_TIME_FORMAT)


def build_window(start: datetime, template: SlotTemplate) -> TimeWindow:
    start = as_utc(start)
    window = TimeWindow(start_time=start, end_time=start + template.duration)
    window.courts = [
        Court(court_index=spec.court_index, capacity=spec.capacity, game_mode=spec.game_mode.value, version=0)
        for spec in template.court_specs()
    ]
    return window


def window_exists(db: Session, start: datetime) -> bool:
    return db.query(TimeWindow.id).filter(TimeWindow.start_time == as_utc(start)).first() is not None


def create_windows(
    db: Session,
    start_times: Iterable[datetime],
    template: SlotTemplate | None = None,
) -> CreateWindowsResult:
    """Create one window per new start instant. All-duplicate requests carry the all_duplicates rejection."""
    template = template or default_slot_template()
    result = CreateWindowsResult()
    pending: list[datetime] = []
    seen: set[datetime] = set()
    for raw in start_times:
        start = as_utc(raw)
        if start in seen or window_exists(db, start):
            result.duplicates.append(format_duplicate(start))
            continue
        seen.add(start)
        pending.append(start)

    for start in pending:
        window = build_window(start, template)
        db.add(window)
        try:
            db.commit()
        except IntegrityError:
            # Lost a race with a concurrent creator of the same start instant
            db.rollback()
            logger.info("create_windows: %s created concurrently, reporting as duplicate", start.isoformat())
            result.duplicates.append(format_duplicate(start))
            continue
        result.created.append(window)

    if not result.created:
        result.rejection = Rejection(RejectionReason.ALL_DUPLICATES)
    logger.info(
        "create_windows: created=%s duplicates=%s", result.created_count, len(result.duplicates)
    )
    return result


def get_window(db: Session, window_id: int) -> TimeWindow | None:
    return db.get(TimeWindow, window_id)


def get_window_by_start(db: Session, start: datetime) -> TimeWindow | None:
    return db.query(TimeWindow).filter(TimeWindow.start_time == as_utc(start)).first()


def iter_windows(
    db: Session,
    start_from: datetime,
    start_to: datetime,
    batch_size: int = WINDOW_LIST_BATCH_SIZE,
) -> Iterator[TimeWindow]:
    """Windows with start_from <= start_time < start_to, ordered by start, fetched batch_size rows at a time."""
    q = (
        db.query(TimeWindow)
        .filter(TimeWindow.start_time >= as_utc(start_from), TimeWindow.start_time < as_utc(start_to))
        .order_by(TimeWindow.start_time.asc())
        .execution_options(yield_per=batch_size)
    )
    yield from q
