"""
Reservation ledger row: one player's seat on one court of one window.
Active while cancelled_at is null; cancellation only ever sets it. Rows are removed with their window.
"""
from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String, text
from sqlalchemy.sql import func

from courtbook.core.constants import OCCUPANCY_UNIT
from courtbook.db.base import Base

_ACTIVE = text("cancelled_at IS NULL")


class Reservation(Base):
    __tablename__ = "reservations"

    id = Column(Integer, primary_key=True, index=True)
    requester_id = Column(String(64), nullable=False, index=True)
    window_id = Column(Integer, ForeignKey("time_windows.id", ondelete="CASCADE"), nullable=False)
    court_index = Column(Integer, nullable=False)
    game_mode = Column(String(16), nullable=False)
    occupancy_units = Column(Integer, nullable=False, default=OCCUPANCY_UNIT)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    cancelled_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index("ix_reservations_window_court", "window_id", "court_index"),
        # One active booking per requester per window, across all courts
        Index(
            "uq_reservations_active_requester_window",
            "requester_id",
            "window_id",
            unique=True,
            sqlite_where=_ACTIVE,
            postgresql_where=_ACTIVE,
        ),
    )

    @property
    def is_active(self) -> bool:
        return self.cancelled_at is None
