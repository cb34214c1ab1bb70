"""Bookable time window. Owns its courts; start_time is unique (one window per start instant)."""
from sqlalchemy import Column, DateTime, Integer
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from courtbook.db.base import Base


class TimeWindow(Base):
    __tablename__ = "time_windows"

    id = Column(Integer, primary_key=True, index=True)
    start_time = Column(DateTime(timezone=True), nullable=False, unique=True, index=True)
    end_time = Column(DateTime(timezone=True), nullable=False, index=True)  # start_time + template duration
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    courts = relationship(
        "Court",
        back_populates="window",
        order_by="Court.court_index",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    def court(self, court_index: int):
        for c in self.courts:
            if c.court_index == court_index:
                return c
        return None
