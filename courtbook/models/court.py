"""Court (sub-resource) of a time window. Mode and capacity never change; version is bumped by every admission/cancellation."""
from sqlalchemy import Column, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from courtbook.db.base import Base


class Court(Base):
    __tablename__ = "courts"

    id = Column(Integer, primary_key=True, index=True)
    window_id = Column(Integer, ForeignKey("time_windows.id", ondelete="CASCADE"), nullable=False, index=True)
    court_index = Column(Integer, nullable=False)
    capacity = Column(Integer, nullable=False)
    game_mode = Column(String(16), nullable=False)  # singles | doubles
    version = Column(Integer, nullable=False, default=0, server_default="0")

    window = relationship("TimeWindow", back_populates="courts")

    __table_args__ = (UniqueConstraint("window_id", "court_index", name="uq_courts_window_index"),)
