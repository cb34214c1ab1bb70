from courtbook.models.court import Court
from courtbook.models.reservation import Reservation
from courtbook.models.time_window import TimeWindow

__all__ = [
    "Court",
    "Reservation",
    "TimeWindow",
]
