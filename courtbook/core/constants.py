"""
Centralized constants for booking rules and the scheduler.

Change job IDs or fixed business rules here instead of scattering literals across
main, services and routes. Tunable values (durations, capacities, intervals) come from config.
"""
from enum import Enum


class GameMode(str, Enum):
    SINGLES = "singles"
    DOUBLES = "doubles"


GAME_MODES = tuple(m.value for m in GameMode)

# Every reservation holds one player's seat, whatever the mode
OCCUPANCY_UNIT = 1

# Court / window status values shown to callers
STATUS_AVAILABLE = "available"
STATUS_PARTIAL = "partial"
STATUS_FULL = "full"

# Scheduler job IDs (must match ids used in main.py add_job)
WINDOW_CLEANUP_JOB_ID = "window_cleanup"

# Streaming window listing: rows fetched per round trip
WINDOW_LIST_BATCH_SIZE = 100

# Role claim value for privileged callers
ADMIN_ROLE = "admin"

# Display format for duplicate start times (e.g. "06:30 PM")
DUPLICATE_TIME_FORMAT = "%I:%M %p"

# Largest id / court index accepted from callers (32-bit INTEGER columns)
MAX_ID = 2**31 - 1

# Admin reservation listing page size
RESERVATION_PAGE_SIZE = 500
RESERVATION_PAGE_SIZE_MAX = 2000
