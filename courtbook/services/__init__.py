from courtbook.services.allocator import admin_cancel, cancel, try_admit
from courtbook.services.availability import project_window
from courtbook.services.cleanup_service import sweep_expired_windows
from courtbook.services.window_registry import create_windows

__all__ = ["try_admit", "cancel", "admin_cancel", "project_window", "sweep_expired_windows", "create_windows"]
