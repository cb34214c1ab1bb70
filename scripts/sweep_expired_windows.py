#!/usr/bin/env python3
"""Delete every time window that has already ended, with its reservations (same as the hourly job).
Run from the project root: python scripts/sweep_expired_windows.py
"""
import sys
from pathlib import Path

project_dir = Path(__file__).resolve().parent.parent
if str(project_dir) not in sys.path:
    sys.path.insert(0, str(project_dir))

from courtbook.db.session import SessionLocal
from courtbook.services.cleanup_service import sweep_expired_windows


def main():
    db = SessionLocal()
    try:
        result = sweep_expired_windows(db)
        print(f"Removed {result.windows} past windows and {result.reservations} reservations.")
    except Exception as e:
        db.rollback()
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    finally:
        db.close()


if __name__ == "__main__":
    main()
