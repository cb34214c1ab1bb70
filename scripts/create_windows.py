#!/usr/bin/env python3
"""
Create bookable time windows for one day without going through the HTTP admin endpoint.
Times are UTC, HH:MM, each window gets the default court set.

Run from the project root:
  python scripts/create_windows.py 2026-10-20 06:00 06:45 17:30 18:15
"""
import argparse
import sys
from datetime import date, datetime, time, timezone
from pathlib import Path

project_dir = Path(__file__).resolve().parent.parent
if str(project_dir) not in sys.path:
    sys.path.insert(0, str(project_dir))

from courtbook.db.session import SessionLocal
from courtbook.services.window_registry import create_windows


def _start_times(day: date, times: list[str]) -> list[datetime]:
    return [datetime.combine(day, time.fromisoformat(t), tzinfo=timezone.utc) for t in times]


def main():
    parser = argparse.ArgumentParser(description="Create time windows for a day")
    parser.add_argument("day", type=date.fromisoformat, help="YYYY-MM-DD")
    parser.add_argument("times", nargs="+", help="start times HH:MM (UTC)")
    args = parser.parse_args()

    db = SessionLocal()
    try:
        result = create_windows(db, _start_times(args.day, args.times))
        print(f"Created {result.created_count} windows")
        for w in result.created:
            print(f"  #{w.id}  {w.start_time:%Y-%m-%d %H:%M} - {w.end_time:%H:%M}  courts={len(w.courts)}")
        if result.duplicates:
            print(f"Already existed: {', '.join(result.duplicates)}")
        if not result.ok:
            print(result.rejection.message, file=sys.stderr)
            sys.exit(1)
    except Exception as e:
        db.rollback()
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    finally:
        db.close()


if __name__ == "__main__":
    main()
