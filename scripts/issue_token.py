#!/usr/bin/env python3
"""
Print a bearer token for local testing (signed with JWT_SECRET from .env).

  python scripts/issue_token.py student-42
  python scripts/issue_token.py ops-1 --admin
"""
import argparse
import sys
from pathlib import Path

project_dir = Path(__file__).resolve().parent.parent
if str(project_dir) not in sys.path:
    sys.path.insert(0, str(project_dir))

from courtbook.core.constants import ADMIN_ROLE
from courtbook.core.security import create_access_token


def main():
    parser = argparse.ArgumentParser(description="Issue a bearer token")
    parser.add_argument("requester_id")
    parser.add_argument("--admin", action="store_true", help="grant the admin role")
    args = parser.parse_args()
    print(create_access_token(args.requester_id, role=ADMIN_ROLE if args.admin else "student"))


if __name__ == "__main__":
    main()
