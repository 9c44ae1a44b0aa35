#!/usr/bin/env python3
"""
Register a user with the swap backend so tokens minted for that id are accepted.

  python scripts/create_user.py "Ada Lovelace" ada@example.com
"""
import argparse
import sys
from pathlib import Path

backend_dir = Path(__file__).resolve().parent.parent
if str(backend_dir) not in sys.path:
    sys.path.insert(0, str(backend_dir))

from dotenv import load_dotenv

load_dotenv(backend_dir / ".env")

from slotswap.db.session import SessionLocal
from slotswap.services.user_service import create_user, get_user_by_email


def main() -> int:
    parser = argparse.ArgumentParser(description="Create a SlotSwap user")
    parser.add_argument("name")
    parser.add_argument("email")
    args = parser.parse_args()

    db = SessionLocal()
    try:
        existing = get_user_by_email(db, args.email)
        if existing:
            print(f"User already exists: id={existing.id} email={existing.email}")
            return 1
        user = create_user(db, args.name, args.email)
        print(f"Created user id={user.id} name={user.name} email={user.email}")
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
