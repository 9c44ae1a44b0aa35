#!/usr/bin/env python3
"""
Clear all swap requests and unlock SWAP_PENDING slots. Slots, owners and users are kept.
Afterwards every slot can be edited or deleted again.

Run from backend dir:
  python scripts/reset_negotiations.py --yes
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
from slotswap.services.admin_service import reset_negotiations


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__.strip().splitlines()[0])
    parser.add_argument("--yes", action="store_true", help="confirm: swap history is deleted for good")
    args = parser.parse_args()
    if not args.yes:
        print("Refusing to run without --yes (this deletes every swap request).", file=sys.stderr)
        return 2

    db = SessionLocal()
    try:
        result = reset_negotiations(db)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        db.close()
    print("Done.", ", ".join(f"{k}={v}" for k, v in result.items()))
    return 0


if __name__ == "__main__":
    sys.exit(main())
