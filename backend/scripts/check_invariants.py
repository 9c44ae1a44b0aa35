#!/usr/bin/env python3
"""
Report slots whose status disagrees with the PENDING swap requests referencing them.
Exit code 1 when any are found. Read-only.

Run from backend dir:
  python scripts/check_invariants.py
"""
import sys
from pathlib import Path

backend_dir = Path(__file__).resolve().parent.parent
if str(backend_dir) not in sys.path:
    sys.path.insert(0, str(backend_dir))

from dotenv import load_dotenv

load_dotenv(backend_dir / ".env")

from slotswap.db.session import SessionLocal
from slotswap.services.invariant_audit import find_invariant_violations


def main() -> int:
    db = SessionLocal()
    try:
        violations = find_invariant_violations(db)
    finally:
        db.close()
    if not violations:
        print("OK  every SWAP_PENDING slot has exactly one PENDING request, and no other slot has any")
        return 0
    for v in violations:
        print(f"slot={v['slot_id']} status={v['status']} pending_requests={v['pending_requests']} problem={v['problem']}")
    print(f"\n{len(violations)} offending slots")
    return 1


if __name__ == "__main__":
    sys.exit(main())
