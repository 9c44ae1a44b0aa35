#!/usr/bin/env python3
"""
Quick checks so the backend can start. Run from backend/:
  python scripts/check_backend.py
"""
import os
import sys
from pathlib import Path

# Run from backend/
backend_dir = Path(__file__).resolve().parent.parent
os.chdir(backend_dir)
if str(backend_dir) not in sys.path:
    sys.path.insert(0, str(backend_dir))


def main():
    errors = []

    # 1) .env
    env_file = backend_dir / ".env"
    if not env_file.exists():
        errors.append("backend/.env missing. Copy from backend/.env.example and set DATABASE_URL, JWT_SECRET.")
    else:
        print("OK  .env exists")

    # 2) JWT secret shared with the identity service
    from slotswap.config import settings

    if not settings.jwt_secret:
        errors.append("JWT_SECRET is empty: every request will be rejected with 401.")
        print("FAIL JWT_SECRET not set")
    else:
        print("OK  JWT_SECRET set")

    # 3) DB connection and tables
    try:
        from sqlalchemy import inspect, text

        from slotswap.db.session import engine
        from slotswap.db.tables import ALL_TABLE_NAMES

        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        print("OK  Database connection (DATABASE_URL)")
        missing = set(ALL_TABLE_NAMES) - set(inspect(engine).get_table_names())
        if missing:
            errors.append(f"Tables missing: {sorted(missing)}. Run: alembic upgrade head")
            print("FAIL Tables missing:", sorted(missing))
        else:
            print("OK  Tables present")
    except Exception as e:
        errors.append(f"Database: {e}")
        print("FAIL Database:", e)

    # 4) App import (catches missing deps, bad imports)
    try:
        from slotswap.main import app  # noqa: F401
        print("OK  App import (slotswap.main)")
    except Exception as e:
        errors.append(f"App import: {e}")
        print("FAIL App import:", e)

    if errors:
        print("\n---")
        for e in errors:
            print("•", e)
        return 1

    print("\nAll checks passed. Start with: uvicorn slotswap.main:app --reload --port 8000")
    return 0


if __name__ == "__main__":
    sys.exit(main())
