from slotswap.db.base import Base
from slotswap.db.session import SessionLocal, engine, get_db, unit_of_work
from slotswap.db.tables import ALL_TABLE_NAMES, NEGOTIATION_TABLE_NAMES

__all__ = ["get_db", "engine", "SessionLocal", "unit_of_work", "Base", "ALL_TABLE_NAMES", "NEGOTIATION_TABLE_NAMES"]
