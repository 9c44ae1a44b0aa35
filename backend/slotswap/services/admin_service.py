"""
Admin: clear negotiation state (see slotswap.db.tables.NEGOTIATION_TABLE_NAMES).
Slots and users are kept; slots locked in a negotiation go back to SWAPPABLE with their current owner.
"""
import logging

from sqlalchemy import text, update
from sqlalchemy.orm import Session

from slotswap.db.tables import NEGOTIATION_TABLE_NAMES
from slotswap.models.slot import Slot, SlotStatus

logger = logging.getLogger(__name__)


def reset_negotiations(db: Session) -> dict[str, int]:
    """
    Delete every swap request (pending and history) and unlock SWAP_PENDING slots, in one commit.
    Returns dict of table -> deleted count plus "released_slots".
    """
    logger.info("reset_negotiations: starting")
    deleted: dict[str, int] = {}
    try:
        for table in NEGOTIATION_TABLE_NAMES:
            deleted[table] = db.execute(text(f"DELETE FROM {table}")).rowcount
        released = db.execute(
            update(Slot)
            .where(Slot.status == SlotStatus.SWAP_PENDING.value)
            .values(status=SlotStatus.SWAPPABLE.value)
            .execution_options(synchronize_session=False)
        ).rowcount
        db.commit()
    except Exception:
        db.rollback()
        raise
    deleted["released_slots"] = released
    logger.info("reset_negotiations: done %s", deleted)
    return deleted
