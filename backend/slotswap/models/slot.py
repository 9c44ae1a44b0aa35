"""
Calendar time-slot owned by one user.

status: BUSY (ordinary use) | SWAPPABLE (open for negotiation) | SWAP_PENDING (locked in one
outstanding swap request). Only the negotiation engine moves a slot into or out of SWAP_PENDING.
"""
import enum

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.sql import func

from slotswap.db.base import Base


class SlotStatus(str, enum.Enum):
    BUSY = "BUSY"
    SWAPPABLE = "SWAPPABLE"
    SWAP_PENDING = "SWAP_PENDING"


# Statuses an owner may set or edit from directly
OWNER_EDITABLE_STATUSES = (SlotStatus.BUSY, SlotStatus.SWAPPABLE)


class Slot(Base):
    __tablename__ = "slots"
    __table_args__ = (
        CheckConstraint("status IN ('BUSY', 'SWAPPABLE', 'SWAP_PENDING')", name="ck_slots_status"),
        CheckConstraint("start_time < end_time", name="ck_slots_time_order"),
        Index("ix_slots_status_start_time", "status", "start_time"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    owner_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    start_time = Column(DateTime(timezone=True), nullable=False)
    end_time = Column(DateTime(timezone=True), nullable=False)
    status = Column(String(16), nullable=False, default=SlotStatus.BUSY.value, server_default=SlotStatus.BUSY.value)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<Slot(id={self.id}, owner_id={self.owner_id}, status='{self.status}')>"
