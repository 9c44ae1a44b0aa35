"""
Proposed exchange of two slots between two distinct owners. Never deleted: terminal rows are history.

status: PENDING -> ACCEPTED | REJECTED, terminal thereafter.
Slot references are immutable; a slot named by any request cannot be deleted.
"""
import enum

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.sql import func

from slotswap.db.base import Base


class SwapRequestStatus(str, enum.Enum):
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"


class SwapRequest(Base):
    __tablename__ = "swap_requests"
    __table_args__ = (
        CheckConstraint("status IN ('PENDING', 'ACCEPTED', 'REJECTED')", name="ck_swap_requests_status"),
        CheckConstraint("requester_id <> responder_id", name="ck_swap_requests_distinct_users"),
        CheckConstraint("requester_slot_id <> responder_slot_id", name="ck_swap_requests_distinct_slots"),
        Index("ix_swap_requests_responder_status", "responder_id", "status"),
        Index("ix_swap_requests_requester_created", "requester_id", "created_at"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    requester_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    responder_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    requester_slot_id = Column(Integer, ForeignKey("slots.id"), nullable=False, index=True)
    responder_slot_id = Column(Integer, ForeignKey("slots.id"), nullable=False, index=True)
    status = Column(String(16), nullable=False, default=SwapRequestStatus.PENDING.value, server_default=SwapRequestStatus.PENDING.value)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
    responded_at = Column(DateTime(timezone=True), nullable=True)  # set when status becomes terminal

    @property
    def slot_ids(self) -> tuple:
        return (self.requester_slot_id, self.responder_slot_id)

    def __repr__(self):
        return f"<SwapRequest(id={self.id}, status='{self.status}', requester_id={self.requester_id}, responder_id={self.responder_id})>"
