"""
Audit of the slot/request invariant: a slot is SWAP_PENDING iff exactly one PENDING request references it.
Read-only; used by scripts/check_invariants.py and tests.
"""
import logging
from collections import Counter

from sqlalchemy import select
from sqlalchemy.orm import Session

from slotswap.models.slot import Slot, SlotStatus
from slotswap.models.swap_request import SwapRequest, SwapRequestStatus

logger = logging.getLogger(__name__)


def pending_reference_counts(db: Session) -> Counter:
    """slot_id -> number of PENDING requests referencing it."""
    counts: Counter = Counter()
    rows = db.execute(
        select(SwapRequest.requester_slot_id, SwapRequest.responder_slot_id).where(
            SwapRequest.status == SwapRequestStatus.PENDING.value
        )
    ).all()
    for requester_slot_id, responder_slot_id in rows:
        for slot_id in (requester_slot_id, responder_slot_id):
            if slot_id is not None:
                counts[slot_id] += 1
    return counts


def find_invariant_violations(db: Session) -> list[dict]:
    """
    One entry per offending slot: {slot_id, status, pending_requests, problem} where problem is
    'locked_without_request', 'referenced_but_not_locked' or 'multiple_pending_requests'.
    """
    counts = pending_reference_counts(db)
    violations = []
    for slot_id, status in db.execute(select(Slot.id, Slot.status).order_by(Slot.id.asc())).all():
        n = counts.get(slot_id, 0)
        problem = None
        if status == SlotStatus.SWAP_PENDING and n == 0:
            problem = "locked_without_request"
        elif status != SlotStatus.SWAP_PENDING and n > 0:
            problem = "referenced_but_not_locked"
        elif n > 1:
            problem = "multiple_pending_requests"
        if problem:
            violations.append({"slot_id": slot_id, "status": status, "pending_requests": n, "problem": problem})
    if violations:
        logger.warning("Invariant audit found %s offending slots", len(violations))
    return violations
