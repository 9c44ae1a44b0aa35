"""
Swap request store: rows of the swap_requests table. Rows are never deleted.

Like the slot store, functions flush but never commit, and status changes are compare-and-set.
"""
from datetime import datetime, timezone
from typing import Iterable

from sqlalchemy import or_, select, update
from sqlalchemy.orm import Session

from slotswap.models.swap_request import SwapRequest, SwapRequestStatus

TERMINAL_STATUSES = (SwapRequestStatus.ACCEPTED, SwapRequestStatus.REJECTED)


def get_swap_request(db: Session, request_id: int, for_update: bool = False) -> SwapRequest | None:
    return db.get(SwapRequest, request_id, with_for_update=for_update, populate_existing=True)


def list_incoming(
    db: Session,
    responder_id: int,
    status: SwapRequestStatus | None = None,
) -> list[SwapRequest]:
    """Requests addressed to responder_id, oldest first; optionally only one status."""
    stmt = select(SwapRequest).where(SwapRequest.responder_id == responder_id)
    if status is not None:
        stmt = stmt.where(SwapRequest.status == SwapRequestStatus(status).value)
    stmt = stmt.order_by(SwapRequest.created_at.asc(), SwapRequest.id.asc())
    return list(db.execute(stmt.execution_options(populate_existing=True)).scalars().all())


def list_outgoing(db: Session, requester_id: int) -> list[SwapRequest]:
    """Every request made by requester_id, newest first."""
    stmt = (
        select(SwapRequest)
        .where(SwapRequest.requester_id == requester_id)
        .order_by(SwapRequest.created_at.desc(), SwapRequest.id.desc())
    )
    return list(db.execute(stmt.execution_options(populate_existing=True)).scalars().all())


def create_swap_request(
    db: Session,
    requester_id: int,
    responder_id: int,
    requester_slot_id: int,
    responder_slot_id: int,
) -> SwapRequest:
    """Insert a PENDING request and flush so it has an id."""
    row = SwapRequest(
        requester_id=requester_id,
        responder_id=responder_id,
        requester_slot_id=requester_slot_id,
        responder_slot_id=responder_slot_id,
        status=SwapRequestStatus.PENDING.value,
    )
    db.add(row)
    db.flush()
    return row


def set_swap_request_status(
    db: Session,
    request_id: int,
    status: SwapRequestStatus,
    expected: SwapRequestStatus | None = SwapRequestStatus.PENDING,
) -> bool:
    """Move a request to status if it is still in expected. Terminal moves stamp responded_at."""
    status = SwapRequestStatus(status)
    values = {"status": status.value}
    if status in TERMINAL_STATUSES:
        values["responded_at"] = datetime.now(timezone.utc)
    stmt = update(SwapRequest).where(SwapRequest.id == request_id)
    if expected is not None:
        stmt = stmt.where(SwapRequest.status == SwapRequestStatus(expected).value)
    result = db.execute(stmt.values(**values).execution_options(synchronize_session=False))
    return result.rowcount == 1


def _references_any(slot_ids: list[int]):
    return or_(SwapRequest.requester_slot_id.in_(slot_ids), SwapRequest.responder_slot_id.in_(slot_ids))


def list_pending_referencing(db: Session, slot_ids: Iterable[int]) -> list[SwapRequest]:
    ids = [i for i in slot_ids if i is not None]
    if not ids:
        return []
    stmt = (
        select(SwapRequest)
        .where(SwapRequest.status == SwapRequestStatus.PENDING.value, _references_any(ids))
        .order_by(SwapRequest.id.asc())
        .execution_options(populate_existing=True)
    )
    return list(db.execute(stmt).scalars().all())


def reject_all_pending_referencing(db: Session, slot_ids: Iterable[int]) -> list[SwapRequest]:
    """
    Cascade primitive: every PENDING request that references any of slot_ids becomes REJECTED.
    Returns the requests that were rejected (as they were just before the change).
    """
    stale = list_pending_referencing(db, slot_ids)
    if not stale:
        return []
    db.execute(
        update(SwapRequest)
        .where(
            SwapRequest.id.in_([r.id for r in stale]),
            SwapRequest.status == SwapRequestStatus.PENDING.value,
        )
        .values(status=SwapRequestStatus.REJECTED.value, responded_at=datetime.now(timezone.utc))
        .execution_options(synchronize_session=False)
    )
    return stale


def is_slot_referenced(db: Session, slot_id: int) -> bool:
    """True when any request, in any status, names the slot. Referenced slots are history and are kept."""
    stmt = select(SwapRequest.id).where(_references_any([slot_id])).limit(1)
    return db.execute(stmt).first() is not None
