"""
Read-only projections joining slots, swap requests and users for presentation.
No writes; read-committed consistency is enough. Request lists are built on the store queries and
resolve slots and counterpart names in one batch each.
"""
from sqlalchemy import select
from sqlalchemy.orm import Session

from slotswap.core.timeutil import iso
from slotswap.models.slot import Slot, SlotStatus
from slotswap.models.swap_request import SwapRequest, SwapRequestStatus
from slotswap.models.user import User
from slotswap.services import slot_store, swap_request_store
from slotswap.services.user_service import get_user_names


def slot_to_dict(slot: Slot) -> dict:
    return {
        "id": slot.id,
        "owner_id": slot.owner_id,
        "title": slot.title,
        "start_time": iso(slot.start_time),
        "end_time": iso(slot.end_time),
        "status": slot.status,
        "created_at": iso(slot.created_at),
        "updated_at": iso(slot.updated_at),
    }


def swap_request_to_dict(swap_request: SwapRequest) -> dict:
    return {
        "id": swap_request.id,
        "requester_id": swap_request.requester_id,
        "responder_id": swap_request.responder_id,
        "requester_slot_id": swap_request.requester_slot_id,
        "responder_slot_id": swap_request.responder_slot_id,
        "status": swap_request.status,
        "created_at": iso(swap_request.created_at),
        "responded_at": iso(swap_request.responded_at),
    }


def _slot_summary(slot: Slot) -> dict:
    return {
        "id": slot.id,
        "title": slot.title,
        "start_time": iso(slot.start_time),
        "end_time": iso(slot.end_time),
    }


def list_my_slots(db: Session, caller_id: int) -> list[dict]:
    """The caller's own slots, earliest first."""
    return [slot_to_dict(s) for s in slot_store.get_slots_owned_by(db, caller_id)]


def list_marketplace(db: Session, caller_id: int) -> list[dict]:
    """SWAPPABLE slots of other users with the owner's name, earliest first."""
    rows = db.execute(
        select(Slot, User.name)
        .join(User, Slot.owner_id == User.id)
        .where(Slot.status == SlotStatus.SWAPPABLE.value, Slot.owner_id != caller_id)
        .order_by(Slot.start_time.asc(), Slot.id.asc())
    ).all()
    return [{**slot_to_dict(slot), "owner_name": owner_name} for slot, owner_name in rows]


def _with_slots_and_names(db: Session, requests: list[SwapRequest], counterpart_of) -> list[tuple]:
    slots = slot_store.get_slots(db, [i for r in requests for i in r.slot_ids])
    names = get_user_names(db, [counterpart_of(r) for r in requests])
    return [
        (r, names.get(counterpart_of(r)), slots[r.requester_slot_id], slots[r.responder_slot_id])
        for r in requests
    ]


def list_incoming(db: Session, caller_id: int) -> list[dict]:
    """PENDING requests waiting for the caller's answer, oldest first, with the requester's name."""
    pending = swap_request_store.list_incoming(db, caller_id, status=SwapRequestStatus.PENDING)
    rows = _with_slots_and_names(db, pending, lambda r: r.requester_id)
    return [
        {
            "request_id": req.id,
            "status": req.status,
            "created_at": iso(req.created_at),
            "requester_id": req.requester_id,
            "requester_name": requester_name,
            "requester_slot": _slot_summary(req_slot),
            "responder_slot": _slot_summary(res_slot),
        }
        for req, requester_name, req_slot, res_slot in rows
    ]


def list_outgoing(db: Session, caller_id: int) -> list[dict]:
    """Every request the caller made, newest first, with the responder's name."""
    made = swap_request_store.list_outgoing(db, caller_id)
    rows = _with_slots_and_names(db, made, lambda r: r.responder_id)
    return [
        {
            "request_id": req.id,
            "status": req.status,
            "created_at": iso(req.created_at),
            "responded_at": iso(req.responded_at),
            "responder_id": req.responder_id,
            "responder_name": responder_name,
            "requester_slot": _slot_summary(req_slot),
            "responder_slot": _slot_summary(res_slot),
        }
        for req, responder_name, req_slot, res_slot in rows
    ]
