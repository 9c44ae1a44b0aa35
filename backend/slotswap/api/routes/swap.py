"""
Swap API: marketplace, propose, respond (accept/reject), incoming and outgoing requests.
"""
from typing import Any

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session

from slotswap.api.deps import get_caller_id, get_negotiation_engine
from slotswap.db.session import get_db
from slotswap.services.negotiation import Decision, NegotiationEngine, SwapOutcome
from slotswap.services.swap_views import (
    list_incoming,
    list_marketplace,
    list_outgoing,
    slot_to_dict,
    swap_request_to_dict,
)

router = APIRouter()


class ProposeBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    my_slot_id: int = Field(..., alias="mySlotId")
    their_slot_id: int = Field(..., alias="theirSlotId")


class RespondBody(BaseModel):
    accept: bool


def _outcome_to_dict(outcome: SwapOutcome) -> dict[str, Any]:
    return {
        "request": swap_request_to_dict(outcome.request),
        "requester_slot": slot_to_dict(outcome.requester_slot) if outcome.requester_slot else None,
        "responder_slot": slot_to_dict(outcome.responder_slot) if outcome.responder_slot else None,
        "cascaded_request_ids": outcome.cascaded_request_ids,
    }


# --- Marketplace ---


@router.get("/swappable-slots")
def swappable_slots(
    db: Session = Depends(get_db),
    caller_id: int = Depends(get_caller_id),
) -> list[dict[str, Any]]:
    """SWAPPABLE slots of other users, earliest first, with owner_name."""
    return list_marketplace(db, caller_id)


# --- Propose ---


@router.post("/request", status_code=status.HTTP_201_CREATED)
def propose_swap(
    body: ProposeBody,
    caller_id: int = Depends(get_caller_id),
    engine: NegotiationEngine = Depends(get_negotiation_engine),
) -> dict[str, Any]:
    """Offer one of the caller's SWAPPABLE slots for another user's SWAPPABLE slot."""
    swap_request = engine.propose(caller_id, body.my_slot_id, body.their_slot_id)
    return {"msg": "Swap request created successfully.", "request": swap_request_to_dict(swap_request)}


# --- Respond ---


@router.post("/response/{request_id}")
def respond_to_swap(
    request_id: int,
    body: RespondBody,
    caller_id: int = Depends(get_caller_id),
    engine: NegotiationEngine = Depends(get_negotiation_engine),
) -> dict[str, Any]:
    """Accept (exchange owners) or reject (slots back to SWAPPABLE) a request addressed to the caller."""
    decision = Decision.ACCEPT if body.accept else Decision.REJECT
    outcome = engine.respond(caller_id, request_id, decision)
    msg = "Swap accepted!" if decision is Decision.ACCEPT else "Swap rejected."
    return {"msg": msg, **_outcome_to_dict(outcome)}


# --- Request lists ---


@router.get("/requests/incoming")
def incoming_requests(
    db: Session = Depends(get_db),
    caller_id: int = Depends(get_caller_id),
) -> list[dict[str, Any]]:
    """PENDING requests where the caller is the responder."""
    return list_incoming(db, caller_id)


@router.get("/requests/outgoing")
def outgoing_requests(
    db: Session = Depends(get_db),
    caller_id: int = Depends(get_caller_id),
) -> list[dict[str, Any]]:
    """All requests the caller made, newest first."""
    return list_outgoing(db, caller_id)
