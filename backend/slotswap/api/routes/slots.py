"""
Slots API (the caller's calendar events): create, list, update, delete.
Edits are refused while a slot is locked in a pending swap.
"""
from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session

from slotswap.api.deps import get_caller_id, get_negotiation_engine
from slotswap.db.session import get_db
from slotswap.services.negotiation import NegotiationEngine, SlotPatch
from slotswap.services.swap_views import list_my_slots, slot_to_dict

router = APIRouter()


class CreateSlotBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(..., max_length=255)
    start_time: datetime = Field(..., alias="startTime")
    end_time: datetime = Field(..., alias="endTime")


class UpdateSlotBody(BaseModel):
    """Only fields present are applied; a blank title is an error, not "no change"."""

    model_config = ConfigDict(populate_by_name=True)

    title: str | None = Field(None, max_length=255)
    start_time: datetime | None = Field(None, alias="startTime")
    end_time: datetime | None = Field(None, alias="endTime")
    status: str | None = Field(None, description="BUSY or SWAPPABLE")


@router.post("", status_code=status.HTTP_201_CREATED)
def create_slot(
    body: CreateSlotBody,
    caller_id: int = Depends(get_caller_id),
    engine: NegotiationEngine = Depends(get_negotiation_engine),
) -> dict[str, Any]:
    """Create a slot for the caller. New slots are BUSY."""
    slot = engine.create_slot(caller_id, body.title, body.start_time, body.end_time)
    return slot_to_dict(slot)


@router.get("/my-events")
def my_slots(
    db: Session = Depends(get_db),
    caller_id: int = Depends(get_caller_id),
) -> list[dict[str, Any]]:
    """The caller's slots, earliest first."""
    return list_my_slots(db, caller_id)


@router.put("/{slot_id}")
def update_slot(
    slot_id: int,
    body: UpdateSlotBody,
    caller_id: int = Depends(get_caller_id),
    engine: NegotiationEngine = Depends(get_negotiation_engine),
) -> dict[str, Any]:
    """Change title, times, or toggle BUSY/SWAPPABLE."""
    patch = SlotPatch(
        title=body.title,
        start_time=body.start_time,
        end_time=body.end_time,
        status=body.status,
    )
    slot = engine.update_slot(caller_id, slot_id, patch)
    return slot_to_dict(slot)


@router.delete("/{slot_id}")
def delete_slot(
    slot_id: int,
    caller_id: int = Depends(get_caller_id),
    engine: NegotiationEngine = Depends(get_negotiation_engine),
) -> dict[str, Any]:
    engine.delete_slot(caller_id, slot_id)
    return {"ok": True, "id": slot_id}
