"""
Negotiation engine: the swap state machine over slots and swap requests.

Every public operation runs as one unit of work (all reads, checks and writes commit together or not at
all). No in-process locks: correctness comes from the database transaction plus compare-and-set writes in
the stores, so of two racing proposals for the same slot exactly one commits and the other fails with
InvalidSlotState. Nothing is retried here; a conflict surfaces to the caller, who re-proposes against
fresh state.

Slot edits go through the engine too, so "no direct edits while SWAP_PENDING" is enforced in one place.
"""
import enum
import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Iterator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from slotswap.core.errors import (
    InvalidSlotData,
    InvalidSlotState,
    NotAuthorizedOrStale,
    NotFound,
    SelfSwap,
    SwapError,
    Unavailable,
)
from slotswap.core.timeutil import as_utc
from slotswap.db.session import unit_of_work
from slotswap.models.slot import OWNER_EDITABLE_STATUSES, Slot, SlotStatus
from slotswap.models.swap_request import SwapRequest, SwapRequestStatus
from slotswap.services import slot_store, swap_request_store
from slotswap.services.ownership import request_responder, require_owned, slot_owner

logger = logging.getLogger(__name__)

MAX_TITLE_LENGTH = 255


class Decision(str, enum.Enum):
    """The responder's answer to a swap request."""

    ACCEPT = "ACCEPT"
    REJECT = "REJECT"


DECISION_TO_STATUS = {
    Decision.ACCEPT: SwapRequestStatus.ACCEPTED,
    Decision.REJECT: SwapRequestStatus.REJECTED,
}


@dataclass
class SwapOutcome:
    """Committed result of responding to a request."""

    request: SwapRequest
    requester_slot: Slot | None
    responder_slot: Slot | None
    cascaded_request_ids: list[int] = field(default_factory=list)
    released_slot_ids: list[int] = field(default_factory=list)


@dataclass
class SlotPatch:
    """Partial slot update. None means "not present"; present fields are applied as given."""

    title: str | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None
    status: SlotStatus | str | None = None

    def changes(self) -> dict:
        """Validated dict of present fields."""
        out: dict = {}
        if self.title is not None:
            out["title"] = _clean_title(self.title)
        if self.start_time is not None:
            out["start_time"] = self.start_time
        if self.end_time is not None:
            out["end_time"] = self.end_time
        if self.status is not None:
            try:
                status = SlotStatus(self.status)
            except ValueError:
                raise InvalidSlotData(f"Unknown slot status {self.status!r}.") from None
            if status not in OWNER_EDITABLE_STATUSES:
                raise InvalidSlotState("SWAP_PENDING is set only by swap requests.")
            out["status"] = status
        return out


def _clean_title(title: str) -> str:
    cleaned = (title or "").strip()
    if not cleaned:
        raise InvalidSlotData("Title cannot be blank.")
    if len(cleaned) > MAX_TITLE_LENGTH:
        raise InvalidSlotData(f"Title is longer than {MAX_TITLE_LENGTH} characters.")
    return cleaned


def _check_interval(start_time: datetime, end_time: datetime) -> None:
    if as_utc(start_time) >= as_utc(end_time):
        raise InvalidSlotData("start_time must be before end_time.")


class NegotiationEngine:
    """
    Propose / accept / reject swaps and edit slots against one store handle.

    session_factory is created once at process start (see slotswap.db.session) and must not expire
    objects on commit, since results are returned after their unit of work closes.
    """

    def __init__(self, session_factory: Callable[[], Session]):
        self._session_factory = session_factory
        self._resolutions: dict[Decision, Callable[[Session, SwapRequest], SwapOutcome]] = {
            Decision.ACCEPT: self._exchange_ownership,
            Decision.REJECT: self._release_both,
        }

    @contextmanager
    def _unit_of_work(self, operation: str) -> Iterator[Session]:
        try:
            with unit_of_work(self._session_factory) as db:
                yield db
        except SwapError as e:
            logger.info("%s refused: %s (%s)", operation, e.kind, e.message)
            raise
        except SQLAlchemyError as e:
            logger.warning("%s failed in the store, rolled back: %s", operation, e)
            raise Unavailable() from e

    # --- Negotiation ---

    def propose(self, caller_id: int, my_slot_id: int, their_slot_id: int) -> SwapRequest:
        """Offer my SWAPPABLE slot for theirs. Both slots become SWAP_PENDING; returns the PENDING request."""
        with self._unit_of_work("propose") as db:
            slots = slot_store.get_slots(db, [my_slot_id, their_slot_id], for_update=True)
            my_slot = slots.get(my_slot_id)
            if my_slot is None:
                raise NotFound("Your slot was not found.")
            require_owned(my_slot, caller_id, slot_owner, InvalidSlotState, "Your slot is not valid or not swappable.")
            if my_slot.status != SlotStatus.SWAPPABLE:
                raise InvalidSlotState("Your slot is not valid or not swappable.")

            their_slot = slots.get(their_slot_id)
            if their_slot is None:
                raise NotFound("The desired slot was not found.")
            if their_slot.status != SlotStatus.SWAPPABLE:
                raise InvalidSlotState("The desired slot is not valid or no longer swappable.")
            if their_slot.owner_id == caller_id:
                raise SelfSwap()

            # Compare-and-set: a proposal that committed after our read makes this match nothing
            for slot in (my_slot, their_slot):
                if not slot_store.set_slot_status(db, slot.id, SlotStatus.SWAP_PENDING, expected=SlotStatus.SWAPPABLE):
                    raise InvalidSlotState(f"Slot {slot.id} is no longer swappable.")

            created = swap_request_store.create_swap_request(
                db,
                requester_id=caller_id,
                responder_id=their_slot.owner_id,
                requester_slot_id=my_slot.id,
                responder_slot_id=their_slot.id,
            )
            swap_request = swap_request_store.get_swap_request(db, created.id)
        logger.info(
            "propose: request=%s requester=%s responder=%s slots=%s<->%s",
            swap_request.id, swap_request.requester_id, swap_request.responder_id,
            swap_request.requester_slot_id, swap_request.responder_slot_id,
        )
        return swap_request

    def respond(self, caller_id: int, request_id: int, decision: Decision | str) -> SwapOutcome:
        """Resolve a PENDING request addressed to the caller. Single dispatch point for accept and reject."""
        decision = Decision(decision)
        operation = decision.value.lower()
        with self._unit_of_work(operation) as db:
            swap_request = swap_request_store.get_swap_request(db, request_id)
            if swap_request is None:
                raise NotFound("Swap request not found.")
            # Slots before the request row, both slots in id order: the same lock order as propose
            slot_store.get_slots(db, swap_request.slot_ids, for_update=True)
            swap_request = swap_request_store.get_swap_request(db, request_id, for_update=True)
            require_owned(swap_request, caller_id, request_responder, NotAuthorizedOrStale)
            if swap_request.status != SwapRequestStatus.PENDING:
                raise NotAuthorizedOrStale()
            if not swap_request_store.set_swap_request_status(
                db, swap_request.id, DECISION_TO_STATUS[decision], expected=SwapRequestStatus.PENDING
            ):
                raise NotAuthorizedOrStale()

            outcome = self._resolutions[decision](db, swap_request)
            outcome.request = swap_request_store.get_swap_request(db, swap_request.id)
        logger.info(
            "%s: request=%s responder=%s slots=%s cascaded=%s released=%s",
            operation, outcome.request.id, caller_id, list(outcome.request.slot_ids),
            outcome.cascaded_request_ids, outcome.released_slot_ids,
        )
        return outcome

    def accept(self, caller_id: int, request_id: int) -> SwapOutcome:
        return self.respond(caller_id, request_id, Decision.ACCEPT)

    def reject(self, caller_id: int, request_id: int) -> SwapOutcome:
        return self.respond(caller_id, request_id, Decision.REJECT)

    def _exchange_ownership(self, db: Session, swap_request: SwapRequest) -> SwapOutcome:
        """Swap owners, both slots BUSY, then reject every other PENDING request on either slot."""
        handovers = (
            (swap_request.requester_slot_id, swap_request.responder_id),
            (swap_request.responder_slot_id, swap_request.requester_id),
        )
        for slot_id, new_owner_id in handovers:
            if not slot_store.set_slot_owner_and_status(
                db, slot_id, new_owner_id, SlotStatus.BUSY, expected=SlotStatus.SWAP_PENDING
            ):
                logger.error("accept: slot %s of request %s is not SWAP_PENDING", slot_id, swap_request.id)
                raise InvalidSlotState(f"Slot {slot_id} is not locked by this request.")

        swapped = set(swap_request.slot_ids)
        # Under the one-PENDING-request-per-slot invariant this finds nothing
        cascaded = swap_request_store.reject_all_pending_referencing(db, swapped)
        if cascaded:
            logger.warning(
                "accept: request %s cascaded rejection to stale requests %s",
                swap_request.id, [r.id for r in cascaded],
            )
        # The other slot of a cascaded request is no longer under negotiation
        released = []
        for stale in cascaded:
            for slot_id in stale.slot_ids:
                if slot_id not in swapped and self._unlock_slot(db, slot_id, strict=False):
                    released.append(slot_id)

        slots = slot_store.get_slots(db, swapped)
        return SwapOutcome(
            request=swap_request,
            requester_slot=slots.get(swap_request.requester_slot_id),
            responder_slot=slots.get(swap_request.responder_slot_id),
            cascaded_request_ids=[r.id for r in cascaded],
            released_slot_ids=sorted(set(released)),
        )

    def _release_both(self, db: Session, swap_request: SwapRequest) -> SwapOutcome:
        """Rejection: both slots back to SWAPPABLE, owners unchanged."""
        released = [
            slot_id for slot_id in swap_request.slot_ids
            if self._unlock_slot(db, slot_id, strict=True)
        ]
        slots = slot_store.get_slots(db, swap_request.slot_ids)
        return SwapOutcome(
            request=swap_request,
            requester_slot=slots.get(swap_request.requester_slot_id),
            responder_slot=slots.get(swap_request.responder_slot_id),
            released_slot_ids=released,
        )

    def _unlock_slot(self, db: Session, slot_id: int, strict: bool) -> bool:
        """
        SWAP_PENDING -> SWAPPABLE unless another PENDING request still references the slot.
        strict: a slot that is not SWAP_PENDING aborts the unit of work instead of being skipped.
        """
        if swap_request_store.list_pending_referencing(db, [slot_id]):
            return False
        if slot_store.set_slot_status(db, slot_id, SlotStatus.SWAPPABLE, expected=SlotStatus.SWAP_PENDING):
            return True
        if strict:
            logger.error("unlock: slot %s is not SWAP_PENDING", slot_id)
            raise InvalidSlotState(f"Slot {slot_id} is not locked by this request.")
        return False

    # --- Slot management ---

    def create_slot(self, caller_id: int, title: str, start_time: datetime, end_time: datetime) -> Slot:
        """New BUSY slot owned by the caller."""
        title = _clean_title(title)
        _check_interval(start_time, end_time)
        with self._unit_of_work("create_slot") as db:
            created = slot_store.create_slot(db, caller_id, title, start_time, end_time)
            slot = slot_store.get_slot(db, created.id)
        logger.info("create_slot: slot=%s owner=%s", slot.id, caller_id)
        return slot

    def update_slot(self, caller_id: int, slot_id: int, patch: SlotPatch) -> Slot:
        """Apply the present fields of patch. Refused while the slot is SWAP_PENDING."""
        changes = patch.changes()
        with self._unit_of_work("update_slot") as db:
            slot = require_owned(
                slot_store.get_slot(db, slot_id, for_update=True),
                caller_id, slot_owner, NotFound, "Slot not found or not owned by you.",
            )
            if slot.status == SlotStatus.SWAP_PENDING:
                raise InvalidSlotState("Slot is part of a pending swap and cannot be edited.")
            _check_interval(changes.get("start_time", slot.start_time), changes.get("end_time", slot.end_time))
            if not slot_store.update_slot_fields(
                db, slot.id, caller_id, changes, allowed_statuses=OWNER_EDITABLE_STATUSES
            ):
                raise InvalidSlotState("Slot changed while being edited; reload and try again.")
            slot = slot_store.get_slot(db, slot.id)
        logger.info("update_slot: slot=%s fields=%s", slot.id, sorted(changes))
        return slot

    def delete_slot(self, caller_id: int, slot_id: int) -> None:
        """Delete an owned slot that no swap request, pending or terminal, references."""
        with self._unit_of_work("delete_slot") as db:
            slot = require_owned(
                slot_store.get_slot(db, slot_id, for_update=True),
                caller_id, slot_owner, NotFound, "Slot not found or not owned by you.",
            )
            if slot.status == SlotStatus.SWAP_PENDING:
                raise InvalidSlotState("Slot is part of a pending swap and cannot be deleted.")
            if swap_request_store.is_slot_referenced(db, slot.id):
                raise InvalidSlotState("Slot is part of swap history and cannot be deleted.")
            if not slot_store.delete_slot(db, slot.id, caller_id, allowed_statuses=OWNER_EDITABLE_STATUSES):
                raise InvalidSlotState("Slot changed while being deleted; reload and try again.")
        logger.info("delete_slot: slot=%s owner=%s", slot_id, caller_id)
