"""
Authorization check shared by slot edits and negotiation: the entity must exist and belong to the caller.
"""
from typing import Callable, TypeVar

from slotswap.core.errors import NotFound, SwapError

T = TypeVar("T")


def require_owned(
    entity: T | None,
    caller_id: int,
    owner_of: Callable[[T], int],
    error: type[SwapError] = NotFound,
    message: str | None = None,
) -> T:
    """Return entity when owner_of(entity) == caller_id; raise error otherwise (absent entities included)."""
    if entity is None or owner_of(entity) != caller_id:
        raise error(message)
    return entity


def slot_owner(slot) -> int:
    return slot.owner_id


def request_responder(swap_request) -> int:
    return swap_request.responder_id
