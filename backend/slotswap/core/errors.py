"""
Centralized error handling for the swap core and its API.

Domain failures are raised as SwapError subclasses by the engine and stores; the rules table below
maps each kind to an HTTP status so routes stay thin and new error kinds are easy to add.
"""
from __future__ import annotations

from fastapi import HTTPException


class SwapError(Exception):
    """Base for every caller-visible failure of the swap core."""

    kind = "swap_error"
    default_message = "Swap operation failed."

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFound(SwapError):
    kind = "not_found"
    default_message = "Not found."


class InvalidSlotState(SwapError):
    kind = "invalid_slot_state"
    default_message = "Slot is not in a valid state for this operation."


class SelfSwap(SwapError):
    kind = "self_swap"
    default_message = "You cannot swap a slot with yourself."


class NotAuthorizedOrStale(SwapError):
    # Not-your-request and no-longer-pending are one error so callers learn nothing about other users' actions
    kind = "not_authorized_or_stale"
    default_message = "Swap request is not pending or you are not authorized to respond."


class InvalidSlotData(SwapError):
    kind = "invalid_slot_data"
    default_message = "Invalid slot data."


class Unavailable(SwapError):
    kind = "unavailable"
    default_message = "The store is unavailable; nothing was changed. Try again."


# ---------------------------------------------------------------------------
# Constants: status codes
# ---------------------------------------------------------------------------

STATUS_BAD_REQUEST = 400
STATUS_NOT_FOUND = 404
STATUS_CONFLICT = 409
STATUS_UNPROCESSABLE = 422
STATUS_SERVICE_UNAVAILABLE = 503
STATUS_INTERNAL_ERROR = 500


# ---------------------------------------------------------------------------
# Error rules: (error type, status_code). First match wins; order subclasses before bases.
# ---------------------------------------------------------------------------

SWAP_ERROR_RULES: list[tuple[type[SwapError], int]] = [
    (NotFound, STATUS_NOT_FOUND),
    (InvalidSlotState, STATUS_CONFLICT),
    (SelfSwap, STATUS_BAD_REQUEST),
    (NotAuthorizedOrStale, STATUS_CONFLICT),
    (InvalidSlotData, STATUS_UNPROCESSABLE),
    (Unavailable, STATUS_SERVICE_UNAVAILABLE),
]


def swap_error_to_http(exc: SwapError) -> HTTPException:
    """
    Map a SwapError into an HTTPException whose detail is {"error": kind, "message": ...}.
    Uses SWAP_ERROR_RULES; unknown kinds become 500.
    """
    detail = {"error": exc.kind, "message": exc.message}
    for error_type, status_code in SWAP_ERROR_RULES:
        if isinstance(exc, error_type):
            return HTTPException(status_code=status_code, detail=detail)
    return HTTPException(status_code=STATUS_INTERNAL_ERROR, detail=detail)
