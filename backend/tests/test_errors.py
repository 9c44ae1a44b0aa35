"""Error kinds map to HTTP statuses through the rules table."""
import pytest

from slotswap.core.errors import (
    InvalidSlotData,
    InvalidSlotState,
    NotAuthorizedOrStale,
    NotFound,
    SelfSwap,
    SwapError,
    Unavailable,
    swap_error_to_http,
)


@pytest.mark.parametrize("exc, status_code, kind", [
    (NotFound(), 404, "not_found"),
    (InvalidSlotState(), 409, "invalid_slot_state"),
    (SelfSwap(), 400, "self_swap"),
    (NotAuthorizedOrStale(), 409, "not_authorized_or_stale"),
    (InvalidSlotData("bad"), 422, "invalid_slot_data"),
    (Unavailable(), 503, "unavailable"),
    (SwapError(), 500, "swap_error"),
])
def test_swap_error_to_http(exc, status_code, kind):
    http_exc = swap_error_to_http(exc)
    assert http_exc.status_code == status_code
    assert http_exc.detail["error"] == kind
    assert http_exc.detail["message"] == exc.message


def test_default_and_custom_messages():
    assert NotFound().message == "Not found."
    assert str(NotFound("Slot 3 not found.")) == "Slot 3 not found."
