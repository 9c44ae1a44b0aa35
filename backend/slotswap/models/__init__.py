from slotswap.models.slot import OWNER_EDITABLE_STATUSES, Slot, SlotStatus
from slotswap.models.swap_request import SwapRequest, SwapRequestStatus
from slotswap.models.user import User

__all__ = [
    "OWNER_EDITABLE_STATUSES",
    "Slot",
    "SlotStatus",
    "SwapRequest",
    "SwapRequestStatus",
    "User",
]
