from slotswap.services.negotiation import Decision, NegotiationEngine, SlotPatch, SwapOutcome
from slotswap.services.user_service import create_user, get_user

__all__ = ["Decision", "NegotiationEngine", "SlotPatch", "SwapOutcome", "create_user", "get_user"]
