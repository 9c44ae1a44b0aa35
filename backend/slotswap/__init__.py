"""SlotSwap: publish calendar slots as swappable and negotiate one-to-one exchanges."""

__version__ = "0.1.0"
