"""Order book data structures and the snapshot/delta sync state machine."""

from .local_orderbook import LocalOrderBook
from .sync_engine import OrderBookSyncEngine, SyncPhase, SyncResult
from .types import DeltaEvent, PriceLevel, Side, Snapshot

__all__ = [
    "DeltaEvent",
    "LocalOrderBook",
    "OrderBookSyncEngine",
    "PriceLevel",
    "Side",
    "Snapshot",
    "SyncPhase",
    "SyncResult",
]
