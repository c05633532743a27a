from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .local_orderbook import LocalOrderBook
from .types import DeltaEvent, Snapshot


class SyncPhase(str, Enum):
    BUFFERING = "buffering"
    FETCHING = "fetching"
    RECONCILING = "reconciling"
    SYNCED = "synced"
    ABORTED = "aborted"


@dataclass
class SyncResult:
    action: str  # "dropped" | "synced" | "applied" | "gap" | "aborted"
    details: str = ""
    lag_ms: Optional[int] = None


class OrderBookSyncEngine:
    """Pure state machine bridging a REST snapshot to the WOO X delta stream.

    No websocket, REST or console I/O happens here. The caller moves the engine
    through BUFFERING and FETCHING, hands it the snapshot, then feeds every
    delta in arrival order.

    Bridging rule, checked on each event until synced:
      - prev_sequence <  snapshot.sequence -> event predates the snapshot, drop
      - prev_sequence == snapshot.sequence -> apply, book is synced
      - prev_sequence >  snapshot.sequence -> at least one update was missed, abort

    Once synced every event is applied as-is. Sequence continuity is not
    re-checked after the bridge, so a later gap goes undetected.
    """

    def __init__(self, lob: Optional[LocalOrderBook] = None):
        self.lob = lob or LocalOrderBook()
        self.phase = SyncPhase.BUFFERING
        self.snapshot_sequence: Optional[int] = None
        self.dropped: int = 0
        self.applied: int = 0

    def begin_fetch(self) -> None:
        if self.phase is not SyncPhase.BUFFERING:
            raise RuntimeError(f"cannot fetch a snapshot from phase {self.phase.value}")
        self.phase = SyncPhase.FETCHING

    def adopt_snapshot(self, snapshot: Snapshot) -> None:
        """Replace the book with `snapshot` and start reconciling."""
        if self.phase not in (SyncPhase.BUFFERING, SyncPhase.FETCHING):
            raise RuntimeError(f"cannot adopt a snapshot from phase {self.phase.value}")
        if snapshot.sequence is None:
            raise ValueError("Snapshot missing sequence; cannot sync.")
        self.lob = LocalOrderBook()
        self.lob.apply_snapshot(snapshot.bids, snapshot.asks)
        self.snapshot_sequence = int(snapshot.sequence)
        self.phase = SyncPhase.RECONCILING

    def abort(self, reason: str = "") -> SyncResult:
        self.phase = SyncPhase.ABORTED
        return SyncResult("aborted", reason)

    @property
    def synced(self) -> bool:
        return self.phase is SyncPhase.SYNCED

    @property
    def aborted(self) -> bool:
        return self.phase is SyncPhase.ABORTED

    def _apply(self, ev: DeltaEvent) -> None:
        self.lob.apply_delta(ev.bids, ev.asks)
        self.applied += 1

    def feed_delta(self, ev: DeltaEvent) -> SyncResult:
        """Feed one delta event in arrival order."""
        if self.phase is SyncPhase.ABORTED:
            return SyncResult("aborted", "engine aborted")

        if self.phase is SyncPhase.SYNCED:
            self._apply(ev)
            return SyncResult("applied", f"ts={ev.sequence}")

        if self.phase is not SyncPhase.RECONCILING or self.snapshot_sequence is None:
            raise RuntimeError(f"cannot feed deltas in phase {self.phase.value}")

        snap_seq = self.snapshot_sequence
        prev = int(ev.prev_sequence)

        if prev < snap_seq:
            self.dropped += 1
            lag = snap_seq - prev
            return SyncResult("dropped", f"prevTs={prev} snapshot={snap_seq}", lag_ms=lag)

        if prev == snap_seq:
            self._apply(ev)
            self.phase = SyncPhase.SYNCED
            return SyncResult("synced", f"prevTs={prev} ts={ev.sequence}")

        self.phase = SyncPhase.ABORTED
        return SyncResult("gap", f"prevTs={prev} > snapshot={snap_seq}")
