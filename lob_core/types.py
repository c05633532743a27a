from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, NamedTuple, Optional


class Side(str, Enum):
    BID = "bid"
    ASK = "ask"


class PriceLevel(NamedTuple):
    price: float
    quantity: float


@dataclass(frozen=True)
class Snapshot:
    """Full book state at one instant, as returned by the REST endpoint.

    `sequence` is the exchange timestamp (epoch ms) the snapshot was taken at.
    """

    sequence: int
    bids: List[PriceLevel] = field(default_factory=list)
    asks: List[PriceLevel] = field(default_factory=list)


@dataclass(frozen=True)
class DeltaEvent:
    """Changes since the update whose own sequence equals `prev_sequence`."""

    sequence: int
    prev_sequence: int
    bids: List[PriceLevel] = field(default_factory=list)
    asks: List[PriceLevel] = field(default_factory=list)
    symbol: Optional[str] = None
