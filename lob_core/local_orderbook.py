from __future__ import annotations

import math
from dataclasses import dataclass, field
from itertools import islice
from typing import Iterable, Iterator, List, Optional, Tuple

from sortedcontainers import SortedDict

from .types import PriceLevel, Side


@dataclass
class LocalOrderBook:
    """In-memory L2 book keyed by float price.

    Both ladders are kept ascending by price; bids are read in reverse so the
    highest price comes first. Only levels with a positive quantity are stored.
    """

    bids: SortedDict = field(default_factory=SortedDict)
    asks: SortedDict = field(default_factory=SortedDict)

    def _ladder(self, side: Side) -> SortedDict:
        return self.bids if Side(side) == Side.BID else self.asks

    @staticmethod
    def _checked(levels: Iterable[PriceLevel]) -> List[Tuple[float, float]]:
        out = []
        for price, qty in levels:
            price, qty = float(price), float(qty)
            # validated before either ladder is touched
            if not (math.isfinite(price) and math.isfinite(qty) and qty >= 0.0):
                raise ValueError(f"invalid level price={price!r} quantity={qty!r}")
            out.append((price, qty))
        return out

    @staticmethod
    def _apply_level(ladder: SortedDict, price: float, qty: float) -> None:
        if qty == 0.0:
            ladder.pop(price, None)
        else:
            ladder[price] = qty

    def apply_snapshot(self, bids: Iterable[PriceLevel], asks: Iterable[PriceLevel]) -> None:
        bids, asks = self._checked(bids), self._checked(asks)
        self.bids.clear()
        self.asks.clear()

        # zero levels are never stored
        for price, qty in bids:
            if qty != 0.0:
                self.bids[price] = qty

        for price, qty in asks:
            if qty != 0.0:
                self.asks[price] = qty

    def apply_delta(self, bids: Iterable[PriceLevel], asks: Iterable[PriceLevel]) -> None:
        """Merge incremental changes. Quantity 0 removes the level if present."""
        bids, asks = self._checked(bids), self._checked(asks)
        for price, qty in bids:
            self._apply_level(self.bids, price, qty)

        for price, qty in asks:
            self._apply_level(self.asks, price, qty)

    def iter_levels(self, side: Side) -> Iterator[PriceLevel]:
        ladder = self._ladder(side)
        items = reversed(ladder.items()) if Side(side) == Side.BID else iter(ladder.items())
        for price, qty in items:
            yield PriceLevel(price, qty)

    def top_levels(self, side: Side, n: int) -> List[PriceLevel]:
        if n <= 0:
            return []
        return list(islice(self.iter_levels(side), n))

    def top_n(self, n: int) -> Tuple[List[PriceLevel], List[PriceLevel]]:
        return self.top_levels(Side.BID, n), self.top_levels(Side.ASK, n)

    def best_bid(self) -> Optional[PriceLevel]:
        if not self.bids:
            return None
        price, qty = self.bids.peekitem(-1)
        return PriceLevel(price, qty)

    def best_ask(self) -> Optional[PriceLevel]:
        if not self.asks:
            return None
        price, qty = self.asks.peekitem(0)
        return PriceLevel(price, qty)

    def depth(self, side: Side) -> int:
        return len(self._ladder(side))
