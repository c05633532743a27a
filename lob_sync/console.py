from __future__ import annotations

import sys
from typing import List, Optional, TextIO

from lob_core.local_orderbook import LocalOrderBook
from lob_core.types import PriceLevel, Side

DECIMALS_PRICE = 2
DECIMALS_QTY = 4
PLACEHOLDER = "-"

CLEAR_SCREEN = "\x1b[2J\x1b[1;1H"


def fmt_price(x: float) -> str:
    # fixed decimal, no scientific notation
    return f"{x:.{DECIMALS_PRICE}f}"


def fmt_qty(x: float) -> str:
    return f"{x:.{DECIMALS_QTY}f}"


def _cell(levels: List[PriceLevel], i: int) -> tuple[str, str]:
    if i < len(levels):
        return fmt_price(levels[i].price), fmt_qty(levels[i].quantity)
    return PLACEHOLDER, PLACEHOLDER


def format_top_of_book(book: LocalOrderBook, levels: int = 5, symbol: Optional[str] = None) -> str:
    bids = book.top_levels(Side.BID, levels)
    asks = book.top_levels(Side.ASK, levels)

    lines = []
    if symbol:
        lines.append(symbol)
    lines.append(f"{'#':>2}  {'BID SIZE':>12} {'BID PRICE':>12} | {'ASK PRICE':<12} {'ASK SIZE':<12}")
    lines.append("-" * 57)
    for i in range(levels):
        bid_px, bid_qty = _cell(bids, i)
        ask_px, ask_qty = _cell(asks, i)
        lines.append(f"{i + 1:>2}  {bid_qty:>12} {bid_px:>12} | {ask_px:<12} {ask_qty:<12}".rstrip())
    return "\n".join(lines) + "\n"


def render_top_of_book(
    book: LocalOrderBook,
    levels: int = 5,
    symbol: Optional[str] = None,
    out: TextIO | None = None,
) -> None:
    """Redraw the top of book in place."""
    out = out or sys.stdout
    out.write(CLEAR_SCREEN)
    out.write(format_top_of_book(book, levels=levels, symbol=symbol))
    out.flush()
