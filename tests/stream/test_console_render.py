from __future__ import annotations

import io

from lob_core.local_orderbook import LocalOrderBook
from lob_sync.console import CLEAR_SCREEN, format_top_of_book, render_top_of_book


def _rows(text: str):
    lines = text.splitlines()
    return lines[2:]


def test_fixed_precision_and_pairing():
    lob = LocalOrderBook()
    lob.apply_snapshot(bids=[(2000.5, 1.25), (1999.0, 3.0)], asks=[(2001.0, 0.5)])

    rows = _rows(format_top_of_book(lob))

    assert len(rows) == 5
    assert rows[0].split() == ["1", "1.2500", "2000.50", "|", "2001.00", "0.5000"]
    assert rows[1].split() == ["2", "3.0000", "1999.00", "|", "-", "-"]
    assert rows[4].split() == ["5", "-", "-", "|", "-", "-"]


def test_empty_book_renders_placeholders():
    rows = _rows(format_top_of_book(LocalOrderBook(), levels=5))
    assert all(r.split()[1:] == ["-", "-", "|", "-", "-"] for r in rows)


def test_symbol_header_and_redraw():
    lob = LocalOrderBook()
    lob.apply_snapshot(bids=[(1.0, 1.0)], asks=[(2.0, 1.0)])
    out = io.StringIO()

    render_top_of_book(lob, symbol="PERP_ETH_USDT", out=out)

    text = out.getvalue()
    assert text.startswith(CLEAR_SCREEN)
    assert text[len(CLEAR_SCREEN):].splitlines()[0] == "PERP_ETH_USDT"
