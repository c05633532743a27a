from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from lob_core.local_orderbook import LocalOrderBook
from lob_core.sync_engine import OrderBookSyncEngine, SyncPhase, SyncResult
from lob_core.types import Snapshot
from lob_sync.channel import EventChannel, Message, StreamFailure
from lob_sync.console import render_top_of_book
from lob_sync.settings import SyncConfig
from lob_sync.snapshot import SnapshotError, WooXRestClient, fetch_snapshot


class SyncAborted(RuntimeError):
    """The local book cannot be (or stay) synchronized; the process should stop."""


class Synchronizer:
    """Owns the local book and drives buffer -> fetch -> reconcile -> synced.

    Runs on the consumer thread. It is the only code that mutates the book, so
    no locking is needed. Every failure past single-frame parsing ends in
    SyncAborted.
    """

    def __init__(
        self,
        config: SyncConfig,
        channel: EventChannel,
        rest_client=None,
        sleep_fn: Callable[[float], None] = time.sleep,
        render_fn: Optional[Callable[[LocalOrderBook], None]] = None,
    ):
        self.config = config
        self.channel = channel
        self.rest_client = rest_client or WooXRestClient(
            base_url=config.rest_url, timeout_s=config.snapshot_timeout_s
        )
        self.sleep_fn = sleep_fn
        if render_fn is None and config.render:
            render_fn = self._render_console
        self.render_fn = render_fn
        self.engine = OrderBookSyncEngine()
        self.snapshot: Optional[Snapshot] = None
        self._log = logging.getLogger("sync")

    @property
    def book(self) -> LocalOrderBook:
        return self.engine.lob

    @property
    def phase(self) -> SyncPhase:
        return self.engine.phase

    def _render_console(self, book: LocalOrderBook) -> None:
        render_top_of_book(book, levels=self.config.render_levels, symbol=self.config.symbol)

    def _render(self) -> None:
        if self.render_fn is not None:
            self.render_fn(self.book)

    def _abort(self, reason: str) -> None:
        if not self.engine.aborted:
            self.engine.abort(reason)
        self.channel.close()
        self._log.error("Sync aborted: %s", reason)
        raise SyncAborted(reason)

    def buffer(self) -> None:
        self._log.info("Buffering for %.1f seconds", self.config.buffer_delay_s)
        self.sleep_fn(self.config.buffer_delay_s)

    def fetch(self) -> Snapshot:
        self.engine.begin_fetch()
        self._log.info("Fetching snapshot")
        try:
            snap = fetch_snapshot(self.rest_client, self.config.symbol, self.config.depth)
        except SnapshotError as exc:
            self._abort(str(exc))
        self.engine.adopt_snapshot(snap)
        self.snapshot = snap
        self._log.info("Attempting to sync book with ws (snapshot ts=%d)", snap.sequence)
        return snap

    def handle(self, msg: Message) -> SyncResult:
        if isinstance(msg, StreamFailure):
            self._abort(f"stream failed: {msg.reason}")

        result = self.engine.feed_delta(msg)
        if result.action == "dropped":
            self._log.info("Stream is %dms behind snapshot", result.lag_ms)
        elif result.action == "synced":
            self._log.info("Local book is now synced (%s)", result.details)
            self._render()
        elif result.action == "applied":
            self._render()
        elif result.action == "gap":
            self._abort(
                f"Local book out of sync ({result.details}), "
                "probably rerun with a bigger buffer delay"
            )
        elif result.action == "aborted":
            self._abort(result.details)
        return result

    def run(self, max_events: Optional[int] = None) -> int:
        """Run the whole protocol. Returns the number of deltas applied to the book.

        With `max_events` set, returns after that many channel messages have been
        handled; otherwise runs until aborted.
        """
        self.buffer()
        self.fetch()

        handled = 0
        while max_events is None or handled < max_events:
            self.handle(self.channel.recv())
            handled += 1
        return self.engine.applied
