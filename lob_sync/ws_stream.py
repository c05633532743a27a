import logging
import threading
from typing import Callable, Optional

import websocket

from lob_sync.channel import EventChannel, StreamFailure
from lob_sync.codec import (
    FrameKind,
    FrameParseError,
    build_pong,
    build_subscribe,
    classify_frame,
    parse_delta_frame,
)
from lob_sync.settings import SyncConfig
from lob_sync.utils import now_ms


class WooXWSStream:
    """Blocking websocket reader that forwards order book deltas into a channel.

    WOO X sends application-level PING frames and drops clients that are slow
    to answer, so the PONG is written from the read loop itself before the
    next frame is read. Nothing else touches the socket while the loop runs.

    There is no reconnect: when the connection ends the loop ends.
    """

    def __init__(
        self,
        config: SyncConfig,
        channel: EventChannel,
        clock_ms: Callable[[], int] = now_ms,
    ):
        self.config = config
        self.channel = channel
        self.clock_ms = clock_ms

        self.frames_received = 0
        self.events_forwarded = 0
        self.parse_errors = 0
        self.pings_answered = 0
        self.error: Optional[str] = None

        self._ws: Optional[websocket.WebSocket] = None
        self._stop = False
        self._thread: Optional[threading.Thread] = None
        self._log = logging.getLogger("websocket")

    def _fail(self, reason: str) -> None:
        self.error = reason
        self._log.error("Stream failed: %s", reason)
        self.channel.send(StreamFailure(reason))

    def connect(self) -> None:
        self._ws = websocket.create_connection(self.config.ws_url)
        self._log.info("Connected to websocket %s", self.config.ws_url)

    def subscribe(self) -> None:
        assert self._ws is not None
        self._ws.send(build_subscribe(self.config.client_id, self.config.topic))
        self._log.info("Subscribed to %s", self.config.topic)

    def _send_pong(self) -> bool:
        ws = self._ws
        if ws is None:
            return False
        ts = self.clock_ms()
        try:
            ws.send(build_pong(ts))
        except (websocket.WebSocketException, OSError) as exc:
            self._fail(f"pong send failed: {exc}")
            return False
        self.pings_answered += 1
        self._log.debug("Answered ping ts=%d", ts)
        return True

    def _handle_text(self, text: str) -> bool:
        """Process one text frame. Returns False when the loop must stop."""
        kind = classify_frame(text)
        if kind is FrameKind.PING:
            return self._send_pong()
        if kind is FrameKind.ACK:
            return True

        try:
            event = parse_delta_frame(text)
        except FrameParseError as exc:
            self.parse_errors += 1
            self._log.warning("Parse err: %s, data: %s", exc, text)
            return True

        if event is None:
            return True
        if not self.channel.send(event):
            self._log.info("Consumer gone; stopping reader")
            return False
        self.events_forwarded += 1
        return True

    def _read_loop(self) -> None:
        ws = self._ws
        assert ws is not None
        while not self._stop:
            try:
                msg = ws.recv()
            except websocket.WebSocketConnectionClosedException as exc:
                self._log.warning("WebSocket closed: %s", exc)
                return
            except (websocket.WebSocketException, OSError) as exc:
                self._log.warning("WebSocket read error: %s", exc)
                return

            if not msg:
                if not getattr(ws, "connected", True):
                    self._log.warning("WebSocket closed by peer")
                    return
                continue

            self.frames_received += 1
            if isinstance(msg, bytes):
                continue
            if not self._handle_text(msg):
                return

    def run(self) -> None:
        """Connect, subscribe and read until the connection or the consumer goes away."""
        try:
            self.connect()
            self.subscribe()
        except (websocket.WebSocketException, OSError) as exc:
            self._fail(f"connect/subscribe failed: {exc}")
            self._close_socket()
            return

        try:
            self._read_loop()
        finally:
            self._close_socket()
            self._log.warning(
                "Reader stopped frames=%d forwarded=%d parse_errors=%d pings=%d",
                self.frames_received,
                self.events_forwarded,
                self.parse_errors,
                self.pings_answered,
            )

    def start(self) -> threading.Thread:
        """Run the reader on a daemon thread."""
        self._thread = threading.Thread(target=self.run, name="woox-ws-reader", daemon=True)
        self._thread.start()
        return self._thread

    def _close_socket(self) -> None:
        ws = self._ws
        self._ws = None
        if ws is None:
            return
        try:
            ws.close()
        except (websocket.WebSocketException, OSError):
            self._log.debug("Ignoring error while closing websocket", exc_info=True)

    def stop(self) -> None:
        """Ask the reader to exit after the frame in hand. The reader closes its own socket."""
        self._stop = True
