import logging

import requests

from lob_core.types import Snapshot
from lob_sync.codec import FrameParseError, parse_snapshot
from lob_sync.settings import SNAPSHOT_TIMEOUT_S, WOOX_REST_URL

log = logging.getLogger("snapshot")


class SnapshotError(RuntimeError):
    """REST snapshot could not be fetched or decoded."""


class WooXRestClient:
    def __init__(self, base_url: str | None = None, timeout_s: float | None = None) -> None:
        self.base_url = base_url or WOOX_REST_URL
        self.timeout_s = SNAPSHOT_TIMEOUT_S if timeout_s is None else float(timeout_s)

    def get_order_book(self, symbol: str, max_level: int) -> dict:
        resp = requests.get(
            self.base_url,
            params={"symbol": symbol, "maxLevel": int(max_level)},
            timeout=self.timeout_s,
        )
        resp.raise_for_status()
        return resp.json()


def fetch_snapshot(client, symbol: str, max_level: int) -> Snapshot:
    """Fetch and decode one order book snapshot. Any failure raises SnapshotError.

    There is deliberately one attempt only; the caller treats a failure as fatal.
    """
    if client is None:
        raise SnapshotError("REST snapshot requires a client.")
    try:
        payload = client.get_order_book(symbol=symbol, max_level=max_level)
    except (requests.RequestException, ValueError) as exc:
        raise SnapshotError(f"HTTP request failed: {exc}") from exc
    try:
        snap = parse_snapshot(payload)
    except FrameParseError as exc:
        raise SnapshotError(f"Failed to parse snapshot json: {exc}") from exc

    log.info(
        "Snapshot received at ts: %d bids=%d asks=%d",
        snap.sequence,
        len(snap.bids),
        len(snap.asks),
    )
    return snap
