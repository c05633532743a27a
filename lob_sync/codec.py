"""WOO X v3 public websocket / REST encoding.

Delta quotes arrive as ``["price", "qty"]`` arrays, snapshot quotes as
``{"price": "...", "quantity": "..."}`` objects. Both decode to PriceLevel.
"""

from __future__ import annotations

import json
import math
from enum import Enum
from typing import Any, List, Optional

from lob_core.types import DeltaEvent, PriceLevel, Snapshot

SUBSCRIBE_CMD = "SUBSCRIBE"
PING_CMD = "PING"
PONG_CMD = "PONG"
ACK_MARKER = "success"


class FrameParseError(ValueError):
    """A single inbound frame or payload could not be decoded."""


class FrameKind(str, Enum):
    PING = "ping"
    ACK = "ack"
    DATA = "data"


def classify_frame(text: str) -> FrameKind:
    # Substring checks match the exchange's control frames without a full decode.
    if PING_CMD in text:
        return FrameKind.PING
    if ACK_MARKER in text:
        return FrameKind.ACK
    return FrameKind.DATA


def build_subscribe(client_id: str, topic: str) -> str:
    return json.dumps({"id": client_id, "cmd": SUBSCRIBE_CMD, "params": [topic]})


def build_pong(ts_ms: int) -> str:
    return json.dumps({"cmd": PONG_CMD, "ts": int(ts_ms)})


def _to_float(value: Any, label: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        raise FrameParseError(f"{label} must be a numeric string (got {value!r})")
    try:
        out = float(value)
    except ValueError as exc:
        raise FrameParseError(f"{label} is not numeric: {value!r}") from exc
    if not math.isfinite(out):
        raise FrameParseError(f"{label} must be finite (got {value!r})")
    return out


def _to_level(price: Any, quantity: Any) -> PriceLevel:
    level = PriceLevel(_to_float(price, "price"), _to_float(quantity, "quantity"))
    if level.quantity < 0:
        raise FrameParseError(f"quantity must not be negative (got {quantity!r})")
    return level


def _to_seq(value: Any, label: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise FrameParseError(f"{label} must be a non-negative integer (got {value!r})")
    return value


def parse_ws_quote(raw: Any) -> PriceLevel:
    if not isinstance(raw, (list, tuple)):
        raise FrameParseError(f"quote must be an array (got {raw!r})")
    if len(raw) < 2:
        raise FrameParseError("quote array too short")
    return _to_level(raw[0], raw[1])


def parse_rest_quote(raw: Any) -> PriceLevel:
    if not isinstance(raw, dict):
        raise FrameParseError(f"quote must be an object (got {raw!r})")
    if "price" not in raw or "quantity" not in raw:
        raise FrameParseError(f"quote missing price/quantity: {raw!r}")
    return _to_level(raw["price"], raw["quantity"])


def _quote_list(raw: Any, label: str) -> List[Any]:
    if not isinstance(raw, list):
        raise FrameParseError(f"{label} must be a list")
    return raw


def parse_delta_frame(text: str) -> Optional[DeltaEvent]:
    """Decode one data frame.

    Returns None for well-formed frames that carry no order book update (no
    ``data`` payload, or no top-level ``ts``). Raises FrameParseError when the
    frame or any quote in it is malformed.
    """
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise FrameParseError(f"invalid json: {exc}") from exc
    if not isinstance(payload, dict):
        raise FrameParseError("frame must be a json object")

    data = payload.get("data")
    if data is None:
        return None
    if not isinstance(data, dict):
        raise FrameParseError("data must be an object")
    if "prevTs" not in data:
        raise FrameParseError("data missing prevTs")

    prev_ts = _to_seq(data["prevTs"], "prevTs")
    bids = [parse_ws_quote(q) for q in _quote_list(data.get("bids"), "bids")]
    asks = [parse_ws_quote(q) for q in _quote_list(data.get("asks"), "asks")]

    ts = payload.get("ts")
    if ts is None:
        return None

    symbol = data.get("s")
    return DeltaEvent(
        sequence=_to_seq(ts, "ts"),
        prev_sequence=prev_ts,
        bids=bids,
        asks=asks,
        symbol=str(symbol) if symbol is not None else None,
    )


def parse_snapshot(payload: Any) -> Snapshot:
    """Decode the REST order book response into a Snapshot."""
    if not isinstance(payload, dict):
        raise FrameParseError("snapshot payload must be a dict")
    if "timestamp" not in payload or "data" not in payload:
        raise FrameParseError("snapshot payload missing required keys")
    data = payload["data"]
    if not isinstance(data, dict):
        raise FrameParseError("snapshot data must be an object")

    return Snapshot(
        sequence=_to_seq(payload["timestamp"], "timestamp"),
        bids=[parse_rest_quote(q) for q in _quote_list(data.get("bids"), "bids")],
        asks=[parse_rest_quote(q) for q in _quote_list(data.get("asks"), "asks")],
    )
